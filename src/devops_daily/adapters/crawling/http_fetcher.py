from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import requests

from devops_daily.domain.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "DevOps Daily News Crawler/1.0"


@dataclass
class HttpFetcher:
    """
    GET with retries and exponential backoff (backoff_base * 2**attempt seconds).
    """
    timeout: float = 10.0
    max_retries: int = 3
    backoff_base: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT
    session: requests.Session = field(default_factory=requests.Session)
    sleep: Callable[[float], None] = time.sleep

    def fetch(self, url: str, *, max_retries: Optional[int] = None, timeout: Optional[float] = None) -> str:
        retries = max(1, max_retries if max_retries is not None else self.max_retries)
        timeout = timeout if timeout is not None else self.timeout
        last_error: Optional[Exception] = None

        for attempt in range(retries):
            try:
                resp = self.session.get(url, timeout=timeout, headers={"User-Agent": self.user_agent})
                resp.raise_for_status()
                return resp.text
            except requests.RequestException as e:
                last_error = e
                logger.warning("Attempt %d/%d failed for %s: %s", attempt + 1, retries, url, e)
                if attempt < retries - 1:
                    self.sleep(self.backoff_base * (2 ** attempt))

        raise FetchError(f"Failed to fetch {url}: {last_error}") from last_error

    def is_url_accessible(self, url: str) -> bool:
        try:
            self.fetch(url, max_retries=1, timeout=5)
            return True
        except FetchError:
            return False
