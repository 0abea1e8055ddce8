from __future__ import annotations

from typing import Optional, Protocol


class Fetcher(Protocol):
    """
    Fetches a URL body as text. Raises FetchError once retries are exhausted.
    """

    def fetch(self, url: str, *, max_retries: Optional[int] = None, timeout: Optional[float] = None) -> str:
        ...
