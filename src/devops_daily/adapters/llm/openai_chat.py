from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

# Requires: pip install openai
from openai import APIError, APIStatusError, OpenAI

from devops_daily.domain.errors import ConfigError, GenerationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-5-nano-2025-08-07"

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def _is_retryable(error: Exception) -> bool:
    # 4xx other than rate limiting will not improve on retry
    if isinstance(error, APIStatusError):
        status = error.status_code
        return not (400 <= status < 500 and status != 429)
    return True


def parse_json_object(text: str) -> dict[str, Any]:
    """
    Parse a model reply as a JSON object, tolerating surrounding prose or fences.
    """
    if not text or not text.strip():
        raise GenerationError("Empty response from model")

    try:
        loaded = json.loads(text)
    except json.JSONDecodeError:
        m = _JSON_OBJECT_RE.search(text)
        if not m:
            logger.error("Failed to parse JSON response: %s", text[:200])
            raise GenerationError("No JSON object found in response") from None
        try:
            loaded = json.loads(m.group(0))
        except json.JSONDecodeError as e:
            logger.error("Failed to parse JSON response: %s", text[:200])
            raise GenerationError("Invalid JSON response from model") from e

    if not isinstance(loaded, dict):
        raise GenerationError(f"Expected a JSON object, got {type(loaded).__name__}")
    return loaded


@dataclass
class OpenAIChatClient:
    """
    OpenAI chat completions with bounded retries and exponential backoff.
    """
    api_key: str
    model: str = DEFAULT_MODEL
    max_completion_tokens: int = 500
    max_retries: int = 3
    sleep: Callable[[float], None] = time.sleep
    client: Optional[Any] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.client is None:
            if not self.api_key:
                raise ConfigError("OPENAI_API_KEY environment variable is required")
            self.client = OpenAI(api_key=self.api_key)

    @property
    def model_name(self) -> str:
        return self.model

    def complete(self, system: str, user: str, *, json_mode: bool = False) -> str:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "max_completion_tokens": self.max_completion_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                resp = self.client.chat.completions.create(**kwargs)
                if not resp.choices:
                    return ""
                return resp.choices[0].message.content or ""
            except APIError as e:
                last_error = e
                status = getattr(e, "status_code", None)
                logger.error(
                    "OpenAI API error (attempt %d/%d): status=%s message=%s",
                    attempt, self.max_retries, status, e,
                )
                if not _is_retryable(e):
                    raise GenerationError(f"OpenAI request rejected: {e}") from e
                if attempt < self.max_retries:
                    self.sleep(min(2 ** (attempt - 1), 10))

        raise GenerationError(f"OpenAI request failed after {self.max_retries} attempts: {last_error}") from last_error

    def complete_json(self, system: str, user: str) -> dict[str, Any]:
        return parse_json_object(self.complete(system, user, json_mode=True))
