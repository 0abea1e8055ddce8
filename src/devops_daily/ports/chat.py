from __future__ import annotations

from typing import Any, Protocol


class ChatClient(Protocol):
    """
    A single-turn chat completion endpoint.
    """

    @property
    def model_name(self) -> str: ...

    def complete(self, system: str, user: str, *, json_mode: bool = False) -> str:
        ...

    def complete_json(self, system: str, user: str) -> dict[str, Any]:
        ...
