from __future__ import annotations

from pathlib import Path
from typing import Protocol

from devops_daily.domain.models import RunTrace


class RunLogger(Protocol):
    """
    Persists digest run traces for debugging.
    """

    def log(self, trace: RunTrace) -> Path:
        ...
