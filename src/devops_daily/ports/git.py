from __future__ import annotations

from pathlib import Path
from typing import Protocol


class GitClient(Protocol):
    """
    The handful of git operations the digest run needs.
    """

    def create_branch(self, name: str) -> None: ...

    def current_branch(self) -> str: ...

    def is_clean(self) -> bool: ...

    def add(self, path: Path) -> None: ...

    def commit(self, message: str) -> None: ...

    def push(self, branch: str) -> None: ...

    def commit_and_push(self, path: Path, message: str, branch: str) -> None: ...
