"""Git operations for publishing a digest, executed via subprocess."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from devops_daily.domain.errors import GitError

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


def run_git(
    args: Sequence[str],
    *,
    cwd: Path,
    operation_context: str,
    check: bool = True,
    runner: Runner = subprocess.run,
) -> subprocess.CompletedProcess:
    """
    Run `git <args>` in cwd. Failures raise GitError carrying the operation and stderr.
    """
    cmd = ["git", *args]
    try:
        result = runner(cmd, cwd=cwd, capture_output=True, text=True, check=False)
    except OSError as e:
        raise GitError(f"Failed to {operation_context}: {e}") from e

    if check and result.returncode != 0:
        stderr = (result.stderr or "").strip()
        raise GitError(f"Failed to {operation_context} (exit {result.returncode}): {stderr}")
    return result


@dataclass(frozen=True, slots=True)
class SubprocessGit:
    cwd: Path
    remote: str = "origin"
    runner: Runner = subprocess.run

    def _git(self, *args: str, context: str, check: bool = True) -> subprocess.CompletedProcess:
        return run_git(args, cwd=self.cwd, operation_context=context, check=check, runner=self.runner)

    def branch_exists(self, name: str) -> bool:
        result = self._git(
            "show-ref", "--verify", "--quiet", f"refs/heads/{name}",
            context=f"check if branch '{name}' exists",
            check=False,
        )
        return result.returncode == 0

    def create_branch(self, name: str) -> None:
        """Check out name, creating it from HEAD when it does not exist yet."""
        if self.branch_exists(name):
            logger.info("Branch %s already exists, checking it out...", name)
            self._git("checkout", name, context=f"checkout branch '{name}'")
            return

        logger.info("Creating new branch: %s", name)
        self._git("checkout", "-b", name, context=f"create branch '{name}'")

    def current_branch(self) -> str:
        result = self._git("rev-parse", "--abbrev-ref", "HEAD", context="get current branch", check=False)
        name = (result.stdout or "").strip()
        return name if result.returncode == 0 and name else "unknown"

    def is_clean(self) -> bool:
        result = self._git("status", "--porcelain", context="check working tree status")
        return not (result.stdout or "").strip()

    def add(self, path: Path) -> None:
        self._git("add", "--", str(path), context=f"add '{path}'")

    def commit(self, message: str) -> None:
        self._git("commit", "-m", message, context="commit")
        logger.info("Committed: %s", message)

    def push(self, branch: str) -> None:
        self._git("push", "--set-upstream", self.remote, branch, context=f"push to {self.remote}/{branch}")
        logger.info("Pushed to %s/%s", self.remote, branch)

    def commit_and_push(self, path: Path, message: str, branch: str) -> None:
        self.add(path)
        self.commit(message)
        self.push(branch)
