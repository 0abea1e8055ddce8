from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Shared console for log records and user-facing summaries
console = Console(stderr=True)


def setup_logging(level: int = logging.INFO, log_file: Optional[Path] = None) -> None:
    """
    Configure the root logger once: rich console output plus an optional file log.
    Safe to call more than once; handlers are replaced, not stacked.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    rich_handler = RichHandler(console=console, show_path=False, markup=False, rich_tracebacks=True)
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(rich_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root.addHandler(file_handler)

    root.setLevel(level)

    # Third-party clients are chatty at INFO
    for noisy in ("httpx", "openai", "urllib3"):
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))
