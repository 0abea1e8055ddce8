from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TextLoader:
    """
    Reads a content file from disk.

    - Tries utf-8 first, falls back to latin-1 with replacement.
    - Skips files larger than max_bytes.
    """
    max_bytes: int = 2_000_000
    prefer_encoding: str = "utf-8"
    fallback_encoding: str = "latin-1"

    def load(self, path: Path) -> Optional[str]:
        try:
            if path.stat().st_size > self.max_bytes:
                logger.warning("Skipping %s: larger than %d bytes", path, self.max_bytes)
                return None
            data = path.read_bytes()
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
            return None

        try:
            return data.decode(self.prefer_encoding, errors="strict")
        except UnicodeDecodeError:
            logger.debug("%s is not valid %s, decoding as %s", path, self.prefer_encoding, self.fallback_encoding)
            return data.decode(self.fallback_encoding, errors="replace")
