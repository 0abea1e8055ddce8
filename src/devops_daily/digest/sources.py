from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from devops_daily.domain.errors import ConfigError
from devops_daily.domain.models import Source
from devops_daily.domain.schema import DEFAULT_CATEGORY, PRIORITY_ORDER, SOURCE_TYPES

logger = logging.getLogger(__name__)


def source_from_dict(raw: Any, index: int) -> Source:
    if not isinstance(raw, dict):
        raise ConfigError(f"sources[{index}] must be a mapping")

    missing = [k for k in ("name", "type", "url") if not raw.get(k)]
    if missing:
        raise ConfigError(f"sources[{index}] is missing: {', '.join(missing)}")

    source_type = str(raw["type"]).strip().lower()
    if source_type not in SOURCE_TYPES:
        raise ConfigError(f"sources[{index}] ({raw['name']}): unknown type {raw['type']!r}")

    priority = str(raw.get("priority") or "medium").strip().lower()
    if priority not in PRIORITY_ORDER:
        raise ConfigError(f"sources[{index}] ({raw['name']}): unknown priority {raw['priority']!r}")

    return Source(
        name=str(raw["name"]).strip(),
        type=source_type,
        url=str(raw["url"]).strip(),
        category=str(raw.get("category") or DEFAULT_CATEGORY).strip(),
        priority=priority,
    )


def load_sources(path: Path) -> list[Source]:
    """
    Load data/sources.yaml: {sources: [{name, type, url, category, priority}]}.
    """
    if not path.is_file():
        raise ConfigError(f"Sources file not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    entries = raw.get("sources") if isinstance(raw, dict) else None
    if not isinstance(entries, list):
        raise ConfigError(f"{path} must contain a 'sources' list")

    sources = [source_from_dict(entry, i) for i, entry in enumerate(entries)]
    logger.info("Loaded %d sources from %s", len(sources), path)
    return sources
