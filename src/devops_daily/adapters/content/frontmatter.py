from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

import yaml

from devops_daily.domain.errors import FrontmatterError
from devops_daily.domain.models import AuthorRef, CategoryRef
from devops_daily.utils.dates import try_parse_date
from devops_daily.utils.slugs import tag_to_slug

Ref = Union[AuthorRef, CategoryRef]


def _normalize_newlines(text: str) -> str:
    return text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")


def _find_fences(lines: list[str]) -> Optional[int]:
    """
    Index of the closing '---' line, or None when the text has no complete block.
    """
    if not lines or lines[0].strip() != "---":
        return None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            return i
    return None


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """
    Split a markdown file into (frontmatter, body).

    Lenient: a missing or unterminated block, broken YAML (an
    impossible date such as 2025-13-45 included) or a non-mapping document
    all yield an empty dict.
    """
    s = _normalize_newlines(text)
    lines = s.split("\n")

    end_idx = _find_fences(lines)
    if end_idx is None:
        return {}, s

    fm_text = "\n".join(lines[1:end_idx]).strip()
    body = "\n".join(lines[end_idx + 1:]).lstrip("\n")
    if not fm_text:
        return {}, body

    try:
        loaded = yaml.safe_load(fm_text)
    except (yaml.YAMLError, ValueError):
        return {}, body

    return (loaded if isinstance(loaded, dict) else {}), body


def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """
    Strict variant of split_frontmatter; raises FrontmatterError instead of guessing.
    """
    s = _normalize_newlines(text)
    lines = s.split("\n")

    if not lines or lines[0].strip() != "---":
        raise FrontmatterError("missing frontmatter block (file must start with '---')")

    end_idx = _find_fences(lines)
    if end_idx is None:
        raise FrontmatterError("unterminated frontmatter block (no closing '---')")

    fm_text = "\n".join(lines[1:end_idx])
    try:
        loaded = yaml.safe_load(fm_text)
    except (yaml.YAMLError, ValueError) as e:
        raise FrontmatterError(f"invalid YAML in frontmatter: {e}") from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise FrontmatterError(f"frontmatter must be a mapping, got {type(loaded).__name__}")

    return loaded, "\n".join(lines[end_idx + 1:]).lstrip("\n")


def normalize_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        # Allow "a, b" or "a"
        parts = [p.strip() for p in value.split(",")]
        return [p for p in parts if p]
    if isinstance(value, (list, tuple)):
        return [x.strip() for x in value if isinstance(x, str) and x.strip()]
    return []


def coerce_ref(value: Any, kind: type[Ref]) -> Optional[Ref]:
    """
    Build a CategoryRef/AuthorRef from {name, slug} or a bare name.
    """
    if isinstance(value, str) and value.strip():
        name = value.strip()
        return kind(name=name, slug=tag_to_slug(name))
    if isinstance(value, dict):
        name = str(value.get("name") or "").strip()
        slug = str(value.get("slug") or "").strip()
        if not name and not slug:
            return None
        return kind(name=name or slug, slug=slug or tag_to_slug(name))
    return None


def coerce_date(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return try_parse_date(value)
