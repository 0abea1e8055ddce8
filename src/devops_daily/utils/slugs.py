from __future__ import annotations

import re

_WS_RE = re.compile(r"\s+")
_NON_SLUG_RE = re.compile(r"[^\w-]+", re.ASCII)
_MULTI_DASH_RE = re.compile(r"-{2,}")
_HEADING_STRIP_RE = re.compile(r"[^\w\s-]")


def tag_to_slug(tag: str) -> str:
    """
    Turn a free-form tag into a URL slug: "GitHub Actions" -> "github-actions".
    """
    slug = _WS_RE.sub("-", tag.lower())
    slug = _NON_SLUG_RE.sub("", slug)
    slug = _MULTI_DASH_RE.sub("-", slug)
    return slug.strip("-")


def slug_to_tag(slug: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def heading_slug(text: str, depth: int) -> str:
    """
    Anchor id for a heading. The level prefix keeps ids unique across levels.
    """
    base = _HEADING_STRIP_RE.sub("", text.lower().strip())
    base = _WS_RE.sub("-", base)
    base = _MULTI_DASH_RE.sub("-", base).strip("-")
    return f"h{depth}-{base}"
