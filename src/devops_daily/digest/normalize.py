from __future__ import annotations

import re
from dataclasses import replace
from typing import Iterable
from urllib.parse import urlsplit, urlunsplit

from devops_daily.domain.models import NewsItem
from devops_daily.utils.dates import to_iso_utc, try_parse_date, utcnow

_WS_RE = re.compile(r"\s+")
_HTML_TAG_RE = re.compile(r"<[^>]*>")
_BRACKET_TAG_RE = re.compile(r"\[.*?\]")

_ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#039;", "'"),
)

EXCERPT_MAX_CHARS = 500


def _decode_entities(text: str) -> str:
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text


def normalize_title(title: str) -> str:
    text = _WS_RE.sub(" ", title.strip())
    text = _decode_entities(text)
    text = _BRACKET_TAG_RE.sub("", text)
    return text.strip()


def normalize_url(url: str) -> str:
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc:
        return url
    path = parts.path or "/"
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, parts.fragment))


def normalize_excerpt(excerpt: str) -> str:
    text = _WS_RE.sub(" ", excerpt.strip())
    text = _HTML_TAG_RE.sub("", text)
    text = _decode_entities(text)
    return text[:EXCERPT_MAX_CHARS].strip()


def normalize_date(value: str) -> str:
    parsed = try_parse_date(value)
    return to_iso_utc(parsed or utcnow())


def normalize_item(item: NewsItem) -> NewsItem:
    return replace(
        item,
        title=normalize_title(item.title),
        url=normalize_url(item.url),
        excerpt=normalize_excerpt(item.excerpt) if item.excerpt else "",
        published_at=normalize_date(item.published_at),
    )


def normalize_items(items: Iterable[NewsItem]) -> list[NewsItem]:
    return [normalize_item(i) for i in items]


def extract_domain(url: str) -> str:
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return "unknown"
    if not host:
        return "unknown"
    return host[4:] if host.startswith("www.") else host
