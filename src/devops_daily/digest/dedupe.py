from __future__ import annotations

import re
from typing import Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from devops_daily.domain.models import NewsItem
from devops_daily.utils.dates import try_parse_date

TRACKING_PARAMS = frozenset({"utm_source", "utm_medium", "utm_campaign", "ref"})

_PUNCT_RE = re.compile(r"[^\w\s]")
_WS_RE = re.compile(r"\s+")


def normalize_url_key(url: str) -> str:
    try:
        parts = urlsplit(url)
    except ValueError:
        return url.lower()
    if not parts.scheme or not parts.netloc:
        return url.lower()

    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in TRACKING_PARAMS]
    key = urlunsplit((parts.scheme, parts.netloc, parts.path or "/", urlencode(query), parts.fragment))
    if key.endswith("/"):
        key = key[:-1]
    return key.lower()


def normalize_title_key(title: str) -> str:
    text = _PUNCT_RE.sub("", title.lower())
    return _WS_RE.sub(" ", text).strip()


def deduplicate_by_url(items: Sequence[NewsItem]) -> list[NewsItem]:
    seen: set[str] = set()
    unique: list[NewsItem] = []
    for item in items:
        key = normalize_url_key(item.url)
        if key not in seen:
            seen.add(key)
            unique.append(item)
    return unique


def deduplicate_by_title(items: Sequence[NewsItem]) -> list[NewsItem]:
    seen: set[str] = set()
    unique: list[NewsItem] = []
    for item in items:
        key = normalize_title_key(item.title)
        if key not in seen:
            seen.add(key)
            unique.append(item)
    return unique


def _is_newer(candidate: NewsItem, current: NewsItem) -> bool:
    a = try_parse_date(candidate.published_at)
    b = try_parse_date(current.published_at)
    if a is None or b is None:
        return False
    return a > b


def deduplicate(items: Sequence[NewsItem]) -> list[NewsItem]:
    """
    Drop URL duplicates, then collapse near-identical titles keeping the newest.
    Output keeps the position where each title first appeared.
    """
    by_title: dict[str, NewsItem] = {}
    for item in deduplicate_by_url(items):
        key = normalize_title_key(item.title)
        existing = by_title.get(key)
        if existing is None or _is_newer(item, existing):
            by_title[key] = item
    return list(by_title.values())
