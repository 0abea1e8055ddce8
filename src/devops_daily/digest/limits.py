from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Mapping, Sequence

from devops_daily.domain.models import NewsItem, Source
from devops_daily.domain.schema import DEFAULT_CATEGORY, PRIORITY_ORDER
from devops_daily.utils.dates import try_parse_date

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def _date_key(item: NewsItem) -> datetime:
    return try_parse_date(item.published_at) or _EPOCH


def sort_by_date(items: Sequence[NewsItem]) -> list[NewsItem]:
    return sorted(items, key=_date_key, reverse=True)


def _limit_by(items: Sequence[NewsItem], key: Callable[[NewsItem], str], limit: int) -> list[NewsItem]:
    groups: dict[str, list[NewsItem]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)

    limited: list[NewsItem] = []
    for group in groups.values():
        limited.extend(sort_by_date(group)[:limit])
    return limited


def limit_per_source(items: Sequence[NewsItem], max_per_source: int = 4) -> list[NewsItem]:
    return _limit_by(items, lambda i: i.source, max_per_source)


def limit_per_category(items: Sequence[NewsItem], max_per_category: int = 12) -> list[NewsItem]:
    return _limit_by(items, lambda i: i.category or DEFAULT_CATEGORY, max_per_category)


def apply_limits(items: Sequence[NewsItem], max_per_source: int = 4, max_per_category: int = 12) -> list[NewsItem]:
    return limit_per_category(limit_per_source(items, max_per_source), max_per_category)


def filter_by_priority(
    items: Sequence[NewsItem],
    min_priority: str = "low",
    sources: Sequence[Source] | Mapping[str, str] = (),
) -> list[NewsItem]:
    """
    Keep items whose source priority is at least min_priority.
    Priorities are looked up by source name; unknown sources count as "low".
    """
    if isinstance(sources, Mapping):
        priorities = dict(sources)
    else:
        priorities = {s.name: s.priority for s in sources}

    threshold = PRIORITY_ORDER[min_priority]
    return [i for i in items if PRIORITY_ORDER.get(priorities.get(i.source, "low"), 1) >= threshold]
