from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence, Union

from devops_daily.digest.limits import sort_by_date
from devops_daily.digest.template import generate_summary, generate_title
from devops_daily.domain.models import Digest, DigestMetadata, DigestStats, NewsItem
from devops_daily.domain.schema import DEFAULT_CATEGORY, DIGEST_CATEGORIES
from devops_daily.utils.dates import current_week, current_year, format_iso_date


def group_by_category(items: Sequence[NewsItem]) -> dict[str, list[NewsItem]]:
    """
    Every digest category in display order, each sorted most recent first.
    Items with an unknown category land in Misc.
    """
    groups: dict[str, list[NewsItem]] = {name: [] for name in DIGEST_CATEGORIES}
    for item in items:
        category = item.category or DEFAULT_CATEGORY
        groups.get(category, groups[DEFAULT_CATEGORY]).append(item)
    return {name: sort_by_date(group) for name, group in groups.items()}


def assemble_digest(
    items: Sequence[NewsItem],
    week: Optional[int] = None,
    year: Optional[int] = None,
    today: Optional[Union[date, datetime]] = None,
) -> Digest:
    w = week or current_week()
    y = year or current_year()
    metadata = DigestMetadata(
        title=generate_title(w, y),
        date=format_iso_date(today),
        week=w,
        year=y,
        summary=generate_summary(),
    )
    return Digest(metadata=metadata, categories=group_by_category(items))


def get_digest_stats(digest: Digest) -> DigestStats:
    counts: dict[str, int] = {}
    sources: list[str] = []
    for category, items in digest.categories.items():
        counts[category] = len(items)
        for item in items:
            if item.source not in sources:
                sources.append(item.source)
    return DigestStats(total_items=sum(counts.values()), category_counts=counts, sources=sources)
