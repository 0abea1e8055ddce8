from __future__ import annotations

from typing import Protocol

from devops_daily.domain.models import NewsItem


class Summarizer(Protocol):
    """
    Produces a short technical summary for a news item.
    """

    def summarize(self, item: NewsItem) -> str:
        ...
