from __future__ import annotations

from typing import Protocol

from devops_daily.domain.models import Classification, NewsItem


class Classifier(Protocol):
    """
    Decides whether a news item belongs in the digest, and under which category.
    """

    @property
    def uses_llm(self) -> bool: ...

    def classify(self, item: NewsItem) -> Classification:
        ...
