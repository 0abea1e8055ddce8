from __future__ import annotations

from typing import Final

# Canonical frontmatter keys used across the content tree
META_TITLE: Final[str] = "title"
META_EXCERPT: Final[str] = "excerpt"
META_SUMMARY: Final[str] = "summary"
META_CATEGORY: Final[str] = "category"
META_AUTHOR: Final[str] = "author"
META_DATE: Final[str] = "date"
META_PUBLISHED_AT: Final[str] = "publishedAt"
META_UPDATED_AT: Final[str] = "updatedAt"
META_READING_TIME: Final[str] = "readingTime"
META_TAGS: Final[str] = "tags"
META_IMAGE: Final[str] = "image"

DATE_KEYS: Final[tuple[str, ...]] = (META_DATE, META_PUBLISHED_AT, META_UPDATED_AT)

# Digest categories, in the order they appear in a rendered digest
DIGEST_CATEGORIES: Final[tuple[str, ...]] = (
    "Kubernetes",
    "Cloud Native",
    "CI/CD",
    "IaC",
    "Observability",
    "Security",
    "Databases",
    "Platforms",
    "Misc",
)
DEFAULT_CATEGORY: Final[str] = "Misc"

SOURCE_TYPES: Final[tuple[str, ...]] = ("rss", "web")
PRIORITY_ORDER: Final[dict[str, int]] = {"high": 3, "medium": 2, "low": 1}
