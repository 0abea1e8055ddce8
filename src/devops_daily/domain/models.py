from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -------------------------
# Content objects
# -------------------------

@dataclass(frozen=True, slots=True)
class CategoryRef:
    name: str
    slug: str


@dataclass(frozen=True, slots=True)
class AuthorRef:
    name: str
    slug: str


@dataclass(frozen=True, slots=True)
class Post:
    """
    An article under content/posts/.

    slug is the file stem; dates are aware UTC datetimes or None.
    """
    slug: str
    title: str
    content: str
    excerpt: str = ""
    category: Optional[CategoryRef] = None
    author: Optional[AuthorRef] = None
    date: Optional[datetime] = None
    published_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    reading_time: Optional[str] = None
    tags: Sequence[str] = field(default_factory=tuple)
    source_path: Optional[Path] = None
    frontmatter: Mapping[str, Any] = field(default_factory=dict)

    @property
    def sort_date(self) -> Optional[datetime]:
        return self.published_at or self.date


@dataclass(frozen=True, slots=True)
class Author:
    name: str
    slug: str
    bio: Optional[str] = None
    avatar: Optional[str] = None
    post_count: int = 0


@dataclass(frozen=True, slots=True)
class Category:
    name: str
    slug: str
    description: Optional[str] = None
    long_description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    count: int = 0


@dataclass(frozen=True, slots=True)
class Tag:
    name: str
    slug: str
    count: int


@dataclass(frozen=True, slots=True)
class NewsDigest:
    """
    A generated weekly digest under content/news/<year>/week-<n>.md.
    """
    title: str
    slug: str
    week: int
    year: int
    content: str
    excerpt: Optional[str] = None
    summary: Optional[str] = None
    date: Optional[datetime] = None
    image: Optional[str] = None
    source_path: Optional[Path] = None


@dataclass(frozen=True, slots=True)
class LintIssue:
    path: Path
    field: Optional[str]
    message: str
    severity: str = "error"  # "error" | "warning"


# -------------------------
# Digest pipeline objects
# -------------------------

@dataclass(frozen=True, slots=True)
class Source:
    name: str
    type: str  # "rss" | "web"
    url: str
    category: str = "Misc"
    priority: str = "medium"  # "high" | "medium" | "low"


@dataclass(frozen=True, slots=True)
class NewsItem:
    """
    A single crawled entry. published_at is an ISO-8601 string.
    """
    title: str
    url: str
    excerpt: str
    source: str
    published_at: str
    category: Optional[str] = None
    tags: Sequence[str] = field(default_factory=tuple)
    summary: Optional[str] = None
    include: Optional[bool] = None


@dataclass(frozen=True, slots=True)
class Classification:
    include: bool
    category: str
    tags: Sequence[str] = field(default_factory=tuple)
    summary: str = ""


@dataclass(frozen=True, slots=True)
class DigestMetadata:
    title: str
    date: str
    week: int
    year: int
    summary: str


@dataclass(frozen=True, slots=True)
class Digest:
    metadata: DigestMetadata
    categories: Mapping[str, Sequence[NewsItem]]


@dataclass(frozen=True, slots=True)
class DigestStats:
    total_items: int
    category_counts: Mapping[str, int]
    sources: Sequence[str]


# -------------------------
# Run tracing
# -------------------------

@dataclass(slots=True)
class RunTrace:
    """
    A structured record of one digest run, dumped as JSON for debugging.
    """
    run_id: str
    started_at: datetime = field(default_factory=_utcnow)
    skip_ai: bool = False

    stage_counts: dict[str, int] = field(default_factory=dict)
    stage_seconds: dict[str, float] = field(default_factory=dict)

    week: Optional[int] = None
    year: Optional[int] = None
    output_path: Optional[Path] = None
    duplicate_urls: list[str] = field(default_factory=list)
    branch: Optional[str] = None
    finished_at: Optional[datetime] = None
    metadata: dict[str, Any] = field(default_factory=dict)
