from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from devops_daily.adapters.content.frontmatter import (
    coerce_date,
    coerce_ref,
    normalize_tags,
    split_frontmatter,
)
from devops_daily.adapters.content.text_loader import TextLoader
from devops_daily.domain import schema
from devops_daily.domain.models import (
    Author,
    AuthorRef,
    Category,
    CategoryRef,
    NewsDigest,
    Post,
    Tag,
)
from devops_daily.publishing.markdown import estimate_reading_time
from devops_daily.utils.slugs import tag_to_slug

logger = logging.getLogger(__name__)

_WEEK_FILE_RE = re.compile(r"week-(\d+)\.md$")
_NEWS_SLUG_RE = re.compile(r"(\d{4})-week-(\d+)")
_YEAR_DIR_RE = re.compile(r"^\d{4}$")
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

CATEGORY_ICONS: dict[str, str] = {
    "kubernetes": "Layers",
    "terraform": "Server",
    "docker": "Database",
    "ci-cd": "Workflow",
    "cloud": "Cloud",
    "git": "GitBranch",
    "security": "Lock",
    "cli": "Terminal",
    "code": "Code",
}

CATEGORY_COLORS: dict[str, str] = {
    "kubernetes": "bg-blue-500/10 text-blue-500",
    "terraform": "bg-purple-500/10 text-purple-500",
    "docker": "bg-cyan-500/10 text-cyan-500",
    "ci-cd": "bg-green-500/10 text-green-500",
    "cloud": "bg-orange-500/10 text-orange-500",
    "git": "bg-red-500/10 text-red-500",
    "security": "bg-yellow-500/10 text-yellow-500",
    "cli": "bg-indigo-500/10 text-indigo-500",
    "code": "bg-pink-500/10 text-pink-500",
}


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def news_image_path(slug: str) -> str:
    return f"/images/news/{slug}.svg"


@dataclass
class ContentRepository:
    """
    Read-only view over a content tree:

        <content_dir>/posts/<slug>.md
        <content_dir>/authors/<slug>.md
        <content_dir>/categories/<slug>.md
        <content_dir>/news/<year>/week-<n>.md

    Posts are parsed once and cached; call reload() after the tree changes.
    """
    content_dir: Path
    posts_dirname: str = "posts"
    authors_dirname: str = "authors"
    categories_dirname: str = "categories"
    news_dirname: str = "news"
    text_loader: TextLoader = field(default_factory=TextLoader)

    _posts: Optional[list[Post]] = field(default=None, init=False, repr=False)

    @property
    def posts_dir(self) -> Path:
        return self.content_dir / self.posts_dirname

    @property
    def authors_dir(self) -> Path:
        return self.content_dir / self.authors_dirname

    @property
    def categories_dir(self) -> Path:
        return self.content_dir / self.categories_dirname

    @property
    def news_dir(self) -> Path:
        return self.content_dir / self.news_dirname

    def reload(self) -> None:
        self._posts = None

    # -------------------------
    # Posts
    # -------------------------

    def _read(self, path: Path) -> Optional[tuple[dict[str, Any], str]]:
        raw = self.text_loader.load(path)
        if raw is None:
            return None
        return split_frontmatter(raw)

    def load_post(self, path: Path) -> Optional[Post]:
        loaded = self._read(path)
        if loaded is None:
            return None
        fm, body = loaded

        title = _opt_str(fm.get(schema.META_TITLE))
        if title is None:
            logger.warning("Skipping post without title: %s", path)
            return None

        reading_time = _opt_str(fm.get(schema.META_READING_TIME)) or estimate_reading_time(body)

        return Post(
            slug=path.stem,
            title=title,
            content=body,
            excerpt=_opt_str(fm.get(schema.META_EXCERPT)) or "",
            category=coerce_ref(fm.get(schema.META_CATEGORY), CategoryRef),
            author=coerce_ref(fm.get(schema.META_AUTHOR), AuthorRef),
            date=coerce_date(fm.get(schema.META_DATE)),
            published_at=coerce_date(fm.get(schema.META_PUBLISHED_AT)),
            updated_at=coerce_date(fm.get(schema.META_UPDATED_AT)),
            reading_time=reading_time,
            tags=tuple(normalize_tags(fm.get(schema.META_TAGS))),
            source_path=path,
            frontmatter=fm,
        )

    def get_all_posts(self) -> list[Post]:
        if self._posts is not None:
            return list(self._posts)

        posts: list[Post] = []
        if self.posts_dir.is_dir():
            for path in sorted(self.posts_dir.glob("*.md")):
                post = self.load_post(path)
                if post is not None:
                    posts.append(post)
        else:
            logger.debug("No posts directory at %s", self.posts_dir)

        # Most recent first; undated posts sink to the bottom
        posts.sort(key=lambda p: p.sort_date or _EPOCH, reverse=True)
        self._posts = posts
        return list(posts)

    def get_post_by_slug(self, slug: str) -> Optional[Post]:
        return next((p for p in self.get_all_posts() if p.slug == slug), None)

    # -------------------------
    # Authors
    # -------------------------

    def _author_from_file(self, path: Path, posts: list[Post]) -> Optional[Author]:
        loaded = self._read(path)
        if loaded is None:
            return None
        fm, _ = loaded
        slug = path.stem
        return Author(
            name=_opt_str(fm.get("name")) or slug,
            slug=slug,
            bio=_opt_str(fm.get("bio")),
            avatar=_opt_str(fm.get("avatar")),
            post_count=sum(1 for p in posts if p.author and p.author.slug == slug),
        )

    def get_all_authors(self) -> list[Author]:
        if not self.authors_dir.is_dir():
            return []
        posts = self.get_all_posts()
        authors = [
            a for a in (self._author_from_file(p, posts) for p in sorted(self.authors_dir.glob("*.md")))
            if a is not None
        ]
        return sorted(authors, key=lambda a: a.name.lower())

    def get_author_by_slug(self, slug: str) -> Optional[Author]:
        path = self.authors_dir / f"{slug}.md"
        if not path.is_file():
            return None
        return self._author_from_file(path, self.get_all_posts())

    def get_posts_by_author(self, author_slug: str) -> list[Post]:
        return [p for p in self.get_all_posts() if p.author and p.author.slug == author_slug]

    # -------------------------
    # Categories
    # -------------------------

    def get_categories_with_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for post in self.get_all_posts():
            if post.category and post.category.slug:
                counts[post.category.slug] = counts.get(post.category.slug, 0) + 1
        return counts

    def _category_from_file(self, path: Path, counts: dict[str, int]) -> Optional[Category]:
        loaded = self._read(path)
        if loaded is None:
            return None
        fm, _ = loaded
        slug = path.stem
        return Category(
            name=_opt_str(fm.get("name")) or slug,
            slug=slug,
            description=_opt_str(fm.get("description")),
            long_description=_opt_str(fm.get("longDescription")),
            icon=_opt_str(fm.get("icon")) or CATEGORY_ICONS.get(slug),
            color=_opt_str(fm.get("color")) or CATEGORY_COLORS.get(slug),
            count=counts.get(slug, 0),
        )

    def get_all_categories(self) -> list[Category]:
        if not self.categories_dir.is_dir():
            return []
        counts = self.get_categories_with_counts()
        categories = [
            c for c in (self._category_from_file(p, counts) for p in sorted(self.categories_dir.glob("*.md")))
            if c is not None
        ]
        return sorted(categories, key=lambda c: (-c.count, c.name))

    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        path = self.categories_dir / f"{slug}.md"
        if not path.is_file():
            return None
        return self._category_from_file(path, self.get_categories_with_counts())

    # -------------------------
    # Tags
    # -------------------------

    def get_all_tags(self) -> list[Tag]:
        # Keyed by slug so "Docker" and "docker" collapse into one tag
        tag_map: dict[str, Tag] = {}
        for post in self.get_all_posts():
            for tag in post.tags:
                slug = tag_to_slug(tag)
                existing = tag_map.get(slug)
                if existing is None:
                    tag_map[slug] = Tag(name=tag, slug=slug, count=1)
                else:
                    tag_map[slug] = Tag(name=existing.name, slug=slug, count=existing.count + 1)

        # sorted() is stable, so ties keep first-seen order
        return sorted(tag_map.values(), key=lambda t: -t.count)

    def get_tag_by_slug(self, slug: str) -> Optional[str]:
        return next((t.name for t in self.get_all_tags() if t.slug == slug), None)

    def get_posts_by_tag_slug(self, tag_slug: str) -> list[Post]:
        actual = self.get_tag_by_slug(tag_slug)
        if actual is None:
            return []
        wanted = actual.lower()
        return [p for p in self.get_all_posts() if any(t.lower() == wanted for t in p.tags)]

    # -------------------------
    # News digests
    # -------------------------

    def _news_from_file(self, path: Path, year: int, week: int) -> Optional[NewsDigest]:
        loaded = self._read(path)
        if loaded is None:
            return None
        fm, body = loaded
        slug = f"{year}-week-{week}"
        summary = _opt_str(fm.get(schema.META_SUMMARY))
        return NewsDigest(
            title=_opt_str(fm.get(schema.META_TITLE)) or slug,
            slug=slug,
            week=week,
            year=year,
            content=body,
            excerpt=summary or _opt_str(fm.get(schema.META_EXCERPT)),
            summary=summary,
            date=coerce_date(fm.get(schema.META_DATE)),
            image=_opt_str(fm.get(schema.META_IMAGE)) or news_image_path(slug),
            source_path=path,
        )

    def get_news_years(self) -> list[int]:
        if not self.news_dir.is_dir():
            return []
        years = [int(p.name) for p in self.news_dir.iterdir() if p.is_dir() and _YEAR_DIR_RE.match(p.name)]
        return sorted(years, reverse=True)

    def get_all_news(self) -> list[NewsDigest]:
        news: list[NewsDigest] = []
        for year in self.get_news_years():
            for path in sorted((self.news_dir / str(year)).glob("*.md")):
                m = _WEEK_FILE_RE.search(path.name)
                week = int(m.group(1)) if m else 0
                digest = self._news_from_file(path, year, week)
                if digest is not None:
                    news.append(digest)

        return sorted(news, key=lambda n: (n.year, n.week), reverse=True)

    def get_news_by_slug(self, slug: str) -> Optional[NewsDigest]:
        m = _NEWS_SLUG_RE.search(slug)
        if not m:
            return None
        year, week = int(m.group(1)), int(m.group(2))
        path = self.news_dir / str(year) / f"week-{week}.md"
        if not path.is_file():
            return None
        return self._news_from_file(path, year, week)

    def get_latest_news(self, limit: int = 6) -> list[NewsDigest]:
        return self.get_all_news()[:limit]

    def get_news_by_year(self, year: int) -> list[NewsDigest]:
        return [n for n in self.get_all_news() if n.year == year]
