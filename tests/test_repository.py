"""Tests for ContentRepository over a temporary content tree."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from devops_daily.adapters.content.repository import ContentRepository, news_image_path


def write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def post(title: str, published: str, *, category: str = "kubernetes", author: str = "jane-doe", tags: str = "[]") -> str:
    return f"""---
title: "{title}"
excerpt: "About {title}"
publishedAt: "{published}"
category:
  name: {category.capitalize()}
  slug: {category}
author:
  name: Someone
  slug: {author}
tags: {tags}
---

Some body text for {title}.
"""


@pytest.fixture
def content(tmp_path: Path) -> Path:
    root = tmp_path / "content"
    write(root / "posts" / "helm-basics.md", post("Helm basics", "2025-01-12T09:00:00Z", tags="[Helm, Kubernetes]"))
    write(root / "posts" / "kubectl-tips.md", post("kubectl tips", "2025-03-01T09:00:00Z", tags="[kubernetes, CLI]"))
    write(
        root / "posts" / "terraform-state.md",
        post("Terraform state", "2024-12-01T09:00:00Z", category="terraform", author="john-roe", tags="[Terraform]"),
    )
    write(root / "posts" / "untitled.md", "---\nexcerpt: nothing\n---\nbody")
    write(root / "authors" / "jane-doe.md", "---\nname: Jane Doe\nbio: Writes about k8s\n---\n")
    write(root / "authors" / "john-roe.md", "---\nname: John Roe\n---\n")
    write(root / "categories" / "kubernetes.md", "---\nname: Kubernetes\ndescription: Orchestration\n---\n")
    write(root / "categories" / "terraform.md", "---\nname: Terraform\nicon: Custom\n---\n")
    write(
        root / "news" / "2025" / "week-46.md",
        '---\ntitle: "DevOps Weekly Digest - Week 46, 2025"\ndate: "2025-11-12"\nsummary: "Weekly news"\n---\n\nNews body\n',
    )
    write(root / "news" / "2025" / "week-45.md", '---\ntitle: "Week 45"\ndate: "2025-11-05"\n---\n\nOlder\n')
    write(root / "news" / "2024" / "week-52.md", '---\ntitle: "Week 52"\n---\n\nLast year\n')
    return root


class TestPosts:
    def test_all_posts_newest_first_and_untitled_skipped(self, content: Path) -> None:
        repo = ContentRepository(content_dir=content)
        assert [p.slug for p in repo.get_all_posts()] == ["kubectl-tips", "helm-basics", "terraform-state"]

    def test_post_fields(self, content: Path) -> None:
        p = ContentRepository(content_dir=content).get_post_by_slug("helm-basics")
        assert p is not None
        assert p.title == "Helm basics"
        assert p.published_at == datetime(2025, 1, 12, 9, tzinfo=timezone.utc)
        assert p.category is not None and p.category.slug == "kubernetes"
        assert p.tags == ("Helm", "Kubernetes")
        assert p.reading_time == "1 min read"

    def test_unknown_slug(self, content: Path) -> None:
        assert ContentRepository(content_dir=content).get_post_by_slug("nope") is None

    def test_missing_posts_dir(self, tmp_path: Path) -> None:
        assert ContentRepository(content_dir=tmp_path).get_all_posts() == []

    def test_impossible_date_skips_post(self, content: Path) -> None:
        write(content / "posts" / "typo.md", "---\ntitle: T\nexcerpt: E\ndate: 2025-02-30\n---\n\nBody.\n")
        slugs = [p.slug for p in ContentRepository(content_dir=content).get_all_posts()]
        assert "typo" not in slugs
        assert len(slugs) == 3

    def test_reload_picks_up_new_files(self, content: Path) -> None:
        repo = ContentRepository(content_dir=content)
        assert len(repo.get_all_posts()) == 3
        write(content / "posts" / "new.md", post("New", "2025-06-01T00:00:00Z"))
        assert len(repo.get_all_posts()) == 3
        repo.reload()
        assert len(repo.get_all_posts()) == 4


class TestAuthorsAndCategories:
    def test_authors_with_counts(self, content: Path) -> None:
        authors = ContentRepository(content_dir=content).get_all_authors()
        assert [(a.name, a.post_count) for a in authors] == [("Jane Doe", 2), ("John Roe", 1)]

    def test_posts_by_author(self, content: Path) -> None:
        repo = ContentRepository(content_dir=content)
        assert {p.slug for p in repo.get_posts_by_author("john-roe")} == {"terraform-state"}

    def test_categories_sorted_by_count(self, content: Path) -> None:
        cats = ContentRepository(content_dir=content).get_all_categories()
        assert [(c.slug, c.count) for c in cats] == [("kubernetes", 2), ("terraform", 1)]

    def test_category_icon_defaults_and_overrides(self, content: Path) -> None:
        repo = ContentRepository(content_dir=content)
        k8s = repo.get_category_by_slug("kubernetes")
        tf = repo.get_category_by_slug("terraform")
        assert k8s is not None and k8s.icon == "Layers"
        assert tf is not None and tf.icon == "Custom"
        assert repo.get_category_by_slug("missing") is None


class TestTags:
    def test_tags_merge_case_insensitively(self, content: Path) -> None:
        tags = ContentRepository(content_dir=content).get_all_tags()
        by_slug = {t.slug: t for t in tags}
        assert by_slug["kubernetes"].count == 2
        assert tags[0].slug == "kubernetes"

    def test_posts_by_tag_slug(self, content: Path) -> None:
        repo = ContentRepository(content_dir=content)
        assert {p.slug for p in repo.get_posts_by_tag_slug("kubernetes")} == {"helm-basics", "kubectl-tips"}
        assert repo.get_posts_by_tag_slug("nope") == []


class TestNews:
    def test_years_descending(self, content: Path) -> None:
        assert ContentRepository(content_dir=content).get_news_years() == [2025, 2024]

    def test_all_news_ordering(self, content: Path) -> None:
        news = ContentRepository(content_dir=content).get_all_news()
        assert [n.slug for n in news] == ["2025-week-46", "2025-week-45", "2024-week-52"]

    def test_news_by_slug(self, content: Path) -> None:
        n = ContentRepository(content_dir=content).get_news_by_slug("2025-week-46")
        assert n is not None
        assert n.week == 46 and n.year == 2025
        assert n.summary == "Weekly news"
        assert n.image == news_image_path("2025-week-46")

    def test_latest_and_by_year(self, content: Path) -> None:
        repo = ContentRepository(content_dir=content)
        assert len(repo.get_latest_news(limit=2)) == 2
        assert [n.week for n in repo.get_news_by_year(2024)] == [52]
