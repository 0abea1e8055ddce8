"""Tests for RSS feed generation."""

import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path

from devops_daily.adapters.content.repository import ContentRepository
from devops_daily.domain.models import AuthorRef, CategoryRef, NewsDigest, Post
from devops_daily.publishing.feed import cdata, generate_feed, write_feed

UTC = timezone.utc
NOW = datetime(2025, 3, 10, 12, tzinfo=UTC)


def sample_posts() -> list[Post]:
    return [
        Post(
            slug="helm",
            title="Helm ]]> tricks",
            content="# Intro\n\nText",
            excerpt="Helm things",
            category=CategoryRef(name="Kubernetes", slug="kubernetes"),
            author=AuthorRef(name="Jane Doe", slug="jane-doe"),
            published_at=datetime(2025, 1, 2, tzinfo=UTC),
            tags=("Helm",),
        ),
        Post(slug="undated", title="Undated", content="", excerpt="No date"),
        Post(slug="tf", title="Terraform", content="Body", date=datetime(2025, 3, 1, tzinfo=UTC)),
    ]


def sample_news() -> list[NewsDigest]:
    return [
        NewsDigest(
            title="DevOps Weekly Digest - Week 10, 2025",
            slug="2025-week-10",
            week=10,
            year=2025,
            content="News body",
            summary="Weekly news",
            excerpt="Weekly news",
            date=datetime(2025, 3, 5, tzinfo=UTC),
        )
    ]


def items(xml: str) -> list[ET.Element]:
    return ET.fromstring(xml).findall("./channel/item")


def test_cdata_splits_terminator() -> None:
    assert cdata("a]]>b") == "<![CDATA[a]]]]><![CDATA[>b]]>"


class TestGenerateFeed:
    def test_well_formed_and_newest_first(self) -> None:
        xml = generate_feed(sample_posts(), sample_news(), site_url="https://example.com/", now=NOW)
        titles = [i.findtext("title") for i in items(xml)]
        assert titles == ["DevOps Weekly Digest - Week 10, 2025", "Terraform", "Helm ]]> tricks", "Undated"]

    def test_links_and_categories(self) -> None:
        xml = generate_feed(sample_posts(), sample_news(), site_url="https://example.com", now=NOW)
        by_title = {i.findtext("title"): i for i in items(xml)}

        news = by_title["DevOps Weekly Digest - Week 10, 2025"]
        assert news.findtext("link") == "https://example.com/news/2025-week-10"
        assert [c.text for c in news.findall("category")] == ["DevOps News"]

        helm = by_title["Helm ]]> tricks"]
        assert helm.findtext("link") == "https://example.com/posts/helm"
        assert [c.text for c in helm.findall("category")] == ["Kubernetes", "Helm"]
        assert helm.findtext("author") == "Jane Doe"
        assert helm.findtext("pubDate") == "Thu, 02 Jan 2025 00:00:00 GMT"

    def test_undated_entries_use_build_time(self) -> None:
        xml = generate_feed(sample_posts(), [], now=NOW)
        undated = [i for i in items(xml) if i.findtext("title") == "Undated"][0]
        assert undated.findtext("pubDate") == "Mon, 10 Mar 2025 12:00:00 GMT"

    def test_content_is_rendered_html(self) -> None:
        xml = generate_feed(sample_posts(), [], now=NOW)
        assert 'id="h1-intro"' in xml

    def test_limit(self) -> None:
        xml = generate_feed(sample_posts(), sample_news(), now=NOW, limit=2)
        assert len(items(xml)) == 2


def test_write_feed(tmp_path: Path) -> None:
    posts = tmp_path / "content" / "posts"
    posts.mkdir(parents=True)
    (posts / "a.md").write_text('---\ntitle: "A"\ndate: 2025-01-01\n---\nBody', encoding="utf-8")

    out = tmp_path / "public" / "feed.xml"
    n = write_feed(ContentRepository(content_dir=tmp_path / "content"), out, now=NOW)

    assert n == 1
    assert [i.findtext("title") for i in items(out.read_text(encoding="utf-8"))] == ["A"]
