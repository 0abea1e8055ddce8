from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence
from xml.sax.saxutils import escape as xml_escape, quoteattr

from devops_daily.adapters.content.repository import ContentRepository
from devops_daily.domain.models import NewsDigest, Post
from devops_daily.publishing.markdown import render_markdown
from devops_daily.utils.dates import format_rfc2822, utcnow

logger = logging.getLogger(__name__)

DEFAULT_SITE_URL = "https://devops-daily.com"
FEED_LIMIT = 50
NEWS_CATEGORY = "DevOps News"

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def cdata(text: str) -> str:
    # A literal "]]>" would end the section early; split it across two sections
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


@dataclass(frozen=True, slots=True)
class FeedEntry:
    title: str
    path: str
    description: str
    content_html: str
    date: Optional[datetime]
    categories: Sequence[str] = field(default_factory=tuple)
    author: Optional[str] = None


def entry_from_post(post: Post) -> FeedEntry:
    categories: list[str] = []
    if post.category and post.category.name:
        categories.append(post.category.name)
    categories.extend(post.tags)
    return FeedEntry(
        title=post.title,
        path=f"/posts/{post.slug}",
        description=post.excerpt or "",
        content_html=render_markdown(post.content) if post.content else (post.excerpt or ""),
        date=post.published_at or post.date,
        categories=tuple(categories),
        author=post.author.name if post.author and post.author.name else None,
    )


def entry_from_news(news: NewsDigest) -> FeedEntry:
    description = news.excerpt or news.summary or ""
    return FeedEntry(
        title=news.title,
        path=f"/news/{news.slug}",
        description=description,
        content_html=render_markdown(news.content) if news.content else description,
        date=news.date,
        categories=(NEWS_CATEGORY,),
    )


def _render_item(entry: FeedEntry, site_url: str, now: datetime) -> str:
    link = xml_escape(f"{site_url}{entry.path}")
    lines = [
        "    <item>",
        f"      <title>{cdata(entry.title)}</title>",
        f"      <link>{link}</link>",
        f"      <description>{cdata(entry.description)}</description>",
        f"      <pubDate>{format_rfc2822(entry.date or now)}</pubDate>",
        f'      <guid isPermaLink="true">{link}</guid>',
    ]
    lines.extend(f"      <category>{cdata(c)}</category>" for c in entry.categories)
    if entry.author:
        lines.append(f"      <author>{cdata(entry.author)}</author>")
    lines.append(f"      <content:encoded>{cdata(entry.content_html or entry.description)}</content:encoded>")
    lines.append("    </item>")
    return "\n".join(lines)


def generate_feed(
    posts: Sequence[Post],
    news: Sequence[NewsDigest],
    *,
    site_url: str = DEFAULT_SITE_URL,
    title: str = "DevOps Daily",
    description: str = "The latest DevOps news, tutorials, and guides",
    now: Optional[datetime] = None,
    limit: int = FEED_LIMIT,
) -> str:
    """
    Build an RSS 2.0 document from posts and news digests, newest first.
    """
    now = now or utcnow()
    site_url = site_url.rstrip("/")

    entries = [entry_from_post(p) for p in posts] + [entry_from_news(n) for n in news]
    entries.sort(key=lambda e: e.date or _EPOCH, reverse=True)
    entries = entries[:limit]

    self_link = quoteattr(f"{site_url}/feed.xml")
    head = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom" '
        'xmlns:content="http://purl.org/rss/1.0/modules/content/">',
        "  <channel>",
        f"    <title>{xml_escape(title)}</title>",
        f"    <link>{xml_escape(site_url)}</link>",
        f"    <description>{xml_escape(description)}</description>",
        "    <language>en</language>",
        f"    <lastBuildDate>{format_rfc2822(now)}</lastBuildDate>",
        f'    <atom:link href={self_link} rel="self" type="application/rss+xml"/>',
    ]
    items = [_render_item(e, site_url, now) for e in entries]
    tail = ["  </channel>", "</rss>", ""]
    return "\n".join(head + items + tail)


def write_feed(
    repo: ContentRepository,
    out_path: Path,
    *,
    site_url: str = DEFAULT_SITE_URL,
    title: str = "DevOps Daily",
    description: str = "The latest DevOps news, tutorials, and guides",
    now: Optional[datetime] = None,
) -> int:
    """
    Render the feed for everything in repo and write it to out_path.
    Returns the number of items written.
    """
    posts = repo.get_all_posts()
    news = repo.get_all_news()
    xml = generate_feed(posts, news, site_url=site_url, title=title, description=description, now=now)

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(xml, encoding="utf-8")

    count = min(FEED_LIMIT, len(posts) + len(news))
    logger.info("RSS feed with %d items written to %s", count, out_path)
    return count
