from __future__ import annotations

import calendar
import logging
import re
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Sequence

import feedparser

from devops_daily.domain.models import NewsItem, Source
from devops_daily.ports import Fetcher
from devops_daily.utils.batching import map_in_batches
from devops_daily.utils.dates import to_iso_utc, utcnow

logger = logging.getLogger(__name__)

_HTML_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")

EXCERPT_MAX_CHARS = 500


def clean_text(html: str, max_chars: int = EXCERPT_MAX_CHARS) -> str:
    text = _HTML_TAG_RE.sub("", html)
    text = _WS_RE.sub(" ", text).strip()
    return text[:max_chars]


def extract_excerpt(entry: Any) -> str:
    """
    First non-empty of: content snippet, content, content:encoded, description, summary.
    """
    candidates: list[str] = []
    snippet = entry.get("contentSnippet")
    if snippet:
        candidates.append(snippet)
    for content in entry.get("content") or []:
        value = content.get("value") if isinstance(content, dict) else None
        if value:
            candidates.append(value)
    for key in ("content_encoded", "description", "summary"):
        value = entry.get(key)
        if value:
            candidates.append(value)

    for raw in candidates:
        if isinstance(raw, str) and raw.strip():
            return clean_text(raw)
    return ""


def entry_published_at(entry: Any) -> str:
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            return to_iso_utc(datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc))
    for key in ("published", "updated", "pubDate"):
        raw = entry.get(key)
        if raw:
            return str(raw)
    return to_iso_utc(utcnow())


def parse_feed(text: str, source: Source) -> list[NewsItem]:
    feed = feedparser.parse(text)
    items: list[NewsItem] = []
    for entry in feed.entries:
        title = (entry.get("title") or "").strip()
        link = (entry.get("link") or "").strip()
        if not title or not link:
            continue
        items.append(
            NewsItem(
                title=title,
                url=link,
                excerpt=extract_excerpt(entry),
                source=source.name,
                published_at=entry_published_at(entry),
                category=source.category,
            )
        )
    return items


def crawl_rss_feed(source: Source, fetcher: Fetcher) -> list[NewsItem]:
    """
    Crawl one feed. Errors are logged and yield an empty list.
    """
    logger.info("Crawling RSS: %s (%s)", source.name, source.url)
    try:
        text = fetcher.fetch(source.url)
        items = parse_feed(text, source)
    except Exception as e:  # contained per source
        logger.error("Error crawling %s: %s", source.name, e)
        return []

    logger.info("  Found %d items from %s", len(items), source.name)
    return items


def crawl_rss_feeds(sources: Sequence[Source], fetcher: Fetcher, concurrency: int = 5) -> list[NewsItem]:
    rss_sources = [s for s in sources if s.type == "rss"]
    results = map_in_batches(rss_sources, lambda s: crawl_rss_feed(s, fetcher), batch_size=concurrency)
    return [item for batch in results for item in batch]


def as_rss_source(source: Source, feed_url: str) -> Source:
    return replace(source, type="rss", url=feed_url)
