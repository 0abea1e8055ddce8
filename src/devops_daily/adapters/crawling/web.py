from __future__ import annotations

import logging
from typing import Optional, Sequence
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from devops_daily.adapters.crawling.rss import as_rss_source, crawl_rss_feed
from devops_daily.domain.errors import FetchError
from devops_daily.domain.models import NewsItem, Source
from devops_daily.ports import Fetcher
from devops_daily.utils.batching import map_in_batches

logger = logging.getLogger(__name__)

COMMON_FEED_PATHS = ("/feed", "/rss", "/feed.xml", "/rss.xml", "/blog/feed")


def find_feed_link(html: str, base_url: str) -> Optional[str]:
    """
    Look for a feed link in the page: <link> alternates first, then anchors.
    """
    soup = BeautifulSoup(html, "html.parser")
    candidates = [
        soup.select_one('link[type="application/rss+xml"]'),
        soup.select_one('link[type="application/atom+xml"]'),
        soup.select_one('a[href*="rss"]'),
        soup.select_one('a[href*="feed"]'),
    ]
    for tag in candidates:
        href = tag.get("href") if tag is not None else None
        if href:
            return urljoin(base_url, str(href))
    return None


def looks_like_feed(body: str) -> bool:
    return "<rss" in body or "<feed" in body


def discover_rss_feed(url: str, fetcher: Fetcher) -> Optional[str]:
    try:
        html = fetcher.fetch(url)
    except FetchError as e:
        logger.error("Error discovering RSS for %s: %s", url, e)
        return None

    link = find_feed_link(html, url)
    if link:
        return link

    for path in COMMON_FEED_PATHS:
        feed_url = urljoin(url, path)
        try:
            body = fetcher.fetch(feed_url, max_retries=1, timeout=5)
        except FetchError:
            continue
        if looks_like_feed(body):
            return feed_url

    return None


def crawl_web_source(source: Source, fetcher: Fetcher) -> list[NewsItem]:
    logger.info("Crawling web: %s (%s)", source.name, source.url)
    feed_url = discover_rss_feed(source.url, fetcher)
    if not feed_url:
        logger.warning("  No RSS feed found for %s", source.name)
        return []

    logger.info("  Found RSS feed: %s", feed_url)
    return crawl_rss_feed(as_rss_source(source, feed_url), fetcher)


def crawl_web_sources(sources: Sequence[Source], fetcher: Fetcher, concurrency: int = 3) -> list[NewsItem]:
    web_sources = [s for s in sources if s.type == "web"]
    results = map_in_batches(web_sources, lambda s: crawl_web_source(s, fetcher), batch_size=concurrency)
    return [item for batch in results for item in batch]
