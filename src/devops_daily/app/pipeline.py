from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, Optional

from devops_daily.adapters.crawling.rss import crawl_rss_feeds
from devops_daily.adapters.crawling.web import crawl_web_sources
from devops_daily.app.container import Container
from devops_daily.digest.assemble import assemble_digest, get_digest_stats
from devops_daily.digest.classify import classify_items
from devops_daily.digest.dedupe import deduplicate
from devops_daily.digest.limits import apply_limits
from devops_daily.digest.normalize import normalize_items
from devops_daily.digest.sources import load_sources
from devops_daily.digest.summarize import summarize_items
from devops_daily.digest.template import render_digest
from devops_daily.digest.validate import check_duplicate_urls, validate_digest_markdown
from devops_daily.domain.errors import DigestValidationError
from devops_daily.domain.models import Digest, DigestStats, RunTrace
from devops_daily.settings import Settings
from devops_daily.utils.dates import current_week, current_year, generate_branch_name, is_within_last_days, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PublishOptions:
    commit: bool = False
    push: bool = False


@dataclass(slots=True)
class DigestResult:
    written: bool
    trace: RunTrace
    digest: Optional[Digest] = None
    stats: Optional[DigestStats] = None
    path: Optional[Path] = None
    markdown: str = ""
    trace_path: Optional[Path] = None
    problems: list[str] = field(default_factory=list)


def digest_path(content_dir: Path, year: int, week: int) -> Path:
    return content_dir / "news" / str(year) / f"week-{week}.md"


@contextmanager
def _stage(trace: RunTrace, name: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        trace.stage_seconds[name] = round(time.perf_counter() - start, 3)


def run_digest(
    container: Container,
    settings: Settings,
    *,
    skip_ai: bool = False,
    now: Optional[datetime] = None,
    publish: PublishOptions = PublishOptions(),
    sleep: Callable[[float], None] = time.sleep,
) -> DigestResult:
    """
    Crawl, filter, classify, summarize and write this week's digest.

    Returns written=False when nothing recent was found. Raises
    DigestValidationError when the written file does not validate.
    """
    now = now or utcnow()
    cfg = settings.digest
    trace = RunTrace(run_id=uuid.uuid4().hex[:8], started_at=now, skip_ai=skip_ai)
    result = DigestResult(written=False, trace=trace)

    try:
        with _stage(trace, "sources"):
            sources = load_sources(settings.paths.sources_file)
        trace.stage_counts["sources"] = len(sources)

        with _stage(trace, "crawl_rss"):
            rss_items = crawl_rss_feeds(sources, container.fetcher, concurrency=cfg.rss_concurrency)
        trace.stage_counts["rss_items"] = len(rss_items)
        logger.info("Found %d items from RSS feeds", len(rss_items))

        with _stage(trace, "crawl_web"):
            web_items = crawl_web_sources(sources, container.fetcher, concurrency=cfg.web_concurrency)
        trace.stage_counts["web_items"] = len(web_items)
        logger.info("Found %d items from web sources", len(web_items))

        items = normalize_items(rss_items + web_items)
        trace.stage_counts["normalized"] = len(items)

        items = deduplicate(items)
        trace.stage_counts["unique"] = len(items)
        logger.info("%d unique items", len(items))

        items = [i for i in items if is_within_last_days(i.published_at, cfg.lookback_days, now=now)]
        trace.stage_counts["recent"] = len(items)
        logger.info("%d items from last %d days", len(items), cfg.lookback_days)

        if not items:
            logger.warning("No items found from the last %d days. Nothing to write.", cfg.lookback_days)
            return result

        with _stage(trace, "classify"):
            items = classify_items(
                items,
                container.classifier,
                batch_size=cfg.batch_size,
                delay=cfg.batch_delay,
                sleep=sleep,
            )
        trace.stage_counts["classified"] = len(items)

        items = apply_limits(items, cfg.max_per_source, cfg.max_per_category)
        trace.stage_counts["limited"] = len(items)
        logger.info("%d items after limits", len(items))

        if skip_ai or container.summarizer is None:
            logger.info("Using excerpts (skipping AI summarization)")
        else:
            with _stage(trace, "summarize"):
                items = summarize_items(
                    items,
                    container.summarizer,
                    batch_size=cfg.batch_size,
                    delay=cfg.batch_delay,
                    sleep=sleep,
                )

        week, year = current_week(now), current_year(now)
        trace.week, trace.year = week, year

        digest = assemble_digest(items, week, year, today=now)
        stats = get_digest_stats(digest)
        result.digest, result.stats = digest, stats
        trace.stage_counts["digest_items"] = stats.total_items
        logger.info(
            "Digest stats: %d items from %d sources (%s)",
            stats.total_items,
            len(stats.sources),
            ", ".join(f"{c}: {n}" for c, n in stats.category_counts.items() if n),
        )

        markdown = render_digest(digest)
        result.markdown = markdown

        duplicates = check_duplicate_urls(markdown)
        if duplicates:
            logger.warning("Found %d duplicate URLs: %s", len(duplicates), duplicates)
        trace.duplicate_urls = duplicates

        path = digest_path(settings.paths.content_dir, year, week)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(markdown, encoding="utf-8")
        result.path, result.written = path, True
        trace.output_path = path
        logger.info("Written to: %s", path)

        problems = validate_digest_markdown(path)
        result.problems = problems
        if problems:
            raise DigestValidationError(f"Markdown validation failed for {path}: {'; '.join(problems)}")

        if publish.commit:
            branch = generate_branch_name(year, week)
            trace.branch = branch
            container.git.create_branch(branch)
            container.git.add(path)
            container.git.commit(f"Add DevOps Weekly Digest - Week {week}, {year}")
            if publish.push:
                container.git.push(branch)

        return result
    finally:
        trace.finished_at = utcnow()
        result.trace_path = container.run_logger.log(trace)
