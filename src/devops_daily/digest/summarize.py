from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence

from devops_daily.domain.errors import GenerationError
from devops_daily.domain.models import NewsItem
from devops_daily.ports import ChatClient, Summarizer
from devops_daily.utils.batching import map_in_batches

logger = logging.getLogger(__name__)

SUMMARIZATION_SYSTEM_PROMPT = """Write a compact, neutral technical summary.
1 sentence: what happened.
1 sentence: why DevOps engineers care.
If it's a release, add 1 short note about breaking changes or key features.
Maximum 3 lines total.
No marketing language. Be concise and technical."""

# Summaries from classification longer than this are kept as-is
MIN_EXISTING_SUMMARY_CHARS = 50


@dataclass(frozen=True, slots=True)
class LLMSummarizer:
    chat: ChatClient

    def summarize(self, item: NewsItem) -> str:
        user = (
            f"Title: {item.title}\n"
            f"Excerpt: {item.excerpt}\n"
            f"Source: {item.source}\n"
            f"Category: {item.category}\n"
            f"URL: {item.url}\n\n"
            "Write a technical summary."
        )
        try:
            summary = self.chat.complete(SUMMARIZATION_SYSTEM_PROMPT, user).strip()
        except GenerationError as e:
            logger.error("Error summarizing item: %s (%s)", item.title, e)
            return item.excerpt[:200] + "..."
        return summary or item.excerpt[:200] + "..."


def summarize_items(
    items: Sequence[NewsItem],
    summarizer: Summarizer,
    *,
    batch_size: int = 10,
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> list[NewsItem]:
    logger.info("Summarizing %d items...", len(items))

    def one(item: NewsItem) -> NewsItem:
        if item.summary and len(item.summary) > MIN_EXISTING_SUMMARY_CHARS:
            return item
        return replace(item, summary=summarizer.summarize(item))

    between: Optional[Callable[[], None]] = (lambda: sleep(delay)) if delay > 0 else None
    summarized = map_in_batches(
        items,
        one,
        batch_size=batch_size,
        on_batch_done=lambda done, total: logger.info("  Summarized %d/%d", done, total),
        between_batches=between,
    )
    logger.info("  Summarized all items")
    return summarized
