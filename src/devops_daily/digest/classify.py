from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Sequence

from devops_daily.domain.errors import GenerationError
from devops_daily.domain.models import Classification, NewsItem
from devops_daily.domain.schema import DEFAULT_CATEGORY, DIGEST_CATEGORIES
from devops_daily.ports import ChatClient, Classifier
from devops_daily.utils.batching import map_in_batches

logger = logging.getLogger(__name__)

CLASSIFICATION_SYSTEM_PROMPT = """You are a DevOps editor. You classify news items into categories:
- Kubernetes: K8s core, distributions, tools
- Cloud Native: CNCF projects, containers, service mesh, networking
- CI/CD: Continuous integration/deployment, GitOps, pipelines
- IaC: Infrastructure as Code (Terraform, Pulumi, Ansible, etc.)
- Observability: Monitoring, logging, tracing, metrics
- Security: Container security, secrets management, policy enforcement
- Databases: SQL, NoSQL, data stores
- Platforms: Cloud providers, PaaS, hosting
- Misc: Everything else

Return strict JSON:
{
  "include": boolean,
  "category": "...",
  "tags": [],
  "summary": "1-2 sentences"
}

Include only technical, actionable updates.
Exclude: marketing fluff, company announcements without technical content, duplicate content."""

_EVENT_RE = re.compile(r"\b(conference|event|meetup)\s+\d{4}\b")

# First match wins
KEYWORD_RULES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("Kubernetes", re.compile(r"\b(kubernetes|k8s|kubectl|helm|kube)\b")),
    ("Cloud Native", re.compile(r"\b(docker|container|cncf|cloud native|service mesh|istio|envoy)\b")),
    ("CI/CD", re.compile(r"(?<!\w)(ci/cd|cicd|github actions|gitlab|jenkins|argo|flux)\b")),
    ("IaC", re.compile(r"\b(terraform|pulumi|ansible|iac|infrastructure as code)\b")),
    ("Observability", re.compile(r"\b(monitoring|observability|prometheus|grafana|datadog|logging|tracing)\b")),
    ("Security", re.compile(r"\b(security|vulnerability|cve|secrets|compliance)\b")),
    ("Databases", re.compile(r"\b(database|postgres|mysql|mongodb|redis|sql)\b")),
    ("Platforms", re.compile(r"\b(aws|azure|gcp|cloud|platform)\b")),
)


def fallback_summary(item: NewsItem) -> str:
    return item.excerpt[:200]


def is_event_announcement(item: NewsItem) -> bool:
    title = item.title.lower()
    return "is coming!" in title or _EVENT_RE.search(title) is not None


def event_classification(item: NewsItem) -> Classification:
    return Classification(include=False, category=DEFAULT_CATEGORY, tags=("event",), summary=fallback_summary(item))


@dataclass(frozen=True, slots=True)
class KeywordClassifier:
    """
    Regex classifier for --skip-ai runs and as the LLM fallback.
    """

    @property
    def uses_llm(self) -> bool:
        return False

    def classify(self, item: NewsItem) -> Classification:
        if is_event_announcement(item):
            return event_classification(item)

        combined = f"{item.title.lower()} {item.excerpt.lower()}"
        category = item.category or DEFAULT_CATEGORY
        for name, pattern in KEYWORD_RULES:
            if pattern.search(combined):
                category = name
                break

        return Classification(include=True, category=category, tags=(), summary=fallback_summary(item))


def _coerce_tags(value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(t).strip() for t in value if isinstance(t, (str, int)) and str(t).strip())


@dataclass(frozen=True, slots=True)
class LLMClassifier:
    chat: ChatClient
    fallback: Classifier = field(default_factory=KeywordClassifier)

    @property
    def uses_llm(self) -> bool:
        return True

    def classify(self, item: NewsItem) -> Classification:
        if is_event_announcement(item):
            return event_classification(item)

        user = (
            f"Title: {item.title}\n"
            f"Excerpt: {item.excerpt}\n"
            f"Source: {item.source}\n"
            f"Date: {item.published_at}\n\n"
            "Classify this item and return only valid JSON."
        )
        try:
            result = self.chat.complete_json(CLASSIFICATION_SYSTEM_PROMPT, user)
        except GenerationError as e:
            logger.error("Error classifying item: %s (%s)", item.title, e)
            return self.fallback.classify(item)

        include = result.get("include")
        category = result.get("category")
        if not isinstance(category, str) or category not in DIGEST_CATEGORIES:
            category = DEFAULT_CATEGORY
        summary = result.get("summary")

        return Classification(
            include=include if isinstance(include, bool) else True,
            category=category,
            tags=_coerce_tags(result.get("tags")),
            summary=summary.strip() if isinstance(summary, str) and summary.strip() else fallback_summary(item),
        )


def apply_classification(item: NewsItem, c: Classification) -> NewsItem:
    return replace(item, category=c.category, tags=tuple(c.tags), summary=c.summary, include=c.include)


def classify_items(
    items: Sequence[NewsItem],
    classifier: Classifier,
    *,
    batch_size: int = 10,
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> list[NewsItem]:
    """
    Classify in concurrent batches and drop items marked include=False.
    """
    mode = "using AI" if classifier.uses_llm else "using keyword-based classification"
    logger.info("Classifying %d items (%s)...", len(items), mode)

    between: Optional[Callable[[], None]] = None
    if classifier.uses_llm and delay > 0:
        between = lambda: sleep(delay)  # noqa: E731

    classified = map_in_batches(
        items,
        lambda item: apply_classification(item, classifier.classify(item)),
        batch_size=batch_size,
        on_batch_done=lambda done, total: logger.info("  Classified %d/%d", done, total),
        between_batches=between,
    )

    included = [i for i in classified if i.include is not False]
    logger.info("  %d/%d items included after classification", len(included), len(items))
    return included
