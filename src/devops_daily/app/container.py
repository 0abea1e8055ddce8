from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from devops_daily.adapters.content.repository import ContentRepository
from devops_daily.adapters.crawling.http_fetcher import HttpFetcher
from devops_daily.adapters.llm.openai_chat import OpenAIChatClient
from devops_daily.adapters.tracing.json_run_logger import JsonRunLogger
from devops_daily.adapters.vcs.subprocess_git import SubprocessGit
from devops_daily.digest.classify import KeywordClassifier, LLMClassifier
from devops_daily.digest.summarize import LLMSummarizer
from devops_daily.domain.errors import ConfigError
from devops_daily.ports import Classifier, Fetcher, GitClient, RunLogger, Summarizer
from devops_daily.settings import Settings


@dataclass(frozen=True, slots=True)
class Container:
    """
    Lightweight dependency container.
    Holds the adapters a digest run is wired from; tests build one with fakes.
    """
    repo: ContentRepository
    fetcher: Fetcher
    classifier: Classifier
    summarizer: Optional[Summarizer]
    git: GitClient
    run_logger: RunLogger


def build_container(settings: Settings, *, skip_ai: bool = False, repo_root: Optional[Path] = None) -> Container:
    """
    Wire real adapters from settings. With skip_ai no OpenAI client is created,
    so no API key is needed.
    """
    fetcher = HttpFetcher(
        timeout=settings.http.timeout,
        max_retries=settings.http.max_retries,
        user_agent=settings.http.user_agent,
    )

    classifier: Classifier
    summarizer: Optional[Summarizer]
    if skip_ai:
        classifier = KeywordClassifier()
        summarizer = None
    elif settings.llm.provider != "openai":
        raise ConfigError(f"Unsupported llm.provider: {settings.llm.provider!r} (only 'openai' is supported)")
    else:
        chat = OpenAIChatClient(
            api_key=settings.llm.api_key,
            model=settings.llm.model,
            max_completion_tokens=settings.llm.max_completion_tokens,
            max_retries=settings.llm.max_retries,
        )
        classifier = LLMClassifier(chat=chat)
        summarizer = LLMSummarizer(chat=chat)

    return Container(
        repo=ContentRepository(content_dir=settings.paths.content_dir),
        fetcher=fetcher,
        classifier=classifier,
        summarizer=summarizer,
        git=SubprocessGit(cwd=repo_root or settings.paths.content_dir.parent),
        run_logger=JsonRunLogger(out_dir=settings.paths.logs_dir / "runs"),
    )
