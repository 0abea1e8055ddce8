from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv

from devops_daily.domain.errors import ConfigError

DEFAULT_SETTINGS_FILE = Path("settings.toml")


@dataclass(frozen=True)
class Paths:
    content_dir: Path
    sources_file: Path
    public_dir: Path
    logs_dir: Path


@dataclass(frozen=True)
class Site:
    url: str = "https://devops-daily.com"
    title: str = "DevOps Daily"
    description: str = "The latest DevOps news, tutorials, and guides"


@dataclass(frozen=True)
class DigestSettings:
    lookback_days: int = 7
    max_per_source: int = 4
    max_per_category: int = 12
    rss_concurrency: int = 5
    web_concurrency: int = 3
    batch_size: int = 10
    batch_delay: float = 1.0


@dataclass(frozen=True)
class LLM:
    provider: str = "openai"
    model: str = "gpt-5-nano-2025-08-07"
    max_completion_tokens: int = 500
    max_retries: int = 3
    api_key: str = field(default="", repr=False)


@dataclass(frozen=True)
class Http:
    timeout: float = 10.0
    max_retries: int = 3
    user_agent: str = "DevOps Daily News Crawler/1.0"


@dataclass(frozen=True)
class Settings:
    paths: Paths
    site: Site = field(default_factory=Site)
    digest: DigestSettings = field(default_factory=DigestSettings)
    llm: LLM = field(default_factory=LLM)
    http: Http = field(default_factory=Http)


def default_paths(base: Path) -> Paths:
    return Paths(
        content_dir=base / "content",
        sources_file=base / "data" / "sources.yaml",
        public_dir=base / "public",
        logs_dir=base / "logs",
    )


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {})
    if not isinstance(value, dict):
        raise ConfigError(f"Config section [{name}] must be a table")
    return value


def _get(sec: dict[str, Any], section: str, key: str, conv: Callable[[Any], Any], default: Any) -> Any:
    if key not in sec:
        return default
    try:
        return conv(sec[key])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config value {section}.{key}: {sec[key]!r}") from e


def _apply_env(settings: Settings) -> Settings:
    site_url = os.getenv("SITE_URL")
    model = os.getenv("OPENAI_CHAT_MODEL")
    api_key = os.getenv("OPENAI_API_KEY", "")

    site = replace(settings.site, url=site_url) if site_url else settings.site
    llm = replace(settings.llm, model=model or settings.llm.model, api_key=api_key)
    return replace(settings, site=site, llm=llm)


def load_settings(path: str | Path | None = None, *, load_env: bool = True) -> Settings:
    """
    Load settings.toml (defaults when no file is found) and overlay env vars.

    An explicitly requested path that does not exist is an error; the implicit
    ./settings.toml is optional.
    """
    if load_env:
        load_dotenv()

    explicit = path is not None
    path = Path(path) if path is not None else DEFAULT_SETTINGS_FILE

    if not path.exists():
        if explicit:
            raise ConfigError(f"Missing config file: {path}")
        return _apply_env(Settings(paths=default_paths(Path.cwd())))

    try:
        with path.open("rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    base = path.resolve().parent

    def expand(p: str) -> Path:
        expanded = Path(os.path.expandvars(os.path.expanduser(p)))
        return (expanded if expanded.is_absolute() else base / expanded).resolve()

    defaults = default_paths(base)
    paths = _section(raw, "paths")
    site = _section(raw, "site")
    digest = _section(raw, "digest")
    llm = _section(raw, "llm")
    http = _section(raw, "http")

    d_site, d_digest, d_llm, d_http = Site(), DigestSettings(), LLM(), Http()

    settings = Settings(
        paths=Paths(
            content_dir=_get(paths, "paths", "content_dir", expand, defaults.content_dir),
            sources_file=_get(paths, "paths", "sources_file", expand, defaults.sources_file),
            public_dir=_get(paths, "paths", "public_dir", expand, defaults.public_dir),
            logs_dir=_get(paths, "paths", "logs_dir", expand, defaults.logs_dir),
        ),
        site=Site(
            url=_get(site, "site", "url", str, d_site.url),
            title=_get(site, "site", "title", str, d_site.title),
            description=_get(site, "site", "description", str, d_site.description),
        ),
        digest=DigestSettings(
            lookback_days=_get(digest, "digest", "lookback_days", int, d_digest.lookback_days),
            max_per_source=_get(digest, "digest", "max_per_source", int, d_digest.max_per_source),
            max_per_category=_get(digest, "digest", "max_per_category", int, d_digest.max_per_category),
            rss_concurrency=_get(digest, "digest", "rss_concurrency", int, d_digest.rss_concurrency),
            web_concurrency=_get(digest, "digest", "web_concurrency", int, d_digest.web_concurrency),
            batch_size=_get(digest, "digest", "batch_size", int, d_digest.batch_size),
            batch_delay=_get(digest, "digest", "batch_delay", float, d_digest.batch_delay),
        ),
        llm=LLM(
            provider=_get(llm, "llm", "provider", str, d_llm.provider),
            model=_get(llm, "llm", "model", str, d_llm.model),
            max_completion_tokens=_get(llm, "llm", "max_completion_tokens", int, d_llm.max_completion_tokens),
            max_retries=_get(llm, "llm", "max_retries", int, d_llm.max_retries),
        ),
        http=Http(
            timeout=_get(http, "http", "timeout", float, d_http.timeout),
            max_retries=_get(http, "http", "max_retries", int, d_http.max_retries),
            user_agent=_get(http, "http", "user_agent", str, d_http.user_agent),
        ),
    )
    return _apply_env(settings)


def with_root(settings: Settings, root: Optional[Path]) -> Settings:
    """Re-anchor the default path layout under root (used by --root)."""
    if root is None:
        return settings
    return replace(settings, paths=default_paths(root.resolve()))
