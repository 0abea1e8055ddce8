"""Tests for settings.toml loading and env overlays."""

from pathlib import Path

import pytest

from devops_daily.domain.errors import ConfigError
from devops_daily.settings import LLM, DigestSettings, load_settings, with_root


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SITE_URL", "OPENAI_CHAT_MODEL", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)


def write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "settings.toml"
    p.write_text(text, encoding="utf-8")
    return p


def test_defaults_when_file_is_absent(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    s = load_settings(load_env=False)
    assert s.paths.content_dir == Path.cwd() / "content"
    assert s.digest == DigestSettings()
    assert s.llm.model == LLM().model


def test_paths_resolve_relative_to_file(tmp_path: Path) -> None:
    p = write(tmp_path, '[paths]\ncontent_dir = "site/content"\n\n[digest]\nlookback_days = 14\nbatch_delay = 0\n')
    s = load_settings(p, load_env=False)
    assert s.paths.content_dir == (tmp_path / "site" / "content").resolve()
    assert s.paths.sources_file == tmp_path.resolve() / "data" / "sources.yaml"
    assert s.digest.lookback_days == 14
    assert s.digest.batch_delay == 0.0
    assert s.digest.max_per_source == 4


def test_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SITE_URL", "https://staging.example.com")
    monkeypatch.setenv("OPENAI_CHAT_MODEL", "gpt-test")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    s = load_settings(write(tmp_path, '[llm]\nmodel = "from-file"\n'), load_env=False)
    assert s.site.url == "https://staging.example.com"
    assert s.llm.model == "gpt-test"
    assert s.llm.api_key == "sk-test"
    assert "sk-test" not in repr(s.llm)


class TestInvalidSettings:
    def test_explicit_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Missing config file"):
            load_settings(tmp_path / "nope.toml", load_env=False)

    def test_bad_toml(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_settings(write(tmp_path, "[digest\n"), load_env=False)

    def test_bad_value_names_key(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="digest.lookback_days"):
            load_settings(write(tmp_path, '[digest]\nlookback_days = "a week"\n'), load_env=False)

    def test_section_must_be_table(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match=r"\[http\]"):
            load_settings(write(tmp_path, 'http = "fast"\n'), load_env=False)


def test_with_root(tmp_path: Path) -> None:
    s = with_root(load_settings(write(tmp_path, ""), load_env=False), tmp_path / "other")
    assert s.paths.logs_dir == (tmp_path / "other").resolve() / "logs"
