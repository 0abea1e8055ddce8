"""Tests for the devops-daily command line."""

import logging
from pathlib import Path

import pytest
from fakes import FakeFetcher, FakeGit, FakeRunLogger

from devops_daily.adapters.content.repository import ContentRepository
from devops_daily.app import cli
from devops_daily.app.container import Container
from devops_daily.digest.classify import KeywordClassifier

VALID_POST = '---\ntitle: "Helm"\nexcerpt: "Charts"\ndate: 2025-01-01\ntags: [Helm]\n---\nBody\n'


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    for name in ("SITE_URL", "OPENAI_CHAT_MODEL", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)


def write_post(root: Path, name: str, text: str) -> None:
    posts = root / "content" / "posts"
    posts.mkdir(parents=True, exist_ok=True)
    (posts / name).write_text(text, encoding="utf-8")


class TestLint:
    def test_clean_tree_exits_zero(self, tmp_path: Path) -> None:
        write_post(tmp_path, "helm.md", VALID_POST)
        assert cli.main(["--root", str(tmp_path), "lint"]) == 0

    def test_errors_exit_one(self, tmp_path: Path) -> None:
        write_post(tmp_path, "bad.md", "no frontmatter")
        assert cli.main(["--root", str(tmp_path), "lint"]) == 1

    def test_strict_fails_on_warnings(self, tmp_path: Path) -> None:
        write_post(tmp_path, "warn.md", '---\ntitle: "T"\ndate: 2025-01-01\n---\n')
        assert cli.main(["--root", str(tmp_path), "lint"]) == 0
        assert cli.main(["--root", str(tmp_path), "lint", "--strict"]) == 1

    def test_bracketed_values_are_printed_verbatim(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        write_post(tmp_path, "odd.md", '---\ntitle: "T"\nexcerpt: "E"\ndate: "[/red] soon"\n---\n')
        assert cli.main(["--root", str(tmp_path), "lint"]) == 1
        assert "[/red]" in capsys.readouterr().err


@pytest.mark.parametrize("kind", cli.LIST_KINDS)
def test_list_kinds(tmp_path: Path, kind: str) -> None:
    write_post(tmp_path, "helm.md", VALID_POST)
    assert cli.main(["--root", str(tmp_path), "list", kind]) == 0


def test_feed_writes_public_file(tmp_path: Path) -> None:
    write_post(tmp_path, "helm.md", VALID_POST)
    assert cli.main(["--root", str(tmp_path), "feed"]) == 0
    assert "<title><![CDATA[Helm]]></title>" in (tmp_path / "public" / "feed.xml").read_text(encoding="utf-8")


def test_missing_settings_file_exits_one(tmp_path: Path) -> None:
    assert cli.main(["--settings", str(tmp_path / "nope.toml"), "lint"]) == 1


def test_digest_command_with_nothing_to_write(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    data = tmp_path / "data"
    data.mkdir()
    (data / "sources.yaml").write_text("sources: []\n", encoding="utf-8")
    built: list[bool] = []

    def fake_container(settings, *, skip_ai):
        built.append(skip_ai)
        return Container(
            repo=ContentRepository(content_dir=settings.paths.content_dir),
            fetcher=FakeFetcher(),
            classifier=KeywordClassifier(),
            summarizer=None,
            git=FakeGit(),
            run_logger=FakeRunLogger(),
        )

    monkeypatch.setattr(cli, "build_container", fake_container)
    assert cli.main(["--root", str(tmp_path), "digest", "--skip-ai"]) == 0
    assert built == [True]
    assert (tmp_path / "logs" / "digest.log").exists()
