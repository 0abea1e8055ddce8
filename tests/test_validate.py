"""Tests for digest markdown validation."""

from pathlib import Path

from devops_daily.digest.validate import (
    check_duplicate_urls,
    extract_link_urls,
    validate_digest_markdown,
    validate_digest_text,
    validate_urls,
)

GOOD = """---
title: "DevOps Weekly Digest - Week 46, 2025"
date: "2025-11-12"
summary: "News"
---

## Kubernetes

[**Read more**](https://kubernetes.io/blog/1-31)
"""


class TestValidateDigestText:
    def test_valid(self) -> None:
        assert validate_digest_text(GOOD) == []

    def test_missing_fields(self) -> None:
        problems = validate_digest_text("---\ntitle: x\n---\nbody")
        assert problems[0] == "Missing required front matter fields: date, summary"

    def test_bad_title_and_date(self) -> None:
        text = GOOD.replace("Week 46, 2025", "Week forty six").replace('"2025-11-12"', '"12/11/2025"')
        problems = validate_digest_text(text)
        assert any(p.startswith("Invalid title format") for p in problems)
        assert any(p.startswith("Invalid date format") for p in problems)

    def test_empty_body(self) -> None:
        text = GOOD.split("## Kubernetes")[0]
        assert validate_digest_text(text) == ["Empty content"]


def test_validate_digest_markdown_reads_paths(tmp_path: Path) -> None:
    p = tmp_path / "week-46.md"
    p.write_text(GOOD, encoding="utf-8")
    assert validate_digest_markdown(p) == []
    assert validate_digest_markdown(tmp_path / "missing.md")[0].startswith("Could not read")


class TestUrls:
    def test_extract(self) -> None:
        text = "[a](https://a.com/x) and [b](http://b.com) but not https://c.com"
        assert extract_link_urls(text) == ["https://a.com/x", "http://b.com"]

    def test_validate_urls(self) -> None:
        assert validate_urls("[a](https://a.com/x)") == []
        assert validate_urls("[a](https:///nohost)") == ["https:///nohost"]
        assert validate_urls("no links") == []

    def test_duplicates_reported_once(self) -> None:
        text = "[a](https://a.com) [b](https://a.com) [c](https://a.com) [d](https://d.com)"
        assert check_duplicate_urls(text) == ["https://a.com"]
