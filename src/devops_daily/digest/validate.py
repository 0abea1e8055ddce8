from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Union
from urllib.parse import urlsplit

from devops_daily.adapters.content.frontmatter import split_frontmatter

logger = logging.getLogger(__name__)

TITLE_RE = re.compile(r"^DevOps Weekly Digest - Week \d+, \d{4}$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
LINK_URL_RE = re.compile(r"\[.*?\]\((https?://[^)]+)\)")


def validate_digest_text(text: str) -> list[str]:
    """
    Problems with a rendered digest; an empty list means it is valid.
    """
    fm, body = split_frontmatter(text)
    problems: list[str] = []

    missing = [k for k in ("title", "date", "summary") if not fm.get(k)]
    if missing:
        problems.append(f"Missing required front matter fields: {', '.join(missing)}")

    title = fm.get("title")
    if title and not TITLE_RE.match(str(title)):
        problems.append(f"Invalid title format: {title!r}")

    date = fm.get("date")
    if date and not DATE_RE.match(str(date)):
        problems.append(f"Invalid date format: {date!r}")

    if not body.strip():
        problems.append("Empty content")

    return problems


def validate_digest_markdown(source: Union[str, Path]) -> list[str]:
    if isinstance(source, Path):
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as e:
            return [f"Could not read {source}: {e}"]
    else:
        text = source

    problems = validate_digest_text(text)
    for p in problems:
        logger.error("Digest validation: %s", p)
    if not problems:
        logger.info("Markdown validation passed")
    return problems


def extract_link_urls(text: str) -> list[str]:
    return LINK_URL_RE.findall(text)


def validate_urls(text: str) -> list[str]:
    """
    Return link URLs that are not well formed (no host, unparsable).
    """
    urls = extract_link_urls(text)
    if not urls:
        logger.warning("No URLs found in content")
        return []

    invalid: list[str] = []
    for url in urls:
        try:
            parts = urlsplit(url)
            ok = bool(parts.scheme and parts.hostname)
        except ValueError:
            ok = False
        if not ok:
            invalid.append(url)

    if invalid:
        logger.error("Invalid URLs found: %s", invalid)
    return invalid


def check_duplicate_urls(text: str) -> list[str]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for url in extract_link_urls(text):
        if url in seen and url not in duplicates:
            duplicates.append(url)
        seen.add(url)
    return duplicates
