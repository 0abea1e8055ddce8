from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from devops_daily.adapters.content.frontmatter import parse_frontmatter
from devops_daily.adapters.content.text_loader import TextLoader
from devops_daily.domain import schema
from devops_daily.domain.errors import FrontmatterError
from devops_daily.domain.models import LintIssue
from devops_daily.utils.slugs import tag_to_slug

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LintReport:
    files_checked: int
    issues: list[LintIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def ok(self) -> bool:
        return not self.errors


def parse_iso8601(value: Any) -> Optional[datetime]:
    """
    Strict ISO-8601: YAML dates/datetimes, or strings accepted by fromisoformat
    (a trailing 'Z' is allowed). Returns an aware UTC datetime or None.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _check_ref(path: Path, key: str, value: Any) -> list[LintIssue]:
    if not isinstance(value, dict):
        return [LintIssue(path, key, f"'{key}' must be a mapping with 'name' and 'slug'")]

    issues: list[LintIssue] = []
    name = value.get("name")
    slug = value.get("slug")
    if not isinstance(name, str) or not name.strip():
        issues.append(LintIssue(path, f"{key}.name", f"'{key}.name' must be a non-empty string"))
    if not isinstance(slug, str) or not slug.strip():
        issues.append(LintIssue(path, f"{key}.slug", f"'{key}.slug' must be a non-empty string"))
    elif tag_to_slug(slug) != slug:
        issues.append(
            LintIssue(path, f"{key}.slug", f"'{key}.slug' is not a clean slug: {slug!r}", severity="warning")
        )
    return issues


def lint_frontmatter(path: Path, fm: dict[str, Any]) -> list[LintIssue]:
    issues: list[LintIssue] = []

    title = fm.get(schema.META_TITLE)
    if title is None:
        issues.append(LintIssue(path, schema.META_TITLE, "missing 'title'"))
    elif not isinstance(title, str) or not title.strip():
        issues.append(LintIssue(path, schema.META_TITLE, "'title' must be a non-empty string"))

    if not fm.get(schema.META_EXCERPT):
        issues.append(LintIssue(path, schema.META_EXCERPT, "missing 'excerpt'", severity="warning"))

    parsed_dates: dict[str, datetime] = {}
    for key in schema.DATE_KEYS:
        if key not in fm:
            continue
        parsed = parse_iso8601(fm[key])
        if parsed is None:
            issues.append(LintIssue(path, key, f"'{key}' is not a valid ISO-8601 date: {fm[key]!r}"))
        else:
            parsed_dates[key] = parsed

    if schema.META_DATE not in fm and schema.META_PUBLISHED_AT not in fm:
        issues.append(LintIssue(path, schema.META_DATE, "no 'date' or 'publishedAt'", severity="warning"))

    published = parsed_dates.get(schema.META_PUBLISHED_AT)
    updated = parsed_dates.get(schema.META_UPDATED_AT)
    if published and updated and updated < published:
        issues.append(
            LintIssue(path, schema.META_UPDATED_AT, "'updatedAt' is earlier than 'publishedAt'", severity="warning")
        )

    if schema.META_TAGS in fm:
        tags = fm[schema.META_TAGS]
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            issues.append(LintIssue(path, schema.META_TAGS, "'tags' must be a list of strings"))

    for key in (schema.META_CATEGORY, schema.META_AUTHOR):
        if key in fm:
            issues.extend(_check_ref(path, key, fm[key]))

    return issues


def lint_post_file(path: Path, *, text_loader: TextLoader | None = None) -> list[LintIssue]:
    loader = text_loader or TextLoader()
    raw = loader.load(path)
    if raw is None:
        return [LintIssue(path, None, "file could not be read")]

    try:
        fm, _ = parse_frontmatter(raw)
    except FrontmatterError as e:
        return [LintIssue(path, None, str(e))]

    return lint_frontmatter(path, fm)


def lint_files(paths: Iterable[Path]) -> LintReport:
    loader = TextLoader()
    checked = 0
    issues: list[LintIssue] = []
    for path in paths:
        checked += 1
        file_issues = lint_post_file(path, text_loader=loader)
        for issue in file_issues:
            logger.debug("%s: [%s] %s", path, issue.severity, issue.message)
        issues.extend(file_issues)
    return LintReport(files_checked=checked, issues=issues)


def lint_content(posts_dir: Path) -> LintReport:
    """
    Lint every *.md directly under posts_dir.
    """
    if not posts_dir.is_dir():
        logger.warning("Posts directory not found: %s", posts_dir)
        return LintReport(files_checked=0)
    return lint_files(sorted(posts_dir.glob("*.md")))
