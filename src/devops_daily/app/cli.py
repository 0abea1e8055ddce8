from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.markup import escape
from rich.table import Table

from devops_daily.adapters.content.repository import ContentRepository
from devops_daily.app.container import build_container
from devops_daily.app.pipeline import DigestResult, PublishOptions, run_digest
from devops_daily.domain.errors import DevOpsDailyError
from devops_daily.lint import LintReport, lint_content
from devops_daily.logging_setup import console, setup_logging
from devops_daily.publishing.feed import write_feed
from devops_daily.settings import Settings, load_settings, with_root
from devops_daily.utils.dates import format_display_date

logger = logging.getLogger(__name__)

LIST_KINDS = ("posts", "tags", "categories", "authors", "news")


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="devops-daily", description="DevOps Daily content and weekly news tooling.")
    ap.add_argument("--settings", default=None, help="Path to settings.toml (default: ./settings.toml if present)")
    ap.add_argument("--root", default=None, help="Project root; overrides configured paths with the default layout")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = ap.add_subparsers(dest="command", required=True)

    lint = sub.add_parser("lint", help="Validate post frontmatter under content/posts")
    lint.add_argument("--strict", action="store_true", help="Treat warnings as errors")

    ls = sub.add_parser("list", help="List content from the repository")
    ls.add_argument("kind", choices=LIST_KINDS)
    ls.add_argument("--limit", type=int, default=0, help="Show at most N rows (0 = all)")

    feed = sub.add_parser("feed", help="Generate the RSS feed")
    feed.add_argument("--out", default=None, help="Output path (default: <public_dir>/feed.xml)")

    digest = sub.add_parser("digest", help="Generate this week's news digest")
    digest.add_argument("--skip-ai", action="store_true", help="Keyword classification, no summarization, no API key")
    digest.add_argument("--commit", action="store_true", help="Create the weekly branch and commit the digest")
    digest.add_argument("--push", action="store_true", help="Push the weekly branch (implies --commit)")
    return ap


def _print_lint_report(report: LintReport, strict: bool) -> int:
    for issue in report.issues:
        style = "red" if issue.severity == "error" else "yellow"
        where = f"{issue.path}" + (f" [{issue.field}]" if issue.field else "")
        console.print(f"[{style}]{issue.severity.upper()}[/{style}] {escape(where)}: {escape(issue.message)}")

    failures = len(report.errors) + (len(report.warnings) if strict else 0)
    console.print(
        f"Checked {report.files_checked} files: "
        f"{len(report.errors)} errors, {len(report.warnings)} warnings"
    )
    return 1 if failures else 0


def _list(repo: ContentRepository, kind: str, limit: int) -> None:
    table = Table(title=kind.capitalize())

    if kind == "posts":
        table.add_column("Date")
        table.add_column("Slug")
        table.add_column("Title")
        table.add_column("Category")
        rows = [
            (format_display_date(p.sort_date) if p.sort_date else "", p.slug, p.title, p.category.name if p.category else "")
            for p in repo.get_all_posts()
        ]
    elif kind == "tags":
        table.add_column("Tag")
        table.add_column("Slug")
        table.add_column("Posts", justify="right")
        rows = [(t.name, t.slug, str(t.count)) for t in repo.get_all_tags()]
    elif kind == "categories":
        table.add_column("Category")
        table.add_column("Slug")
        table.add_column("Posts", justify="right")
        rows = [(c.name, c.slug, str(c.count)) for c in repo.get_all_categories()]
    elif kind == "authors":
        table.add_column("Author")
        table.add_column("Slug")
        table.add_column("Posts", justify="right")
        rows = [(a.name, a.slug, str(a.post_count)) for a in repo.get_all_authors()]
    else:
        table.add_column("Year", justify="right")
        table.add_column("Week", justify="right")
        table.add_column("Slug")
        table.add_column("Title")
        rows = [(str(n.year), str(n.week), n.slug, n.title) for n in repo.get_all_news()]

    if limit > 0:
        rows = rows[:limit]
    for row in rows:
        table.add_row(*row)
    console.print(table)


def _print_digest_summary(result: DigestResult) -> None:
    if not result.written or result.stats is None:
        console.print("[yellow]No digest written.[/yellow]")
        return

    table = Table(title="Digest statistics")
    table.add_column("Category")
    table.add_column("Items", justify="right")
    for category, count in result.stats.category_counts.items():
        if count:
            table.add_row(category, str(count))
    table.add_row("[bold]Total[/bold]", f"[bold]{result.stats.total_items}[/bold]")
    console.print(table)
    console.print(f"Sources: {len(result.stats.sources)}")
    console.print(f"[green]Digest generated successfully:[/green] {result.path}")


def _load(args: argparse.Namespace) -> Settings:
    settings = load_settings(args.settings)
    return with_root(settings, Path(args.root) if args.root else None)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_argparser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        settings = _load(args)

        if args.command == "lint":
            return _print_lint_report(lint_content(settings.paths.content_dir / "posts"), args.strict)

        if args.command == "list":
            _list(ContentRepository(content_dir=settings.paths.content_dir), args.kind, args.limit)
            return 0

        if args.command == "feed":
            out = Path(args.out) if args.out else settings.paths.public_dir / "feed.xml"
            n = write_feed(
                ContentRepository(content_dir=settings.paths.content_dir),
                out,
                site_url=settings.site.url,
                title=settings.site.title,
                description=settings.site.description,
            )
            console.print(f"RSS feed generated with {n} items: {out}")
            return 0

        if args.command == "digest":
            setup_logging(
                logging.DEBUG if args.verbose else logging.INFO,
                log_file=settings.paths.logs_dir / "digest.log",
            )
            container = build_container(settings, skip_ai=args.skip_ai)
            publish = PublishOptions(commit=args.commit or args.push, push=args.push)
            result = run_digest(container, settings, skip_ai=args.skip_ai, publish=publish)
            _print_digest_summary(result)
            return 0
    except DevOpsDailyError as e:
        console.print(f"[red]Error:[/red] {e}")
        logger.debug("Command failed", exc_info=True)
        return 1

    return 2


if __name__ == "__main__":
    sys.exit(main())
