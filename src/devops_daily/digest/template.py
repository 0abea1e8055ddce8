from __future__ import annotations

from devops_daily.domain.models import Digest, NewsItem
from devops_daily.utils.dates import format_display_date

CATEGORY_EMOJIS: dict[str, str] = {
    "Kubernetes": "⚓",
    "Cloud Native": "☁️",
    "CI/CD": "🔄",
    "IaC": "🏗️",
    "Observability": "📊",
    "Security": "🔐",
    "Databases": "💾",
    "Platforms": "🌐",
    "Misc": "📰",
}
DEFAULT_EMOJI = "📰"

DIGEST_HEADER = "> 📌 **Handpicked by DevOps Daily** - Your weekly dose of curated DevOps news and updates!"
SECTION_SEPARATOR = "\n\n---\n\n"


def generate_title(week: int, year: int) -> str:
    return f"DevOps Weekly Digest - Week {week}, {year}"


def generate_summary() -> str:
    return (
        "⚡ Curated updates from Kubernetes, cloud native tooling, CI/CD, IaC, "
        "observability, and security - handpicked for DevOps professionals!"
    )


def _yaml_quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_news_item(item: NewsItem) -> str:
    summary = item.summary or item.excerpt[:200]
    tags = ""
    if item.tags:
        tags = "\n  🏷️ *" + ", ".join(f"`{t}`" for t in item.tags) + "*"

    return (
        f"### 📄 {item.title}\n"
        "\n"
        f"{summary}\n"
        "\n"
        f"**📅 {format_display_date(item.published_at)}** • **📰 {item.source}**{tags}\n"
        "\n"
        f"[**🔗 Read more**]({item.url})"
    )


def render_digest(digest: Digest) -> str:
    meta = digest.metadata
    front_matter = "\n".join(
        [
            "---",
            f"title: {_yaml_quote(meta.title)}",
            f"date: {_yaml_quote(meta.date)}",
            f"summary: {_yaml_quote(meta.summary)}",
            "---",
        ]
    )
    header = f"\n{DIGEST_HEADER}\n\n---\n"

    sections = []
    for category, items in digest.categories.items():
        if not items:
            continue
        emoji = CATEGORY_EMOJIS.get(category, DEFAULT_EMOJI)
        body = "\n\n".join(format_news_item(i) for i in items)
        sections.append(f"## {emoji} {category}\n\n{body}")

    return f"{front_matter}\n{header}\n{SECTION_SEPARATOR.join(sections)}\n"
