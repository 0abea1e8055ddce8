from __future__ import annotations

import math
import re
from html import unescape
from typing import Optional

import mistune
from mistune.util import escape

from devops_daily.utils.slugs import heading_slug

_TAG_RE = re.compile(r"<[^>]+>")
_WORD_RE = re.compile(r"\S+")
_FENCE_RE = re.compile(r"^```.*?^```", re.MULTILINE | re.DOTALL)


class AnchoredHTMLRenderer(mistune.HTMLRenderer):
    """
    HTML renderer that gives every heading a level-prefixed id and a self link,
    and tags fenced code with highlight.js-style language classes.
    """

    def heading(self, text: str, level: int, **attrs) -> str:
        plain = unescape(_TAG_RE.sub("", text))
        slug = heading_slug(plain, level)
        return (
            f'<h{level} id="{slug}" class="group relative scroll-mt-24">'
            f'<a href="#{slug}">{text}</a>'
            f"</h{level}>\n"
        )

    def block_code(self, code: str, info: Optional[str] = None) -> str:
        lang = (info or "").strip().split(None, 1)[0] if info and info.strip() else "plaintext"
        return f'<pre><code class="hljs language-{escape(lang)}">{escape(code)}</code></pre>\n'


_markdown = mistune.create_markdown(
    renderer=AnchoredHTMLRenderer(escape=False),
    hard_wrap=True,
    plugins=["table", "strikethrough", "task_lists", "url"],
)


def render_markdown(text: str) -> str:
    result = _markdown(text)
    return result if isinstance(result, str) else ""


def count_words(text: str, *, skip_code: bool = True) -> int:
    if skip_code:
        text = _FENCE_RE.sub("", text)
    return len(_WORD_RE.findall(text))


def estimate_reading_time(text: str, wpm: int = 200) -> str:
    minutes = max(1, math.ceil(count_words(text) / max(1, wpm)))
    return f"{minutes} min read"
