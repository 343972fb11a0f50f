"""Markdown rendering for Inkwell.

Markdown is converted with mistune using a renderer that adds heading anchors,
opens external links in a new tab, wraps images in ``<figure>`` elements and
highlights fenced code with Pygments when the language is known.

Key classes:
- MarkdownRenderer: Callable renderer with a bounded result cache.
"""

from __future__ import annotations

import re
from collections import Counter

import mistune
from markupsafe import escape
from mistune.util import safe_entity, striptags
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .cache import BoundedCache

RENDER_CACHE_SIZE = 50
MARKDOWN_PLUGINS = ["strikethrough", "footnotes", "table", "url"]
FIGURES_ONLY_RE = re.compile(
    r"\s*(?:<figure><img [^>]*><figcaption>[^<]*</figcaption></figure>\s*)+"
)


def anchor_id(text: str) -> str:
    """Anchor for a heading: tags dropped, lowercased, non-word runs as ``-``."""
    plain = re.sub(r"<[^>]+>", "", text).lower()
    plain = re.sub(r"[^\w\s-]", "", plain)
    return re.sub(r"[-\s]+", "-", plain).strip("-")


class _BlogRenderer(mistune.HTMLRenderer):
    """HTML renderer with heading anchors, figures and highlighted code."""

    def __init__(self):
        super().__init__(escape=False)
        self._seen_anchors: Counter[str] = Counter()

    def heading(self, text: str, level: int, **attrs) -> str:
        anchor = anchor_id(text) or "section"
        repeats = self._seen_anchors[anchor]
        self._seen_anchors[anchor] += 1
        if repeats:
            anchor = f"{anchor}-{repeats}"
        return f'<h{level} id="{anchor}">{text}</h{level}>\n'

    # mistune passes url and text already HTML-escaped.
    def link(self, text: str, url: str, title: str | None = None) -> str:
        href = self.safe_url(url or "")
        title_attr = f' title="{safe_entity(title)}"' if title else ""
        target_attr = ""
        if (url or "").startswith(("http://", "https://")):
            target_attr = ' target="_blank" rel="noopener noreferrer"'
        return f'<a href="{href}"{title_attr}{target_attr}>{text}</a>'

    def image(self, text: str, url: str, title: str | None = None) -> str:
        src = self.safe_url(url or "")
        alt = striptags(text or "")
        title_attr = f' title="{safe_entity(title)}"' if title else ""
        return (
            f'<figure><img src="{src}" alt="{alt}"{title_attr}>'
            f"<figcaption>{alt}</figcaption></figure>"
        )

    def paragraph(self, text: str) -> str:
        if FIGURES_ONLY_RE.fullmatch(text):
            return text.strip() + "\n"
        return f"<p>{text}</p>\n"

    def block_code(self, code: str, info: str | None = None) -> str:
        words = (info or "").split()
        language = words[0] if words else ""
        if language:
            try:
                lexer = get_lexer_by_name(language, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
                return highlight(code, lexer, formatter)
        escaped = escape(code)
        return f'<pre><code class="language-{language or "text"}">{escaped}</code></pre>\n'


class MarkdownRenderer:
    """Renders Markdown text to HTML.

    Results are memoized by source text in a bounded cache owned by the
    renderer (oldest entry evicted first). Rendering errors propagate to the
    caller, which decides whether to skip the document.

    Attributes:
        cache: Cache of rendered HTML keyed by Markdown source.
    """

    def __init__(self, cache_enabled: bool = True, cache_size: int = RENDER_CACHE_SIZE):
        """Initialize the renderer.

        Args:
            cache_enabled: Whether rendered output is memoized.
            cache_size: Maximum number of cached results.
        """
        self.cache = BoundedCache(cache_size, enabled=cache_enabled)

    def render(self, markdown: str) -> str:
        """Render Markdown to HTML.

        Args:
            markdown: Markdown source.

        Returns:
            HTML string; empty for empty input.
        """
        if not markdown:
            return ""
        return self.cache.get_or_compute(markdown, lambda: self._convert(markdown))

    __call__ = render

    @staticmethod
    def _convert(markdown: str) -> str:
        converter = mistune.create_markdown(renderer=_BlogRenderer(), plugins=MARKDOWN_PLUGINS)
        return converter(markdown)
