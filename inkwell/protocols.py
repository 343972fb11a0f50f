"""Protocol definitions for Inkwell.

The content pipeline depends on these interfaces rather than on mistune or
PyYAML directly, so tests can substitute simple callables.
"""

from __future__ import annotations

from typing import Any, Protocol


class MarkdownConverter(Protocol):
    """Converts Markdown text to HTML.

    Implementations may cache results and may raise on malformed input; the
    pipeline treats a raise as a failure of that one document.
    """

    def __call__(self, markdown: str) -> str:
        ...


class FrontmatterParser(Protocol):
    """Splits raw document text into (metadata, body).

    Implementations must not raise on malformed metadata; they return an
    empty mapping and the full text instead.
    """

    def __call__(self, text: str, source: str = ...) -> tuple[dict[str, Any], str]:
        ...
