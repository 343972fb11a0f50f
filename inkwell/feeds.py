"""Feed generation for Inkwell.

Key class:
- SitemapGenerator: Builds sitemap.xml following the sitemaps.org protocol.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING

from markupsafe import escape

from .utils import tag_url

if TYPE_CHECKING:
    from .content import Document

HOME_PRIORITY = "1.0"
ABOUT_PRIORITY = "0.8"
DOCUMENT_PRIORITY = "0.7"
TAG_PRIORITY = "0.5"


class SitemapGenerator:
    """Generates sitemap.xml for search engine indexing.

    The schema is fixed: the home page, the about page, every document with
    its last-modified date, and every tag page, each with a fixed priority.

    Attributes:
        base_url: Absolute site URL prefixed to every location.
    """

    filename = "sitemap.xml"

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def generate(
        self,
        documents: Sequence[Document],
        tags: Mapping[str, Iterable[Document]],
    ) -> str:
        """Generate sitemap.xml content.

        Args:
            documents: Documents to list, in output order.
            tags: Tag index; one entry is written per tag.

        Returns:
            Sitemap XML content.
        """
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            self._entry("/", HOME_PRIORITY),
            self._entry("/about/", ABOUT_PRIORITY),
        ]
        for doc in documents:
            lines.append(self._entry(doc.url, DOCUMENT_PRIORITY, lastmod=doc.date_iso))
        for tag in tags:
            lines.append(self._entry(tag_url(tag), TAG_PRIORITY))
        lines.append("</urlset>")
        return "\n".join(lines) + "\n"

    def _entry(self, path: str, priority: str, lastmod: str | None = None) -> str:
        parts = ["  <url>", f"    <loc>{escape(self.base_url + path)}</loc>"]
        if lastmod:
            parts.append(f"    <lastmod>{lastmod}</lastmod>")
        parts.append(f"    <priority>{priority}</priority>")
        parts.append("  </url>")
        return "\n".join(parts)
