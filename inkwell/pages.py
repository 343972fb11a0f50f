"""Page assembly for Inkwell.

The assembler turns documents, the tag index and pagination windows into
finished output pages. Every page type has a content template (``listing``,
``post``, ``tag``, ``tags-index``, ``about``, ``error``) whose output is
wrapped by the ``base`` template together with the ``header`` and ``footer``
fragments.

Text taken from documents or the configuration is HTML-escaped before it is
placed in a template context; rendered Markdown and rendered fragments are
inserted as-is.

Key classes:
- OutputPage: A finished page and its path relative to the output root.
- PageAssembler: Produces the OutputPages of every page type.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from markupsafe import escape

from .config import Config
from .content import Document
from .context import lazy
from .feeds import SitemapGenerator
from .pagination import PageWindow, PaginationView, paginate, page_url, pagination_view
from .templates import TemplateLoader
from .utils import join_root_url, tag_slug, tag_url

logger = logging.getLogger(__name__)

LISTING_HEADING = "Latest posts"
NOT_FOUND_MESSAGE = "The page you are looking for does not exist."


@dataclass(frozen=True)
class OutputPage:
    """A rendered page.

    Attributes:
        path: POSIX path relative to the output directory.
        content: Page text (HTML or XML).
    """

    path: str
    content: str


class PageAssembler:
    """Assembles the pages of a site from its documents.

    The assembler holds no per-build state besides its collaborators, so one
    instance can serve several page-type tasks running concurrently.

    Attributes:
        config: Build configuration.
        loader: Template loader used for every fragment.
        today: Date used for the copyright fallback.
    """

    def __init__(self, config: Config, loader: TemplateLoader, today: date | None = None):
        self.config = config
        self.loader = loader
        self.today = today or date.today()

    # Fragments

    def render_page(
        self,
        content: str,
        title: str = "",
        description: str = "",
        canonical_path: str = "",
        body_class: str = "",
    ) -> str:
        """Wrap page content with the ``base`` template.

        Args:
            content: Rendered content template output.
            title: Page title shown before the site title; empty on the home page.
            description: Meta description; defaults to the site description.
            canonical_path: Site-relative path of the page. A canonical link
                is emitted only when ``site.url`` is configured.
            body_class: CSS class of the ``<body>`` element.

        Returns:
            Complete HTML document.
        """
        site = self.config.site
        canonical = ""
        if site.url and canonical_path:
            canonical = join_root_url(site.url, canonical_path)
        context = {
            "language": escape(site.language),
            "site_title": escape(site.title),
            "page_title": escape(title),
            "description": escape(description or site.description),
            "canonical": escape(canonical),
            "body_class": escape(body_class),
            "site": self._site_context(),
            "appearance": dict(self.config.appearance),
            "header": lazy(self.render_header),
            "footer": lazy(self.render_footer),
            "content": content,
        }
        return self.loader.render("base", context)

    def render_header(self) -> str:
        site = self.config.site
        return self.loader.render(
            "header",
            {
                "site_title": escape(site.title),
                "site_description": escape(site.description),
                "navigation": [
                    {"label": escape(item.label), "url": escape(item.url)}
                    for item in self.config.navigation
                ],
                "site": self._site_context(),
            },
        )

    def render_footer(self) -> str:
        site = self.config.site
        copyright_text = site.copyright or f"© {self.today.year} {site.title}"
        return self.loader.render(
            "footer",
            {
                "copyright": escape(copyright_text),
                "year": self.today.year,
                "social": [
                    {"platform": escape(link.platform), "url": escape(link.url)}
                    for link in self.config.social
                ],
                "site": self._site_context(),
            },
        )

    def render_tags(self, tags: Iterable[str]) -> str:
        """Render the ``tags`` fragment; empty when there are no tags."""
        tag_list = _tag_links(tags)
        if not tag_list:
            return ""
        return self.loader.render("tags", {"tags": tag_list})

    def document_context(self, doc: Document) -> dict[str, Any]:
        """Build the template context of a document.

        Additional frontmatter fields are exposed verbatim, both at the top
        level and under ``metadata``; computed fields take precedence.
        """
        context: dict[str, Any] = dict(doc.metadata)
        context.update(
            {
                "id": doc.id,
                "url": doc.url,
                "title": escape(doc.title),
                "date": doc.date_iso,
                "formatted_date": escape(doc.formatted_date),
                "author": escape(doc.author),
                "summary": escape(doc.summary),
                "reading_time": doc.reading_time_minutes,
                "show_reading_time": self.config.content.show_reading_time,
                "tag_list": _tag_links(doc.tags),
                "tags": lazy(lambda: self.render_tags(doc.tags)),
                "content": doc.rendered_body,
                "metadata": dict(doc.metadata),
            }
        )
        return context

    def render_card(self, doc: Document) -> str:
        return self.loader.render("post-card", self.document_context(doc))

    def render_pagination(self, view: PaginationView, base_path: str = "/") -> str:
        """Render the ``pagination`` fragment; empty for a single page."""
        if view.total_pages <= 1:
            return ""
        current = view.current_page
        context = {
            "current_page": current,
            "total_pages": view.total_pages,
            "prev_url": page_url(base_path, current - 1) if current > 1 else "",
            "next_url": page_url(base_path, current + 1) if current < view.total_pages else "",
            "first_url": page_url(base_path, 1),
            "last_url": page_url(base_path, view.total_pages),
            "show_first": view.show_first,
            "show_first_ellipsis": view.show_first_ellipsis,
            "show_last": view.show_last,
            "show_last_ellipsis": view.show_last_ellipsis,
            "pages": [
                {
                    "number": number,
                    "url": page_url(base_path, number),
                    "is_current": number == current,
                }
                for number in view.visible_pages
            ],
        }
        return self.loader.render("pagination", context)

    # Page types

    def listing_pages(self, documents: Sequence[Document]) -> list[OutputPage]:
        """Render the paginated home listing.

        The home page always exists; with no documents it is a single page
        without cards.
        """
        windows = paginate(documents, self.config.content.posts_per_page)
        if not windows:
            windows = [PageWindow(1, (), True, "/", pagination_view(1, 1))]

        pages = []
        for window in windows:
            content = self.loader.render(
                "listing",
                {
                    "heading": LISTING_HEADING,
                    "page_number": window.page_number,
                    "is_first_page": window.is_first_page,
                    "cards": [self.render_card(doc) for doc in window.items],
                    "pagination": self.render_pagination(window.pagination),
                },
            )
            title = "" if window.is_first_page else f"Page {window.page_number}"
            html = self.render_page(
                content,
                title=title,
                canonical_path=window.url,
                body_class="home-page",
            )
            pages.append(OutputPage(_index_path(window.url), html))
        return pages

    def document_page(self, doc: Document) -> OutputPage:
        content = self.loader.render("post", self.document_context(doc))
        html = self.render_page(
            content,
            title=doc.title,
            description=doc.summary,
            canonical_path=doc.url,
            body_class="post-page",
        )
        return OutputPage(_index_path(doc.url), html)

    def document_pages(self, documents: Iterable[Document]) -> list[OutputPage]:
        return [self.document_page(doc) for doc in documents]

    def tag_pages(self, tag_index: Mapping[str, Sequence[Document]]) -> list[OutputPage]:
        """Render one page per tag listing its documents newest first."""
        pages = []
        for tag, documents in tag_index.items():
            newest_first = sorted(documents, key=lambda doc: doc.date, reverse=True)
            content = self.loader.render(
                "tag",
                {
                    "tag": escape(tag),
                    "count": len(newest_first),
                    "cards": [self.render_card(doc) for doc in newest_first],
                },
            )
            html = self.render_page(
                content,
                title=f"Posts tagged: {tag}",
                description=f"Posts tagged with {tag}",
                canonical_path=tag_url(tag),
                body_class="tag-page",
            )
            pages.append(OutputPage(f"tags/{tag_slug(tag)}/index.html", html))
        return pages

    def tag_index_page(self, tag_index: Mapping[str, Sequence[Document]]) -> OutputPage:
        """Render the alphabetical list of tags with their document counts."""
        tags = [
            {"name": escape(tag), "url": tag_url(tag), "count": len(documents)}
            for tag, documents in sorted(tag_index.items(), key=lambda item: item[0].lower())
        ]
        content = self.loader.render("tags-index", {"tags": tags})
        html = self.render_page(
            content,
            title="Tags",
            description="Browse all tags",
            canonical_path="/tags/",
            body_class="tags-page",
        )
        return OutputPage("tags/index.html", html)

    def about_page(self, doc: Document | None) -> OutputPage | None:
        """Render the about page, or return None when there is none."""
        if doc is None:
            return None
        description = str(doc.metadata.get("description") or "")
        content = self.loader.render("about", self.document_context(doc))
        html = self.render_page(
            content,
            title=doc.title,
            description=description,
            canonical_path="/about/",
            body_class="about-page",
        )
        return OutputPage("about/index.html", html)

    def error_page(self, message: str = NOT_FOUND_MESSAGE) -> OutputPage:
        content = self.loader.render("error", {"message": escape(message)})
        html = self.render_page(content, title="Page not found", body_class="error-page")
        return OutputPage("404.html", html)

    def sitemap(
        self,
        documents: Sequence[Document],
        tag_index: Mapping[str, Sequence[Document]],
    ) -> OutputPage:
        if not self.config.site.url:
            logger.warning("site.url is not set; sitemap locations will be relative")
        generator = SitemapGenerator(self.config.site.url)
        return OutputPage(generator.filename, generator.generate(documents, tag_index))

    def _site_context(self) -> dict[str, Any]:
        site = self.config.site
        return {
            "title": escape(site.title),
            "description": escape(site.description),
            "language": escape(site.language),
            "url": escape(site.url),
        }


def _tag_links(tags: Iterable[str]) -> list[dict[str, Any]]:
    return [{"name": escape(tag), "url": tag_url(tag)} for tag in tags]


def _index_path(url: str) -> str:
    """Map a site-relative directory URL to its ``index.html`` path.

    Examples:
        >>> _index_path("/")
        'index.html'

        >>> _index_path("/page/2/")
        'page/2/index.html'
    """
    stripped = url.strip("/")
    return f"{stripped}/index.html" if stripped else "index.html"
