"""Content processing for Inkwell.

This module turns Markdown files into immutable Document objects. It splits
frontmatter from the body, fills in missing metadata, renders the body and
derives reading time, a display date and the document URL.

Key classes:
- Document: Frozen dataclass holding a post and its derived fields.
- ContentPipeline: Loads single documents or a whole posts directory.

Key functions:
- extract_tag_index: Group documents by tag.
- merge_tags_by_slug: Fold tags that map to the same tag page.
- sort_documents: Newest-first ordering with stable ties.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .config import ContentSettings
from .errors import ContentSourceError
from .extractors import coerce_date, coerce_tags, extract_frontmatter
from .protocols import FrontmatterParser, MarkdownConverter
from .renderers import MarkdownRenderer
from .utils import count_words, document_id, tag_slug, titleize

logger = logging.getLogger(__name__)

RESERVED_FIELDS = frozenset({"title", "date", "author", "tags", "summary"})


@dataclass(frozen=True)
class Document:
    """A blog post with all of its derived fields computed.

    Attributes:
        id: Identifier derived from the filename; also the URL slug.
        title: Title from frontmatter, or derived from the filename.
        date: Publication date, or the file modification date.
        author: Author from frontmatter, or the configured default.
        tags: Ordered tags, without repeats.
        summary: Optional summary from frontmatter.
        raw_body: Markdown body without frontmatter.
        rendered_body: Body rendered to HTML.
        reading_time_minutes: Estimated reading time.
        formatted_date: Date formatted for display.
        url: Site-relative URL of the document page.
        metadata: Any additional frontmatter fields, verbatim.
        source_path: File the document was loaded from, if any.
        warnings: Messages about metadata that had to be synthesized.
    """

    id: str
    title: str
    date: date
    author: str
    tags: tuple[str, ...]
    summary: str
    raw_body: str
    rendered_body: str
    reading_time_minutes: int
    formatted_date: str
    url: str
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    source_path: Path | None = None
    warnings: tuple[str, ...] = ()

    @property
    def date_iso(self) -> str:
        return self.date.isoformat()


def reading_time(text: str, words_per_minute: int, minimum: int = 1) -> int:
    """Estimate reading time in whole minutes.

    Examples:
        >>> reading_time("word " * 450, words_per_minute=200)
        3

        >>> reading_time("", words_per_minute=200)
        1
    """
    minutes = math.ceil(count_words(text) / words_per_minute)
    return max(minimum, minutes)


def format_date(value: date, date_format: str) -> str:
    """Format a date for display using ``strftime`` (month names follow LC_TIME)."""
    return value.strftime(date_format)


def document_url(doc_id: str) -> str:
    return f"/posts/{doc_id}/"


def discover_documents(source_dir: Path) -> list[Path]:
    """List Markdown files directly inside ``source_dir`` in name order.

    Hidden files and files starting with ``_`` (drafts) are skipped.

    Raises:
        ContentSourceError: If the directory cannot be listed.
    """
    try:
        entries = list(source_dir.iterdir())
    except OSError as exc:
        raise ContentSourceError(source_dir, f"cannot list content directory ({exc})") from exc
    return sorted(
        path
        for path in entries
        if path.is_file()
        and path.suffix.lower() == ".md"
        and not path.name.startswith((".", "_"))
    )


def sort_documents(documents: Iterable[Document]) -> list[Document]:
    """Sort documents newest first; equal dates keep their incoming order."""
    return sorted(documents, key=lambda doc: doc.date, reverse=True)


def extract_tag_index(documents: Iterable[Document]) -> dict[str, list[Document]]:
    """Build an index mapping tags to the documents carrying them.

    Tags appear in the order they are first met and each list keeps the
    order of ``documents``.

    Args:
        documents: Documents in processing order.

    Returns:
        Dictionary mapping tag names to lists of documents.
    """
    tags: dict[str, list[Document]] = {}
    for doc in documents:
        for tag in doc.tags:
            tags.setdefault(tag, []).append(doc)
    return tags


def merge_tags_by_slug(tag_index: Mapping[str, Iterable[Document]]) -> dict[str, list[Document]]:
    """Fold tags that share an output folder into one entry.

    ``machine learning`` and ``machine_learning`` both live under
    ``tags/machine_learning/``. The first name met is kept; later ones add
    their documents (each document once, index order kept) and log a warning.
    """
    merged: dict[str, list[Document]] = {}
    names: dict[str, str] = {}
    for tag, documents in tag_index.items():
        slug = tag_slug(tag)
        name = names.setdefault(slug, tag)
        if name != tag:
            logger.warning(
                "Tags %r and %r share the page tags/%s/; listing them together as %r",
                name, tag, slug, name,
            )
        bucket = merged.setdefault(name, [])
        for doc in documents:
            if all(doc is not seen for seen in bucket):
                bucket.append(doc)
    return merged


class ContentPipeline:
    """Builds Document objects from Markdown sources.

    Attributes:
        settings: Content settings from the configuration.
        renderer: Markdown-to-HTML converter.
        parse_frontmatter: Frontmatter splitter.
    """

    def __init__(
        self,
        settings: ContentSettings,
        renderer: MarkdownConverter | None = None,
        frontmatter_parser: FrontmatterParser = extract_frontmatter,
    ):
        """Initialize the pipeline.

        Args:
            settings: Content settings (author default, reading speed...).
            renderer: Optional Markdown converter; defaults to MarkdownRenderer.
            frontmatter_parser: Optional frontmatter splitter.
        """
        self.settings = settings
        self.renderer = renderer or MarkdownRenderer()
        self.parse_frontmatter = frontmatter_parser

    def load_document(
        self,
        raw_text: str,
        source_id: str,
        modified: datetime | None = None,
        source_path: Path | None = None,
    ) -> Document:
        """Build a Document from raw file text.

        Args:
            raw_text: File contents, frontmatter included.
            source_id: Source filename; the id and fallback title derive from it.
            modified: Modification time used when the date is missing.
            source_path: Path of the source file, if any.

        Returns:
            Fully computed Document.

        Raises:
            Exception: Whatever the renderer raises; callers skip the document.
        """
        metadata, body = self.parse_frontmatter(raw_text, source_id)
        warnings: list[str] = []

        doc_date = coerce_date(metadata.get("date"))
        if doc_date is None:
            fallback = modified or datetime.now()
            doc_date = fallback.date()
            reason = "Missing" if not metadata.get("date") else "Unparseable"
            warnings.append(f"{reason} date in {source_id}, using file modification date")

        title = metadata.get("title")
        if title is None or not str(title).strip():
            title = titleize(source_id)
            warnings.append(f"Missing title in {source_id}, using normalized filename")

        for message in warnings:
            logger.warning(message)

        author = metadata.get("author") or self.settings.default_author
        rendered = self.renderer(body)
        doc_id = document_id(source_id)
        extra = {key: value for key, value in metadata.items() if key not in RESERVED_FIELDS}

        return Document(
            id=doc_id,
            title=str(title).strip(),
            date=doc_date,
            author=str(author or ""),
            tags=coerce_tags(metadata.get("tags")),
            summary=str(metadata.get("summary") or ""),
            raw_body=body,
            rendered_body=rendered,
            reading_time_minutes=reading_time(
                body,
                self.settings.words_per_minute,
                self.settings.min_reading_minutes,
            ),
            formatted_date=format_date(doc_date, self.settings.date_format),
            url=document_url(doc_id),
            metadata=MappingProxyType(extra),
            source_path=source_path,
            warnings=tuple(warnings),
        )

    def load_document_file(self, path: Path) -> Document:
        """Read ``path`` and build a Document, using its mtime as the date fallback."""
        raw_text = path.read_text(encoding="utf-8")
        modified = datetime.fromtimestamp(path.stat().st_mtime)
        return self.load_document(raw_text, path.name, modified=modified, source_path=path)

    def load_all_documents(self, source_dir: Path) -> list[Document]:
        """Load every Markdown document in ``source_dir``.

        Each file is loaded independently; a file that fails to read, parse
        or render is logged and left out. Files whose id collides with an
        earlier file are skipped as well.

        Args:
            source_dir: Directory holding the posts.

        Returns:
            Documents sorted by date, newest first, ties in discovery order.

        Raises:
            ContentSourceError: If ``source_dir`` exists but is not a readable
                directory.
        """
        if not source_dir.exists():
            logger.warning("No posts directory at %s", source_dir)
            return []
        if not source_dir.is_dir():
            raise ContentSourceError(source_dir, "content path is not a directory")

        files = discover_documents(source_dir)
        if not files:
            logger.warning("No markdown files found in %s", source_dir)
            return []
        logger.info("Found %d markdown files in %s", len(files), source_dir)

        documents: list[Document] = []
        seen_ids: set[str] = set()
        for path in files:
            try:
                doc = self.load_document_file(path)
            except Exception as exc:
                logger.warning("Skipping %s (stage: load): %s: %s", path.name, type(exc).__name__, exc)
                continue
            if doc.id in seen_ids:
                logger.warning("Skipping %s: id %r is already used by another post", path.name, doc.id)
                continue
            seen_ids.add(doc.id)
            documents.append(doc)
        return sort_documents(documents)
