"""Utility functions for Inkwell.

This module contains small string helpers used throughout the Inkwell codebase.

Key functions:
    slugify: Convert a title or filename to a URL slug.
    titleize: Fallback title derived from a document id.
    document_id: Derive a document identifier from its filename.
    tag_slug: Derive the output folder name of a tag page.
    count_words: Count whitespace-separated words.
    join_root_url: Join a base URL with a path.
"""

from __future__ import annotations

import re
import unicodedata
from pathlib import Path
from urllib.parse import quote


def slugify(name: str) -> str:
    """Convert a title or filename stem to a lowercase ASCII slug.

    Accented characters are transliterated where Unicode provides an ASCII
    decomposition; anything else outside ``[a-z0-9]`` becomes a hyphen.

    Args:
        name: Title or filename stem.

    Returns:
        URL-friendly slug, or ``"post"`` if nothing usable remains.

    Examples:
        >>> slugify("Hello, World!")
        'hello-world'

        >>> slugify("Crème Brûlée")
        'creme-brulee'
    """
    normalized = unicodedata.normalize("NFKD", name)
    ascii_only = normalized.encode("ascii", "ignore").decode("ascii")
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", ascii_only)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "post"


_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}[-_]")


def titleize(source_id: str) -> str:
    """Fallback title for a document whose frontmatter has none.

    A leading ``YYYY-MM-DD-`` date is dropped and separators become spaces:

        >>> titleize("2024-01-15-hello-world")
        'Hello World'
        >>> titleize("v1.2_release_notes.md")
        'V1.2 Release Notes'
    """
    base = source_id[:-3] if source_id.lower().endswith(".md") else source_id
    base = _DATE_PREFIX_RE.sub("", base)
    words = re.split(r"[\s\-_]+", base)
    return " ".join(word[:1].upper() + word[1:] for word in words if word) or "Untitled"


def document_id(filename: str) -> str:
    """Derive a document id from its filename.

    The extension is dropped and whitespace runs become underscores, so the
    id can be used verbatim as a URL path segment and output folder.

    Examples:
        >>> document_id("my first post.md")
        'my_first_post'
    """
    stem = Path(filename).stem if filename.lower().endswith(".md") else filename
    return re.sub(r"\s+", "_", stem.strip())


def tag_slug(tag: str) -> str:
    """Return the folder name used for a tag page.

    Whitespace and path separators become underscores so a tag always maps
    to a single folder under ``tags/``.

    Examples:
        >>> tag_slug("machine learning")
        'machine_learning'

        >>> tag_slug("c/c++")
        'c_c++'
    """
    slug = re.sub(r"[\s/\\]+", "_", tag.strip())
    if slug in ("", ".", ".."):
        return slug.replace(".", "_") or "_"
    return slug


def tag_url(tag: str) -> str:
    """Return the percent-encoded URL of a tag page."""
    return f"/tags/{quote(tag_slug(tag))}/"


def count_words(text: str) -> int:
    """Count whitespace-separated words in ``text``."""
    return len(text.split())


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Args:
        root_url: Base URL (e.g., https://example.com/blog).
        path: Path beginning with or without a leading slash.

    Returns:
        Combined URL with proper slash handling.

    Examples:
        >>> join_root_url('https://example.com', '/about')
        'https://example.com/about'

        >>> join_root_url('https://example.com/', 'about')
        'https://example.com/about'
    """
    if not root_url:
        return path
    base = root_url.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"
