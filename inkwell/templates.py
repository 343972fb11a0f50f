"""Template loading for Inkwell.

Templates are looked up by logical name (``post``, ``post-card``, ``base``...)
and resolved in order:

1. ``<templates_dir>/<name>.html`` in the project, overriding the default.
2. ``inkwell/templates/default/<name>.html`` shipped with the package.
3. Nothing found: the miss is logged and an empty string is returned, so a
   missing template degrades the page instead of failing the build.

Key class:
- TemplateLoader: Resolves, caches and renders named templates.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .cache import BoundedCache
from .directives import render_template

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "templates" / "default"
TEMPLATE_SUFFIX = ".html"

__all__ = ["DEFAULT_TEMPLATES_DIR", "TemplateLoader"]


class TemplateLoader:
    """Resolves logical template names to template text.

    Successful loads are memoized by resolved absolute path in a cache owned
    by the loader. Entries are never invalidated during a build; pass
    ``cache_enabled=False`` to read from disk on every call.

    Attributes:
        templates_dir: Project template directory (overrides), may not exist.
        defaults_dir: Directory of built-in templates.
        cache: Template text cache.
    """

    def __init__(
        self,
        templates_dir: Path | None,
        defaults_dir: Path = DEFAULT_TEMPLATES_DIR,
        cache_enabled: bool = True,
        cache_size: int | None = 64,
    ):
        """Initialize the loader.

        Args:
            templates_dir: Directory with project template overrides.
            defaults_dir: Directory with built-in templates.
            cache_enabled: Whether to memoize loaded templates.
            cache_size: Maximum number of cached templates.
        """
        self.templates_dir = templates_dir
        self.defaults_dir = defaults_dir
        self.cache = BoundedCache(cache_size, enabled=cache_enabled)

    def candidates(self, name: str) -> list[Path]:
        """Return the candidate files for ``name`` in resolution order."""
        filename = f"{name}{TEMPLATE_SUFFIX}"
        paths = []
        if self.templates_dir is not None:
            paths.append(self.templates_dir / filename)
        paths.append(self.defaults_dir / filename)
        return paths

    def load(self, name: str) -> str:
        """Load a template by logical name.

        Args:
            name: Template name without extension.

        Returns:
            Template text, or an empty string if no candidate exists.
        """
        tried = []
        for candidate in self.candidates(name):
            resolved = candidate.resolve()
            cached = self.cache.get(resolved)
            if cached is not None:
                return cached
            try:
                text = resolved.read_text(encoding="utf-8")
            except FileNotFoundError:
                tried.append(str(resolved))
                continue
            except OSError as exc:
                logger.warning("Could not read template %s: %s", resolved, exc)
                tried.append(str(resolved))
                continue
            self.cache.set(resolved, text)
            return text
        logger.error("Template %r not found (tried %s)", name, ", ".join(tried))
        return ""

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        """Load a template and render it against ``context``.

        Args:
            name: Template name without extension.
            context: Values available to the template.

        Returns:
            Rendered string; empty when the template is missing.
        """
        return render_template(self.load(name), context)
