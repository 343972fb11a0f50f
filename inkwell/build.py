"""Site building functionality for Inkwell.

This module wires the components of a build together: it loads the
configuration, loads every document, then renders and writes each page type.

Page types (listing, documents, tags, tag index, about, sitemap, assets) are
independent of each other and run concurrently in a thread pool. A page type
that fails is logged and recorded in ``BuildResult.failed`` while the others
proceed. Only an unusable configuration, content directory or output
directory aborts the build; a best-effort ``404.html`` is still written
whenever the output directory is known.

Key functions:
- build_site: Main function to build the entire site.

Key classes:
- SiteBuilder: Runs one build from a resolved Config.
- BuildResult: Outcome of a build.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from .assets import AssetCopier
from .config import DEFAULT_CONFIG_PATH, Config, config_from_mapping, load_config
from .content import ContentPipeline, Document, extract_tag_index, merge_tags_by_slug
from .errors import BuildError, ConfigError, ContentSourceError
from .pages import OutputPage, PageAssembler
from .renderers import MarkdownRenderer
from .templates import TemplateLoader

logger = logging.getLogger(__name__)

CORE_PAGE_TYPES = frozenset({"listing", "documents"})
ABOUT_SOURCE = "index.md"


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        documents: Documents that were loaded, newest first.
        output_dir: Directory where the site was built.
        written: Files written, grouped by page type in task order.
        failed: Page types that failed.
    """

    documents: list[Document]
    output_dir: Path
    written: list[Path] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        """True unless a core page type (listing or documents) failed."""
        return not CORE_PAGE_TYPES.intersection(self.failed)


def write_output(output_dir: Path, page: OutputPage) -> Path:
    """Write ``page`` below ``output_dir``, creating parent directories."""
    target = output_dir / page.path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(page.content, encoding="utf-8")
    return target


class SiteBuilder:
    """Builds a site from a resolved configuration.

    Attributes:
        config: Build configuration.
        loader: Template loader shared by every page type.
        pipeline: Content pipeline for posts and the about page.
        assembler: Page assembler.
        max_workers: Thread pool size; None lets the executor decide.
    """

    def __init__(
        self,
        config: Config,
        loader: TemplateLoader | None = None,
        pipeline: ContentPipeline | None = None,
        max_workers: int | None = None,
        verbose: bool = False,
    ):
        self.config = config
        self.loader = loader or TemplateLoader(
            config.paths.templates_dir, cache_enabled=config.cache_templates
        )
        self.pipeline = pipeline or ContentPipeline(
            config.content,
            renderer=MarkdownRenderer(cache_enabled=config.cache_rendering),
        )
        self.assembler = PageAssembler(config, self.loader)
        self.max_workers = max_workers
        self._progress = logger.info if verbose else logger.debug

    @property
    def output_dir(self) -> Path:
        return self.config.paths.output_dir

    def build(self) -> BuildResult:
        """Run the build.

        Returns:
            BuildResult with the loaded documents, written files and failed
            page types.

        Raises:
            BuildError: If the output directory cannot be created or the
                content directory cannot be read.
        """
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BuildError("output", f"cannot create {self.output_dir} ({exc})", exc) from exc

        try:
            documents = self.pipeline.load_all_documents(self.config.paths.posts_dir)
        except ContentSourceError as exc:
            self.write_error_page()
            raise BuildError("content", str(exc), exc) from exc
        self._progress("Loaded %d documents", len(documents))

        tag_index = merge_tags_by_slug(extract_tag_index(documents))
        result = BuildResult(documents=documents, output_dir=self.output_dir)
        tasks = self._tasks(documents, tag_index)

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {name: pool.submit(task) for name, task in tasks.items()}

        for name, future in futures.items():
            try:
                written = future.result()
            except Exception as exc:
                logger.error("Failed to build %s pages: %s: %s", name, type(exc).__name__, exc)
                result.failed.append(name)
                continue
            self._progress("Built %s: %d files", name, len(written))
            result.written.extend(written)

        error_page = self.write_error_page()
        if error_page is None:
            result.failed.append("error")
        else:
            result.written.append(error_page)
        return result

    def write_error_page(self) -> Path | None:
        """Write ``404.html``; return its path, or None if that failed."""
        try:
            return write_output(self.output_dir, self.assembler.error_page())
        except OSError as exc:
            logger.error("Failed to write error page: %s", exc)
            return None

    def load_about(self) -> Document | None:
        source = self.config.paths.about_dir / ABOUT_SOURCE
        if not source.is_file():
            logger.debug("No about page at %s", source)
            return None
        return self.pipeline.load_document_file(source)

    def _tasks(
        self,
        documents: list[Document],
        tag_index: dict[str, list[Document]],
    ) -> dict[str, Callable[[], list[Path]]]:
        assembler = self.assembler

        def about() -> list[OutputPage]:
            page = assembler.about_page(self.load_about())
            return [page] if page is not None else []

        producers: dict[str, Callable[[], list[OutputPage]]] = {
            "listing": lambda: assembler.listing_pages(documents),
            "documents": lambda: assembler.document_pages(documents),
            "tags": lambda: assembler.tag_pages(tag_index),
            "tags-index": lambda: [assembler.tag_index_page(tag_index)],
            "about": about,
            "sitemap": lambda: [assembler.sitemap(documents, tag_index)],
        }
        tasks = {name: self._writer(produce) for name, produce in producers.items()}
        tasks["assets"] = AssetCopier(self.config.paths.static_dir, self.output_dir).run
        return tasks

    def _writer(self, produce: Callable[[], list[OutputPage]]) -> Callable[[], list[Path]]:
        def run() -> list[Path]:
            return [write_output(self.output_dir, page) for page in produce()]

        return run


def build_site(
    config_path: Path | str = DEFAULT_CONFIG_PATH,
    output_dir: Path | str | None = None,
    verbose: bool = False,
    debug: bool = False,
    max_workers: int | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        config_path: Path to the configuration file.
        output_dir: Optional output directory overriding ``paths.output_dir``.
        verbose: Log build progress at INFO level.
        debug: Log resolved paths and their existence before building.
        max_workers: Optional thread pool size for the page-type tasks.

    Returns:
        BuildResult describing what was written and which page types failed.

    Raises:
        BuildError: If the configuration is invalid, or the content or output
            directory is unusable.
    """
    try:
        config = load_config(config_path, output_dir)
    except ConfigError as exc:
        if output_dir is not None:
            _write_fallback_error_page(Path(output_dir))
        raise BuildError("config", str(exc), exc) from exc

    if debug:
        _log_paths(config)
    builder = SiteBuilder(config, max_workers=max_workers, verbose=verbose)
    result = builder.build()
    if result.failed:
        logger.warning("Build finished with failures: %s", ", ".join(result.failed))
    return result


def _write_fallback_error_page(output_dir: Path) -> None:
    """Write a 404 page using default settings and templates."""
    config = config_from_mapping({}, Path.cwd(), output_dir=output_dir)
    builder = SiteBuilder(config)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("Cannot create output directory %s: %s", output_dir, exc)
        return
    builder.write_error_page()


def _log_paths(config: Config) -> None:
    paths = config.paths
    logger.debug("Configuration file: %s", config.source_path)
    for name in ("content_dir", "posts_dir", "about_dir", "templates_dir", "static_dir", "output_dir"):
        path = getattr(paths, name)
        logger.debug("%s: %s (exists: %s)", name, path, path.exists())
