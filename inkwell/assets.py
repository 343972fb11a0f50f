"""Static asset copying for Inkwell.

Static files are copied verbatim from the project's static directory into
the output directory:

- the ``css``, ``js`` and ``images`` folders, recursively;
- a fixed set of root files (``favicon.ico``, ``.nojekyll``, ``_redirects``,
  ``.htaccess``) when present.

The built-in stylesheet is copied first so that the default templates are
styled; a project ``css/style.css`` replaces it.

Key class:
- AssetCopier: Copies static assets and reports the files it wrote.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_STATIC_DIR = Path(__file__).parent / "static"
ASSET_DIRS = ("css", "js", "images")
ROOT_FILES = ("favicon.ico", ".nojekyll", "_redirects", ".htaccess")


class AssetCopier:
    """Copies static assets into the output directory.

    Attributes:
        static_dir: Project directory holding ``css/``, ``js/``, ``images/``.
        output_dir: Build output directory.
        defaults_dir: Directory of built-in assets.
    """

    def __init__(self, static_dir: Path, output_dir: Path, defaults_dir: Path = DEFAULT_STATIC_DIR):
        self.static_dir = static_dir
        self.output_dir = output_dir
        self.defaults_dir = defaults_dir

    def run(self) -> list[Path]:
        """Copy default and project assets.

        Returns:
            Paths written, in copy order. A file present in both the defaults
            and the project appears twice.

        Raises:
            OSError: If a file cannot be copied.
        """
        written = self._copy_dirs(self.defaults_dir)
        if self.static_dir.resolve() == self.output_dir.resolve():
            logger.warning("Static directory is the output directory; skipping asset copy")
            return written
        written.extend(self._copy_dirs(self.static_dir))
        for name in ROOT_FILES:
            source = self.static_dir / name
            if source.is_file():
                written.append(self._copy_file(source, self.output_dir / name))
        logger.info("Copied %d static files", len(written))
        return written

    def _copy_dirs(self, root: Path) -> list[Path]:
        written = []
        for folder in ASSET_DIRS:
            source_dir = root / folder
            if not source_dir.is_dir():
                continue
            for item in sorted(source_dir.rglob("*")):
                if item.is_dir():
                    continue
                rel = item.relative_to(root)
                written.append(self._copy_file(item, self.output_dir / rel))
        return written

    @staticmethod
    def _copy_file(source: Path, dest: Path) -> Path:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, dest)
        logger.debug("Copied %s -> %s", source, dest)
        return dest
