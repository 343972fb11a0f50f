"""Exception types raised by Inkwell.

Only conditions with no safe default are raised as exceptions. Content,
page-assembly and template problems are logged and skipped instead.
"""

from __future__ import annotations

from pathlib import Path


class InkwellError(Exception):
    """Base class for all Inkwell errors."""


class ConfigError(InkwellError):
    """Configuration could not be loaded or failed validation.

    Attributes:
        config_path: Path of the configuration file involved.
        problems: Individual validation messages, if any.
    """

    def __init__(self, config_path: Path | None, message: str, problems: list[str] | None = None):
        self.config_path = config_path
        self.message = message
        self.problems = list(problems or [])
        detail = message
        if self.problems:
            detail += ": " + "; ".join(self.problems)
        super().__init__(f"{config_path}: {detail}" if config_path else detail)


class ContentSourceError(InkwellError):
    """The content source directory exists but cannot be read."""

    def __init__(self, source_dir: Path, message: str):
        self.source_dir = source_dir
        self.message = message
        super().__init__(f"{source_dir}: {message}")


class BuildError(InkwellError):
    """Fatal error during a site build.

    Attributes:
        stage: Build stage that failed (e.g. 'config', 'content').
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        stage: str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.stage = stage
        self.message = message
        self.original_error = original_error
        super().__init__(f"[{stage}] {message}")
