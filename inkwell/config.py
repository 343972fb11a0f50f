"""Configuration loading for Inkwell.

The blog configuration lives in a YAML file (``blog/config.yaml`` by default;
JSON files work too since JSON is valid YAML). User values are deep-merged
over ``DEFAULT_CONFIG``, relative paths are resolved against the directory of
the configuration file, and the result is validated and frozen into a
``Config`` object that is passed explicitly to every component.

Key functions:
- load_config: Load, merge, resolve and validate a configuration file.
- config_from_mapping: Build a Config from an in-memory mapping.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("blog") / "config.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "site": {
        "title": "Markdown Blog",
        "description": "A static blog built with Inkwell",
        "language": "en",
        "url": "",
        "copyright": "",
    },
    "navigation": [
        {"label": "Home", "url": "/"},
        {"label": "Tags", "url": "/tags/"},
        {"label": "About", "url": "/about/"},
    ],
    "social": {"links": []},
    "appearance": {},
    "content": {
        "posts_per_page": 10,
        "show_reading_time": True,
        "default_author": "",
        "words_per_minute": 200,
        "min_reading_minutes": 1,
        "date_format": "%B %d, %Y",
    },
    "paths": {
        "content_dir": "content",
        "templates_dir": "templates",
        "static_dir": ".",
        "output_dir": "../dist",
    },
    "cache_templates": True,
    "cache_rendering": True,
}


@dataclass(frozen=True)
class SiteSettings:
    title: str
    description: str
    language: str
    url: str
    copyright: str


@dataclass(frozen=True)
class NavItem:
    label: str
    url: str


@dataclass(frozen=True)
class SocialLink:
    platform: str
    url: str


@dataclass(frozen=True)
class ContentSettings:
    posts_per_page: int
    show_reading_time: bool
    default_author: str
    words_per_minute: int
    min_reading_minutes: int
    date_format: str


@dataclass(frozen=True)
class PathSettings:
    """Absolute paths used by a build."""

    content_dir: Path
    posts_dir: Path
    about_dir: Path
    templates_dir: Path
    static_dir: Path
    output_dir: Path


@dataclass(frozen=True)
class Config:
    """Resolved, read-only configuration for one build.

    Attributes:
        site: Site metadata (title, description, language, url, copyright).
        content: Content settings (pagination, reading time, authoring).
        paths: Resolved absolute directories.
        navigation: Header navigation items.
        social: Footer social links.
        appearance: Free-form appearance tokens exposed to templates.
        cache_templates: Whether template text is memoized.
        cache_rendering: Whether rendered Markdown is memoized.
        source_path: Configuration file the values came from, if any.
    """

    site: SiteSettings
    content: ContentSettings
    paths: PathSettings
    navigation: tuple[NavItem, ...] = ()
    social: tuple[SocialLink, ...] = ()
    appearance: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    cache_templates: bool = True
    cache_rendering: bool = True
    source_path: Path | None = None


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``.

    Nested mappings are merged key by key; every other value, lists
    included, replaces the base value outright.

    Examples:
        >>> deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}})
        {'a': {'b': 1, 'c': 3}}
    """
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(
    config_path: Path | str = DEFAULT_CONFIG_PATH,
    output_dir: Path | str | None = None,
) -> Config:
    """Load site configuration from a YAML (or JSON) file.

    A missing file is not fatal: a warning is logged and the defaults are
    used, with paths resolved relative to where the file would have been.

    Args:
        config_path: Path to the configuration file.
        output_dir: Optional output directory override, resolved against the
            current working directory.

    Returns:
        Resolved Config.

    Raises:
        ConfigError: If the file cannot be read or parsed, or fails validation.
    """
    path = Path(config_path).expanduser().resolve()
    raw: Any = {}
    if path.exists():
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(path, f"cannot read configuration ({exc})") from exc
        try:
            raw = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(path, f"invalid configuration syntax ({exc})") from exc
        if not isinstance(raw, Mapping):
            raise ConfigError(path, "configuration root must be a mapping")
    else:
        logger.warning("Could not load config from %s; using default configuration", path)
    return config_from_mapping(raw, path.parent, output_dir=output_dir, source_path=path)


def config_from_mapping(
    raw: Mapping[str, Any],
    base_dir: Path,
    output_dir: Path | str | None = None,
    source_path: Path | None = None,
) -> Config:
    """Build a Config from a mapping of user settings.

    Args:
        raw: User settings, merged over ``DEFAULT_CONFIG``.
        base_dir: Directory that relative paths are resolved against.
        output_dir: Optional output directory override.
        source_path: Configuration file the settings came from.

    Returns:
        Resolved Config.

    Raises:
        ConfigError: If the merged settings fail validation.
    """
    merged = deep_merge(DEFAULT_CONFIG, raw)
    problems = validate_config(merged)
    if problems:
        for problem in problems:
            logger.error("Configuration problem: %s", problem)
        raise ConfigError(source_path, "invalid configuration", problems)

    site = merged["site"]
    content = merged["content"]
    paths = merged["paths"]
    base_dir = Path(base_dir).resolve()
    content_dir = _resolve(base_dir, paths["content_dir"])
    if output_dir is not None:
        resolved_output = Path(output_dir).expanduser().resolve()
    else:
        resolved_output = _resolve(base_dir, paths["output_dir"])

    return Config(
        site=SiteSettings(
            title=str(site["title"]),
            description=str(site.get("description") or ""),
            language=str(site.get("language") or "en"),
            url=str(site.get("url") or "").rstrip("/"),
            copyright=str(site.get("copyright") or ""),
        ),
        content=ContentSettings(
            posts_per_page=content["posts_per_page"],
            show_reading_time=content["show_reading_time"],
            default_author=str(content.get("default_author") or ""),
            words_per_minute=content["words_per_minute"],
            min_reading_minutes=content["min_reading_minutes"],
            date_format=str(content["date_format"]),
        ),
        paths=PathSettings(
            content_dir=content_dir,
            posts_dir=content_dir / "posts",
            about_dir=content_dir / "about",
            templates_dir=_resolve(base_dir, paths["templates_dir"]),
            static_dir=_resolve(base_dir, paths["static_dir"]),
            output_dir=resolved_output,
        ),
        navigation=tuple(
            NavItem(label=str(item["label"]), url=str(item["url"]))
            for item in merged["navigation"]
        ),
        social=tuple(
            SocialLink(platform=str(link["platform"]), url=str(link["url"]))
            for link in merged["social"].get("links") or []
        ),
        appearance=MappingProxyType(dict(merged["appearance"])),
        cache_templates=bool(merged["cache_templates"]),
        cache_rendering=bool(merged["cache_rendering"]),
        source_path=source_path,
    )


def validate_config(config: Mapping[str, Any]) -> list[str]:
    """Validate merged settings.

    Args:
        config: Settings merged over the defaults.

    Returns:
        List of problems; empty when the settings are valid.
    """
    problems: list[str] = []
    for section in ("site", "content", "paths", "social", "appearance"):
        if not isinstance(config.get(section), Mapping):
            problems.append(f"{section} must be a mapping")
    if problems:
        return problems

    site = config["site"]
    if not isinstance(site.get("title"), str) or not site["title"].strip():
        problems.append("site.title is required")

    content = config["content"]
    _check_int(problems, content, "posts_per_page", minimum=1)
    _check_int(problems, content, "words_per_minute", minimum=1)
    _check_int(problems, content, "min_reading_minutes", minimum=0)
    if not isinstance(content.get("show_reading_time"), bool):
        problems.append("content.show_reading_time must be true or false")
    if not isinstance(content.get("date_format"), str):
        problems.append("content.date_format must be a string")

    for key in ("content_dir", "templates_dir", "static_dir", "output_dir"):
        if not isinstance(config["paths"].get(key), str):
            problems.append(f"paths.{key} must be a string")

    navigation = config.get("navigation")
    if not isinstance(navigation, list) or not all(
        isinstance(item, Mapping) and "label" in item and "url" in item
        for item in navigation
    ):
        problems.append("navigation must be a list of {label, url} items")

    links = config["social"].get("links") or []
    if not isinstance(links, list) or not all(
        isinstance(link, Mapping) and "platform" in link and "url" in link
        for link in links
    ):
        problems.append("social.links must be a list of {platform, url} items")
    return problems


def _check_int(problems: list[str], section: Mapping[str, Any], key: str, minimum: int) -> None:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        problems.append(f"content.{key} must be an integer")
    elif value < minimum:
        problems.append(f"content.{key} should be at least {minimum}")


def _resolve(base_dir: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()
