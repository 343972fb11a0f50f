"""Metadata extraction for Inkwell.

Documents start with an optional YAML frontmatter block between ``---``
markers. A block that fails to parse is treated as absent: the whole text
becomes the body and a warning is logged.

Key functions:
- extract_frontmatter: Split frontmatter metadata from body text.
- coerce_date: Normalize frontmatter date values to ``datetime.date``.
- coerce_tags: Normalize frontmatter tag values to an ordered tuple.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any

import yaml

logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r"^---[ \t]*\n(?:(.*?)\n)?---[ \t]*(?:\n|$)", re.DOTALL)


def extract_frontmatter(text: str, source: str = "<string>") -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter from content.

    Args:
        text: Raw file content.
        source: Identifier used in log messages.

    Returns:
        Tuple of (frontmatter dict, remaining content).
    """
    normalized = text.lstrip("\ufeff").replace("\r\n", "\n")
    match = FRONTMATTER_RE.match(normalized)
    if not match:
        return {}, normalized
    try:
        data = yaml.safe_load(match.group(1) or "") or {}
    except yaml.YAMLError as exc:
        logger.warning("Invalid frontmatter in %s, treating it as body text: %s", source, exc)
        return {}, normalized
    if not isinstance(data, dict):
        logger.warning("Frontmatter in %s is not a mapping, treating it as body text", source)
        return {}, normalized
    return data, normalized[match.end() :]


def coerce_date(value: Any) -> date | None:
    """Convert a frontmatter date value to a calendar date.

    Args:
        value: A ``date``/``datetime`` (as produced by YAML) or an ISO string.

    Returns:
        The calendar date, or None if the value is empty or unparseable.

    Examples:
        >>> coerce_date("2024-01-15")
        datetime.date(2024, 1, 15)

        >>> coerce_date("next tuesday") is None
        True
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def coerce_tags(value: Any) -> tuple[str, ...]:
    """Normalize a frontmatter ``tags`` value.

    Accepts a list or a comma-separated string. Order is kept and repeats
    within the same document are dropped.

    Examples:
        >>> coerce_tags(["python", "web", "python"])
        ('python', 'web')

        >>> coerce_tags("python, web")
        ('python', 'web')
    """
    if value is None:
        return ()
    if isinstance(value, str):
        candidates: list[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        candidates = list(value)
    else:
        candidates = [value]
    seen: list[str] = []
    for candidate in candidates:
        if candidate is None:
            continue
        tag = str(candidate).strip()
        if tag and tag not in seen:
            seen.append(tag)
    return tuple(seen)
