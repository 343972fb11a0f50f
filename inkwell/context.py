"""Template context values and dot-path resolution.

A template context is a nested mapping whose leaves are one of three kinds:

- Scalar: strings, numbers, booleans, ``None`` and any other plain object.
- Container: mappings and sequences (lists and tuples), traversable by path.
- Lazy: a ``LazyValue`` wrapping a zero-argument producer, invoked on use.

Only ``LazyValue`` instances are ever called; plain callables are scalars.
Lookups that cannot be satisfied return the ``MISSING`` sentinel rather than
raising, and directive evaluation treats it as falsy and empty.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class _Missing:
    """Sentinel for a path that did not resolve."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


@dataclass(frozen=True)
class LazyValue:
    """A context value computed on demand by a zero-argument producer."""

    producer: Callable[[], Any]

    def __call__(self) -> Any:
        return self.producer()


class ValueKind(Enum):
    MISSING = "missing"
    SCALAR = "scalar"
    CONTAINER = "container"
    LAZY = "lazy"


def lazy(producer: Callable[[], Any]) -> LazyValue:
    """Wrap ``producer`` so templates invoke it when substituted."""
    return LazyValue(producer)


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def classify(value: Any) -> ValueKind:
    """Return the kind of a context value."""
    if value is MISSING:
        return ValueKind.MISSING
    if isinstance(value, LazyValue):
        return ValueKind.LAZY
    if isinstance(value, Mapping) or is_sequence(value):
        return ValueKind.CONTAINER
    return ValueKind.SCALAR


def force(value: Any) -> Any:
    """Invoke lazy values, returning anything else unchanged."""
    while isinstance(value, LazyValue):
        value = value()
    return value


def resolve_path(context: Any, path: str) -> Any:
    """Resolve a dot-delimited path against a context.

    Mapping segments are looked up by key, sequence segments by integer
    index; ``length`` on a sequence yields its size. Lazy values met in the
    middle of a path are invoked so they can produce containers.

    Args:
        context: Mapping (or sequence) to traverse.
        path: Dot-delimited path such as ``site.title`` or ``posts.0.url``.

    Returns:
        The resolved value, or ``MISSING`` if any segment is absent or the
        traversal hits a non-container.

    Examples:
        >>> resolve_path({"site": {"title": "Notes"}}, "site.title")
        'Notes'

        >>> resolve_path({"site": {}}, "site.title.length")
        MISSING
    """
    path = path.strip()
    if not path:
        return MISSING
    current = context
    for segment in path.split("."):
        current = force(current)
        if isinstance(current, Mapping):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif is_sequence(current):
            if segment == "length":
                current = len(current)
            elif segment.isdigit() and int(segment) < len(current):
                current = current[int(segment)]
            else:
                return MISSING
        else:
            return MISSING
    return current


def is_truthy(value: Any) -> bool:
    """Truthiness used by ``{{#if}}``; missing values and empty containers are false."""
    return bool(force(value))


def to_text(value: Any) -> str:
    """Stringify a context value for substitution into template output.

    Examples:
        >>> to_text(True)
        'true'

        >>> to_text(lazy(lambda: 3))
        '3'
    """
    kind = classify(value)
    if kind is ValueKind.MISSING:
        return ""
    if kind is ValueKind.LAZY:
        return to_text(force(value))
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
