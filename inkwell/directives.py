"""Directive template language.

Templates are HTML text with three kinds of directives:

- ``{{#each path}} ... {{/each}}`` repeats its body for every element of a
  sequence. Each element is rendered against a child context holding the
  element's fields (or ``this`` for scalar elements), ``_index`` and
  ``_parent``.
- ``{{#if condition}} ... {{else}} ... {{/if}}`` renders one branch. A bare
  path is a truthiness test; ``left op right`` compares with ``==``, ``===``,
  ``!=`` or ``!==``.
- ``{{path}}`` substitutes a value from the context.

Blocks are matched by a two-pass scanner: closers are paired with openers by
per-keyword nesting depth, then the tree is built from the matched ranges.
Nested blocks of the same kind therefore pair correctly. Malformed markup
never raises; unmatched openers, closers and ``{{else}}`` tags are emitted as
literal text. Substituted values are never rescanned for directives.

Key functions:
    parse_template: Parse template text into a ``Template``.
    render_template: Parse and render in one step.
    evaluate_condition: Evaluate an ``{{#if}}`` condition against a context.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .context import MISSING, force, is_sequence, is_truthy, resolve_path, to_text

TAG_RE = re.compile(r"\{\{([^{}]*)\}\}")

_OPEN_RE = re.compile(r"^#(each|if)\s+(.+)$", re.DOTALL)
_CLOSE_RE = re.compile(r"^/(each|if)$")


def _loose_equal(left: Any, right: Any) -> bool:
    return to_text(left) == to_text(right)


def _strict_equal(left: Any, right: Any) -> bool:
    return type(left) is type(right) and left == right


_COMPARATORS = {
    "==": _loose_equal,
    "===": _strict_equal,
    "!=": lambda left, right: not _loose_equal(left, right),
    "!==": lambda left, right: not _strict_equal(left, right),
}


@dataclass(frozen=True)
class _Token:
    kind: str  # "text" | "var" | "open" | "close" | "else"
    raw: str
    keyword: str = ""
    argument: str = ""


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Variable:
    path: str


@dataclass(frozen=True)
class EachBlock:
    path: str
    body: tuple[Node, ...]


@dataclass(frozen=True)
class IfBlock:
    condition: str
    then_branch: tuple[Node, ...]
    else_branch: tuple[Node, ...] = ()


Node = Union[Text, Variable, EachBlock, IfBlock]


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    position = 0
    for match in TAG_RE.finditer(text):
        if match.start() > position:
            tokens.append(_Token("text", text[position : match.start()]))
        tokens.append(_classify_tag(match.group(0), match.group(1).strip()))
        position = match.end()
    if position < len(text):
        tokens.append(_Token("text", text[position:]))
    return tokens


def _classify_tag(raw: str, inner: str) -> _Token:
    opener = _OPEN_RE.match(inner)
    if opener:
        return _Token("open", raw, opener.group(1), opener.group(2).strip())
    closer = _CLOSE_RE.match(inner)
    if closer:
        return _Token("close", raw, closer.group(1))
    if inner == "else":
        return _Token("else", raw)
    if not inner or inner[0] in "#/":
        return _Token("text", raw)
    return _Token("var", raw, argument=inner)


def _match_blocks(tokens: list[_Token]) -> dict[int, int]:
    """Pair opener indexes with closer indexes, tracking depth per keyword."""
    stacks: dict[str, list[int]] = {"each": [], "if": []}
    pairs: dict[int, int] = {}
    for index, token in enumerate(tokens):
        if token.kind == "open":
            stacks[token.keyword].append(index)
        elif token.kind == "close" and stacks[token.keyword]:
            pairs[stacks[token.keyword].pop()] = index
    return pairs


class _TreeBuilder:
    def __init__(self, tokens: list[_Token]):
        self.tokens = tokens
        self.pairs = _match_blocks(tokens)

    def build(self, start: int, stop: int) -> tuple[Node, ...]:
        nodes: list[Node] = []
        index = start
        while index < stop:
            token = self.tokens[index]
            end = self.pairs.get(index)
            if token.kind == "open" and end is not None and end < stop:
                nodes.append(self._block(token, index, end))
                index = end + 1
                continue
            if token.kind == "var":
                nodes.append(Variable(token.argument))
            else:
                nodes.append(Text(token.raw))
            index += 1
        return tuple(_merge_text(nodes))

    def _block(self, token: _Token, start: int, end: int) -> Node:
        if token.keyword == "each":
            return EachBlock(token.argument, self.build(start + 1, end))
        split = self._find_else(start + 1, end)
        if split is None:
            return IfBlock(token.argument, self.build(start + 1, end))
        return IfBlock(
            token.argument,
            self.build(start + 1, split),
            self.build(split + 1, end),
        )

    def _find_else(self, start: int, stop: int) -> int | None:
        """Find the first ``{{else}}`` not nested inside another block."""
        index = start
        while index < stop:
            token = self.tokens[index]
            if token.kind == "else":
                return index
            end = self.pairs.get(index)
            if token.kind == "open" and end is not None and end < stop:
                index = end + 1
            else:
                index += 1
        return None


def _merge_text(nodes: list[Node]) -> list[Node]:
    merged: list[Node] = []
    for node in nodes:
        if isinstance(node, Text) and merged and isinstance(merged[-1], Text):
            merged[-1] = Text(merged[-1].value + node.value)
        else:
            merged.append(node)
    return merged


@dataclass(frozen=True)
class Template:
    """A parsed template, reusable across contexts."""

    source: str
    nodes: tuple[Node, ...] = field(repr=False)

    def render(self, context: Mapping[str, Any]) -> str:
        return _render_nodes(self.nodes, context)


def parse_template(text: str) -> Template:
    """Parse template text into a reusable ``Template``.

    Args:
        text: Template source.

    Returns:
        Parsed template. Parsing never fails; malformed directives are kept
        as literal text.
    """
    tokens = _tokenize(text or "")
    return Template(text or "", _TreeBuilder(tokens).build(0, len(tokens)))


def render_template(text: str, context: Mapping[str, Any]) -> str:
    """Render template text against a context.

    Args:
        text: Template source.
        context: Mapping of values available to the template.

    Returns:
        Rendered string.

    Examples:
        >>> render_template("{{#each xs}}{{v}}{{/each}}", {"xs": [{"v": "a"}, {"v": "b"}]})
        'ab'
    """
    if not text:
        return ""
    return parse_template(text).render(context)


def child_context(item: Any, parent: Mapping[str, Any], index: int) -> dict[str, Any]:
    """Build the context layer for one element of an ``{{#each}}`` block."""
    item = force(item)
    layer: dict[str, Any] = {"this": item}
    if isinstance(item, Mapping):
        layer.update(item)
    layer["_parent"] = parent
    layer["_index"] = index
    return layer


def evaluate_condition(condition: str, context: Mapping[str, Any]) -> bool:
    """Evaluate an ``{{#if}}`` condition.

    Args:
        condition: Either a single path or ``left operator right``.
        context: Context to resolve paths against.

    Returns:
        Result of the test; malformed conditions evaluate to False.
    """
    parts = condition.split()
    if len(parts) == 1:
        return is_truthy(resolve_path(context, parts[0]))
    if len(parts) != 3 or parts[1] not in _COMPARATORS:
        return False
    left, op, right = parts
    return _COMPARATORS[op](_operand(left, context), _operand(right, context))


def _operand(token: str, context: Mapping[str, Any]) -> Any:
    value = force(resolve_path(context, token))
    if value is MISSING or value is None:
        if len(token) >= 2 and token[0] == token[-1] and token[0] in "\"'":
            return token[1:-1]
        return token
    return value


def _render_nodes(nodes: tuple[Node, ...], context: Mapping[str, Any]) -> str:
    return "".join(_render_node(node, context) for node in nodes)


def _render_node(node: Node, context: Mapping[str, Any]) -> str:
    if isinstance(node, Text):
        return node.value
    if isinstance(node, Variable):
        return to_text(resolve_path(context, node.path))
    if isinstance(node, EachBlock):
        items = force(resolve_path(context, node.path))
        if not is_sequence(items) or not items:
            return ""
        return "".join(
            _render_nodes(node.body, child_context(item, context, index))
            for index, item in enumerate(items)
        )
    if evaluate_condition(node.condition, context):
        return _render_nodes(node.then_branch, context)
    return _render_nodes(node.else_branch, context)
