"""Structured payload parsing and tree rendering.

Payloads (usually tool results) are parsed once into a small tagged tree of
``ScalarNode``/``ObjectNode``/``ArrayNode`` values. Parsing is lossless:
object members keep their declaration order and long arrays keep every item.
Deciding which array items to show happens only while rendering, so the same
tree serves verbose and compact views.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any, Union

from .exceptions import PayloadParseError
from .text import display_width, truncate_with_ellipsis

TREE_EDGE = "├─"
TREE_LAST = "└─"
TREE_VERT = "│ "
TREE_SPACE = "  "

ARRAY_TRUNCATE_THRESHOLD = 6
ARRAY_SHOW_FIRST = 3
ARRAY_SHOW_LAST = 3

EMPTY_LABEL = "(empty)"
# Scalars are never squeezed below this many columns.
MIN_VALUE_WIDTH = 10

# Containers nested deeper than this are not drawn as a tree.
MAX_PAYLOAD_DEPTH = 64

TOOL_CALL_ID_PREFIX = "call_"

Scalar = Union[str, int, float, bool, None]


@dataclass(frozen=True)
class ScalarNode:
    """A string, number, boolean or null leaf."""

    value: Scalar

    @property
    def literal(self) -> str:
        """Return the value formatted as a JSON literal."""
        return json.dumps(self.value, ensure_ascii=False)


@dataclass(frozen=True)
class ObjectNode:
    """An object whose members keep their declaration order."""

    members: tuple[tuple[str, PayloadNode], ...]

    @property
    def is_empty(self) -> bool:
        return not self.members


@dataclass(frozen=True)
class ArrayNode:
    """An ordered sequence of values."""

    items: tuple[PayloadNode, ...]

    @property
    def is_empty(self) -> bool:
        return not self.items

    def visible(self, verbose: bool) -> tuple[list[int], int]:
        """Return the indices to draw and how many items are hidden.

        Compact rendering keeps the head and tail of arrays longer than
        ``ARRAY_TRUNCATE_THRESHOLD``; verbose rendering keeps everything.
        """
        count = len(self.items)
        if verbose or count <= ARRAY_TRUNCATE_THRESHOLD:
            return list(range(count)), 0
        head = list(range(ARRAY_SHOW_FIRST))
        tail = list(range(count - ARRAY_SHOW_LAST, count))
        return head + tail, count - len(head) - len(tail)


PayloadNode = Union[ScalarNode, ObjectNode, ArrayNode]


class _Members(list):
    """Marker type so parsed objects can be told apart from arrays."""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _to_node(value: Any, depth: int = 0) -> PayloadNode:
    if isinstance(value, list) and depth >= MAX_PAYLOAD_DEPTH:
        raise PayloadParseError(
            f"structured payload nested deeper than {MAX_PAYLOAD_DEPTH} levels"
        )
    if isinstance(value, _Members):
        return ObjectNode(tuple((key, _to_node(item, depth + 1)) for key, item in value))
    if isinstance(value, list):
        return ArrayNode(tuple(_to_node(item, depth + 1) for item in value))
    return ScalarNode(value)


def parse_payload(raw: str) -> PayloadNode:
    """Parse *raw* into a payload tree, raising ``PayloadParseError`` when malformed."""
    try:
        decoded = json.loads(
            raw, object_pairs_hook=_Members, parse_constant=_reject_constant
        )
    except (TypeError, ValueError, RecursionError) as exc:
        raise PayloadParseError(f"invalid structured payload: {exc}") from exc
    return _to_node(decoded)


def strip_tool_call_id(content: str) -> str:
    """Drop a leading ``call_<id>:`` marker from a stored tool result."""
    stripped = content.strip()
    if stripped.startswith(TOOL_CALL_ID_PREFIX):
        separator = stripped.find(":")
        if separator > 0:
            return stripped[separator + 1 :].strip()
    return stripped


def looks_like_payload(content: str) -> bool:
    """Cheap check for content that is worth trying to parse as a payload."""
    candidate = strip_tool_call_id(content)
    return (candidate.startswith("{") and candidate.endswith("}")) or (
        candidate.startswith("[") and candidate.endswith("]")
    )


def render_tree(raw: str, verbose: bool = False, max_width: int = 0) -> list[str]:
    """Parse *raw* and render it as tree lines.

    ``PayloadParseError`` propagates so callers can fall back to plain text.
    ``max_width`` of 0 or less disables scalar truncation.
    """
    return render_node(parse_payload(raw), verbose, max_width)


def render_node(node: PayloadNode, verbose: bool = False, max_width: int = 0) -> list[str]:
    """Render an already parsed payload tree."""
    lines: list[str] = []
    if isinstance(node, ScalarNode):
        lines.append(_fit_literal(node.literal, "", max_width))
    else:
        _render_children(node, "", verbose, max_width, lines)
    return lines


def _fit_literal(literal: str, head: str, max_width: int) -> str:
    if max_width <= 0:
        return literal
    available = max(max_width - display_width(head), MIN_VALUE_WIDTH)
    return truncate_with_ellipsis(literal, available)


def _child_rows(
    node: ObjectNode | ArrayNode, verbose: bool
) -> list[tuple[str, PayloadNode | None]]:
    """Return ``(label, child)`` rows; a ``None`` child is a summary row."""
    if isinstance(node, ObjectNode):
        return [(f"{json.dumps(key, ensure_ascii=False)}: ", child) for key, child in node.members]

    indices, hidden = node.visible(verbose)
    rows: list[tuple[str, PayloadNode | None]] = []
    for position, index in enumerate(indices):
        if hidden and position == ARRAY_SHOW_FIRST:
            rows.append((f"[{hidden} more]", None))
        rows.append((f"[{index}] ", node.items[index]))
    return rows


def _render_children(
    node: ObjectNode | ArrayNode,
    prefix: str,
    verbose: bool,
    max_width: int,
    lines: list[str],
) -> None:
    rows = _child_rows(node, verbose)
    for position, (label, child) in enumerate(rows):
        is_last = position == len(rows) - 1
        head = prefix + (TREE_LAST if is_last else TREE_EDGE) + label
        if child is None:
            lines.append(head)
        elif isinstance(child, ScalarNode):
            lines.append(head + _fit_literal(child.literal, head, max_width))
        elif child.is_empty:
            lines.append(head + EMPTY_LABEL)
        else:
            lines.append(head.rstrip())
            child_prefix = prefix + (TREE_SPACE if is_last else TREE_VERT)
            _render_children(child, child_prefix, verbose, max_width, lines)
