"""Conversation log entries and their line layout.

``format_entry`` is the layout contract used everywhere a conversation is
drawn: it turns one entry into plain text lines that fit a column budget.
``render_entry`` produces the same lines as styled ``rich.text.Text`` using
an explicit :class:`~zoea_tui.theme.Theme`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import logging
from typing import TYPE_CHECKING, NamedTuple, Protocol

from rich.text import Text

from .exceptions import PayloadParseError
from .payload import (
    ArrayNode,
    ObjectNode,
    ScalarNode,
    looks_like_payload,
    parse_payload,
    render_node,
    render_tree,
    strip_tool_call_id,
)
from .text import display_width, truncate_with_ellipsis, wrap_text

if TYPE_CHECKING:
    from .theme import Theme

LOGGER = logging.getLogger(__name__)

MIN_CONTENT_WIDTH = 20
MAX_SENDER_LABEL_WIDTH = 12
REASONING_HEADER = "REASONING:"

TOOL_CALLS_PREFIX = "[TOOL_CALLS]"
TOOL_CALL_RECORD_DELIMITER = "|"
TOOL_CALL_FIELD_DELIMITER = ":"
TOOL_CALL_FIELD_COUNT = 3


class Role(str, Enum):
    """Author role of a conversation entry."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"
    UNKNOWN = "unknown"


class Source(str, Enum):
    """Where a conversation entry came from."""

    DIRECT = "direct"
    BROADCAST = "broadcast"
    BROADCAST_SELF = "broadcast_self"
    SYSTEM = "system"
    LLM = "llm"
    TOOL = "tool"
    LEGACY = "legacy"


ROLE_PREFIXES: dict[Role, str] = {
    Role.USER: "YOU:",
    Role.ASSISTANT: "AI:",
    Role.SYSTEM: "SYS:",
    Role.TOOL: "TOOL:",
}
UNKNOWN_PREFIX = "???:"
SELF_BROADCAST_PREFIX = "YOU (BROADCAST):"
SWARM_PREFIX = "SWARM:"


class MemoryRecord(Protocol):
    """Stored conversation item as handed over by the memory layer."""

    role: str
    source: str
    sender_id: str
    content: str
    created_at: datetime | None
    reasoning: str | None


def _coerce_role(value: str) -> Role:
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        return Role.UNKNOWN


def _coerce_source(value: str) -> Source:
    try:
        return Source(str(value).strip().lower())
    except ValueError:
        return Source.LEGACY


@dataclass(frozen=True)
class LogEntry:
    """One conversation item ready for display."""

    role: Role
    source: Source
    sender_id: str
    content: str
    reasoning: str | None = None
    timestamp: datetime | None = None
    sender_name: str = ""

    @classmethod
    def from_memory(
        cls,
        record: MemoryRecord,
        current_mysis_id: str,
        sender_name: str = "",
    ) -> LogEntry:
        """Map a stored memory onto an entry as seen by ``current_mysis_id``."""
        source = _coerce_source(record.source)
        sender_id = record.sender_id or ""
        if source is Source.BROADCAST and sender_id and sender_id == current_mysis_id:
            source = Source.BROADCAST_SELF
        return cls(
            role=_coerce_role(record.role),
            source=source,
            sender_id=sender_id,
            content=record.content or "",
            reasoning=record.reasoning or None,
            timestamp=record.created_at,
            sender_name=sender_name,
        )


class ToolCall(NamedTuple):
    """One call parsed from a stored ``[TOOL_CALLS]`` record."""

    call_id: str
    name: str
    arguments: str


class EntryLine(NamedTuple):
    """A laid out line: the prefix or padding, the body, and what the body is."""

    lead: str
    body: str
    kind: str

    @property
    def text(self) -> str:
        return (self.lead + self.body).rstrip()


def format_tick_timestamp(tick: int, timestamp: datetime | None) -> str:
    """Format a tick number and wall clock time as ``T<tick> ⬡ [HH:MM]``."""
    if timestamp is None:
        return f"T{tick} ⬡ [--:--]"
    return f"T{tick} ⬡ [{timestamp.astimezone().strftime('%H:%M')}]"


def format_sender_label(sender_id: str, sender_name: str) -> str:
    """Short label for a broadcast sender, preferring its display name."""
    if sender_name:
        return truncate_with_ellipsis(sender_name, MAX_SENDER_LABEL_WIDTH)
    if not sender_id:
        return ""
    prefix = "id:"
    return prefix + truncate_with_ellipsis(
        sender_id, MAX_SENDER_LABEL_WIDTH - display_width(prefix)
    )


def entry_prefix(entry: LogEntry) -> str:
    """Return the role prefix shown on the first line of an entry."""
    if entry.source is Source.BROADCAST:
        if entry.sender_name:
            label = format_sender_label(entry.sender_id, entry.sender_name)
            return f"SWARM ({label}):"
        return SWARM_PREFIX
    if entry.role is Role.USER and entry.source is Source.BROADCAST_SELF:
        return SELF_BROADCAST_PREFIX
    return ROLE_PREFIXES.get(entry.role, UNKNOWN_PREFIX)


def content_width_for(prefix: str, max_width: int) -> int:
    """Columns left for the body once the prefix and gutter are taken."""
    return max(max_width - display_width(prefix) - 2, MIN_CONTENT_WIDTH)


def parse_tool_calls(content: str) -> list[ToolCall]:
    """Parse a ``[TOOL_CALLS]id:name:args|...`` record, skipping malformed parts."""
    stored = content[len(TOOL_CALLS_PREFIX) :] if content.startswith(TOOL_CALLS_PREFIX) else content
    calls: list[ToolCall] = []
    if not stored:
        return calls
    for record in stored.split(TOOL_CALL_RECORD_DELIMITER):
        fields = record.split(TOOL_CALL_FIELD_DELIMITER, TOOL_CALL_FIELD_COUNT - 1)
        if len(fields) < TOOL_CALL_FIELD_COUNT:
            LOGGER.debug("Skipping malformed tool call record %r", record)
            continue
        calls.append(ToolCall(*fields))
    return calls


def _format_arg_value(node: ScalarNode | ObjectNode | ArrayNode) -> str:
    if isinstance(node, ScalarNode):
        return node.literal
    if isinstance(node, ArrayNode):
        return "[...]"
    return "{...}"


def format_tool_args(arguments: str) -> str:
    """Inline ``key: value`` rendering of a tool call's JSON arguments."""
    if arguments.strip() in {"", "{}"}:
        return ""
    try:
        node = parse_payload(arguments)
    except PayloadParseError:
        return "..."
    if not isinstance(node, ObjectNode):
        return "..."
    return ", ".join(
        f"{key}: {_format_arg_value(value)}" for key, value in node.members
    )


def tool_call_lines(content: str, width: int, verbose: bool) -> list[tuple[str, str]]:
    """Lay out a stored tool call record as ``(kind, text)`` rows."""
    stored = content[len(TOOL_CALLS_PREFIX) :]
    if not stored:
        return [("tool", "⚠ Empty tool call record")]

    rows: list[tuple[str, str]] = [("tool", "⚡ Calling tools:")]
    for call in parse_tool_calls(content):
        if verbose and call.arguments.strip() not in {"", "{}"}:
            rows.append(("tool", truncate_with_ellipsis(f"  • {call.name}", width)))
            try:
                tree = render_tree(call.arguments, True, width - 4)
            except PayloadParseError:
                tree = [call.arguments]
            rows.extend(("content", "    " + line) for line in tree)
        else:
            line = f"  • {call.name}({format_tool_args(call.arguments)})"
            rows.append(("tool", truncate_with_ellipsis(line, width)))
    return rows


def _body_rows(entry: LogEntry, width: int, verbose: bool) -> list[tuple[str, str]]:
    content = entry.content
    if entry.role is Role.ASSISTANT and content.startswith(TOOL_CALLS_PREFIX):
        return tool_call_lines(content, width, verbose)
    if looks_like_payload(content):
        try:
            node = parse_payload(strip_tool_call_id(content))
        except PayloadParseError:
            LOGGER.debug("Content looked structured but did not parse; wrapping as text")
        else:
            return [("content", line) for line in render_node(node, verbose, width)]
    return [("content", line) for line in wrap_text(content, width)]


def layout_entry(
    entry: LogEntry,
    max_width: int,
    verbose: bool,
    *,
    current_tick: int | None = None,
) -> list[EntryLine]:
    """Lay out *entry* into prefixed, padded lines without styling."""
    prefix = entry_prefix(entry)
    if current_tick is not None:
        prefix = f"{format_tick_timestamp(current_tick, entry.timestamp)} {prefix}"
    width = content_width_for(prefix, max_width)
    padding = " " * (display_width(prefix) + 1)

    rows = _body_rows(entry, width, verbose) or [("content", "")]
    lines = [EntryLine(prefix + " ", rows[0][1], rows[0][0])]
    lines.extend(EntryLine(padding, body, kind) for kind, body in rows[1:])

    if entry.reasoning:
        lines.append(EntryLine("", "", "blank"))
        lines.append(EntryLine(padding, REASONING_HEADER, "reasoning_header"))
        lines.extend(
            EntryLine(padding, line, "reasoning")
            for line in wrap_text(entry.reasoning, width)
        )
    return lines


def format_entry(
    entry: LogEntry,
    max_width: int,
    verbose: bool = False,
    *,
    current_tick: int | None = None,
) -> list[str]:
    """Lay out *entry* as plain text lines fitting ``max_width`` columns."""
    return [line.text for line in layout_entry(entry, max_width, verbose, current_tick=current_tick)]


def render_entry(
    entry: LogEntry,
    max_width: int,
    verbose: bool,
    theme: Theme,
    *,
    current_tick: int | None = None,
) -> list[Text]:
    """Styled variant of :func:`format_entry`."""
    body_styles = {
        "tool": theme.style("tool", bold=True),
        "reasoning_header": theme.style("reasoning_header"),
        "reasoning": theme.style("reasoning", dim=True, italic=True),
    }
    prefix_style = theme.role_style(entry.role, entry.source)
    rendered: list[Text] = []
    for index, line in enumerate(layout_entry(entry, max_width, verbose, current_tick=current_tick)):
        text = Text(no_wrap=True, overflow="ellipsis")
        if index == 0:
            text.append(line.lead.rstrip(), style=prefix_style)
            if line.body:
                text.append(" ")
        else:
            text.append(line.lead if line.body else "")
        text.append(line.body.rstrip(), style=body_styles.get(line.kind, ""))
        rendered.append(text)
    return rendered
