"""Dashboard chrome: hint line, section titles, headers, help and list rows.

Everything here returns plain strings sized to a column budget; widgets add
colour on top.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import NamedTuple

from .entries import (
    TOOL_CALLS_PREFIX,
    LogEntry,
    Role,
    Source,
    format_sender_label,
    format_tick_timestamp,
    format_tool_args,
    parse_tool_calls,
)
from .text import display_width, pad_to_width, truncate_to_width, truncate_with_ellipsis

HINT_SEPARATOR = "  ·  "
ERROR_LABEL = "Error: "

DASHBOARD_TITLE = "⬡ Z O E A   N O V A ⬡   COMMAND CENTER"
DASHBOARD_HINT = "[ ? ] HELP  ·  [ n ] NEW MYSIS  ·  [ b ] BROADCAST"
FOCUS_HINT = "[ ESC ] BACK  ·  [ m ] MESSAGE  ·  [ ↑↓ ] SCROLL  ·  [ G ] BOTTOM"
EMPTY_SWARM_MESSAGE = "No myses. Press 'n' to create one."
EMPTY_BROADCASTS_MESSAGE = "No broadcasts yet. Press 'b' to broadcast."
MAX_SWARM_MESSAGES = 10

SPINNER_FRAMES = ("⬡", "⬢", "⬡", "⬢", "⬦", "⬥", "⬦", "⬥")

NAME_COLUMN = 8
PROVIDER_COLUMN = 12
STATE_COLUMN = 8
ACCOUNT_COLUMN = 12
ACTIVITY_BRANCH = "  └─ "
MIN_ROW_WIDTH = 10

STATE_INDICATORS = {
    "running": "●",
    "idle": "◦",
    "stopped": "◌",
    "errored": "✖",
}


class HelpItem(NamedTuple):
    key: str
    description: str


HELP_ITEMS: tuple[HelpItem, ...] = (
    HelpItem("q / Ctrl+C", "Quit"),
    HelpItem("n", "New agent"),
    HelpItem("b", "Broadcast message to all"),
    HelpItem("m", "Message selected agent"),
    HelpItem("c", "Configure provider"),
    HelpItem("Tab / Shift+Tab", "Navigate agents"),
    HelpItem("Enter", "Focus selected agent"),
    HelpItem("Esc", "Back / Cancel"),
    HelpItem("↑ / ↓", "Scroll / Browse history"),
    HelpItem("PgUp / PgDn", "Scroll page"),
    HelpItem("G / End", "Go to bottom (auto-scroll)"),
    HelpItem("v", "Toggle verbose payloads"),
    HelpItem("?", "Toggle help"),
)


@dataclass
class MysisInfo:
    """Display snapshot of one mysis."""

    id: str
    name: str
    state: str = "idle"
    provider: str = ""
    account_username: str = ""
    created_at: datetime | None = None
    last_error: str = ""
    entries: list[LogEntry] = field(default_factory=list)


def _error_text(error: BaseException | str | None) -> str:
    if error is None:
        return ""
    message = str(error)
    return " ".join(message.split())


def render_hint_with_error(
    hint: str, error: BaseException | str | None, width: int
) -> str:
    """Join the key hint and an optional error on a single line of *width* columns.

    The error is truncated with an ellipsis rather than wrapped. A width of
    zero or less leaves the line unconstrained.
    """
    message = _error_text(error)
    line = hint
    if message:
        line = f"{hint}{HINT_SEPARATOR}{ERROR_LABEL}"
        if width > 0:
            available = width - display_width(line)
            if available > 3:
                return line + truncate_with_ellipsis(message, available)
        line += message
    if width > 0:
        return truncate_with_ellipsis(line, width)
    return line


def section_title(title: str, width: int, suffix: str = "") -> str:
    """Full-width ``⬧─── TITLE ───⬧`` rule with an optional trailing suffix."""
    label = f" {title} "
    available = max(width - display_width(label) - 4 - display_width(suffix), 2)
    left = available // 2
    right = available - left
    return "⬧─" + "─" * left + label + "─" * right + "─⬧" + suffix


def focus_header(
    mysis: MysisInfo,
    focus_index: int,
    total: int,
    width: int,
    spinner: str = "",
) -> list[str]:
    """Two header lines for the focus view: name banner, then ID/created or error."""
    count = f" ({focus_index}/{total})" if total > 0 and focus_index > 0 else ""
    title = f" ⬡ MYSIS: {mysis.name}{count} ⬡ "
    available = max(width - display_width(title) - 3, 4)
    left = available // 2
    banner = " ⬥" + "─" * left + title + "─" * (available - left) + "⬥"

    if mysis.state == "errored" and mysis.last_error:
        details = f"  ERROR {spinner}".rstrip()
    else:
        created = (
            mysis.created_at.astimezone().strftime("%Y-%m-%d %H:%M")
            if mysis.created_at is not None
            else "(unknown)"
        )
        details = f"  ID: {mysis.id}    Created: {created}"
    return [banner, details]


def help_lines() -> list[str]:
    """Keyboard shortcut table with keys padded to a common column."""
    key_width = max(display_width(item.key) for item in HELP_ITEMS)
    lines = ["⌨ Keyboard Shortcuts", ""]
    lines.extend(
        f"{pad_to_width(item.key, key_width)}  {item.description}" for item in HELP_ITEMS
    )
    return lines


def _fixed(text: str, width: int) -> str:
    if display_width(text) > width:
        text = truncate_to_width(text, width - 3) + "..."
    return pad_to_width(text, width)


def info_row(mysis: MysisInfo, selected: bool, width: int, indicator: str = "") -> str:
    """First dashboard row of a mysis: cursor, state glyph, name, provider, state, account."""
    cursor = "[→ ]" if selected else "[  ]"
    glyph = indicator or STATE_INDICATORS.get(mysis.state, "?")
    account = f"@{mysis.account_username}" if mysis.account_username else "logged out"
    name = mysis.name
    if display_width(name) > NAME_COLUMN:
        name = truncate_to_width(name, NAME_COLUMN - 3) + "..."
    content = " ".join(
        (
            pad_to_width(name, NAME_COLUMN),
            _fixed(mysis.provider, PROVIDER_COLUMN),
            pad_to_width(mysis.state, STATE_COLUMN),
            _fixed(account, ACCOUNT_COLUMN),
        )
    )
    return truncate_to_width(f"{cursor} {glyph}  {content}".rstrip(), max(width, MIN_ROW_WIDTH))


def _flatten(text: str) -> str:
    return text.replace("\n", " ")


def _with_stamp(label: str, body: str, stamp: str, width: int) -> str:
    lead = f"{stamp} {label}" if stamp else label
    available = width - display_width(lead)
    return lead + truncate_with_ellipsis(_flatten(body), max(available, 0))


def activity_summary(mysis: MysisInfo, width: int, current_tick: int = 0) -> str:
    """One-line summary of the most relevant recent activity.

    Priority: the last error of an errored mysis, then the latest AI reply,
    then the latest tool call, then the latest user message or broadcast.
    """
    if mysis.state == "errored" and mysis.last_error:
        return _with_stamp(ERROR_LABEL, mysis.last_error, "", width)

    recent = list(reversed(mysis.entries))
    for entry in recent:
        if entry.role is Role.ASSISTANT and not entry.content.startswith(TOOL_CALLS_PREFIX):
            stamp = format_tick_timestamp(current_tick, entry.timestamp)
            return _with_stamp("[AI] ", entry.content, stamp, width)

    for entry in recent:
        if entry.role is Role.ASSISTANT:
            calls = parse_tool_calls(entry.content)
            if not calls:
                continue
            stamp = format_tick_timestamp(current_tick, entry.timestamp)
            lead = f"{stamp} → call "
            call = f"{calls[0].name}({format_tool_args(calls[0].arguments)})"
            return lead + truncate_with_ellipsis(call, max(width - display_width(lead), 0))

    for entry in recent:
        if entry.role is Role.USER:
            label = "[SWARM] " if entry.source is Source.BROADCAST else "[YOU] "
            stamp = format_tick_timestamp(current_tick, entry.timestamp)
            return _with_stamp(label, entry.content, stamp, width)
    return ""


def dashboard_rows(
    mysis: MysisInfo,
    selected: bool,
    width: int,
    current_tick: int = 0,
    indicator: str = "",
) -> list[str]:
    """The two dashboard rows for *mysis*: info row and activity row."""
    available = max(width - display_width(ACTIVITY_BRANCH) - 2, MIN_ROW_WIDTH)
    summary = activity_summary(mysis, available, current_tick) or "(no recent activity)"
    return [
        info_row(mysis, selected, width, indicator),
        ACTIVITY_BRANCH + summary,
    ]


def swarm_lines(
    broadcasts: list[LogEntry], width: int, current_tick: int = 0, limit: int = MAX_SWARM_MESSAGES
) -> list[str]:
    """Most recent broadcasts first, one truncated line each."""
    if not broadcasts:
        return [EMPTY_BROADCASTS_MESSAGE]
    lines: list[str] = []
    for entry in list(reversed(broadcasts))[:limit]:
        stamp = format_tick_timestamp(current_tick, entry.timestamp)
        label = format_sender_label(entry.sender_id, entry.sender_name)
        sender = f" [{label}]" if label else ""
        lead = f"{stamp}{sender} "
        lines.append(lead + truncate_with_ellipsis(_flatten(entry.content), max(width - display_width(lead), 1)))
    return lines


def focus_hint(verbose: bool) -> str:
    return f"{FOCUS_HINT}  ·  [ v ] VERBOSE: {'ON' if verbose else 'OFF'}"


def state_counts(myses: list[MysisInfo], spinner: str = SPINNER_FRAMES[0]) -> str:
    """Compact ``<glyph> <count>`` summary per state, running first."""
    counts: dict[str, int] = {}
    for mysis in myses:
        counts[mysis.state] = counts.get(mysis.state, 0) + 1
    parts = []
    for state in ("running", "idle", "stopped", "errored"):
        if counts.get(state):
            glyph = spinner if state == "running" else STATE_INDICATORS[state]
            parts.append(f"{glyph} {counts[state]}")
    return "  ".join(parts)


def _sort_key(entry: LogEntry) -> float:
    return entry.timestamp.timestamp() if entry.timestamp is not None else 0.0


def collect_broadcasts(myses: list[MysisInfo]) -> list[LogEntry]:
    """Swarm-wide broadcasts, oldest first, each delivered copy counted once.

    A mysis's own broadcast is reported as a broadcast from that mysis.
    """
    names = {mysis.id: mysis.name for mysis in myses}
    seen: set[tuple[str, str, float]] = set()
    broadcasts: list[LogEntry] = []
    for mysis in myses:
        for entry in mysis.entries:
            if entry.source not in (Source.BROADCAST, Source.BROADCAST_SELF):
                continue
            if entry.source is Source.BROADCAST_SELF or not entry.sender_name:
                entry = replace(
                    entry,
                    source=Source.BROADCAST,
                    sender_name=entry.sender_name or names.get(entry.sender_id, ""),
                )
            key = (entry.sender_id, entry.content, _sort_key(entry))
            if key in seen:
                continue
            seen.add(key)
            broadcasts.append(entry)
    broadcasts.sort(key=_sort_key)
    return broadcasts
