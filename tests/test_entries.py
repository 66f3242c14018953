"""Tests for conversation entry layout."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
import unittest

from rich.text import Text

from zoea_tui.entries import (
    LogEntry,
    Role,
    Source,
    content_width_for,
    entry_prefix,
    format_entry,
    format_sender_label,
    format_tick_timestamp,
    format_tool_args,
    parse_tool_calls,
    render_entry,
)
from zoea_tui.text import display_width
from zoea_tui.theme import DEFAULT_THEME


def _entry(content: str, role: Role = Role.USER, source: Source = Source.DIRECT, **kwargs) -> LogEntry:
    return LogEntry(role=role, source=source, sender_id=kwargs.pop("sender_id", ""), content=content, **kwargs)


@dataclass
class FakeMemory:
    role: str
    source: str
    sender_id: str
    content: str
    created_at: datetime | None = None
    reasoning: str | None = None


class PrefixTests(unittest.TestCase):
    """Validate role and broadcast prefixes."""

    def test_role_prefixes(self) -> None:
        expected = {
            Role.USER: "YOU:",
            Role.ASSISTANT: "AI:",
            Role.SYSTEM: "SYS:",
            Role.TOOL: "TOOL:",
            Role.UNKNOWN: "???:",
        }
        for role, prefix in expected.items():
            self.assertEqual(entry_prefix(_entry("x", role=role)), prefix)

    def test_self_broadcast(self) -> None:
        entry = _entry("hi all", source=Source.BROADCAST_SELF)
        self.assertEqual(format_entry(entry, 80), ["YOU (BROADCAST): hi all"])

    def test_broadcast_from_other_sender_is_swarm_regardless_of_role(self) -> None:
        for role in (Role.USER, Role.ASSISTANT, Role.SYSTEM):
            entry = _entry("hello", role=role, source=Source.BROADCAST, sender_id="m-2")
            self.assertEqual(entry_prefix(entry), "SWARM:")

    def test_broadcast_with_sender_name(self) -> None:
        entry = _entry("hello", source=Source.BROADCAST, sender_id="m-2", sender_name="scout")
        self.assertEqual(entry_prefix(entry), "SWARM (scout):")


class FormatEntryTests(unittest.TestCase):
    """Validate wrapping, padding, payloads and reasoning."""

    def test_single_line(self) -> None:
        self.assertEqual(format_entry(_entry("hello there"), 80), ["YOU: hello there"])

    def test_continuation_lines_are_padded_by_prefix_width(self) -> None:
        content = " ".join(["word"] * 30)
        lines = format_entry(_entry(content, role=Role.ASSISTANT), 40)
        self.assertTrue(lines[0].startswith("AI: word"))
        for line in lines[1:]:
            self.assertTrue(line.startswith("    word"))
            self.assertFalse(line.startswith("     "))

    def test_lines_fit_the_width(self) -> None:
        content = " ".join(["alpha", "beta", "gamma"] * 20)
        for line in format_entry(_entry(content), 50):
            self.assertLessEqual(display_width(line), 50)

    def test_content_width_is_floored(self) -> None:
        self.assertEqual(content_width_for("YOU:", 10), 20)
        self.assertEqual(content_width_for("YOU:", 80), 74)

    def test_wide_prefix_padding_uses_display_width(self) -> None:
        entry = _entry(" ".join(["word"] * 20), source=Source.BROADCAST, sender_name="日本")
        lines = format_entry(entry, 40)
        padding = display_width(entry_prefix(entry)) + 1
        self.assertTrue(lines[1].startswith(" " * padding + "word"))

    def test_payload_content_renders_as_tree(self) -> None:
        raw = json.dumps([{"id": index} for index in range(10)])
        lines = format_entry(_entry(raw, role=Role.TOOL), 80)
        self.assertEqual(lines[0], "TOOL: ├─[0]")
        text = "\n".join(lines)
        self.assertIn("[4 more]", text)
        self.assertNotIn('"id": 5', text)

    def test_tool_result_with_call_id_renders_as_tree(self) -> None:
        lines = format_entry(_entry('call_abc:{"ok": true}', role=Role.TOOL), 80)
        self.assertEqual(lines, ['TOOL: └─"ok": true'])

    def test_verbose_payload_is_not_truncated(self) -> None:
        raw = json.dumps(list(range(10)))
        lines = format_entry(_entry(raw, role=Role.TOOL), 80, verbose=True)
        self.assertEqual(len(lines), 10)

    def test_malformed_payload_falls_back_to_text(self) -> None:
        lines = format_entry(_entry("{not really json}", role=Role.TOOL), 80)
        self.assertEqual(lines, ["TOOL: {not really json}"])

    def test_deeply_nested_payload_falls_back_to_text(self) -> None:
        for depth in (100, 5000):
            raw = "[" * depth + "1" + "]" * depth
            lines = format_entry(_entry(raw, role=Role.TOOL), 80, verbose=True)
            self.assertTrue(lines[0].startswith("TOOL: [[[["))

    def test_reasoning_block(self) -> None:
        entry = _entry("answer", role=Role.ASSISTANT, reasoning="thinking hard")
        self.assertEqual(
            format_entry(entry, 80),
            ["AI: answer", "", "    REASONING:", "    thinking hard"],
        )

    def test_empty_content_still_has_prefix_line(self) -> None:
        self.assertEqual(format_entry(_entry(""), 80), ["YOU:"])

    def test_tick_stamp_prefix(self) -> None:
        entry = _entry("hi", timestamp=None)
        self.assertEqual(format_entry(entry, 80, current_tick=7), ["T7 ⬡ [--:--] YOU: hi"])


class ToolCallTests(unittest.TestCase):
    """Validate stored tool call records."""

    def test_parse_tool_calls_skips_malformed(self) -> None:
        calls = parse_tool_calls('[TOOL_CALLS]c1:get_status:{}|broken|c2:travel:{"to": "sol"}')
        self.assertEqual([call.name for call in calls], ["get_status", "travel"])
        self.assertEqual(calls[1].arguments, '{"to": "sol"}')

    def test_format_tool_args(self) -> None:
        self.assertEqual(
            format_tool_args('{"to": "sol", "speed": 3, "opts": {"a": 1}, "ids": [1]}'),
            'to: "sol", speed: 3, opts: {...}, ids: [...]',
        )
        self.assertEqual(format_tool_args("{}"), "")
        self.assertEqual(format_tool_args("not json"), "...")

    def test_compact_tool_call_rendering(self) -> None:
        entry = _entry('[TOOL_CALLS]c1:travel:{"to": "sol"}', role=Role.ASSISTANT)
        self.assertEqual(
            format_entry(entry, 80),
            ["AI: ⚡ Calling tools:", '      • travel(to: "sol")'],
        )

    def test_verbose_tool_call_rendering(self) -> None:
        entry = _entry('[TOOL_CALLS]c1:travel:{"to": "sol"}', role=Role.ASSISTANT)
        self.assertEqual(
            format_entry(entry, 80, verbose=True),
            ["AI: ⚡ Calling tools:", "      • travel", '        └─"to": "sol"'],
        )

    def test_deeply_nested_tool_arguments_fall_back_to_raw_text(self) -> None:
        arguments = "[" * 5000 + "]" * 5000
        entry = _entry(f"[TOOL_CALLS]c1:travel:{arguments}", role=Role.ASSISTANT)
        lines = format_entry(entry, 80, verbose=True)
        self.assertEqual(lines[:2], ["AI: ⚡ Calling tools:", "      • travel"])
        self.assertTrue(lines[2].startswith("        [[[["))
        compact = format_entry(entry, 80)
        self.assertEqual(compact[0], "AI: ⚡ Calling tools:")
        self.assertTrue(compact[1].startswith("      • travel("))

    def test_empty_tool_call_record(self) -> None:
        entry = _entry("[TOOL_CALLS]", role=Role.ASSISTANT)
        self.assertEqual(format_entry(entry, 80), ["AI: ⚠ Empty tool call record"])


class HelperTests(unittest.TestCase):
    """Validate timestamp and sender label helpers."""

    def test_format_tick_timestamp(self) -> None:
        stamp = datetime(2026, 1, 1, 10, 5, tzinfo=timezone.utc)
        local = stamp.astimezone().strftime("%H:%M")
        self.assertEqual(format_tick_timestamp(42, stamp), f"T42 ⬡ [{local}]")

    def test_format_sender_label(self) -> None:
        self.assertEqual(format_sender_label("abc", "scout"), "scout")
        self.assertEqual(format_sender_label("abc", "a-very-long-mysis-name"), "a-very-lo...")
        self.assertEqual(format_sender_label("abcdefghijklmnop", ""), "id:abcdef...")
        self.assertEqual(format_sender_label("", ""), "")


class FromMemoryTests(unittest.TestCase):
    """Validate mapping stored memories to entries."""

    def test_own_broadcast_becomes_broadcast_self(self) -> None:
        memory = FakeMemory("user", "broadcast", "m-1", "hi all")
        entry = LogEntry.from_memory(memory, "m-1")
        self.assertIs(entry.source, Source.BROADCAST_SELF)

    def test_other_broadcast_stays_broadcast(self) -> None:
        memory = FakeMemory("user", "broadcast", "m-2", "hi all")
        entry = LogEntry.from_memory(memory, "m-1", sender_name="scout")
        self.assertIs(entry.source, Source.BROADCAST)
        self.assertEqual(entry.sender_name, "scout")

    def test_unknown_values_are_coerced(self) -> None:
        memory = FakeMemory("narrator", "somewhere", "", "text", reasoning="")
        entry = LogEntry.from_memory(memory, "m-1")
        self.assertIs(entry.role, Role.UNKNOWN)
        self.assertIs(entry.source, Source.LEGACY)
        self.assertIsNone(entry.reasoning)


class RenderEntryTests(unittest.TestCase):
    """Validate the styled variant matches the plain layout."""

    def test_render_entry_matches_format_entry(self) -> None:
        entry = _entry(
            " ".join(["word"] * 25), role=Role.ASSISTANT, reasoning="because reasons"
        )
        plain = format_entry(entry, 40)
        styled = render_entry(entry, 40, False, DEFAULT_THEME)
        self.assertTrue(all(isinstance(line, Text) for line in styled))
        self.assertEqual([line.plain.rstrip() for line in styled], plain)


if __name__ == "__main__":
    unittest.main()
