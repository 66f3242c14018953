"""Tests for swarm snapshot loading."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
import unittest

from zoea_tui.entries import Role, Source
from zoea_tui.exceptions import SnapshotFormatError
from zoea_tui.snapshot import load_snapshot, load_snapshot_with_tick, parse_snapshot

SNAPSHOT = {
    "tick": 42,
    "myses": [
        {
            "id": "a1",
            "name": "alpha",
            "state": "Running",
            "provider": "ollama",
            "account": "crab",
            "created_at": "2026-01-01T10:00:00Z",
            "memories": [
                {"role": "user", "source": "direct", "content": "hi"},
                {"role": "user", "source": "broadcast", "sender_id": "a1", "content": "regroup"},
            ],
        },
        {
            "id": "b1",
            "name": "beta",
            "state": "errored",
            "last_error": "provider unreachable",
            "account": None,
            "memories": [
                {"role": "user", "source": "broadcast", "sender_id": "a1", "content": "regroup"},
                {"role": "assistant", "source": "llm", "content": "ok", "reasoning": "fine"},
                {"role": "narrator", "source": "direct", "content": None},
            ],
        },
    ],
}


class ParseSnapshotTests(unittest.TestCase):
    """Validate mapping snapshot documents onto display models."""

    def test_parse_snapshot(self) -> None:
        myses, tick = parse_snapshot(SNAPSHOT)
        self.assertEqual(tick, 42)
        alpha, beta = myses
        self.assertEqual((alpha.id, alpha.name, alpha.state), ("a1", "alpha", "running"))
        self.assertEqual(alpha.account_username, "crab")
        self.assertIsNotNone(alpha.created_at)
        self.assertEqual(beta.account_username, "")
        self.assertEqual(beta.last_error, "provider unreachable")

    def test_broadcasts_are_resolved_per_viewer(self) -> None:
        alpha, beta = parse_snapshot(SNAPSHOT)[0]
        self.assertIs(alpha.entries[1].source, Source.BROADCAST_SELF)
        self.assertIs(beta.entries[0].source, Source.BROADCAST)
        self.assertEqual(beta.entries[0].sender_name, "alpha")

    def test_memories_are_coerced(self) -> None:
        beta = parse_snapshot(SNAPSHOT)[0][1]
        self.assertEqual(beta.entries[1].reasoning, "fine")
        self.assertIs(beta.entries[1].source, Source.LLM)
        self.assertIs(beta.entries[2].role, Role.UNKNOWN)
        self.assertEqual(beta.entries[2].content, "")

    def test_missing_name_falls_back_to_id(self) -> None:
        myses, tick = parse_snapshot({"myses": [{"id": "x9"}]})
        self.assertEqual(myses[0].name, "x9")
        self.assertEqual(tick, 0)

    def test_invalid_documents_raise(self) -> None:
        for payload in (
            {"myses": [{"id": ""}]},
            {"myses": [{"id": "a", "state": "dancing"}]},
            {"tick": -1},
            ["not", "a", "mapping"],
        ):
            with self.assertRaises(SnapshotFormatError):
                parse_snapshot(payload)


class LoadSnapshotTests(unittest.TestCase):
    """Validate reading snapshot files."""

    def test_load_from_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "swarm.json"
            path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
            with self.assertLogs("zoea_tui.snapshot", level="INFO") as logs:
                myses, tick = load_snapshot_with_tick(path)
            self.assertEqual([mysis.name for mysis in myses], ["alpha", "beta"])
            self.assertEqual(tick, 42)
            self.assertTrue(any("snapshot.loaded" in line for line in logs.output))
            self.assertEqual(len(load_snapshot(path)), 2)

    def test_missing_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            with self.assertRaises(SnapshotFormatError):
                load_snapshot(Path(temp_dir) / "missing.json")

    def test_invalid_json_raises(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "swarm.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertRaises(SnapshotFormatError):
                load_snapshot(path)

    def test_non_utf8_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "swarm.json"
            path.write_bytes(b'{"myses": [\xff\xfe]}')
            with self.assertRaises(SnapshotFormatError):
                load_snapshot(path)

    def test_deeply_nested_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "swarm.json"
            path.write_text("[" * 100000 + "]" * 100000, encoding="utf-8")
            with self.assertRaises(SnapshotFormatError):
                load_snapshot(path)


if __name__ == "__main__":
    unittest.main()
