"""Tests for the in-memory message sink."""

from __future__ import annotations

import unittest

from zoea_tui.delivery import LocalEchoSink, OutgoingMessage
from zoea_tui.entries import Role, Source
from zoea_tui.exceptions import DeliveryError
from zoea_tui.history import InputMode
from zoea_tui.panels import MysisInfo


class LocalEchoSinkTests(unittest.TestCase):
    """Validate how submissions change the in-memory swarm."""

    def setUp(self) -> None:
        self.myses = [MysisInfo("a1", "alpha"), MysisInfo("b1", "beta")]
        self.sink = LocalEchoSink(self.myses)

    def test_direct_message_goes_to_target_only(self) -> None:
        self.sink(OutgoingMessage(InputMode.MESSAGE, "b1", "status?"))
        self.assertEqual(self.myses[0].entries, [])
        (entry,) = self.myses[1].entries
        self.assertIs(entry.role, Role.USER)
        self.assertIs(entry.source, Source.DIRECT)
        self.assertEqual(entry.content, "status?")
        self.assertIsNotNone(entry.timestamp)

    def test_broadcast_reaches_every_mysis(self) -> None:
        with self.assertLogs("zoea_tui.delivery", level="INFO") as logs:
            self.sink(OutgoingMessage(InputMode.BROADCAST, "", "regroup"))
        for mysis in self.myses:
            self.assertEqual([entry.content for entry in mysis.entries], ["regroup"])
            self.assertIs(mysis.entries[0].source, Source.BROADCAST)
        self.assertTrue(any("delivery.local_echo" in line for line in logs.output))

    def test_broadcast_without_myses_fails(self) -> None:
        with self.assertRaises(DeliveryError):
            LocalEchoSink([])(OutgoingMessage(InputMode.BROADCAST, "", "anyone?"))

    def test_new_mysis_is_appended(self) -> None:
        self.sink(OutgoingMessage(InputMode.NEW_MYSIS, "", "  gamma "))
        created = self.myses[-1]
        self.assertEqual(created.name, "gamma")
        self.assertEqual(created.state, "idle")
        self.assertEqual(len(created.id), 8)

    def test_duplicate_name_is_rejected(self) -> None:
        with self.assertRaises(DeliveryError):
            self.sink(OutgoingMessage(InputMode.NEW_MYSIS, "", "alpha"))
        self.assertEqual(len(self.myses), 2)

    def test_configure_provider(self) -> None:
        self.sink(OutgoingMessage(InputMode.CONFIG_PROVIDER, "a1", "opencode_zen"))
        self.assertEqual(self.myses[0].provider, "opencode_zen")

    def test_unknown_target_raises(self) -> None:
        with self.assertRaises(DeliveryError):
            self.sink(OutgoingMessage(InputMode.MESSAGE, "zz", "hello"))

    def test_idle_mode_raises(self) -> None:
        with self.assertRaises(DeliveryError):
            self.sink(OutgoingMessage(InputMode.NONE, "", "hello"))


if __name__ == "__main__":
    unittest.main()
