"""Tests for configuration loading and validation."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
import unittest

from zoea_tui.config import DEFAULT_CONFIG, load_config


class ConfigTests(unittest.TestCase):
    """Validate config merge and fallback behavior."""

    def test_missing_config_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config = load_config(config_path=Path(temp_dir) / "config.toml")
            self.assertEqual(config, DEFAULT_CONFIG)
            self.assertEqual(config["keybinds"]["toggle_help"], "question_mark")
            self.assertEqual(config["keybinds"]["scroll_bottom"], "G")
            self.assertEqual(config["ui"]["history_size"], 100)
            self.assertFalse(config["ui"]["verbose"])

    def test_partial_config_overrides_selected_values(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                """
[ui]
verbose = true
history_size = 20

[keybinds]
broadcast = "B"

[theme]
user = "#abc"
                """.strip(),
                encoding="utf-8",
            )
            config = load_config(config_path=config_path)
            self.assertTrue(config["ui"]["verbose"])
            self.assertEqual(config["ui"]["history_size"], 20)
            self.assertEqual(config["keybinds"]["broadcast"], "B")
            self.assertEqual(config["keybinds"]["message"], DEFAULT_CONFIG["keybinds"]["message"])
            self.assertEqual(config["theme"]["user"], "#abc")
            self.assertEqual(config["app"]["title"], DEFAULT_CONFIG["app"]["title"])

    def test_invalid_values_fall_back_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text('[theme]\nuser = "green"\n', encoding="utf-8")
            with self.assertLogs("zoea_tui.config", level="WARNING") as logs:
                config = load_config(config_path=config_path)
            self.assertEqual(config, DEFAULT_CONFIG)
            self.assertTrue(any("config.invalid" in line for line in logs.output))

    def test_history_size_bounds(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text("[ui]\nhistory_size = 0\n", encoding="utf-8")
            config = load_config(config_path=config_path)
            self.assertEqual(config["ui"]["history_size"], DEFAULT_CONFIG["ui"]["history_size"])

    def test_log_level_is_normalized(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text('[logging]\nlevel = "debug"\n', encoding="utf-8")
            self.assertEqual(load_config(config_path=config_path)["logging"]["level"], "DEBUG")

    def test_malformed_toml_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text("[ui\nverbose = ", encoding="utf-8")
            with self.assertLogs("zoea_tui.config", level="WARNING"):
                config = load_config(config_path=config_path)
            self.assertEqual(config, DEFAULT_CONFIG)

    @unittest.skipUnless(os.name == "posix", "permissions are POSIX only")
    def test_config_file_is_made_private(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text("", encoding="utf-8")
            config_path.chmod(0o644)
            load_config(config_path=config_path)
            self.assertEqual(config_path.stat().st_mode & 0o777, 0o600)


if __name__ == "__main__":
    unittest.main()
