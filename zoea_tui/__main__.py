"""CLI entrypoint for zoea-tui."""

from __future__ import annotations

import argparse
from importlib import metadata
from pathlib import Path
import sys
from typing import Sequence

from .app import ZoeaDashboardApp
from .config import ensure_config_dir, load_config
from .exceptions import SnapshotFormatError
from .logging_utils import configure_logging
from .snapshot import load_snapshot_with_tick


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="zoea-tui", description="Zoea swarm dashboard")
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Read configuration from this TOML file",
    )
    parser.add_argument(
        "snapshot",
        nargs="?",
        type=Path,
        help="Swarm snapshot (JSON) to display",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Load configuration and the optional snapshot, then run the TUI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("zoea-tui")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"zoea-tui {version}")
        return 0

    if args.config is None:
        ensure_config_dir()
    config = load_config(args.config)
    configure_logging(config["logging"])

    myses = []
    tick = 0
    if args.snapshot is not None:
        try:
            myses, tick = load_snapshot_with_tick(args.snapshot)
        except SnapshotFormatError as exc:
            print(f"zoea-tui: {exc}", file=sys.stderr)
            return 1

    app = ZoeaDashboardApp(myses, config=config, current_tick=tick)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
