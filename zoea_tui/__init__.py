"""Top-level package for zoea-tui."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import ZoeaDashboardApp
    from .config import ensure_config_dir, load_config
    from .entries import LogEntry, format_entry
    from .exceptions import (
        ConfigValidationError,
        DeliveryError,
        PayloadParseError,
        SnapshotFormatError,
        ZoeaError,
    )
    from .history import InputHistory, InputMode
    from .payload import render_tree
    from .scrollbar import ScrollGeometry, compute_scrollbar
    from .snapshot import load_snapshot
    from .text import wrap_text

__all__ = [
    "ConfigValidationError",
    "DeliveryError",
    "InputHistory",
    "InputMode",
    "LogEntry",
    "PayloadParseError",
    "ScrollGeometry",
    "SnapshotFormatError",
    "ZoeaDashboardApp",
    "ZoeaError",
    "compute_scrollbar",
    "ensure_config_dir",
    "format_entry",
    "load_config",
    "load_snapshot",
    "render_tree",
    "wrap_text",
]

_LAZY_EXPORTS: dict[str, str] = {
    "ZoeaDashboardApp": ".app",
    "ensure_config_dir": ".config",
    "load_config": ".config",
    "LogEntry": ".entries",
    "format_entry": ".entries",
    "ConfigValidationError": ".exceptions",
    "DeliveryError": ".exceptions",
    "PayloadParseError": ".exceptions",
    "SnapshotFormatError": ".exceptions",
    "ZoeaError": ".exceptions",
    "InputHistory": ".history",
    "InputMode": ".history",
    "render_tree": ".payload",
    "ScrollGeometry": ".scrollbar",
    "compute_scrollbar": ".scrollbar",
    "load_snapshot": ".snapshot",
    "wrap_text": ".text",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols so the layout engine never pulls in Textual."""
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
