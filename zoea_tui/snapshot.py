"""Read-only loader for swarm snapshot files.

A snapshot is a JSON export of the swarm::

    {"myses": [{"id": "...", "name": "...", "state": "idle",
                "provider": "ollama", "account": "crab",
                "created_at": "2026-01-01T10:00:00Z", "last_error": "",
                "memories": [{"role": "user", "source": "direct",
                              "sender_id": "", "content": "hi",
                              "reasoning": null,
                              "created_at": "2026-01-01T10:01:00Z"}]}],
     "tick": 42}
"""

from __future__ import annotations

from datetime import datetime
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .entries import LogEntry, Source
from .exceptions import SnapshotFormatError
from .panels import MysisInfo

LOGGER = logging.getLogger(__name__)

VALID_STATES = {"idle", "running", "stopped", "errored"}


class StoredMemory(BaseModel):
    """One persisted conversation item; satisfies ``MemoryRecord``."""

    model_config = ConfigDict(frozen=True)
    role: str = "system"
    source: str = "legacy"
    sender_id: str = ""
    content: str = ""
    reasoning: str | None = None
    created_at: datetime | None = None

    @field_validator("sender_id", "content", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class StoredMysis(BaseModel):
    """One mysis as exported in a snapshot."""

    id: str = Field(min_length=1)
    name: str = ""
    state: str = "idle"
    provider: str = ""
    account: str = ""
    created_at: datetime | None = None
    last_error: str = ""
    memories: list[StoredMemory] = Field(default_factory=list)

    @field_validator("state", mode="before")
    @classmethod
    def _normalize_state(cls, value: Any) -> str:
        normalized = str(value or "idle").strip().lower()
        if normalized not in VALID_STATES:
            raise ValueError(f"Unsupported mysis state {normalized!r}.")
        return normalized

    @field_validator("account", "last_error", "provider", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Snapshot(BaseModel):
    """Root snapshot document."""

    myses: list[StoredMysis] = Field(default_factory=list)
    tick: int = Field(default=0, ge=0)


def _to_info(stored: StoredMysis, names: dict[str, str]) -> MysisInfo:
    entries = []
    for memory in stored.memories:
        entry = LogEntry.from_memory(memory, stored.id)
        if entry.source is Source.BROADCAST and entry.sender_id in names:
            entry = LogEntry.from_memory(memory, stored.id, names[entry.sender_id])
        entries.append(entry)
    return MysisInfo(
        id=stored.id,
        name=stored.name or stored.id,
        state=stored.state,
        provider=stored.provider,
        account_username=stored.account,
        created_at=stored.created_at,
        last_error=stored.last_error,
        entries=entries,
    )


def parse_snapshot(payload: Any) -> tuple[list[MysisInfo], int]:
    """Validate a decoded snapshot document and return ``(myses, tick)``."""
    try:
        snapshot = Snapshot.model_validate(payload)
    except ValidationError as exc:
        raise SnapshotFormatError(f"Snapshot is invalid: {exc}") from exc
    names = {stored.id: stored.name for stored in snapshot.myses if stored.name}
    return [_to_info(stored, names) for stored in snapshot.myses], snapshot.tick


def load_snapshot(path: Path) -> list[MysisInfo]:
    """Load the myses stored in the snapshot file at *path*."""
    myses, _ = load_snapshot_with_tick(path)
    return myses


def load_snapshot_with_tick(path: Path) -> tuple[list[MysisInfo], int]:
    """Like :func:`load_snapshot` but also return the recorded swarm tick."""
    target = Path(path).expanduser()
    try:
        payload = json.loads(target.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SnapshotFormatError(f"Unable to read snapshot {target}: {exc}") from exc
    except (UnicodeDecodeError, RecursionError, json.JSONDecodeError) as exc:
        raise SnapshotFormatError(f"Snapshot {target} is not valid JSON: {exc}") from exc
    myses, tick = parse_snapshot(payload)
    LOGGER.info(
        "snapshot.loaded",
        extra={"event": "snapshot.loaded", "path": str(target), "myses": len(myses)},
    )
    return myses, tick
