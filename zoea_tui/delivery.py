"""Outgoing message hand-off from the composer to whatever runs the swarm."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Awaitable, Callable, NamedTuple, Union
from uuid import uuid4

from .entries import LogEntry, Role, Source
from .exceptions import DeliveryError
from .history import InputMode
from .panels import MysisInfo

LOGGER = logging.getLogger(__name__)


class OutgoingMessage(NamedTuple):
    """A committed composer submission."""

    mode: InputMode
    target_id: str
    text: str


MessageSink = Callable[[OutgoingMessage], Union[Awaitable[None], None]]


class LocalEchoSink:
    """Apply submissions to an in-memory swarm instead of sending them.

    Direct messages and broadcasts are appended as user entries, a new mysis
    request adds an idle mysis, and a provider change updates the target.
    """

    def __init__(self, myses: list[MysisInfo]) -> None:
        self.myses = myses

    def _find(self, mysis_id: str) -> MysisInfo:
        for mysis in self.myses:
            if mysis.id == mysis_id:
                return mysis
        raise DeliveryError(f"Unknown mysis {mysis_id!r}")

    def __call__(self, message: OutgoingMessage) -> None:
        now = datetime.now(timezone.utc)
        if message.mode is InputMode.MESSAGE:
            target = self._find(message.target_id)
            target.entries.append(LogEntry(Role.USER, Source.DIRECT, "", message.text, timestamp=now))
        elif message.mode is InputMode.BROADCAST:
            if not self.myses:
                raise DeliveryError("No myses to broadcast to")
            for mysis in self.myses:
                mysis.entries.append(
                    LogEntry(Role.USER, Source.BROADCAST, "", message.text, timestamp=now)
                )
        elif message.mode is InputMode.NEW_MYSIS:
            name = message.text.strip()
            if any(mysis.name == name for mysis in self.myses):
                raise DeliveryError(f"A mysis named {name!r} already exists")
            self.myses.append(MysisInfo(id=uuid4().hex[:8], name=name, created_at=now))
        elif message.mode is InputMode.CONFIG_PROVIDER:
            self._find(message.target_id).provider = message.text.strip()
        else:
            raise DeliveryError(f"Nothing to deliver in mode {message.mode.value!r}")
        LOGGER.info(
            "delivery.local_echo",
            extra={"event": "delivery.local_echo", "mode": message.mode.value, "target": message.target_id},
        )
