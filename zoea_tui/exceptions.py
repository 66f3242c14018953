"""Domain exception hierarchy for the swarm dashboard."""

from __future__ import annotations


class ZoeaError(RuntimeError):
    """Base class for all domain-level dashboard errors."""


class PayloadParseError(ZoeaError, ValueError):
    """Raised when message content is not well-formed structured data."""


class ConfigValidationError(ZoeaError):
    """Raised when configuration cannot be validated safely."""


class SnapshotFormatError(ZoeaError):
    """Raised when a swarm snapshot file cannot be read or understood."""


class DeliveryError(ZoeaError):
    """Raised by a message sink when a message cannot be delivered."""
