"""Shared dataclasses for PulseMon chart samples and stream state."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Sample:
    index: int
    value: float


@dataclass(frozen=True)
class StreamState:
    """Snapshot of the ingestor's framing state (for diagnostics and tests)."""

    handshake_complete: bool
    pending: bytes
