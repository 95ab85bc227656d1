"""Byte-stream ingestion: handshake, line framing, parsing, and windowing."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

from ..sensors.pulse_oximeter import ParseFailure, Reading, parse_bytes
from ..tools.debug import time_block
from .handshake import GateState, HandshakeGate
from .line_reassembler import LineReassembler
from .models import Sample, StreamState
from .timeseries_window import WINDOW_CAPACITY, TimeSeriesWindow

logger = logging.getLogger(__name__)

ReadingCallback = Callable[[float, int, int], None]
SnapshotCallback = Callable[[List[Sample]], None]


class ReadingObserver(Protocol):
    """Display-side interface notified synchronously from :meth:`StreamIngestor.on_bytes_available`."""

    def on_reading_parsed(self, temperature: float, heart_rate: int, spo2: int) -> None:  # pragma: no cover - protocol
        ...

    def on_sample_appended(self, snapshot: List[Sample]) -> None:  # pragma: no cover - protocol
        ...


class StreamIngestor:
    """
    Single entry point for bytes arriving from one connected device.

    The ingestor owns the framing state (handshake flag and pending partial
    line) and the temperature window for one session. It is not thread-safe:
    the transport must deliver chunks one at a time from a single thread.
    No input makes it raise; malformed lines are logged and dropped, and
    observer errors are logged so a faulty display cannot stall ingestion.
    """

    def __init__(
        self,
        observer: Optional[ReadingObserver] = None,
        *,
        on_reading_parsed: Optional[ReadingCallback] = None,
        on_sample_appended: Optional[SnapshotCallback] = None,
        capacity: int = WINDOW_CAPACITY,
    ) -> None:
        if observer is not None:
            on_reading_parsed = on_reading_parsed or observer.on_reading_parsed
            on_sample_appended = on_sample_appended or observer.on_sample_appended
        self._on_reading_parsed = on_reading_parsed
        self._on_sample_appended = on_sample_appended

        self._reassembler = LineReassembler()
        self._gate = HandshakeGate(self._reassembler)
        self._window = TimeSeriesWindow(capacity)
        self.lines_parsed = 0
        self.lines_dropped = 0

    # ------------------------------------------------------------------ state
    @property
    def handshake_complete(self) -> bool:
        return self._gate.connected

    @property
    def gate_state(self) -> GateState:
        return self._gate.state

    @property
    def window(self) -> TimeSeriesWindow:
        return self._window

    @property
    def pending(self) -> bytes:
        return self._reassembler.pending

    @property
    def state(self) -> StreamState:
        return StreamState(
            handshake_complete=self._gate.connected,
            pending=self._reassembler.pending,
        )

    # ------------------------------------------------------------------ ingest
    def on_bytes_available(self, raw: bytes) -> None:
        """Run one transport chunk through the pipeline to completion."""
        if not raw:
            return

        if not self._gate.connected:
            self._gate.feed(raw)
            return

        with time_block(f"ingest {len(raw)} bytes"):
            for line in self._reassembler.feed(raw):
                self._handle_line(line)

    def _handle_line(self, line: bytes) -> None:
        logger.debug("Received: %r", line)
        result = parse_bytes(line)
        if isinstance(result, ParseFailure):
            self.lines_dropped += 1
            logger.warning("Dropping telemetry line %r (%s)", result.line, result.reason)
            return

        self.lines_parsed += 1
        self._publish(result)

    def _publish(self, reading: Reading) -> None:
        if self._on_reading_parsed is not None:
            try:
                self._on_reading_parsed(reading.temperature, reading.heart_rate, reading.spo2)
            except Exception:
                logger.exception("Reading callback failed for %r", reading)

        self._window.append(reading.temperature)

        if self._on_sample_appended is not None:
            try:
                self._on_sample_appended(self._window.snapshot())
            except Exception:
                logger.exception("Sample callback failed")

    # ------------------------------------------------------------------ session
    def reset(self) -> None:
        """Forget the handshake, the partial line, and every sample (reconnect)."""
        self._gate.reset()
        self._reassembler.clear()
        self._window.clear()
        self.lines_parsed = 0
        self.lines_dropped = 0
        logger.info("Stream session reset; awaiting greeting")
