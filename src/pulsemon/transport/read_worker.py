"""Threaded worker that polls the serial port and emits raw byte chunks."""

from __future__ import annotations

import time
from typing import Iterable, Optional

import serial
from PySide6.QtCore import QObject, Signal, Slot

from ..config import PulseMonConfig
from .serial_port import SerialFactory, SerialTransport, TransportError, find_device


class SerialReadWorker(QObject):
    """QObject-based worker that pulls bytes from a :class:`SerialTransport`.

    It is meant to live in its own QThread. Chunks are emitted through
    ``bytes_received`` together with the worker's ``session_id``; connected to
    a slot on the GUI thread, Qt's queued connection delivers them one at a
    time, in order, and the receiver can drop chunks from an older session
    that were still queued when it reconnected. Empty reads are not emitted.

    Built with :meth:`for_detection`, the worker first searches the serial
    ports in its own thread, emits ``port_found`` and then the bytes read
    during the search (greeting included) before it carries on reading from the
    same open port.
    """

    bytes_received = Signal(int, bytes)
    port_found = Signal(str)
    error = Signal(str)
    finished = Signal()

    def __init__(
        self,
        transport: Optional[SerialTransport],
        session_id: int = 0,
        *,
        poll_interval_ms: int = 20,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._transport = transport
        self.session_id = int(session_id)
        self._poll_interval_s = max(1, int(poll_interval_ms)) / 1000.0
        self._running = False
        self._detect_config: Optional[PulseMonConfig] = None
        self._candidates: Optional[list[str]] = None
        self._serial_factory: SerialFactory = serial.Serial

    @classmethod
    def for_detection(
        cls,
        config: PulseMonConfig,
        session_id: int = 0,
        *,
        candidates: Iterable[str] | None = None,
        serial_factory: SerialFactory = serial.Serial,
        poll_interval_ms: int = 20,
        parent: QObject | None = None,
    ) -> "SerialReadWorker":
        worker = cls(None, session_id, poll_interval_ms=poll_interval_ms, parent=parent)
        worker._detect_config = config
        worker._candidates = list(candidates) if candidates is not None else None
        worker._serial_factory = serial_factory
        return worker

    def _open(self) -> bytes:
        """Open the port (searching for it if needed); return bytes already read."""
        if self._transport is not None:
            self._transport.open()
            return b""

        found = find_device(
            self._detect_config or PulseMonConfig(),
            self._candidates,
            serial_factory=self._serial_factory,
            should_stop=lambda: not self._running,
        )
        if found is None:
            if not self._running:
                return b""
            raise TransportError("No pulse oximeter found on any serial port")
        self._transport = found.transport
        self.port_found.emit(found.port)
        return found.received

    @Slot()
    def start(self) -> None:
        """Entry point for the QThread: read until stopped or the port fails."""
        self._running = True
        try:
            preamble = self._open()
            if preamble:
                self.bytes_received.emit(self.session_id, preamble)
            while self._running:
                chunk = self._transport.read_available()
                if chunk:
                    self.bytes_received.emit(self.session_id, chunk)
                else:
                    time.sleep(self._poll_interval_s)
        except TransportError as exc:
            self.error.emit(str(exc))
        finally:
            self._running = False
            if self._transport is not None:
                self._transport.close()
            self.finished.emit()

    @Slot()
    def stop(self) -> None:
        """Request the reading loop (or the port search) to terminate."""
        self._running = False
