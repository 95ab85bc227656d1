from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, QThread, Signal, Slot

from ..config import PulseMonConfig
from ..core import ReadingObserver, StreamIngestor
from ..transport import SerialTransport, scan_ports
from ..transport.read_worker import SerialReadWorker

logger = logging.getLogger(__name__)


class SerialController(QObject):
    """Non-visual controller that owns the device session.

    It runs a :class:`SerialReadWorker` in a QThread and feeds every chunk
    into one :class:`StreamIngestor` on the GUI thread. Reconnecting stops
    the worker, resets the ingestor, and starts a fresh worker with a new
    session id so chunks still queued from the old port are ignored.
    """

    connected = Signal(str)
    port_detected = Signal(str)
    disconnected = Signal()
    handshake_completed = Signal()
    error = Signal(str)

    def __init__(
        self,
        config: PulseMonConfig,
        observer: Optional[ReadingObserver] = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._config = config.sanitized()
        self.ingestor = StreamIngestor(observer)
        self._session_id = 0
        self._thread: Optional[QThread] = None
        self._worker: Optional[SerialReadWorker] = None
        self._port: Optional[str] = None

    @property
    def port(self) -> Optional[str]:
        return self._port

    @property
    def is_running(self) -> bool:
        return self._worker is not None

    def available_ports(self) -> list[str]:
        return scan_ports()

    # ------------------------------------------------------------------ session
    def connect_port(self, port: Optional[str] = None) -> None:
        """(Re)connect to ``port``; the previous session's state is discarded."""
        self._begin_session()

        target = port or self._config.port
        if not target:
            self.error.emit("No serial port selected")
            return

        worker = SerialReadWorker(
            SerialTransport(self._config, target),
            self._session_id,
            poll_interval_ms=self._config.read_poll_ms,
        )
        self._port = target
        self._start_worker(worker)
        logger.info("Connecting to %s (session %d)", target, self._session_id)
        self.connected.emit(target)

    def detect_and_connect(self) -> None:
        """
        Search all ports for the greeting in the reader thread and stream from
        the first match. The greeting read during the search is delivered to
        the ingestor, so the handshake completes without a second greeting.
        """
        self._begin_session()
        worker = SerialReadWorker.for_detection(
            self._config,
            self._session_id,
            poll_interval_ms=self._config.read_poll_ms,
        )
        worker.port_found.connect(self._on_port_found)
        self._port = None
        self._start_worker(worker)
        logger.info("Searching serial ports for the device (session %d)", self._session_id)

    def _begin_session(self) -> None:
        self.stop(wait=True)
        self.ingestor.reset()
        self._session_id += 1

    def _start_worker(self, worker: SerialReadWorker) -> None:
        thread = QThread(self)
        worker.moveToThread(thread)
        thread.started.connect(worker.start)
        worker.bytes_received.connect(self._on_bytes_received)
        worker.error.connect(self._on_worker_error)
        worker.finished.connect(self._on_worker_finished)
        worker.finished.connect(worker.deleteLater)
        worker.finished.connect(thread.quit)
        thread.finished.connect(thread.deleteLater)

        self._thread = thread
        self._worker = worker
        thread.start()

    def stop(self, *, wait: bool = False, wait_timeout_ms: int = 2000) -> None:
        worker, thread = self._worker, self._thread
        self._worker = None
        self._thread = None
        if worker is None:
            return
        # Flag flip only; the worker's loop checks it between reads.
        worker.stop()
        if wait and thread is not None:
            thread.wait(max(0, int(wait_timeout_ms)))
        self.disconnected.emit()

    # ------------------------------------------------------------------ slots
    @Slot(int, bytes)
    def _on_bytes_received(self, session_id: int, chunk: bytes) -> None:
        if session_id != self._session_id or self._worker is None:
            return
        was_connected = self.ingestor.handshake_complete
        self.ingestor.on_bytes_available(bytes(chunk))
        if not was_connected and self.ingestor.handshake_complete:
            self.handshake_completed.emit()

    @Slot(str)
    def _on_port_found(self, port: str) -> None:
        if self.sender() is not self._worker:
            return
        self._port = port
        self.port_detected.emit(port)
        self.connected.emit(port)

    @Slot(str)
    def _on_worker_error(self, message: str) -> None:
        logger.error("Serial worker error: %s", message)
        self.error.emit(message)

    @Slot()
    def _on_worker_finished(self) -> None:
        if self.sender() is self._worker:
            self._worker = None
            self._thread = None
            self.disconnected.emit()


__all__ = ["SerialController"]
