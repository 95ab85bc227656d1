"""Thin pyserial wrapper for the oximeter's UART link."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

import serial
from serial.tools import list_ports

from ..config import PulseMonConfig
from ..sensors.pulse_oximeter import GREETING_TOKEN

logger = logging.getLogger(__name__)

SerialFactory = Callable[[], serial.Serial]


class TransportError(RuntimeError):
    """Raised when the serial port cannot be opened, read, or written."""


class SerialTransport:
    """
    Open/configure/read primitives for one serial port.

    Reads never block: :meth:`read_available` returns whatever is waiting in
    the driver buffer, or ``b""`` when nothing has arrived yet.
    """

    def __init__(
        self,
        config: PulseMonConfig,
        port: Optional[str] = None,
        *,
        serial_factory: SerialFactory = serial.Serial,
    ) -> None:
        self._config = config.sanitized()
        self.port = port or self._config.port
        self._serial_factory = serial_factory
        self._serial: serial.Serial | None = None

    # ------------------------------------------------------------------ connection
    @property
    def is_open(self) -> bool:
        return self._serial is not None and bool(self._serial.is_open)

    def open(self) -> None:
        if self.is_open:
            return
        if not self.port:
            raise TransportError("No serial port configured")

        cfg = self._config
        ser = self._serial_factory()
        ser.port = self.port
        ser.baudrate = cfg.baud_rate
        ser.bytesize = cfg.data_bits
        ser.parity = cfg.parity
        ser.stopbits = cfg.stop_bits
        ser.xonxoff = False
        ser.rtscts = False
        ser.dsrdtr = False
        ser.timeout = 0
        try:
            ser.open()
        except (serial.SerialException, OSError) as exc:
            logger.error("Failed to open serial port %s: %s", self.port, exc)
            raise TransportError(f"Failed to open {self.port}: {exc}") from exc

        self._serial = ser
        logger.info(
            "Opened serial port %s at %d baud (%d%s%s)",
            self.port,
            cfg.baud_rate,
            cfg.data_bits,
            cfg.parity,
            cfg.stop_bits,
        )

    def close(self) -> None:
        ser, self._serial = self._serial, None
        if ser is None:
            return
        try:
            ser.close()
        except (serial.SerialException, OSError) as exc:
            logger.warning("Error closing serial port %s: %s", self.port, exc)
        else:
            logger.info("Closed serial port %s", self.port)

    # ------------------------------------------------------------------ io
    def read_available(self) -> bytes:
        ser = self._require_open()
        try:
            waiting = ser.in_waiting
            if not waiting:
                return b""
            return bytes(ser.read(waiting))
        except (serial.SerialException, OSError) as exc:
            raise TransportError(f"Read from {self.port} failed: {exc}") from exc

    def write(self, data: bytes) -> int:
        ser = self._require_open()
        try:
            return int(ser.write(data) or 0)
        except (serial.SerialException, OSError) as exc:
            raise TransportError(f"Write to {self.port} failed: {exc}") from exc

    def _require_open(self) -> serial.Serial:
        if self._serial is None:
            raise TransportError("Serial port is not open")
        return self._serial

    def __enter__(self) -> "SerialTransport":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def scan_ports() -> List[str]:
    """Return device names of all serial ports visible to the OS, sorted."""
    return sorted(port.device for port in list_ports.comports())


@dataclass
class DetectedDevice:
    """Open transport to the port that sent the greeting, plus what it sent."""

    port: str
    transport: SerialTransport
    received: bytes


def find_device(
    config: PulseMonConfig,
    candidates: Iterable[str] | None = None,
    *,
    serial_factory: SerialFactory = serial.Serial,
    poll_interval_s: float = 0.05,
    should_stop: Callable[[], bool] | None = None,
) -> Optional[DetectedDevice]:
    """
    Search ``candidates`` (default: every port) for the device greeting.

    Each port is opened with the configured framing and read for up to
    ``detect_timeout_s`` seconds. The first port whose received bytes contain
    the greeting token is returned still open, together with every byte read
    from it, so the session can start from the greeting instead of waiting
    for a second one. The caller owns (and must close) the returned
    transport. Ports that fail to open are skipped; the others are closed.
    """
    cfg = config.sanitized()
    ports = list(candidates) if candidates is not None else scan_ports()
    for port in ports:
        if should_stop is not None and should_stop():
            break
        transport = SerialTransport(cfg, port, serial_factory=serial_factory)
        try:
            transport.open()
        except TransportError:
            continue

        received = bytearray()
        deadline = time.monotonic() + cfg.detect_timeout_s
        try:
            while time.monotonic() < deadline:
                if should_stop is not None and should_stop():
                    break
                received += transport.read_available()
                if GREETING_TOKEN in received:
                    logger.info("Found pulse oximeter on %s", port)
                    return DetectedDevice(port=port, transport=transport, received=bytes(received))
                time.sleep(poll_interval_s)
        except TransportError as exc:
            logger.warning("Search of %s aborted: %s", port, exc)
        transport.close()
        logger.debug("No greeting on %s after %.1f s", port, cfg.detect_timeout_s)
    return None
