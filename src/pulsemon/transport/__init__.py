"""Serial transport: opening the UART, discovering the device, reading bytes.

Nothing here parses telemetry; chunks are handed unchanged to
:class:`pulsemon.core.StreamIngestor`. The Qt worker lives in
:mod:`read_worker` and is imported separately so the transport stays usable
without a Qt installation at import time.
"""

from .serial_port import DetectedDevice, SerialTransport, TransportError, find_device, scan_ports

__all__ = ["DetectedDevice", "SerialTransport", "TransportError", "find_device", "scan_ports"]
