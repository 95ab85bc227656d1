"""Core streaming pipeline: framing, handshake, and the chart window.

This package sits between the serial transport and the GUI. Raw byte chunks
enter through :class:`StreamIngestor`, which gates them on the device
greeting, reassembles lines, parses readings, and keeps the most recent
temperatures in a :class:`TimeSeriesWindow`.
"""

from .handshake import GateState, HandshakeGate
from .ingestor import ReadingObserver, StreamIngestor
from .line_reassembler import LineReassembler
from .models import Sample, StreamState
from .timeseries_window import WINDOW_CAPACITY, TimeSeriesWindow

__all__ = [
    "GateState",
    "HandshakeGate",
    "LineReassembler",
    "ReadingObserver",
    "Sample",
    "StreamIngestor",
    "StreamState",
    "TimeSeriesWindow",
    "WINDOW_CAPACITY",
]
