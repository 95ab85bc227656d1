"""
The pulse oximeter firmware prints one text line per measurement:

  T: 36.6, bpm: 72, SPO2: 98

  - T    : float body temperature in °C
  - bpm  : int   pulse rate in beats per minute
  - SPO2 : int   oxygen saturation in percent

Before it starts streaming telemetry the device announces itself with the
literal greeting ``PulseOximeter`` (see :mod:`pulsemon.core.handshake`).

``parse_line()`` turns one such line into a :class:`Reading`. Lines that do
not match return a :class:`ParseFailure` so callers can drop them without
raising exceptions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

GREETING_TOKEN = b"PulseOximeter"

# Labels are case-sensitive and the pattern may appear anywhere in the line.
_RECORD_RE = re.compile(r"T: ([\d.]+), bpm: (\d+), SPO2: (\d+)")


@dataclass(frozen=True)
class Reading:
    temperature: float
    heart_rate: int
    spo2: int


@dataclass(frozen=True)
class ParseFailure:
    """Why a candidate line was rejected; returned, never raised."""

    line: str
    reason: str


def parse_line(line: str) -> Reading | ParseFailure:
    """
    Parse a single trimmed telemetry line into a :class:`Reading`.

    Leading and trailing noise around the record is tolerated. A captured
    temperature such as ``"1.2.3"`` matches the character class but is not a
    float; that case fails as a whole instead of yielding a partial reading.
    """
    match = _RECORD_RE.search(line)
    if match is None:
        return ParseFailure(line=line, reason="no telemetry record in line")

    temp_raw, bpm_raw, spo2_raw = match.groups()
    try:
        temperature = float(temp_raw)
        heart_rate = int(bpm_raw)
        spo2 = int(spo2_raw)
    except ValueError as exc:
        return ParseFailure(line=line, reason=f"bad numeric field ({exc})")

    return Reading(temperature=temperature, heart_rate=heart_rate, spo2=spo2)


def parse_bytes(raw: bytes) -> Reading | ParseFailure:
    """Decode one reassembled line (UTF-8, lenient) and parse it."""
    text = raw.decode("utf-8", errors="replace").strip()
    return parse_line(text)


def format_reading_labels(reading: Reading) -> tuple[str, str, str]:
    """Return the (temperature, pulse rate, SpO2) label texts for the GUI."""
    return (
        f"Temperature: {reading.temperature:g}°C",
        f"PRbpm: {reading.heart_rate}",
        f"SpO2: {reading.spo2}%",
    )
