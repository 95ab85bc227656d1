"""Newline framing for byte chunks delivered by the serial transport."""

from __future__ import annotations

from typing import List

NEWLINE = b"\n"


class LineReassembler:
    """
    Accumulate raw byte fragments and emit complete ``\\n``-terminated lines.

    The transport hands over whatever happened to be in the UART buffer, so a
    record may arrive split over several chunks, several records may arrive
    in one chunk, or a chunk may be empty. ``pending`` always holds exactly
    the bytes after the last newline seen (or everything, if none yet).
    """

    __slots__ = ("_pending",)

    def __init__(self) -> None:
        self._pending = bytearray()

    @property
    def pending(self) -> bytes:
        return bytes(self._pending)

    def tail(self, size: int) -> bytes:
        """Return the last ``size`` pending bytes (fewer if less is buffered)."""
        if size <= 0:
            return b""
        return bytes(self._pending[-size:])

    def discard_lines(self, raw: bytes) -> int:
        """
        Buffer ``raw`` like :meth:`feed` but drop the completed lines.

        Used before the handshake, when lines must not be parsed. Returns the
        number of bytes dropped.
        """
        if not raw:
            return 0
        cut = raw.rfind(NEWLINE)
        if cut < 0:
            self._pending += raw
            return 0
        dropped = len(self._pending) + cut + 1
        self._pending = bytearray(raw[cut + 1 :])
        return dropped

    def feed(self, raw: bytes) -> List[bytes]:
        """
        Append ``raw`` and return the lines it completes, in arrival order.

        Newlines are stripped but other whitespace is kept. The final segment
        after the last newline, even when empty, stays pending and is never
        reported as a line.
        """
        if not raw:
            return []
        self._pending += raw
        if NEWLINE not in raw:
            return []

        *lines, tail = bytes(self._pending).split(NEWLINE)
        self._pending = bytearray(tail)
        return lines

    def clear(self) -> None:
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)
