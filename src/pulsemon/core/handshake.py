"""One-shot greeting detection in front of the telemetry parser."""

from __future__ import annotations

import enum
import logging

from ..sensors.pulse_oximeter import GREETING_TOKEN
from .line_reassembler import LineReassembler

logger = logging.getLogger(__name__)


class GateState(enum.Enum):
    AWAITING_GREETING = "awaiting_greeting"
    CONNECTED = "connected"


class HandshakeGate:
    """
    Hold back record parsing until the device has announced itself.

    Bytes received before the greeting share the reassembler's pending
    buffer: completed lines are dropped unparsed and only the bytes after
    the last newline are kept. Each chunk is searched for
    :data:`GREETING_TOKEN` together with the end of that pending tail, so a
    token split over several chunks is still found once both halves have
    arrived (the token holds no newline, so trimming never cuts it). On the
    first hit the gate switches to ``CONNECTED`` and every buffered byte is
    dropped, including telemetry that arrived in the same chunk as the
    greeting.

    There is no timeout: a device that never sends the greeting keeps the
    gate in ``AWAITING_GREETING`` until :meth:`reset`. Add a watchdog on top
    if that matters for your setup.
    """

    def __init__(self, reassembler: LineReassembler, token: bytes = GREETING_TOKEN) -> None:
        if not token:
            raise ValueError("greeting token must not be empty")
        if b"\n" in token:
            raise ValueError("greeting token must not contain a newline")
        self._reassembler = reassembler
        self._token = bytes(token)
        self._state = GateState.AWAITING_GREETING

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is GateState.CONNECTED

    def feed(self, raw: bytes) -> bool:
        """
        Buffer ``raw`` while waiting for the greeting.

        Returns ``True`` only for the call that completes the handshake.
        Nothing is forwarded downstream from that call. Once connected the
        gate is a no-op and callers should feed the reassembler directly.
        """
        if self.connected or not raw:
            return False

        window = self._reassembler.tail(len(self._token) - 1) + raw
        if self._token not in window:
            dropped = self._reassembler.discard_lines(raw)
            if dropped:
                logger.debug("Dropped %d bytes received before the greeting", dropped)
            return False

        discarded = len(self._reassembler) + len(raw)
        self._reassembler.clear()
        self._state = GateState.CONNECTED
        logger.info(
            "Handshake complete: greeting %r seen, discarded %d buffered bytes",
            self._token.decode("ascii", errors="replace"),
            discarded,
        )
        return True

    def reset(self) -> None:
        self._state = GateState.AWAITING_GREETING
