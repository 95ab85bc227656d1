from __future__ import annotations

import logging

import pytest

from pulsemon.core import GateState, Sample, StreamIngestor, StreamState


class RecordingObserver:
    def __init__(self) -> None:
        self.readings: list[tuple[float, int, int]] = []
        self.snapshots: list[list[Sample]] = []

    def on_reading_parsed(self, temperature: float, heart_rate: int, spo2: int) -> None:
        self.readings.append((temperature, heart_rate, spo2))

    def on_sample_appended(self, snapshot: list[Sample]) -> None:
        self.snapshots.append(snapshot)


@pytest.fixture()
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture()
def ingestor(observer: RecordingObserver) -> StreamIngestor:
    return StreamIngestor(observer)


def test_end_to_end_partial_record(ingestor: StreamIngestor, observer: RecordingObserver) -> None:
    ingestor.on_bytes_available(b"PulseOximeter\n")
    ingestor.on_bytes_available(b"T: 37.0, bpm: 80, SPO2: 99\nT: 37")
    ingestor.on_bytes_available(b".1, bpm: 81, SPO2: 97\n")

    assert observer.readings == [(37.0, 80, 99), (37.1, 81, 97)]
    assert len(ingestor.window) == 2
    assert [s.value for s in ingestor.window.snapshot()] == [37.0, 37.1]
    assert ingestor.pending == b""


def test_telemetry_before_greeting_is_ignored(ingestor: StreamIngestor, observer: RecordingObserver) -> None:
    for _ in range(10):
        ingestor.on_bytes_available(b"T: 36.6, bpm: 72, SPO2: 98\n")

    assert observer.readings == []
    assert len(ingestor.window) == 0
    assert ingestor.gate_state is GateState.AWAITING_GREETING


def test_pending_has_no_newline_before_greeting(ingestor: StreamIngestor) -> None:
    for _ in range(1000):
        ingestor.on_bytes_available(b"T: 36.6, bpm: 72, SPO2: 98\n")
    ingestor.on_bytes_available(b"T: 36.7, bpm")

    state = ingestor.state
    assert not state.handshake_complete
    assert b"\n" not in state.pending
    assert state.pending == b"T: 36.7, bpm"


def test_records_in_greeting_chunk_are_sacrificed(ingestor: StreamIngestor, observer: RecordingObserver) -> None:
    ingestor.on_bytes_available(b"T: 36.0, bpm: 70, SPO2: 97\nPulseOximeter\nT: 36.6, bpm: 72, SPO2: 98\n")
    assert ingestor.handshake_complete
    assert observer.readings == []

    ingestor.on_bytes_available(b"T: 36.7, bpm: 73, SPO2: 99\n")
    assert observer.readings == [(36.7, 73, 99)]


def test_noise_greeting_noise_forwards_nothing(ingestor: StreamIngestor, observer: RecordingObserver) -> None:
    ingestor.on_bytes_available(b"noise PulseOximeter noise\n")
    assert ingestor.state == StreamState(handshake_complete=True, pending=b"")
    assert observer.readings == []
    assert ingestor.lines_dropped == 0


def test_bad_line_is_logged_and_skipped(
    ingestor: StreamIngestor,
    observer: RecordingObserver,
    caplog: pytest.LogCaptureFixture,
) -> None:
    ingestor.on_bytes_available(b"PulseOximeter")
    with caplog.at_level(logging.WARNING, logger="pulsemon.core.ingestor"):
        ingestor.on_bytes_available(b"garbage\nT: 36.6, bpm: 72, SPO2: 98\n")

    assert observer.readings == [(36.6, 72, 98)]
    assert ingestor.lines_dropped == 1
    assert ingestor.lines_parsed == 1
    assert any("garbage" in rec.getMessage() for rec in caplog.records)


def test_many_lines_in_one_chunk(ingestor: StreamIngestor, observer: RecordingObserver) -> None:
    ingestor.on_bytes_available(b"PulseOximeter")
    chunk = b"".join(b"T: %d.5, bpm: 70, SPO2: 98\n" % (30 + i) for i in range(30))
    ingestor.on_bytes_available(chunk)

    assert len(observer.readings) == 30
    assert len(ingestor.window) == 25
    assert ingestor.window.snapshot()[0] == Sample(index=5, value=35.5)
    assert len(observer.snapshots[-1]) == 25


def test_reading_callback_precedes_sample_callback() -> None:
    events: list[str] = []
    ingestor = StreamIngestor(
        on_reading_parsed=lambda t, hr, s: events.append("reading"),
        on_sample_appended=lambda snap: events.append(f"sample:{len(snap)}"),
    )
    ingestor.on_bytes_available(b"PulseOximeter")
    ingestor.on_bytes_available(b"T: 36.6, bpm: 72, SPO2: 98\n")
    assert events == ["reading", "sample:1"]


def test_empty_and_partial_chunks_are_not_errors(ingestor: StreamIngestor, observer: RecordingObserver) -> None:
    ingestor.on_bytes_available(b"")
    ingestor.on_bytes_available(b"PulseOximeter")
    ingestor.on_bytes_available(b"")
    ingestor.on_bytes_available(b"T: 36")
    assert observer.readings == []
    assert ingestor.pending == b"T: 36"


def test_observer_errors_do_not_escape() -> None:
    def _boom(*_args) -> None:
        raise RuntimeError("display gone")

    ingestor = StreamIngestor(on_reading_parsed=_boom, on_sample_appended=_boom)
    ingestor.on_bytes_available(b"PulseOximeter")
    ingestor.on_bytes_available(b"T: 36.6, bpm: 72, SPO2: 98\n")
    assert len(ingestor.window) == 1


def test_reset_clears_session(ingestor: StreamIngestor, observer: RecordingObserver) -> None:
    ingestor.on_bytes_available(b"PulseOximeter")
    ingestor.on_bytes_available(b"T: 36.6, bpm: 72, SPO2: 98\nT: 36.7, bpm: 7")

    ingestor.reset()

    assert len(ingestor.window) == 0
    assert ingestor.gate_state is GateState.AWAITING_GREETING
    assert ingestor.state == StreamState(handshake_complete=False, pending=b"")

    # Old partial line must not leak into the new session.
    ingestor.on_bytes_available(b"PulseOximeter")
    ingestor.on_bytes_available(b"3, SPO2: 98\nT: 38.0, bpm: 90, SPO2: 96\n")
    assert observer.readings[-1] == (38.0, 90, 96)
    assert ingestor.window.snapshot() == [Sample(index=0, value=38.0)]


def test_works_without_observer() -> None:
    ingestor = StreamIngestor()
    ingestor.on_bytes_available(b"PulseOximeter")
    ingestor.on_bytes_available(b"T: 36.6, bpm: 72, SPO2: 98\n")
    assert ingestor.window.latest() == Sample(index=0, value=36.6)
