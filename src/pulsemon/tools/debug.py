"""Minimal helpers for opt-in debug/instrumentation hooks and log setup."""

from __future__ import annotations

import logging
import os
import sys
import time
from contextlib import contextmanager
from typing import Callable, Iterator

DEBUG_PULSEMON = os.getenv("PULSEMON_DEBUG", "").lower() in {"1", "true", "yes", "on"}

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def debug_enabled() -> bool:
    """Return True when lightweight instrumentation should run."""
    return DEBUG_PULSEMON


def configure_logging(level: int | str = logging.INFO) -> None:
    """Send log records to stdout; ``PULSEMON_DEBUG`` forces DEBUG level."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError("unknown log level")
    if DEBUG_PULSEMON:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


@contextmanager
def time_block(label: str, *, emitter: Callable[[str], None] | None = None) -> Iterator[None]:
    """
    Context manager that emits elapsed time when debugging is enabled.

    The overhead is a flag check when disabled.
    """
    if not DEBUG_PULSEMON:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        target = emitter or logging.getLogger("pulsemon.debug").debug
        target(f"[DEBUG] {label} took {elapsed_ms:.3f} ms")
