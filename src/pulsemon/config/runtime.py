"""Runtime configuration for the serial link and the monitor window."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

VALID_PARITIES = {"N", "E", "O", "M", "S"}
VALID_DATA_BITS = {5, 6, 7, 8}
VALID_STOP_BITS = {1, 1.5, 2}


@dataclass(slots=True)
class PulseMonConfig:
    """
    Serial port settings and display limits.

    The defaults match the oximeter firmware: 115200 baud, 8N1, no flow
    control. ``port`` may be ``None`` together with ``auto_detect`` to search
    every available port for the device greeting.
    """

    port: Optional[str] = "COM15"
    baud_rate: int = 115200
    data_bits: int = 8
    parity: str = "N"
    stop_bits: float = 1
    auto_detect: bool = False
    detect_timeout_s: float = 2.0
    read_poll_ms: int = 20

    chart_min_temp: float = 25.0
    chart_max_temp: float = 45.0

    def sanitized(self) -> PulseMonConfig:
        """Return a copy with limits applied; raises ``ValueError`` on nonsense."""
        parity = str(self.parity).strip().upper()[:1] or "N"
        if parity not in VALID_PARITIES:
            raise ValueError(f"Unsupported parity {self.parity!r}")
        data_bits = int(self.data_bits)
        if data_bits not in VALID_DATA_BITS:
            raise ValueError(f"Unsupported data_bits {self.data_bits!r}")
        stop_bits = float(self.stop_bits)
        if stop_bits not in VALID_STOP_BITS:
            raise ValueError(f"Unsupported stop_bits {self.stop_bits!r}")

        lo, hi = float(self.chart_min_temp), float(self.chart_max_temp)
        if hi < lo:
            lo, hi = hi, lo
        port = str(self.port).strip() if self.port else None
        return PulseMonConfig(
            port=port or None,
            baud_rate=max(1, int(self.baud_rate)),
            data_bits=data_bits,
            parity=parity,
            stop_bits=int(stop_bits) if stop_bits.is_integer() else stop_bits,
            auto_detect=bool(self.auto_detect),
            detect_timeout_s=max(0.1, float(self.detect_timeout_s)),
            read_poll_ms=max(1, int(self.read_poll_ms)),
            chart_min_temp=lo,
            chart_max_temp=hi,
        )


# Blocks whose keys are lifted to the top level, e.g. ``serial: {port: COM4}``.
_SECTIONS = ("serial", "display")


def _flatten(data: Mapping[str, Any]) -> Iterator[tuple[str, Any]]:
    for key, value in data.items():
        if key in _SECTIONS and isinstance(value, Mapping):
            yield from value.items()
        else:
            yield key, value


def config_from_mapping(data: Mapping[str, Any] | None) -> PulseMonConfig:
    """Build a sanitized :class:`PulseMonConfig` from a parsed YAML document."""
    allowed = {f.name for f in fields(PulseMonConfig)}
    values: dict[str, Any] = {}
    for name, value in _flatten(data or {}):
        if name in allowed:
            values[name] = value
        else:
            logger.debug("Ignoring unknown config key %r", name)
    return PulseMonConfig(**values).sanitized()


def load_config(path: str | Path | None) -> PulseMonConfig:
    """Read ``path`` as YAML; no path or a missing file yields the defaults."""
    cfg_path = None if path is None else Path(path).expanduser()
    if cfg_path is None or not cfg_path.is_file():
        return PulseMonConfig()

    document = yaml.safe_load(cfg_path.read_text(encoding="utf-8"))
    if document is None:
        document = {}
    elif not isinstance(document, Mapping):
        raise ValueError(f"{cfg_path}: top level must be a mapping, not {type(document).__name__}")
    logger.info("Loaded configuration from %s", cfg_path)
    return config_from_mapping(document)


__all__ = ["PulseMonConfig", "config_from_mapping", "load_config"]
