from __future__ import annotations

import pytest

pytest.importorskip("PySide6")
pytest.importorskip("pyqtgraph")

from pulsemon.gui.application import _parse_cli_args, resolve_config  # noqa: E402


def test_cli_overrides_config_file(tmp_path) -> None:
    cfg_path = tmp_path / "pulsemon.yaml"
    cfg_path.write_text("serial:\n  port: COM4\n  baud_rate: 9600\n", encoding="utf-8")

    args, qt_argv = _parse_cli_args(
        ["pulsemon", "--config", str(cfg_path), "--baud", "115200", "-style", "fusion"]
    )
    cfg = resolve_config(args)

    assert cfg.port == "COM4"
    assert cfg.baud_rate == 115200
    assert not cfg.auto_detect
    assert qt_argv == ["pulsemon", "-style", "fusion"]


def test_auto_detect_flag() -> None:
    args, _ = _parse_cli_args(["pulsemon", "--auto-detect", "--port", "/dev/ttyACM0"])
    cfg = resolve_config(args)
    assert cfg.auto_detect
    assert cfg.port == "/dev/ttyACM0"
