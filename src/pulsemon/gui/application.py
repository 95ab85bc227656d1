"""Qt application entry point for the PulseMon desktop GUI.

This module parses command-line options, loads the YAML configuration, sets
up logging, builds the :class:`~pulsemon.gui.main_window.MainWindow`, and
starts the Qt event loop. ``python main.py``, ``python -m
pulsemon.gui.application`` and the ``pulsemon`` console script all go
through ``main()`` here.
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from typing import Tuple

import pyqtgraph as pg
from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication

from ..config import PulseMonConfig, load_config
from ..tools.debug import configure_logging
from .main_window import MainWindow


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PulseMon serial pulse oximeter monitor")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML file with serial/display settings",
    )
    parser.add_argument(
        "--port",
        type=str,
        default=None,
        help="Serial port to open (overrides the config file)",
    )
    parser.add_argument(
        "--baud",
        type=int,
        default=None,
        help="Baud rate (default: 115200)",
    )
    parser.add_argument(
        "--auto-detect",
        action="store_true",
        help="Search all serial ports for the device greeting on startup",
    )
    parser.add_argument(
        "--no-connect",
        action="store_true",
        help="Start without opening the serial port",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="INFO",
        help="Logging verbosity (default: INFO)",
    )
    return parser


def _parse_cli_args(
    argv: list[str],
) -> tuple[argparse.Namespace, list[str]]:
    parser = _build_arg_parser()
    args, qt_args = parser.parse_known_args(argv[1:])
    qt_argv = [argv[0], *qt_args]
    return args, qt_argv


def resolve_config(args: argparse.Namespace) -> PulseMonConfig:
    """Merge the YAML config with command-line overrides."""
    cfg = load_config(args.config)
    overrides = {}
    if args.port:
        overrides["port"] = args.port
    if args.baud:
        overrides["baud_rate"] = args.baud
    if args.auto_detect:
        overrides["auto_detect"] = True
    if overrides:
        cfg = dataclasses.replace(cfg, **overrides)
    return cfg.sanitized()


def create_app(
    argv: list[str] | None = None,
    *,
    config: PulseMonConfig | None = None,
) -> Tuple[QApplication, MainWindow]:
    """
    Create the QApplication and main PulseMon window.

    Returns
    -------
    app:
        The QApplication instance (owned by caller).
    window:
        The main window, not yet connected to a port.
    """
    qt_args = argv if argv is not None else sys.argv
    pg.setConfigOptions(antialias=True)
    app = QApplication.instance() or QApplication(qt_args)
    window = MainWindow(config=config)
    return app, window


def main(argv: list[str] | None = None) -> None:
    raw_argv = argv if argv is not None else sys.argv
    args, qt_argv = _parse_cli_args(raw_argv)
    configure_logging(args.log_level)
    config = resolve_config(args)
    app, win = create_app(qt_argv, config=config)

    win.show()
    if not args.no_connect:
        # Defer until the event loop runs so the window is painted first.
        if config.auto_detect:
            QTimer.singleShot(0, win.auto_connect)
        else:
            QTimer.singleShot(0, win.connect_device)
    raise SystemExit(app.exec())


def run() -> None:
    """Console-script entry point."""
    main(sys.argv)


if __name__ == "__main__":
    main()
