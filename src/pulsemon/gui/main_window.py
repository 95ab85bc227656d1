"""Main window for the PulseMon GUI."""

from __future__ import annotations

import logging
from typing import List, Optional

import pyqtgraph as pg
from PySide6.QtCore import Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..config import PulseMonConfig
from ..core import Sample
from ..core.timeseries_window import samples_to_arrays
from ..sensors.pulse_oximeter import Reading, format_reading_labels
from .serial_controller import SerialController

_BACKGROUND = (53, 53, 53)


class MainWindow(QMainWindow):
    """Latest temperature / pulse rate / SpO2 plus a sliding temperature chart."""

    def __init__(self, config: PulseMonConfig | None = None) -> None:
        super().__init__()
        self.setWindowTitle("PulseMon")
        self._config = (config or PulseMonConfig()).sanitized()
        self._logger = logging.getLogger(__name__)

        self.controller = SerialController(self._config, observer=self, parent=self)
        self._capacity = self.controller.ingestor.window.capacity

        self._build_ui()
        self.controller.connected.connect(self._on_connected)
        self.controller.port_detected.connect(self._on_port_detected)
        self.controller.disconnected.connect(self._on_disconnected)
        self.controller.handshake_completed.connect(self._on_handshake_completed)
        self.controller.error.connect(self._on_error)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.controller.stop(wait=True)
        super().closeEvent(event)

    # ------------------------------------------------------------------ layout
    def _build_ui(self) -> None:
        container = QWidget()
        layout = QVBoxLayout(container)

        controls = QHBoxLayout()
        controls.addWidget(QLabel("Port:"))
        self.port_combo = QComboBox()
        self.port_combo.setEditable(True)
        controls.addWidget(self.port_combo, 1)
        self.scan_button = QPushButton("Scan")
        self.scan_button.clicked.connect(self.refresh_ports)
        controls.addWidget(self.scan_button)
        self.connect_button = QPushButton("Connect")
        self.connect_button.clicked.connect(self._on_connect_clicked)
        controls.addWidget(self.connect_button)
        layout.addLayout(controls)

        readouts = QHBoxLayout()
        self.label_temperature = QLabel("Temperature: --")
        self.label_bpm = QLabel("PRbpm: --")
        self.label_spo2 = QLabel("SpO2: --")
        for label in (self.label_temperature, self.label_bpm, self.label_spo2):
            readouts.addWidget(label)
        layout.addLayout(readouts)

        self.plot_widget = pg.PlotWidget(title="Temperature Data")
        self.plot_widget.setBackground(_BACKGROUND)
        self.plot_widget.setLabel("bottom", "Time")
        self.plot_widget.setLabel("left", "Temperature (°C)")
        self.plot_widget.setYRange(self._config.chart_min_temp, self._config.chart_max_temp, padding=0)
        self.plot_widget.setXRange(0, self._capacity - 1, padding=0)
        self.plot_widget.setMouseEnabled(x=False, y=False)
        self._curve = self.plot_widget.plot([], [], pen=pg.mkPen("w", width=2))
        layout.addWidget(self.plot_widget, 1)

        self.setCentralWidget(container)
        self.statusBar().showMessage("Disconnected")
        self.refresh_ports()

    @Slot()
    def refresh_ports(self) -> None:
        current = self.port_combo.currentText() or self._config.port or ""
        self.port_combo.clear()
        ports = self.controller.available_ports()
        self.port_combo.addItems(ports)
        if current:
            if current not in ports:
                self.port_combo.addItem(current)
            self.port_combo.setCurrentText(current)

    # ------------------------------------------------------------------ session
    def connect_device(self, port: Optional[str] = None) -> None:
        """Start (or restart) the session; clears the readouts and chart."""
        self._clear_display()
        self.controller.connect_port(port or self.port_combo.currentText() or None)

    def auto_connect(self) -> None:
        """Search every port for the device in the reader thread, then stream from it."""
        self._clear_display()
        self.controller.detect_and_connect()
        self.statusBar().showMessage("Searching for pulse oximeter...")

    @Slot()
    def _on_connect_clicked(self) -> None:
        self.connect_device()

    def _clear_display(self) -> None:
        self.label_temperature.setText("Temperature: --")
        self.label_bpm.setText("PRbpm: --")
        self.label_spo2.setText("SpO2: --")
        self._curve.setData([], [])
        self.plot_widget.setXRange(0, self._capacity - 1, padding=0)

    # ------------------------------------------------------------------ observer
    def on_reading_parsed(self, temperature: float, heart_rate: int, spo2: int) -> None:
        texts = format_reading_labels(Reading(temperature, heart_rate, spo2))
        for label, text in zip((self.label_temperature, self.label_bpm, self.label_spo2), texts):
            label.setText(text)

    def on_sample_appended(self, snapshot: List[Sample]) -> None:
        if not snapshot:
            return
        xs, ys = samples_to_arrays(snapshot)
        self._curve.setData(xs, ys)
        start = max(0, int(xs[-1]) - self._capacity + 1)
        self.plot_widget.setXRange(start, start + self._capacity - 1, padding=0)

    # ------------------------------------------------------------------ status
    @Slot(str)
    def _on_connected(self, port: str) -> None:
        self.connect_button.setText("Reconnect")
        self.statusBar().showMessage(f"{port}: waiting for device greeting")

    @Slot(str)
    def _on_port_detected(self, port: str) -> None:
        self.port_combo.setCurrentText(port)
        self.statusBar().showMessage(f"Pulse oximeter found on {port}")

    @Slot()
    def _on_disconnected(self) -> None:
        self.connect_button.setText("Connect")
        self.statusBar().showMessage("Disconnected")

    @Slot()
    def _on_handshake_completed(self) -> None:
        self.statusBar().showMessage(f"{self.controller.port}: receiving telemetry")

    @Slot(str)
    def _on_error(self, message: str) -> None:
        self._logger.error(message)
        self.statusBar().showMessage(message)
