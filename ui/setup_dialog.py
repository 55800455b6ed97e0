from __future__ import annotations
from PyQt6.QtWidgets import (
    QDialog, QFormLayout, QComboBox, QDialogButtonBox, QSpinBox, QCheckBox,
)
from core.config import MIN_RESYNC_PACING_MS, AppConfig
from midi.device import guess_dt_port, list_input_ports, list_output_ports


class SetupDialog(QDialog):
    """Pick the MIDI input/output ports the amp is attached to."""

    def __init__(
        self,
        config: AppConfig,
        in_ports: list[str] | None = None,
        out_ports: list[str] | None = None,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("MIDI Setup")
        self._config = config
        self._in_ports = in_ports if in_ports is not None else list_input_ports()
        self._out_ports = out_ports if out_ports is not None else list_output_ports()
        self._build_ui()
        self._load_from_config()

    @property
    def selected_in_port(self) -> str:
        return self.in_combo.currentText()

    @property
    def selected_out_port(self) -> str:
        return self.out_combo.currentText()

    def _build_ui(self) -> None:
        layout = QFormLayout(self)

        self.in_combo = QComboBox()
        self.in_combo.addItems(self._in_ports)
        layout.addRow("MIDI In:", self.in_combo)

        self.out_combo = QComboBox()
        self.out_combo.addItems(self._out_ports)
        layout.addRow("MIDI Out:", self.out_combo)

        self.pacing_spin = QSpinBox()
        self.pacing_spin.setRange(MIN_RESYNC_PACING_MS, 1000)
        self.pacing_spin.setSuffix(" ms")
        layout.addRow("Resync pacing:", self.pacing_spin)

        self.traffic_check = QCheckBox("Log MIDI traffic")
        layout.addRow(self.traffic_check)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        self.ok_button = buttons.button(QDialogButtonBox.StandardButton.Ok)
        self.ok_button.setEnabled(bool(self._in_ports) and bool(self._out_ports))
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    def _select(self, combo: QComboBox, ports: list[str], configured: str) -> None:
        idx = combo.findText(configured) if configured else -1
        if idx < 0:
            guess = guess_dt_port(ports)
            idx = guess if guess is not None else -1
        if idx >= 0:
            combo.setCurrentIndex(idx)

    def _load_from_config(self) -> None:
        self._select(self.in_combo, self._in_ports, self._config.midi_in_port)
        self._select(self.out_combo, self._out_ports, self._config.midi_out_port)
        self.pacing_spin.setValue(self._config.resync_pacing_ms)
        self.traffic_check.setChecked(self._config.log_midi_traffic)

    def _on_accept(self) -> None:
        self._config.midi_in_port = self.selected_in_port
        self._config.midi_out_port = self.selected_out_port
        self._config.resync_pacing_ms = self.pacing_spin.value()
        self._config.log_midi_traffic = self.traffic_check.isChecked()
        self._config.save()
        self.accept()
