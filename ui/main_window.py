from __future__ import annotations
from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QHBoxLayout, QSplitter, QMessageBox,
    QToolBar, QDialog,
)
from PyQt6.QtGui import QAction
from PyQt6.QtCore import Qt, QTimer
from core.config import AppConfig
from core.logger import AppLogger
from midi.params import AmpChannel
from midi.session import AmpSession
from midi.sysex import ConnectionInfo
from ui.amp_panel import ChannelPanel, MasterPanel
from ui.log_panel import LogPanel
from ui.setup_dialog import SetupDialog

APP_TITLE = "DT Edit"
CONNECTION_POLL_MS = 1000


class MainWindow(QMainWindow):
    def __init__(
        self,
        config: AppConfig | None = None,
        session: AmpSession | None = None,
        logger: AppLogger | None = None,
        open_on_show: bool = True,
    ) -> None:
        super().__init__()
        self._config = config or AppConfig()
        self._logger = logger or AppLogger()
        self._session = session or AmpSession(config=self._config, logger=self._logger)
        self._open_on_show = open_on_show
        self._shown_once = False
        self.resize(1100, 800)
        if self._config.window_x is not None and self._config.window_y is not None:
            self.move(self._config.window_x, self._config.window_y)
        self._build_ui()
        self._connect_signals()
        self._update_title()

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(CONNECTION_POLL_MS)
        self._poll_timer.timeout.connect(self._session.check_connection)
        self._poll_timer.start()

    @property
    def session(self) -> AmpSession:
        return self._session

    @property
    def panels(self) -> list[ChannelPanel | MasterPanel]:
        return [self.channel_a_panel, self.channel_b_panel, self.master_panel]

    def _build_ui(self) -> None:
        toolbar = QToolBar("Main")
        toolbar.setMovable(False)
        self.setup_action = QAction("MIDI Setup...", self)
        self.setup_action.triggered.connect(self.show_setup_dialog)
        self.refresh_action = QAction("Refresh", self)
        self.refresh_action.triggered.connect(self._on_refresh)
        toolbar.addAction(self.setup_action)
        toolbar.addAction(self.refresh_action)
        self.addToolBar(toolbar)

        param_map = self._session.param_map
        self.channel_a_panel = ChannelPanel(
            AmpChannel.A, param_map, self._on_user_change,
            self._on_knob_release, self._on_amp_selected,
        )
        self.channel_b_panel = ChannelPanel(
            AmpChannel.B, param_map, self._on_user_change,
            self._on_knob_release, self._on_amp_selected,
        )
        self.master_panel = MasterPanel(param_map, self._on_user_change, self._on_knob_release)

        top = QWidget()
        h_layout = QHBoxLayout(top)
        h_layout.addWidget(self.channel_a_panel)
        h_layout.addWidget(self.channel_b_panel)
        h_layout.addWidget(self.master_panel)

        self._log_panel = LogPanel()

        v_splitter = QSplitter(Qt.Orientation.Vertical)
        v_splitter.addWidget(top)
        v_splitter.addWidget(self._log_panel)
        v_splitter.setSizes([620, 180])
        self.setCentralWidget(v_splitter)

    def _connect_signals(self) -> None:
        self._session.state.parameter_changed.connect(self._on_param_changed)
        self._session.connection_changed.connect(self._on_connection_changed)
        self._session.identified.connect(self._on_identified)
        self._session.busy_changed.connect(self._on_busy_changed)
        self._logger.message_logged.connect(self._log_panel.append_message)

    # -- title --

    def _update_title(self) -> None:
        info = self._session.connection_info
        if self._session.connected and info.identified:
            self.setWindowTitle(f"{APP_TITLE} (connected to {info.status_text})")
        else:
            self.setWindowTitle(f"{APP_TITLE} (not connected)")

    def _on_identified(self, info: ConnectionInfo) -> None:
        self._update_title()

    def _on_connection_changed(self, connected: bool) -> None:
        self._update_title()
        self.refresh_action.setEnabled(connected)
        if not connected:
            self.statusBar().showMessage("Not connected", 5000)

    # -- connection --

    def showEvent(self, event) -> None:  # noqa: N802
        super().showEvent(event)
        if self._open_on_show and not self._shown_once:
            self._shown_once = True
            QTimer.singleShot(0, self.connect_to_amp)

    def connect_to_amp(self) -> bool:
        """Open the configured ports, offering the setup dialog until it works."""
        while not self._session.open_ports(self._config.midi_in_port, self._config.midi_out_port):
            reply = QMessageBox.question(
                self, "MIDI error",
                "There was an error while establishing the MIDI connection to the "
                "device.\n\nWould you like to check the configuration?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            )
            if reply != QMessageBox.StandardButton.Yes:
                return False
            if not self.show_setup_dialog(reconnect=False):
                return False
        self._session.resync()
        return True

    def show_setup_dialog(self, reconnect: bool = True) -> bool:
        dialog = SetupDialog(self._config, parent=self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return False
        self._session.device.log_traffic = self._config.log_midi_traffic
        self._session.resync_sequencer.pacing = self._config.resync_pacing
        if reconnect:
            return self.connect_to_amp()
        return True

    def _on_refresh(self) -> None:
        if not self._session.resync():
            self.statusBar().showMessage("Resync already running or not connected", 3000)

    def _on_busy_changed(self, busy: bool) -> None:
        self.centralWidget().setEnabled(not busy)
        if busy:
            QApplication.setOverrideCursor(Qt.CursorShape.WaitCursor)
        else:
            QApplication.restoreOverrideCursor()

    # -- parameters --

    def _on_param_changed(self, param_id: int, value) -> None:
        for panel in self.panels:
            panel.on_param_changed(param_id, value)

    def _on_user_change(self, param_id: int, value) -> None:
        self._session.write(param_id, value)

    def _on_knob_release(self, param_id: int) -> None:
        self._session.release_block()

    def _shift_held(self) -> bool:
        return bool(QApplication.keyboardModifiers() & Qt.KeyboardModifier.ShiftModifier)

    def _on_amp_selected(self, channel: AmpChannel, index: int) -> None:
        # Shift selects the model without touching the power-amp section
        self._session.write_amp_model(channel, index, load_defaults=not self._shift_held())

    def closeEvent(self, event) -> None:  # noqa: N802
        self._poll_timer.stop()
        pos = self.pos()
        self._config.window_x = pos.x()
        self._config.window_y = pos.y()
        try:
            self._config.save()
        except OSError as exc:
            self._logger.warning(f"could not save settings: {exc}")
        self._session.shutdown()
        event.accept()
