from __future__ import annotations
from PyQt6.QtCore import QObject, pyqtSignal
from core.config import AppConfig
from core.logger import AppLogger
from midi.device import MidiDevice
from midi.dispatcher import IncomingDispatcher
from midi.handshake import IdentificationHandshake
from midi.params import AmpChannel, ParamMap
from midi.resync import BulkResync
from midi.suppression import EchoSuppressor
from midi.sysex import ConnectionInfo
from model.amp_state import AmpState

RESYNC_JOIN_TIMEOUT = 2.0  # seconds


class AmpSession(QObject):
    """Keeps a DT amp and the local AmpState in step over one MIDI port pair."""

    connection_changed = pyqtSignal(bool)
    identified = pyqtSignal(object)  # ConnectionInfo
    busy_changed = pyqtSignal(bool)

    def __init__(
        self,
        device: MidiDevice | None = None,
        param_map: ParamMap | None = None,
        config: AppConfig | None = None,
        logger: AppLogger | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._logger = logger or AppLogger()
        self._config = config or AppConfig()
        self._device = device or MidiDevice(logger=self._logger)
        self._param_map = param_map or ParamMap()
        channel = self._config.midi_channel

        self._state = AmpState(self._param_map, parent=self)
        self._suppressor = EchoSuppressor(
            self._send, channel=channel,
            timeout=self._config.suppression_timeout, logger=self._logger,
        )
        self._resync = BulkResync(
            self._send, channel=channel,
            pacing=self._config.resync_pacing, logger=self._logger, parent=self,
        )
        self._handshake = IdentificationHandshake(logger=self._logger, parent=self)
        self._dispatcher = IncomingDispatcher(
            self._param_map, self._state, self._suppressor, self._resync,
            self._handshake, channel=channel, logger=self._logger,
        )
        self._resync.busy_changed.connect(self.busy_changed)
        self._handshake.identified.connect(self.identified)
        self._device.log_traffic = self._config.log_midi_traffic
        self._device.set_receive_callback(self._dispatcher.handle)

    @property
    def device(self) -> MidiDevice:
        return self._device

    @property
    def param_map(self) -> ParamMap:
        return self._param_map

    @property
    def state(self) -> AmpState:
        return self._state

    @property
    def suppressor(self) -> EchoSuppressor:
        return self._suppressor

    @property
    def resync_sequencer(self) -> BulkResync:
        return self._resync

    @property
    def dispatcher(self) -> IncomingDispatcher:
        return self._dispatcher

    @property
    def connected(self) -> bool:
        return self._device.connected

    @property
    def connection_info(self) -> ConnectionInfo:
        return self._handshake.info

    def _send(self, message: list[int]) -> None:
        # Ports can close under a running resync; the rest of it is dropped
        if self._device.connected:
            self._device.send(message)

    # -- connection --

    def open_ports(self, in_name: str, out_name: str) -> bool:
        self._resync.cancel()
        # A cancelled worker sends its closers on the old ports, then frees the token
        self._resync.wait(timeout=RESYNC_JOIN_TIMEOUT)
        self._suppressor.reset()
        self._dispatcher.reset()
        self._handshake.reset()
        if not self._device.open(in_name, out_name):
            self.connection_changed.emit(False)
            return False
        self.connection_changed.emit(True)
        self._handshake.start(self._send)
        return True

    def close_ports(self) -> None:
        self._resync.cancel()
        self._resync.wait(timeout=RESYNC_JOIN_TIMEOUT)
        was_connected = self._device.connected
        self._device.close()
        self._handshake.reset()
        self._suppressor.reset()
        self._dispatcher.reset()
        if was_connected:
            self.connection_changed.emit(False)

    def check_connection(self) -> bool:
        """Detect a vanished port (amp unplugged); closes the session if so."""
        if not self._device.connected:
            return False
        if self._device.ports_present():
            return True
        self._logger.device("MIDI port disappeared, closing connection")
        self.close_ports()
        return False

    # -- outbound --

    def write(self, param_id: int, value) -> bool:
        """Apply a user edit locally and send it to the amp.

        Returns False when nothing was sent: unknown id, not connected, or
        suppression active (an echo is still in flight).
        """
        param = self._param_map.lookup(param_id)
        if param is None or not self._device.connected:
            return False
        value = param.clip(value)
        if self._suppressor.blocked:
            return False
        self._state.set_local(param.id, value)
        if not self._suppressor.write(param.id, param.encode(value)):
            return False
        if param.cascades:
            self.resync()
        return True

    def write_amp_model(self, channel: AmpChannel, index: int, load_defaults: bool = True) -> bool:
        """Select an amp model, optionally loading its power-amp defaults.

        With defaults the amp rewrites the channel's power-amp section on its
        own, so a resync follows to pick the new values up.
        """
        param = self._param_map.amp_model(channel)
        if not self._device.connected or self._suppressor.blocked:
            return False
        index = param.clip(index)
        target = param.defaults_id if load_defaults else param.id
        self._state.set_local(param.id, index)
        if not self._suppressor.write(target, param.encode(index)):
            return False
        if load_defaults:
            self.resync()
        return True

    def release_block(self) -> None:
        if self._device.connected:
            self._suppressor.release()

    def resync(self, asynchronous: bool = False) -> bool:
        if not self._device.connected:
            return False
        if asynchronous:
            return self._resync.start_async()
        return self._resync.run()

    def shutdown(self) -> None:
        self.close_ports()
