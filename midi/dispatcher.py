from __future__ import annotations
import threading
import mido
from core.logger import AppLogger, format_bytes
from midi.handshake import IdentificationHandshake
from midi.params import CC_BLOCK, CC_RECEIVING, DT_MIDI_CHANNEL, ParamMap
from midi.resync import BulkResync
from midi.suppression import EchoSuppressor
from model.amp_state import AmpState


class IncomingDispatcher:
    """Routes datagrams from the rtmidi thread to the handshake or the amp state.

    Nothing here ever sends a parameter write: received values go straight
    into AmpState, so an echo can never feed back into the outbound path.
    """

    def __init__(
        self,
        param_map: ParamMap,
        state: AmpState,
        suppressor: EchoSuppressor,
        resync: BulkResync,
        handshake: IdentificationHandshake,
        channel: int = DT_MIDI_CHANNEL,
        logger: AppLogger | None = None,
    ) -> None:
        self._param_map = param_map
        self._state = state
        self._suppressor = suppressor
        self._resync = resync
        self._handshake = handshake
        self._channel = channel
        self._logger = logger or AppLogger()
        self._receiving = threading.Event()

    @property
    def receiving(self) -> bool:
        """True between the echoed receiving-on and receiving-off sentinels."""
        return self._receiving.is_set()

    def reset(self) -> None:
        self._receiving.clear()

    def handle(self, message, timestamp: float = 0.0) -> None:
        if not message:
            return
        try:
            msg = mido.Message.from_bytes(list(message), time=timestamp)
        except (ValueError, TypeError):
            self._logger.midi(f"dropped malformed datagram: {format_bytes(message)}")
            return

        if msg.type == "sysex":
            self._handshake.handle(msg.bytes())
            return
        if msg.type != "control_change" or msg.channel != self._channel:
            return
        self._on_control_change(msg.control, msg.value)

    def _on_control_change(self, control: int, value: int) -> None:
        if control == CC_BLOCK:
            self._suppressor.set_blocked(value >= 64)
            return
        if control == CC_RECEIVING:
            if value >= 64:
                self._receiving.set()
            else:
                self._receiving.clear()
            return
        if self._suppressor.blocked:
            return

        param = self._param_map.lookup(control)
        if param is None:
            return
        decoded = param.decode(value)
        previous = self._state.apply_remote(param.id, decoded)
        if param.cascades and previous != decoded and not self.receiving:
            # Voicing changed on the amp itself; its dependent params moved too
            self._logger.sync(f"{param.name} changed to {decoded}, resyncing")
            self._resync.start_async()
