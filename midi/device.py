from __future__ import annotations
from typing import Callable
import rtmidi
from core.logger import AppLogger, format_bytes

DEVICE_NAME_FRAGMENTS = ("DT25", "DT50", "Line 6")

ReceiveCallback = Callable[[list[int], float], None]


def list_input_ports() -> list[str]:
    midi_in = rtmidi.MidiIn()
    ports = midi_in.get_ports()
    midi_in.delete()
    return ports


def list_output_ports() -> list[str]:
    midi_out = rtmidi.MidiOut()
    ports = midi_out.get_ports()
    midi_out.delete()
    return ports


def find_port(ports: list[str], name: str) -> int | None:
    """Index of the port whose name matches exactly, or None."""
    for i, port in enumerate(ports):
        if port == name:
            return i
    return None


def guess_dt_port(ports: list[str]) -> int | None:
    """Best guess at the amp's port when nothing is configured yet."""
    for fragment in DEVICE_NAME_FRAGMENTS:
        for i, name in enumerate(ports):
            if fragment in name:
                return i
    return None


class MidiDevice:
    """Named in/out port pair delivering raw datagrams to one callback."""

    def __init__(self, logger: AppLogger | None = None) -> None:
        self._midi_out = rtmidi.MidiOut()
        self._midi_in = rtmidi.MidiIn()
        self._connected = False
        self._in_name: str | None = None
        self._out_name: str | None = None
        self._logger = logger or AppLogger()
        self._receive_callback: ReceiveCallback | None = None
        self._clock = 0.0
        self.log_traffic = False

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def in_name(self) -> str | None:
        return self._in_name

    @property
    def out_name(self) -> str | None:
        return self._out_name

    def set_receive_callback(self, callback: ReceiveCallback | None) -> None:
        """Register callback(message, timestamp), invoked on the rtmidi thread."""
        self._receive_callback = callback

    def open(self, in_name: str, out_name: str) -> bool:
        """Open both ports by name. Always closes first; returns False on any failure."""
        self.close()
        if not in_name or not out_name:
            return False
        in_index = find_port(self._midi_in.get_ports(), in_name)
        if in_index is None:
            self._logger.device(f"input port not found: {in_name}")
            return False
        out_index = find_port(self._midi_out.get_ports(), out_name)
        if out_index is None:
            self._logger.device(f"output port not found: {out_name}")
            return False
        try:
            self._midi_in.set_callback(self._dispatch_midi_input)
            self._midi_in.open_port(in_index)
            # SysEx must come through for the identity reply
            self._midi_in.ignore_types(sysex=False, timing=True, active_sense=True)
            self._midi_out.open_port(out_index)
        except (rtmidi.SystemError, rtmidi.InvalidPortError) as exc:
            self._logger.device(f"could not open ports: {exc}")
            self._close_ports()
            return False
        self._logger.device(f"IN:  {in_name} (index {in_index})")
        self._logger.device(f"OUT: {out_name} (index {out_index})")
        self._clock = 0.0
        self._connected = True
        self._in_name = in_name
        self._out_name = out_name
        return True

    def close(self) -> None:
        if self._connected:
            self._logger.device("ports closed")
        self._close_ports()
        self._connected = False
        self._in_name = None
        self._out_name = None

    def _close_ports(self) -> None:
        self._midi_in.cancel_callback()
        self._midi_in.close_port()
        self._midi_out.close_port()

    def ports_present(self) -> bool:
        """True while both open ports are still enumerated by the system."""
        if not self._connected:
            return False
        return (self._in_name in self._midi_in.get_ports()
                and self._out_name in self._midi_out.get_ports())

    def send(self, message: list[int]) -> None:
        if not self._connected:
            raise RuntimeError("Not connected to a MIDI device")
        if self.log_traffic:
            self._logger.midi(f"TX: {format_bytes(message)}")
        self._midi_out.send_message(message)

    def _dispatch_midi_input(self, event, _data=None) -> None:
        message, delta = event
        if not message:
            return
        self._clock += delta
        if self.log_traffic:
            self._logger.midi(f"RX: {format_bytes(message)}")
        if self._receive_callback is not None:
            self._receive_callback(list(message), self._clock)
