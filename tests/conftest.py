import sys
import pytest
from PyQt6.QtWidgets import QApplication
from core.config import MIN_RESYNC_PACING_MS, AppConfig
from core.logger import AppLogger
from midi.params import CC_AMP_DEFAULTS_A, CC_AMP_DEFAULTS_B, CC_DUMP_REQUEST
from midi.sysex import IDENTIFY_REQUEST

# Power-amp values (raw) the fake amp loads on an amp-with-defaults write
FAKE_POWER_AMP_DEFAULTS = {
    CC_AMP_DEFAULTS_A: {73: 127, 75: 0, 77: 2, 74: 127, 78: 0, 79: 127},
    CC_AMP_DEFAULTS_B: {115: 127, 116: 0, 114: 2, 117: 127, 86: 0, 87: 127},
}
_AMP_MODEL_IDS = {CC_AMP_DEFAULTS_A: 11, CC_AMP_DEFAULTS_B: 91}

DT50_HEAD_REPLY = [
    0xF0, 0x7E, 0x7F, 0x06, 0x02, 0x00, 0x01, 0x0C, 0x15, 0x00,
    0x02, 0x00, 0x20, 0x31, 0x30, 0x37, 0xF7,
]


class FakeDevice:
    """Stands in for MidiDevice: records every datagram sent."""

    def __init__(self) -> None:
        self.connected = False
        self.in_name = None
        self.out_name = None
        self.log_traffic = False
        self.open_result = True
        self.present = True
        self.sent: list[list[int]] = []
        self.on_send = None
        self._callback = None

    def set_receive_callback(self, callback) -> None:
        self._callback = callback

    def open(self, in_name: str, out_name: str) -> bool:
        self.close()
        if not self.open_result or not in_name or not out_name:
            return False
        self.connected = True
        self.in_name = in_name
        self.out_name = out_name
        return True

    def close(self) -> None:
        self.connected = False
        self.in_name = None
        self.out_name = None

    def ports_present(self) -> bool:
        return self.connected and self.present

    def send(self, message: list[int]) -> None:
        if not self.connected:
            raise RuntimeError("Not connected to a MIDI device")
        self.sent.append(list(message))
        if self.on_send is not None:
            self.on_send(list(message))

    def receive(self, message: list[int], timestamp: float = 0.0) -> None:
        if self._callback is not None:
            self._callback(list(message), timestamp)

    def cc_sent(self) -> list[tuple[int, int]]:
        return [(m[1], m[2]) for m in self.sent if len(m) == 3 and m[0] & 0xF0 == 0xB0]


class FakeAmp:
    """Answers like a DT amp: echoes every datagram straight back,
    replies to the device inquiry and answers dump requests with its state.
    """

    def __init__(self, device: FakeDevice, values: dict[int, int] | None = None) -> None:
        self.device = device
        self.values: dict[int, int] = dict(values or {})
        self.received: list[list[int]] = []
        device.on_send = self._on_message

    def _on_message(self, message: list[int]) -> None:
        self.received.append(message)
        if message == IDENTIFY_REQUEST:
            self.device.receive(DT50_HEAD_REPLY)
            return
        self.device.receive(message)
        if len(message) != 3 or message[0] & 0xF0 != 0xB0:
            return
        control, value = message[1], message[2]
        if control == CC_DUMP_REQUEST:
            if value == 0:
                for param_id, raw in sorted(self.values.items()):
                    self.device.receive([message[0], param_id, raw])
        elif control in FAKE_POWER_AMP_DEFAULTS:
            self.values[_AMP_MODEL_IDS[control]] = value
            self.values.update(FAKE_POWER_AMP_DEFAULTS[control])
        elif control < 126:
            self.values[control] = value


@pytest.fixture(scope="session")
def app():
    return QApplication.instance() or QApplication(sys.argv)


@pytest.fixture
def config(tmp_path):
    cfg = AppConfig(path=tmp_path / "config.json")
    cfg.midi_in_port = "DT50 In"
    cfg.midi_out_port = "DT50 Out"
    cfg.resync_pacing_ms = MIN_RESYNC_PACING_MS
    return cfg


@pytest.fixture
def logger(app):
    return AppLogger(echo=False)


@pytest.fixture
def fake_device():
    return FakeDevice()


@pytest.fixture
def fake_amp(fake_device):
    return FakeAmp(fake_device)
