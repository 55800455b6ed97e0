from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum

# Universal non-realtime device inquiry, broadcast to all device ids
IDENTIFY_REQUEST = [0xF0, 0x7E, 0x7F, 0x06, 0x01, 0xF7]

# Identity reply: F0 7E 7F 06 02 | 00 01 0C (Line 6) | 15 00 (DT family) |
# model | ?? | version ASCII " 1" "0" "7" | F7
IDENTITY_REPLY_LENGTH = 17
_REPLY_HEADER = [0x7E, 0x7F, 0x06, 0x02, 0x00, 0x01, 0x0C]
_FAMILY = [0x15, 0x00]
_HEADER_OFFSET = 1
_FAMILY_OFFSET = 8
_MODEL_OFFSET = 10
_VERSION_OFFSET = 12


class DTModel(IntEnum):
    DT50_112 = 0
    DT50_212 = 1
    DT50_HEAD = 2
    DT25_112 = 3
    DT25_HEAD = 4


MODEL_NAMES = {
    DTModel.DT50_112: "DT50 1x12 Combo",
    DTModel.DT50_212: "DT50 212 Combo",
    DTModel.DT50_HEAD: "DT50 Head",
    DTModel.DT25_112: "DT25 1x12 Combo",
    DTModel.DT25_HEAD: "DT25 Head",
}
UNKNOWN_MODEL_NAME = "Unknown DT model"


@dataclass(frozen=True)
class ConnectionInfo:
    identified: bool = False
    model: DTModel | None = None
    model_code: int | None = None
    version_major: int = 0
    version_minor: int = 0
    version_patch: int = 0

    @property
    def model_name(self) -> str:
        if not self.identified:
            return ""
        if self.model is None:
            return UNKNOWN_MODEL_NAME
        return MODEL_NAMES[self.model]

    @property
    def version_string(self) -> str:
        """Firmware version as the amp displays it, e.g. '1.07'."""
        if not self.identified:
            return ""
        return f"{self.version_major}.{self.version_minor}{self.version_patch}"

    @property
    def status_text(self) -> str:
        if not self.identified:
            return ""
        return f"{self.model_name} v{self.version_string}"


def parse_identity_reply(message) -> ConnectionInfo | None:
    """Decode a device-inquiry reply from a DT amp.

    Returns None for anything that is not a well-formed DT reply; unrelated
    SysEx traffic on the same port is expected and not an error.
    """
    msg = list(message)
    if len(msg) != IDENTITY_REPLY_LENGTH:
        return None
    if msg[0] != 0xF0 or msg[-1] != 0xF7:
        return None
    if msg[_HEADER_OFFSET:_HEADER_OFFSET + len(_REPLY_HEADER)] != _REPLY_HEADER:
        return None
    if msg[_FAMILY_OFFSET:_FAMILY_OFFSET + len(_FAMILY)] != _FAMILY:
        return None

    raw = msg[_VERSION_OFFSET:_VERSION_OFFSET + 4]
    text = "".join(chr(b) for b in raw)
    # Leading byte is a space until the firmware reaches 10.00
    major_text = text[:2].strip()
    if not major_text.isdigit() or not text[2].isdigit() or not text[3].isdigit():
        return None

    code = msg[_MODEL_OFFSET]
    try:
        model = DTModel(code)
    except ValueError:
        model = None
    return ConnectionInfo(
        identified=True,
        model=model,
        model_code=code,
        version_major=int(major_text),
        version_minor=int(text[2]),
        version_patch=int(text[3]),
    )
