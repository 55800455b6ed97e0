from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

DT_MIDI_CHANNEL = 0  # zero-based; the DT listens on MIDI channel 1

# Sentinel controllers used for protocol signalling, never audible settings
CC_DUMP_REQUEST = 83
CC_RECEIVING = 126
CC_BLOCK = 127

# Sub-addresses for CC 83, each makes the amp report one parameter group
DUMP_GROUPS = (0, 17, 18, 19, 29, 30, 31, 32, 33, 34, 35)

# Writing the amp model to these ids also loads that model's power-amp defaults
CC_AMP_DEFAULTS_A = 12
CC_AMP_DEFAULTS_B = 89


class Domain(Enum):
    CONTINUOUS = "continuous"  # 0-127 <-> 0.0-1.0
    BOOLEAN = "boolean"        # threshold at 64
    ENUM = "enum"              # direct list index
    QUAD = "quad"              # four-way selector


class AmpChannel(Enum):
    A = "A"
    B = "B"
    MASTER = "Master"


def _clip7(raw: int) -> int:
    return max(0, min(127, int(raw)))


def decode(domain: Domain, raw: int, size: int = 128, inverted: bool = False):
    """Convert a raw 7-bit controller value into its semantic value."""
    raw = _clip7(raw)
    if domain is Domain.CONTINUOUS:
        return raw / 127.0
    if domain is Domain.BOOLEAN:
        return raw < 64 if inverted else raw >= 64
    return min(raw, size - 1)


def encode(domain: Domain, value, size: int = 128, inverted: bool = False) -> int:
    """Convert a semantic value into a raw 7-bit controller value.

    Booleans are asymmetric: True is always sent as 127 (0 when inverted),
    never as the raw value the amp may have reported.
    """
    if domain is Domain.CONTINUOUS:
        return _clip7(round(float(value) * 127))
    if domain is Domain.BOOLEAN:
        on = bool(value) != inverted
        return 127 if on else 0
    return _clip7(max(0, min(size - 1, int(value))))


def build_cc(channel: int, control: int, value: int) -> list[int]:
    return [0xB0 | (channel & 0x0F), control & 0x7F, value & 0x7F]


@dataclass(frozen=True)
class ParamDef:
    id: int
    name: str
    display_name: str
    channel: AmpChannel
    domain: Domain
    size: int = 128
    labels: tuple[str, ...] = ()
    inverted: bool = False    # device polarity reversed (raw >= 64 means False)
    cascades: bool = False    # changing it rewrites dependent params device-side
    defaults_id: int | None = None

    def decode(self, raw: int):
        return decode(self.domain, raw, self.size, self.inverted)

    def encode(self, value) -> int:
        return encode(self.domain, value, self.size, self.inverted)

    def clip(self, value):
        """Clamp a semantic value to this parameter's domain."""
        if self.domain is Domain.CONTINUOUS:
            return max(0.0, min(1.0, float(value)))
        if self.domain is Domain.BOOLEAN:
            return bool(value)
        return max(0, min(self.size - 1, int(value)))

    @property
    def default(self):
        if self.domain is Domain.CONTINUOUS:
            return 0.0
        if self.domain is Domain.BOOLEAN:
            return False
        return 0

    def build_message(self, channel: int, value) -> list[int]:
        return build_cc(channel, self.id, self.encode(self.clip(value)))


# ---------------------------------------------------------------------------
# Value labels
# ---------------------------------------------------------------------------

AMP_MODELS = (
    "None", "Blackface Double Normal", "Blackface Double Vib", "Hiway 100",
    "Super O", "Gibtone 185", "Tweed B-Man Normal", "Tweed B-Man Bright",
    "Blackface 'Lux Normal", "Blackface 'Lux Vib", "Divide 9/15",
    "Phd Motorway", "Class A-15", "Class A-30", "Brit J-45 Normal",
    "Brit J-45 Bright", "Brit Plexi 100 Normal", "Brit Plexi 100 Bright",
    "Brit P-75 Normal", "Brit P-75 Bright", "Brit J-800", "Bomber Uber",
    "Treadplate", "Angel F-Ball", "Line 6 Elektrik", "Flip Top (Bass)",
    "Solo 100 Clean", "Solo 100 Crunch", "Solo 100 Overdrive",
    "Line 6 Doom", "Line 6 Epic",
)

CAB_MODELS = (
    "None", "2x12 Blackface Double", "4x12 Hiway", "1x(6x9) Super O",
    "1x12 Gibtone F-Coil", "4x10 Tweed B-Man", "1x12 Blackface 'Lux",
    "1x12 Brit 12-H", "2x12 PhD Ported", "1x12 Blue Bell",
    "2x12 Silver Bell", "4x12 Greenback 25", "4x12 Blackback 30",
    "4x12 Brit T-75", "4x12 Uber", "4x12 Tread V-30", "4x12 XXL V-30",
    "1x15 Flip Top (Bass)",
)

REVERB_TYPES = (
    "None", "Spring", "'63 Spring", "Plate", "Room", "Chamber", "Hall",
    "Cave", "Ducking", "Octo", "Tile", "Echo", "Particle Verb",
)

MIC_MODELS = (
    "None", "57 Dynamic", "57 Dynamic, Off Axis", "409 Dynamic",
    "421 Dynamic", "4038 Ribbon", "121 Ribbon", "67 Condenser",
    "87 Condenser",
)

VOICINGS = ("I", "II", "III", "IV")
TOPOLOGIES = ("I", "II", "III", "IV")

_ON_OFF = ("Off", "On")


def _channel_params(ch: AmpChannel, ids: dict[str, int], defaults_id: int) -> list[ParamDef]:
    sfx = ch.value.lower()
    cont = Domain.CONTINUOUS
    boolean = Domain.BOOLEAN
    return [
        ParamDef(ids["amp"], f"amp_{sfx}", "Amp", ch, Domain.ENUM,
                 size=len(AMP_MODELS), labels=AMP_MODELS, defaults_id=defaults_id),
        ParamDef(ids["cab"], f"cab_{sfx}", "Cab", ch, Domain.ENUM,
                 size=len(CAB_MODELS), labels=CAB_MODELS),
        ParamDef(ids["gain"], f"gain_{sfx}", "Drive", ch, cont),
        ParamDef(ids["bass"], f"bass_{sfx}", "Bass", ch, cont),
        ParamDef(ids["middle"], f"middle_{sfx}", "Middle", ch, cont),
        ParamDef(ids["treble"], f"treble_{sfx}", "Treble", ch, cont),
        ParamDef(ids["presence"], f"presence_{sfx}", "Presence", ch, cont),
        ParamDef(ids["volume"], f"volume_{sfx}", "Volume", ch, cont),
        ParamDef(ids["voice"], f"voice_{sfx}", "Voicing", ch, Domain.QUAD,
                 size=4, labels=VOICINGS, cascades=True),
        ParamDef(ids["reverb_bypass"], f"reverb_bypass_{sfx}", "Reverb", ch, boolean,
                 size=2, labels=_ON_OFF),
        ParamDef(ids["reverb_type"], f"reverb_type_{sfx}", "Reverb Type", ch, Domain.ENUM,
                 size=len(REVERB_TYPES), labels=REVERB_TYPES),
        ParamDef(ids["reverb_decay"], f"reverb_decay_{sfx}", "Decay", ch, cont),
        ParamDef(ids["reverb_predelay"], f"reverb_predelay_{sfx}", "Pre-Delay", ch, cont),
        ParamDef(ids["reverb_tone"], f"reverb_tone_{sfx}", "Tone", ch, cont),
        ParamDef(ids["reverb_mix"], f"reverb_mix_{sfx}", "Mix", ch, cont),
        # Power amp section
        ParamDef(ids["class"], f"class_{sfx}", "Class", ch, boolean,
                 size=2, labels=("A/B", "A")),
        ParamDef(ids["xtode"], f"xtode_{sfx}", "Pentode/Triode", ch, boolean,
                 size=2, labels=("Pentode", "Triode")),
        ParamDef(ids["topology"], f"topology_{sfx}", "Topology", ch, Domain.QUAD,
                 size=4, labels=TOPOLOGIES),
        ParamDef(ids["boost"], f"boost_{sfx}", "Boost", ch, boolean,
                 size=2, labels=_ON_OFF),
        ParamDef(ids["pi_voltage"], f"pi_voltage_{sfx}", "PI Voltage", ch, boolean,
                 size=2, labels=("Low", "High")),
        ParamDef(ids["cap_type"], f"cap_type_{sfx}", "Cap Type", ch, boolean,
                 size=2, labels=("Tight", "Loose")),
    ]


_CHANNEL_A_IDS = {
    "amp": 11, "cab": 71, "gain": 13, "bass": 14, "middle": 15, "treble": 16,
    "presence": 21, "volume": 17, "voice": 120, "reverb_bypass": 36,
    "reverb_type": 37, "reverb_decay": 52, "reverb_predelay": 53,
    "reverb_tone": 54, "reverb_mix": 18, "class": 73, "xtode": 75,
    "topology": 77, "boost": 74, "pi_voltage": 78, "cap_type": 79,
}

_CHANNEL_B_IDS = {
    "amp": 91, "cab": 110, "gain": 92, "bass": 93, "middle": 94, "treble": 95,
    "presence": 102, "volume": 103, "voice": 121, "reverb_bypass": 105,
    "reverb_type": 107, "reverb_decay": 56, "reverb_predelay": 57,
    "reverb_tone": 58, "reverb_mix": 106, "class": 115, "xtode": 116,
    "topology": 114, "boost": 117, "pi_voltage": 86, "cap_type": 87,
}

_PARAMS: list[ParamDef] = [
    *_channel_params(AmpChannel.A, _CHANNEL_A_IDS, CC_AMP_DEFAULTS_A),
    *_channel_params(AmpChannel.B, _CHANNEL_B_IDS, CC_AMP_DEFAULTS_B),
    ParamDef(82, "xlr_mic", "XLR Mic", AmpChannel.MASTER, Domain.ENUM,
             size=len(MIC_MODELS), labels=MIC_MODELS),
    ParamDef(85, "low_volume", "Low Volume", AmpChannel.MASTER, Domain.BOOLEAN,
             size=2, labels=_ON_OFF, inverted=True),
    ParamDef(19, "channel_b", "Channel", AmpChannel.MASTER, Domain.BOOLEAN,
             size=2, labels=("A", "B"), inverted=True),
    ParamDef(20, "master_volume", "Master", AmpChannel.MASTER, Domain.CONTINUOUS),
]

# Power-amp parameters reset by an amp-with-defaults write
POWER_AMP_KEYS = ("class", "xtode", "topology", "boost", "pi_voltage", "cap_type")


class ParamMap:
    def __init__(self) -> None:
        self._by_id = {p.id: p for p in _PARAMS}
        self._by_name = {p.name: p for p in _PARAMS}

    def lookup(self, param_id: int) -> ParamDef | None:
        return self._by_id.get(param_id)

    def get(self, name: str) -> ParamDef | None:
        return self._by_name.get(name)

    def list_all(self) -> list[ParamDef]:
        return list(self._by_id.values())

    def ids(self) -> list[int]:
        return list(self._by_id.keys())

    def by_channel(self, channel: AmpChannel) -> list[ParamDef]:
        return [p for p in self._by_id.values() if p.channel is channel]

    def amp_model(self, channel: AmpChannel) -> ParamDef:
        return self._by_name[f"amp_{channel.value.lower()}"]

    def power_amp(self, channel: AmpChannel) -> list[ParamDef]:
        sfx = channel.value.lower()
        return [self._by_name[f"{key}_{sfx}"] for key in POWER_AMP_KEYS]
