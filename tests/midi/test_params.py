import pytest
from midi.params import (
    AMP_MODELS, CAB_MODELS, MIC_MODELS, REVERB_TYPES,
    AmpChannel, Domain, ParamMap, build_cc, decode, encode,
)


def test_continuous_decode_is_linear():
    assert decode(Domain.CONTINUOUS, 0) == 0.0
    assert decode(Domain.CONTINUOUS, 127) == 1.0
    assert decode(Domain.CONTINUOUS, 64) == pytest.approx(64 / 127.0)


def test_continuous_encode_rounds_and_clips():
    assert encode(Domain.CONTINUOUS, 0.5) == 64
    assert encode(Domain.CONTINUOUS, 1.0) == 127
    assert encode(Domain.CONTINUOUS, 1.7) == 127
    assert encode(Domain.CONTINUOUS, -0.2) == 0


def test_continuous_round_trip_is_exact():
    for raw in range(128):
        assert encode(Domain.CONTINUOUS, decode(Domain.CONTINUOUS, raw)) == raw


def test_every_descriptor_round_trips():
    params = ParamMap().list_all()
    assert {p.id for p in params if p.inverted} == {19, 85}
    for p in params:
        if p.domain is Domain.CONTINUOUS:
            values = [raw / 127.0 for raw in range(128)]
        elif p.domain is Domain.BOOLEAN:
            values = [False, True]
        else:
            values = list(range(p.size))
        for v in values:
            assert p.decode(p.encode(v)) == v, (p.name, v)


def test_boolean_threshold_at_64():
    assert decode(Domain.BOOLEAN, 63) is False
    assert decode(Domain.BOOLEAN, 64) is True
    assert encode(Domain.BOOLEAN, True) == 127
    assert encode(Domain.BOOLEAN, False) == 0


def test_boolean_encode_normalises_reported_value():
    # A device-reported 100 decodes to True but is written back as 127
    assert encode(Domain.BOOLEAN, decode(Domain.BOOLEAN, 100)) == 127


def test_inverted_boolean():
    assert decode(Domain.BOOLEAN, 127, inverted=True) is False
    assert decode(Domain.BOOLEAN, 0, inverted=True) is True
    assert encode(Domain.BOOLEAN, True, inverted=True) == 0
    assert encode(Domain.BOOLEAN, False, inverted=True) == 127


def test_enum_clips_to_size():
    assert decode(Domain.ENUM, 5, size=9) == 5
    assert decode(Domain.ENUM, 100, size=9) == 8
    assert encode(Domain.ENUM, 20, size=9) == 8
    assert encode(Domain.ENUM, -3, size=9) == 0


def test_quad_clips_to_four():
    assert decode(Domain.QUAD, 3, size=4) == 3
    assert decode(Domain.QUAD, 90, size=4) == 3


def test_raw_values_clipped_before_decode():
    assert decode(Domain.CONTINUOUS, 300) == 1.0
    assert decode(Domain.CONTINUOUS, -5) == 0.0


def test_build_cc():
    assert build_cc(0, 13, 64) == [0xB0, 13, 64]
    assert build_cc(3, 13, 64) == [0xB3, 13, 64]


def test_param_ids_unique_and_in_range():
    pm = ParamMap()
    ids = pm.ids()
    assert len(ids) == len(set(ids))
    assert all(0 <= i <= 127 for i in ids)
    assert not {126, 127, 83} & set(ids)


def test_lookup_known_ids():
    pm = ParamMap()
    assert pm.lookup(13).name == "gain_a"
    assert pm.lookup(92).name == "gain_b"
    assert pm.lookup(20).name == "master_volume"
    assert pm.lookup(120).cascades
    assert pm.lookup(121).cascades


def test_lookup_unknown_returns_none():
    assert ParamMap().lookup(1) is None


def test_channels_are_symmetric():
    pm = ParamMap()
    a = [p.name[:-2] for p in pm.by_channel(AmpChannel.A)]
    b = [p.name[:-2] for p in pm.by_channel(AmpChannel.B)]
    assert a == b
    assert len(pm.by_channel(AmpChannel.MASTER)) == 4


def test_amp_model_carries_defaults_id():
    pm = ParamMap()
    assert pm.amp_model(AmpChannel.A).id == 11
    assert pm.amp_model(AmpChannel.A).defaults_id == 12
    assert pm.amp_model(AmpChannel.B).id == 91
    assert pm.amp_model(AmpChannel.B).defaults_id == 89


def test_power_amp_section():
    pm = ParamMap()
    assert [p.id for p in pm.power_amp(AmpChannel.A)] == [73, 75, 77, 74, 78, 79]
    assert [p.id for p in pm.power_amp(AmpChannel.B)] == [115, 116, 114, 117, 86, 87]


def test_label_tables():
    assert len(AMP_MODELS) == 31
    assert len(CAB_MODELS) == 18
    assert len(REVERB_TYPES) == 13
    assert len(MIC_MODELS) == 9
    pm = ParamMap()
    assert pm.get("amp_a").size == 31
    assert pm.get("xlr_mic").size == 9


def test_channel_select_is_inverted():
    channel_b = ParamMap().get("channel_b")
    assert channel_b.decode(127) is False
    assert channel_b.decode(0) is True
    assert channel_b.build_message(0, True) == [0xB0, 19, 0]


def test_param_clip():
    pm = ParamMap()
    assert pm.get("gain_a").clip(2.0) == 1.0
    assert pm.get("voice_a").clip(9) == 3
    assert pm.get("reverb_bypass_a").clip(1) is True
