import json
from core.config import MIN_RESYNC_PACING_MS, AppConfig

def test_config_defaults(tmp_path):
    cfg = AppConfig(path=tmp_path / "config.json")
    assert cfg.midi_in_port == ""
    assert cfg.midi_out_port == ""
    assert cfg.midi_channel == 0
    assert cfg.resync_pacing == 0.05
    assert cfg.suppression_timeout == 2.0
    assert cfg.window_x is None
    assert not cfg.has_ports

def test_config_save_and_load(tmp_path):
    path = tmp_path / "config.json"
    cfg = AppConfig(path=path)
    cfg.midi_in_port = "DT50 In"
    cfg.midi_out_port = "DT50 Out"
    cfg.window_x = 120
    cfg.save()
    cfg2 = AppConfig(path=path)
    assert cfg2.midi_in_port == "DT50 In"
    assert cfg2.midi_out_port == "DT50 Out"
    assert cfg2.window_x == 120
    assert cfg2.has_ports

def test_config_does_not_crash_on_missing_file(tmp_path):
    cfg = AppConfig(path=tmp_path / "nonexistent" / "config.json")
    assert cfg.midi_in_port == ""

def test_config_ignores_corrupt_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    cfg = AppConfig(path=path)
    assert cfg.resync_pacing_ms == 50

def test_config_ignores_unknown_keys(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"midi_in_port": "X", "theme": "dark"}))
    cfg = AppConfig(path=path)
    assert cfg.midi_in_port == "X"
    assert not hasattr(cfg, "theme")

def test_zero_timeout_disables_suppression_expiry(tmp_path):
    cfg = AppConfig(path=tmp_path / "config.json")
    cfg.suppression_timeout_ms = 0
    assert cfg.suppression_timeout is None

def test_resync_pacing_has_floor(tmp_path):
    cfg = AppConfig(path=tmp_path / "config.json")
    cfg.resync_pacing_ms = 0
    assert cfg.resync_pacing == MIN_RESYNC_PACING_MS / 1000.0
    cfg.resync_pacing_ms = -20
    assert cfg.resync_pacing == 0.01
