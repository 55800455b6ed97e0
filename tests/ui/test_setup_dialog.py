from core.config import MIN_RESYNC_PACING_MS, AppConfig
from ui.setup_dialog import SetupDialog

IN_PORTS = ["Midi Through 14:0", "Line 6 DT50 20:0"]
OUT_PORTS = ["Midi Through 14:0", "Line 6 DT50 20:0"]


def test_setup_dialog_guesses_amp_port(app, tmp_path):
    cfg = AppConfig(path=tmp_path / "config.json")
    dlg = SetupDialog(cfg, in_ports=IN_PORTS, out_ports=OUT_PORTS)
    assert dlg.selected_in_port == "Line 6 DT50 20:0"
    assert dlg.selected_out_port == "Line 6 DT50 20:0"
    assert dlg.pacing_spin.value() == 50


def test_setup_dialog_prefers_configured_port(app, tmp_path):
    cfg = AppConfig(path=tmp_path / "config.json")
    cfg.midi_in_port = "Midi Through 14:0"
    dlg = SetupDialog(cfg, in_ports=IN_PORTS, out_ports=OUT_PORTS)
    assert dlg.selected_in_port == "Midi Through 14:0"


def test_setup_dialog_round_trips_values(app, tmp_path):
    path = tmp_path / "config.json"
    cfg = AppConfig(path=path)
    dlg = SetupDialog(cfg, in_ports=IN_PORTS, out_ports=OUT_PORTS)
    dlg.in_combo.setCurrentIndex(0)
    dlg.pacing_spin.setValue(80)
    dlg.traffic_check.setChecked(True)
    dlg._on_accept()

    cfg2 = AppConfig(path=path)
    assert cfg2.midi_in_port == "Midi Through 14:0"
    assert cfg2.midi_out_port == "Line 6 DT50 20:0"
    assert cfg2.resync_pacing_ms == 80
    assert cfg2.log_midi_traffic


def test_setup_dialog_without_ports_cannot_accept(app, tmp_path):
    cfg = AppConfig(path=tmp_path / "config.json")
    dlg = SetupDialog(cfg, in_ports=[], out_ports=[])
    assert not dlg.ok_button.isEnabled()


def test_setup_dialog_pacing_cannot_reach_zero(app, tmp_path):
    cfg = AppConfig(path=tmp_path / "config.json")
    cfg.resync_pacing_ms = 0
    dlg = SetupDialog(cfg, in_ports=IN_PORTS, out_ports=OUT_PORTS)
    assert dlg.pacing_spin.minimum() == MIN_RESYNC_PACING_MS
    assert dlg.pacing_spin.value() == MIN_RESYNC_PACING_MS
    dlg.pacing_spin.setValue(0)
    assert dlg.pacing_spin.value() == MIN_RESYNC_PACING_MS
