from __future__ import annotations
import json
from pathlib import Path

MIN_RESYNC_PACING_MS = 10

_DEFAULTS = {
    "midi_in_port": "",
    "midi_out_port": "",
    "midi_channel": 0,
    "resync_pacing_ms": 50,
    "suppression_timeout_ms": 2000,
    "window_x": None,
    "window_y": None,
    "log_midi_traffic": False,
}


class AppConfig:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "dtedit" / "config.json"
        self.midi_in_port: str = _DEFAULTS["midi_in_port"]
        self.midi_out_port: str = _DEFAULTS["midi_out_port"]
        self.midi_channel: int = _DEFAULTS["midi_channel"]
        self.resync_pacing_ms: int = _DEFAULTS["resync_pacing_ms"]
        # 0 keeps suppression raised until the block-off echo arrives
        self.suppression_timeout_ms: int = _DEFAULTS["suppression_timeout_ms"]
        self.window_x: int | None = _DEFAULTS["window_x"]
        self.window_y: int | None = _DEFAULTS["window_y"]
        self.log_midi_traffic: bool = _DEFAULTS["log_midi_traffic"]
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def resync_pacing(self) -> float:
        """Pacing delay between dump requests, in seconds."""
        return max(MIN_RESYNC_PACING_MS, self.resync_pacing_ms) / 1000.0

    @property
    def suppression_timeout(self) -> float | None:
        if not self.suppression_timeout_ms or self.suppression_timeout_ms <= 0:
            return None
        return self.suppression_timeout_ms / 1000.0

    @property
    def has_ports(self) -> bool:
        return bool(self.midi_in_port) and bool(self.midi_out_port)

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text())
            for key in _DEFAULTS:
                if key in data:
                    setattr(self, key, data[key])
        except (json.JSONDecodeError, OSError):
            pass

    def save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = {key: getattr(self, key) for key in _DEFAULTS}
        self._path.write_text(json.dumps(data, indent=2))
