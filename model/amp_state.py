from __future__ import annotations
import threading
from PyQt6.QtCore import QObject, pyqtSignal
from midi.params import ParamMap


class AmpState(QObject):
    """Last known semantic value of every amp parameter.

    Written from two threads: the GUI thread stores user edits with
    `set_local`, the rtmidi thread stores amp reports with `apply_remote`.
    Only remote updates emit `parameter_changed`; receivers in the GUI
    thread get it queued, so widgets are never touched from the rtmidi
    thread.
    """

    parameter_changed = pyqtSignal(int, object)  # param id, semantic value

    def __init__(self, param_map: ParamMap, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._param_map = param_map
        self._lock = threading.Lock()
        self._values: dict[int, object] = {}
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._values = {p.id: p.default for p in self._param_map.list_all()}

    def value(self, param_id: int):
        with self._lock:
            return self._values.get(param_id)

    def snapshot(self) -> dict[int, object]:
        with self._lock:
            return dict(self._values)

    def set_local(self, param_id: int, value) -> None:
        with self._lock:
            self._values[param_id] = value

    def apply_remote(self, param_id: int, value):
        """Store a value reported by the amp; returns the previous value."""
        with self._lock:
            previous = self._values.get(param_id)
            self._values[param_id] = value
        self.parameter_changed.emit(param_id, value)
        return previous
