from __future__ import annotations
from typing import Callable
from PyQt6.QtCore import QObject, pyqtSignal
from core.logger import AppLogger
from midi.sysex import IDENTIFY_REQUEST, ConnectionInfo, parse_identity_reply


class IdentificationHandshake(QObject):
    """One-shot device inquiry sent after every successful port open.

    There is no timeout or retry: an amp that never answers leaves the
    connection unidentified but still usable.
    """

    identified = pyqtSignal(object)  # ConnectionInfo

    def __init__(self, logger: AppLogger | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._logger = logger or AppLogger()
        self._info = ConnectionInfo()

    @property
    def info(self) -> ConnectionInfo:
        return self._info

    def reset(self) -> None:
        self._info = ConnectionInfo()

    def start(self, send: Callable[[list[int]], None]) -> None:
        self.reset()
        send(list(IDENTIFY_REQUEST))

    def handle(self, message) -> bool:
        """Inspect an inbound SysEx message; True if it was our identity reply."""
        info = parse_identity_reply(message)
        if info is None:
            return False
        self._info = info
        self._logger.device(f"identified: {info.status_text}")
        self.identified.emit(info)
        return True
