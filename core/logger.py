from __future__ import annotations
from PyQt6.QtCore import QObject, pyqtSignal


class AppLogger(QObject):
    """Categorised log sink shared by the protocol core and the UI.

    Safe to call from the rtmidi callback thread: the signal is delivered to
    widgets in the GUI thread through a queued connection.
    """

    message_logged = pyqtSignal(str, str)  # category, message

    def __init__(self, echo: bool = True, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._echo = echo

    def log(self, category: str, message: str) -> None:
        if self._echo:
            print(f"[{category}] {message}", flush=True)
        self.message_logged.emit(category, message)

    def midi(self, message: str) -> None:
        self.log("MIDI", message)

    def sync(self, message: str) -> None:
        self.log("SYNC", message)

    def device(self, message: str) -> None:
        self.log("DEVICE", message)

    def general(self, message: str) -> None:
        self.log("GENERAL", message)

    def warning(self, message: str) -> None:
        self.log("WARNING", message)


def format_bytes(message) -> str:
    return " ".join(f"{b:02X}" for b in message)
