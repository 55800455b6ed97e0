from __future__ import annotations
import threading
from typing import Callable
from PyQt6.QtCore import QObject, pyqtSignal
from core.logger import AppLogger
from midi.params import (
    CC_BLOCK, CC_DUMP_REQUEST, CC_RECEIVING, DT_MIDI_CHANNEL, DUMP_GROUPS,
    build_cc,
)

DEFAULT_PACING = 0.05  # seconds between dump requests


class BulkResync(QObject):
    """Pulls the amp's full parameter state with a paced series of dump requests.

    Single-flight: a second `run()` while one is in progress returns False
    at once without sending anything. The synchronous variant blocks its
    caller for roughly len(DUMP_GROUPS) * pacing and reports busy through
    `busy_changed` so the UI can lock itself. `start_async()` runs the same
    sequence on a worker thread and is what the receive path uses, since
    blocking the rtmidi thread would stall the very replies being requested.

    The replies arrive on the normal inbound path; the receiving sentinel
    (126) lets the dispatcher tell them apart from knob twiddling on the amp.
    """

    busy_changed = pyqtSignal(bool)
    started = pyqtSignal()
    finished = pyqtSignal(bool)  # True when every group was requested

    def __init__(
        self,
        send: Callable[[list[int]], None],
        channel: int = DT_MIDI_CHANNEL,
        pacing: float = DEFAULT_PACING,
        groups: tuple[int, ...] = DUMP_GROUPS,
        logger: AppLogger | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._send = send
        self._channel = channel
        self.pacing = pacing
        self._groups = tuple(groups)
        self._logger = logger or AppLogger()
        self._token = threading.Lock()
        self._cancel = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def in_progress(self) -> bool:
        return self._token.locked()

    def run(self, asynchronous: bool = False) -> bool:
        if not self._token.acquire(blocking=False):
            return False
        self._cancel.clear()
        self._sequence(asynchronous)
        return True

    def _sequence(self, asynchronous: bool) -> None:
        # Caller holds the token
        completed = False
        try:
            self.started.emit()
            if not asynchronous:
                self.busy_changed.emit(True)
            self._send(build_cc(self._channel, CC_RECEIVING, 127))
            completed = self._request_groups()
            # Clear any suppression left over from an interrupted write
            self._send(build_cc(self._channel, CC_BLOCK, 0))
            if not asynchronous:
                self.busy_changed.emit(False)
            self._send(build_cc(self._channel, CC_RECEIVING, 0))
        finally:
            self._token.release()
        self._logger.sync(
            f"resync {'done' if completed else 'cancelled'}"
            f"{' (async)' if asynchronous else ''}"
        )
        self.finished.emit(completed)

    def _request_groups(self) -> bool:
        if self._cancel.wait(self.pacing):
            return False
        for group in self._groups:
            self._send(build_cc(self._channel, CC_DUMP_REQUEST, group))
            if self._cancel.wait(self.pacing):
                return False
        return True

    def start_async(self) -> bool:
        """Run the sequence on a worker thread. False if one is already running.

        The token is taken here, before the thread starts, so a `cancel()`
        issued right after this returns always reaches the worker.
        """
        if not self._token.acquire(blocking=False):
            return False
        self._cancel.clear()
        thread = threading.Thread(target=self._sequence, args=(True,), daemon=True)
        self._thread = thread
        thread.start()
        return True

    def cancel(self) -> None:
        """Cut an in-flight resync short; the closing sentinels are still sent."""
        if self.in_progress:
            self._cancel.set()

    def wait(self, timeout: float | None = None) -> None:
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
