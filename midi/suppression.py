from __future__ import annotations
import threading
import time
from typing import Callable
from core.logger import AppLogger
from midi.params import CC_BLOCK, DT_MIDI_CHANNEL, build_cc

BLOCK_ON = 127
BLOCK_OFF = 0


class EchoSuppressor:
    """Brackets every outbound write in block-on / block-off sentinels.

    The amp echoes everything it receives. The echoed block-on arrives
    after the write was already applied locally, so while the flag is
    raised the dispatcher drops every control change; the echoed block-off
    lowers it again.

    `blocked` is written from the rtmidi thread and read from the GUI and
    resync threads, hence the lock.
    """

    def __init__(
        self,
        send: Callable[[list[int]], None],
        channel: int = DT_MIDI_CHANNEL,
        timeout: float | None = None,
        logger: AppLogger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._send = send
        self._channel = channel
        self._timeout = timeout
        self._logger = logger or AppLogger()
        self._clock = clock
        self._lock = threading.Lock()
        self._blocked = False
        self._blocked_since = 0.0

    @property
    def timeout(self) -> float | None:
        return self._timeout

    @timeout.setter
    def timeout(self, value: float | None) -> None:
        self._timeout = value

    @property
    def blocked(self) -> bool:
        with self._lock:
            if not self._blocked:
                return False
            expired = (self._timeout is not None
                       and self._clock() - self._blocked_since > self._timeout)
            if not expired:
                return True
            # Block-off echo never came back (link dropped mid-write)
            self._blocked = False
        self._logger.warning(
            f"suppression stuck for more than {self._timeout:.1f}s, clearing"
        )
        return False

    def set_blocked(self, blocked: bool) -> None:
        with self._lock:
            if blocked and not self._blocked:
                self._blocked_since = self._clock()
            self._blocked = blocked

    def reset(self) -> None:
        self.set_blocked(False)

    def write(self, param_id: int, raw: int) -> bool:
        """Send one parameter value as an indivisible block-on/value/block-off triple.

        A no-op returning False while suppression is active.
        """
        if self.blocked:
            return False
        self._send(build_cc(self._channel, CC_BLOCK, BLOCK_ON))
        self._send(build_cc(self._channel, param_id, raw))
        self._send(build_cc(self._channel, CC_BLOCK, BLOCK_OFF))
        return True

    def release(self) -> None:
        """Send a lone block-off, e.g. when a knob drag ends."""
        self._send(build_cc(self._channel, CC_BLOCK, BLOCK_OFF))
