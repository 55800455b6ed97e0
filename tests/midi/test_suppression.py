from core.logger import AppLogger
from midi.suppression import EchoSuppressor


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _make(timeout=None, clock=None):
    sent = []
    sup = EchoSuppressor(
        sent.append, timeout=timeout, logger=AppLogger(echo=False),
        clock=clock or _Clock(),
    )
    return sup, sent


def test_write_sends_bracketed_triple():
    sup, sent = _make()
    assert sup.write(13, 64)
    assert sent == [[0xB0, 127, 127], [0xB0, 13, 64], [0xB0, 127, 0]]


def test_write_uses_channel():
    sent = []
    sup = EchoSuppressor(sent.append, channel=2, logger=AppLogger(echo=False))
    sup.write(13, 64)
    assert sent[1] == [0xB2, 13, 64]


def test_write_is_noop_while_blocked():
    sup, sent = _make()
    sup.set_blocked(True)
    assert not sup.write(13, 64)
    assert sent == []


def test_block_cleared_by_echo():
    sup, sent = _make()
    sup.set_blocked(True)
    sup.set_blocked(False)
    assert not sup.blocked
    assert sup.write(13, 64)


def test_release_sends_block_off_only():
    sup, sent = _make()
    sup.release()
    assert sent == [[0xB0, 127, 0]]


def test_no_timeout_keeps_block_raised():
    clock = _Clock()
    sup, _ = _make(timeout=None, clock=clock)
    sup.set_blocked(True)
    clock.now += 3600
    assert sup.blocked


def test_stale_block_expires_after_timeout(app):
    clock = _Clock()
    sup, _ = _make(timeout=2.0, clock=clock)
    warnings = []
    sup._logger.message_logged.connect(lambda cat, msg: warnings.append(cat))
    sup.set_blocked(True)
    clock.now += 1.5
    assert sup.blocked
    clock.now += 1.0
    assert not sup.blocked
    assert warnings == ["WARNING"]


def test_repeated_block_on_keeps_first_start():
    clock = _Clock()
    sup, _ = _make(timeout=2.0, clock=clock)
    sup.set_blocked(True)
    clock.now += 1.5
    sup.set_blocked(True)
    clock.now += 1.0
    assert not sup.blocked


def test_reset_clears_block():
    sup, _ = _make()
    sup.set_blocked(True)
    sup.reset()
    assert not sup.blocked
