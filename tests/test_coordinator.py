from __future__ import annotations

import itertools
import signal

import pytest

from qrloop.coordinator import ExitCoordinator
from qrloop.signals import ExitFlag, install_signal_handlers, restore_signal_handlers


class FakeTerminal:
    def __init__(self, pending=None):
        self.pending = list(pending or [])
        self.reads = 0

    def read_key(self):
        self.reads += 1
        return self.pending.pop(0) if self.pending else None


@pytest.mark.parametrize("window_exit, terminal_exit, flagged", list(itertools.product([False, True], repeat=3)))
def test_exit_requested_is_logical_or(window_exit, terminal_exit, flagged):
    flag = ExitFlag()
    if flagged:
        flag.set()
    terminal = FakeTerminal([ord("x")] if terminal_exit else [ord("a")])
    coordinator = ExitCoordinator(terminal, flag)

    window_key = 27 if window_exit else -1

    assert coordinator.exit_requested(window_key) is (window_exit or terminal_exit or flagged)


def test_window_key_short_circuits_terminal_read():
    terminal = FakeTerminal([ord("a")])

    assert ExitCoordinator(terminal).exit_requested(ord("q"))
    assert terminal.reads == 0


def test_extended_window_key_is_not_an_exit():
    assert not ExitCoordinator(FakeTerminal()).exit_requested(0xFF51)


def test_works_without_terminal():
    flag = ExitFlag()
    coordinator = ExitCoordinator(None, flag)

    assert not coordinator.exit_requested(None)
    flag.set()
    assert coordinator.exit_requested(None)


def test_flag_stays_set():
    flag = ExitFlag()
    flag.set()
    flag.set(signal.SIGTERM, None)

    assert flag.is_set()
    assert bool(flag)


@pytest.mark.skipif(not hasattr(signal, "SIGUSR1"), reason="requires POSIX signals")
def test_signal_sets_flag_and_handlers_are_restored():
    flag = ExitFlag()
    original = signal.getsignal(signal.SIGUSR1)

    previous = install_signal_handlers(flag, [signal.SIGUSR1])
    try:
        signal.raise_signal(signal.SIGUSR1)
        assert flag.is_set()
    finally:
        restore_signal_handlers(previous)

    assert signal.getsignal(signal.SIGUSR1) == original
