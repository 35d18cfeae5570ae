"""Signal driven exit requests."""
from __future__ import annotations

import signal
from typing import Dict, Iterable, Optional

DEFAULT_SIGNALS = tuple(
    sig
    for sig in (
        getattr(signal, "SIGINT", None),
        getattr(signal, "SIGTERM", None),
        getattr(signal, "SIGHUP", None),
    )
    if sig is not None
)


class ExitFlag:
    """Set-once flag written by signal handlers and read by the main loop."""

    __slots__ = ("_set",)

    def __init__(self) -> None:
        self._set = False

    def set(self, *_args) -> None:
        self._set = True

    def is_set(self) -> bool:
        return self._set

    def __bool__(self) -> bool:
        return self._set


def install_signal_handlers(
    flag: ExitFlag, signals: Optional[Iterable[int]] = None
) -> Dict[int, object]:
    """Route ``signals`` to ``flag`` and return the handlers they replaced."""

    previous: Dict[int, object] = {}
    for sig in DEFAULT_SIGNALS if signals is None else signals:
        previous[sig] = signal.signal(sig, flag.set)
    return previous


def restore_signal_handlers(previous: Dict[int, object]) -> None:
    for sig, handler in previous.items():
        signal.signal(sig, handler if handler is not None else signal.SIG_DFL)


__all__ = ["DEFAULT_SIGNALS", "ExitFlag", "install_signal_handlers", "restore_signal_handlers"]
