"""Raw terminal mode for reading single key presses without blocking."""
from __future__ import annotations

import logging
import os
import sys
from typing import Any, List, Optional

try:
    import fcntl
    import termios
except ImportError:  # pragma: no cover - Windows has no termios
    fcntl = None  # type: ignore[assignment]
    termios = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class RawTerminal:
    """Scoped guard that switches a terminal to raw, non-blocking input.

    Entering the guard disables canonical line buffering and echo and puts the
    descriptor into ``O_NONBLOCK`` mode; leaving it restores both, whichever
    way the ``with`` block ends.  ``enable`` and ``disable`` are idempotent.
    Descriptors that are not terminals are left untouched.
    """

    def __init__(self, fd: Optional[int] = None):
        if fd is None:
            try:
                fd = sys.stdin.fileno()
            except (AttributeError, OSError, ValueError):
                fd = -1
        self._fd = fd
        self._saved_attrs: Optional[List[Any]] = None
        self._saved_flags: Optional[int] = None

    @property
    def fd(self) -> int:
        return self._fd

    @property
    def enabled(self) -> bool:
        return self._saved_attrs is not None

    def enable(self) -> None:
        if self.enabled:
            return
        if termios is None or self._fd < 0 or not os.isatty(self._fd):
            logger.debug("fd %d is not a terminal; raw mode skipped", self._fd)
            return

        attrs = termios.tcgetattr(self._fd)
        raw = termios.tcgetattr(self._fd)
        raw[3] &= ~(termios.ICANON | termios.ECHO)
        termios.tcsetattr(self._fd, termios.TCSANOW, raw)

        flags = fcntl.fcntl(self._fd, fcntl.F_GETFL)
        fcntl.fcntl(self._fd, fcntl.F_SETFL, flags | os.O_NONBLOCK)

        self._saved_attrs = attrs
        self._saved_flags = flags
        logger.debug("raw mode enabled on fd %d", self._fd)

    def disable(self) -> None:
        if not self.enabled:
            return
        try:
            termios.tcsetattr(self._fd, termios.TCSANOW, self._saved_attrs)
            fcntl.fcntl(self._fd, fcntl.F_SETFL, self._saved_flags & ~os.O_NONBLOCK)
        finally:
            self._saved_attrs = None
            self._saved_flags = None
        logger.debug("raw mode disabled on fd %d", self._fd)

    def read_key(self) -> Optional[int]:
        """Return one pending byte, or ``None`` when no input is waiting."""

        if not self.enabled:
            return None
        try:
            data = os.read(self._fd, 1)
        except (BlockingIOError, InterruptedError):
            return None
        except OSError as exc:
            # A hung-up terminal reports EIO; treat it as no input.
            logger.debug("read from fd %d failed: %s", self._fd, exc)
            return None
        return data[0] if data else None

    def __enter__(self) -> "RawTerminal":
        self.enable()
        return self

    def __exit__(self, *_exc_info) -> None:
        self.disable()


__all__ = ["RawTerminal"]
