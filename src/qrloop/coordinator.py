"""Single decision point for leaving an interactive loop."""
from __future__ import annotations

import logging
from typing import Optional

from .keys import is_exit_key
from .signals import ExitFlag
from .terminal import RawTerminal

logger = logging.getLogger(__name__)


class ExitCoordinator:
    """Combine window keys, terminal keys and signals into one exit decision."""

    def __init__(self, terminal: Optional[RawTerminal] = None, flag: Optional[ExitFlag] = None):
        self.terminal = terminal
        self.flag = flag if flag is not None else ExitFlag()

    def exit_requested(self, window_key: Optional[int]) -> bool:
        if is_exit_key(window_key):
            logger.info("exit requested from window key %d", window_key)
            return True
        if self.terminal is not None and is_exit_key(self.terminal.read_key()):
            logger.info("exit requested from terminal")
            return True
        if self.flag.is_set():
            logger.info("exit requested by signal")
            return True
        return False


__all__ = ["ExitCoordinator"]
