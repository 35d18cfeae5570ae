"""Interactive QR code generator driven by window key presses."""
from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import Optional, Sequence

from .config import GeneratorConfig, configure_logging
from .display import Display
from .keys import Outcome, apply_action, lookup_action, normalize_key
from .qr import QRCodeManager, auto_file_name
from .render import compose_canvas
from .signals import ExitFlag, install_signal_handlers, restore_signal_handlers
from .state import GeneratorState

logger = logging.getLogger(__name__)


class GeneratorApp:
    """Redraw on demand, then block until the next key press."""

    def __init__(
        self,
        state: GeneratorState,
        display,
        manager: Optional[QRCodeManager] = None,
        rng: Optional[random.Random] = None,
        flag: Optional[ExitFlag] = None,
        config: Optional[GeneratorConfig] = None,
    ):
        self.state = state
        self.display = display
        self.config = config or GeneratorConfig()
        self.manager = manager or QRCodeManager(self.config)
        self.rng = rng or random.Random()
        self.flag = flag if flag is not None else ExitFlag()
        self.need_redraw = True

    def redraw(self) -> None:
        qr = self.manager.render(self.state)
        self.display.show(compose_canvas(qr, self.state, self.config))
        self.need_redraw = False

    def save(self) -> None:
        path = self.state.output or auto_file_name(self.state)
        try:
            self.manager.save_png(self.state, path)
        except OSError as exc:
            logger.error("%s", exc)
            self.state.save_message = f"Save failed: {path}"
        else:
            print(f"Saved: {path}")
            self.state.save_message = f"Saved: {path}"
        self.need_redraw = True

    def handle_key(self, key: int) -> bool:
        """Apply one key event; return ``False`` when the loop should end."""

        if key < 0:
            # waitKey gives up immediately once the window has been closed.
            return self.display.is_open() and not self.flag.is_set()

        action = lookup_action(normalize_key(key))
        if action is not None:
            outcome = apply_action(self.state, action, self.rng, self.config)
            if outcome is Outcome.QUIT:
                logger.info("quit key pressed")
                return False
            if outcome is Outcome.SAVE:
                self.save()
            elif outcome is Outcome.REDRAW:
                self.need_redraw = True

        if self.flag.is_set():
            logger.info("exit requested by signal")
            return False
        return True

    def run(self) -> None:
        try:
            while True:
                if self.need_redraw:
                    self.redraw()
                if not self.handle_key(self.display.wait_key(0)):
                    break
        finally:
            self.display.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qrloop-generate", description="Interactive QR code generator")
    parser.add_argument("-t", "--text", help="initial payload text")
    parser.add_argument("-o", "--output", help="fixed path used by the save key")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    config = GeneratorConfig()
    manager = QRCodeManager(config)
    if not manager.is_available():
        print("QR generation requires segno; install segno", file=sys.stderr)
        return 1

    state = GeneratorState.from_config(config, text=args.text, output=args.output)
    flag = ExitFlag()
    previous = install_signal_handlers(flag)
    try:
        GeneratorApp(state, Display(config.window_title), manager, flag=flag, config=config).run()
    finally:
        restore_signal_handlers(previous)
    return 0


__all__ = ["GeneratorApp", "main"]


if __name__ == "__main__":  # pragma: no cover - manual launch only
    raise SystemExit(main())
