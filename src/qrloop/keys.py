"""Key handling shared by the detector and the generator.

The detector only needs to know whether a key asks to quit
(:func:`is_exit_key`).  The generator maps normalised key codes to small
tagged :class:`Action` values through the static :data:`KEY_ACTIONS` table and
applies them to a :class:`~qrloop.state.GeneratorState` with
:func:`apply_action`.
"""
from __future__ import annotations

import random
import string
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .config import GeneratorConfig
from .state import ErrorCorrection, GeneratorState, clamp

ESC = 27
BACKSPACE = 8
DELETE = 127

EXIT_KEYS = frozenset(
    {
        ESC,
        ord("q"), ord("Q"),
        ord("x"), ord("X"),
        ord("c"), ord("C"),
        3,   # Ctrl+C
        4,   # Ctrl+D
        17,  # Ctrl+Q
        24,  # Ctrl+X
    }
)

# X11/GTK keysyms for editing keys that should behave like their ASCII codes.
_KEYSYM_ALIASES = {
    0xFF08: BACKSPACE,
    0xFF1B: ESC,
    0xFFFF: DELETE,
}

ALPHANUMERIC = string.digits + string.ascii_uppercase + string.ascii_lowercase


def is_exit_key(code: Optional[int]) -> bool:
    """Return ``True`` if ``code`` is one of the quit keys.

    Extended codes (arrows, function keys) are never masked down to 8 bits:
    0xFF51 is "left arrow", not ``'Q'``.
    """

    if code is None or code < 0 or code > 255:
        return False
    return code in EXIT_KEYS


def normalize_key(code: int) -> Optional[int]:
    """Reduce a ``waitKeyEx`` result to an 8-bit key code.

    Modifier flags above bit 16 are dropped so shifted characters reach the
    table.  Known editing keysyms are aliased; every other extended code
    returns ``None``.
    """

    if code < 0:
        return None
    code &= 0xFFFF
    if code <= 0xFF:
        return code
    return _KEYSYM_ALIASES.get(code)


class ActionKind(Enum):
    APPEND = "append"
    DELETE = "delete"
    SCALE = "scale"
    QUIET_ZONE = "quiet_zone"
    ECL = "ecl"
    VERSION = "version"
    SAVE = "save"
    TOGGLE_HELP = "toggle_help"
    RANDOMIZE = "randomize"
    CLEAR = "clear"
    QUIT = "quit"


@dataclass(frozen=True, slots=True)
class Action:
    kind: ActionKind
    delta: int = 0
    char: str = ""


class Outcome(Enum):
    """What the loop has to do after an action was applied."""

    REDRAW = "redraw"
    SAVE = "save"
    QUIT = "quit"
    IGNORED = "ignored"


def _bind(keys: str, action: Action) -> Dict[int, Action]:
    return {ord(key): action for key in keys}


KEY_ACTIONS: Dict[int, Action] = {
    ESC: Action(ActionKind.QUIT),
    BACKSPACE: Action(ActionKind.DELETE),
    DELETE: Action(ActionKind.DELETE),
    **_bind("qQ", Action(ActionKind.QUIT)),
    **_bind("hH", Action(ActionKind.TOGGLE_HELP)),
    **_bind("rR", Action(ActionKind.RANDOMIZE)),
    **_bind("cC", Action(ActionKind.CLEAR)),
    **_bind("+=", Action(ActionKind.SCALE, 1)),
    **_bind("-_", Action(ActionKind.SCALE, -1)),
    **_bind("]}", Action(ActionKind.QUIET_ZONE, 1)),
    **_bind("[{", Action(ActionKind.QUIET_ZONE, -1)),
    **_bind("e", Action(ActionKind.ECL, -1)),
    **_bind("E", Action(ActionKind.ECL, 1)),
    **_bind("v", Action(ActionKind.VERSION, -1)),
    **_bind("V", Action(ActionKind.VERSION, 1)),
    **_bind("sS", Action(ActionKind.SAVE)),
}
"""Static key bindings of the generator; printable keys not listed append."""


def lookup_action(code: Optional[int]) -> Optional[Action]:
    """Return the action bound to a normalised key code, if any."""

    if code is None:
        return None
    action = KEY_ACTIONS.get(code)
    if action is not None:
        return action
    if 32 <= code <= 126:
        return Action(ActionKind.APPEND, char=chr(code))
    return None


def random_text(rng: random.Random, config: Optional[GeneratorConfig] = None) -> str:
    """Return a random alphanumeric payload for quick experiments."""

    low, high = (config or GeneratorConfig()).random_length
    length = rng.randint(low, high)
    return "".join(rng.choice(ALPHANUMERIC) for _ in range(length))


def apply_action(
    state: GeneratorState,
    action: Action,
    rng: random.Random,
    config: Optional[GeneratorConfig] = None,
) -> Outcome:
    """Apply ``action`` to ``state`` and report what the caller must do next."""

    config = config or GeneratorConfig()
    kind = action.kind

    if kind is ActionKind.QUIT:
        return Outcome.QUIT
    if kind is ActionKind.SAVE:
        return Outcome.SAVE

    if kind is ActionKind.DELETE:
        if not state.text:
            return Outcome.IGNORED
        state.text = state.text[:-1]
    elif kind is ActionKind.APPEND:
        state.text += action.char
    elif kind is ActionKind.CLEAR:
        state.text = ""
    elif kind is ActionKind.RANDOMIZE:
        state.text = random_text(rng, config)
    elif kind is ActionKind.TOGGLE_HELP:
        state.show_help = not state.show_help
    elif kind is ActionKind.SCALE:
        state.scale = clamp(state.scale + action.delta, config.min_scale, config.max_scale)
    elif kind is ActionKind.QUIET_ZONE:
        state.quiet_zone = clamp(state.quiet_zone + action.delta, 0, config.max_quiet_zone)
    elif kind is ActionKind.ECL:
        state.ecl = ErrorCorrection.from_index(state.ecl + action.delta)
    elif kind is ActionKind.VERSION:
        state.version = clamp(state.version + action.delta, 0, config.max_version)
    else:  # pragma: no cover - every kind is handled above
        raise ValueError(f"Unknown action: {kind}")

    state.save_message = None
    return Outcome.REDRAW


__all__ = [
    "Action",
    "ActionKind",
    "EXIT_KEYS",
    "KEY_ACTIONS",
    "Outcome",
    "apply_action",
    "is_exit_key",
    "lookup_action",
    "normalize_key",
    "random_text",
]
