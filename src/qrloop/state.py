"""Runtime state containers used by the qrloop tools."""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from .config import GeneratorConfig


class ErrorCorrection(IntEnum):
    """QR error correction levels, ordered by redundancy."""

    L = 0
    M = 1
    Q = 2
    H = 3

    @classmethod
    def from_index(cls, index: int) -> "ErrorCorrection":
        return cls(clamp(index, cls.L, cls.H))


def clamp(value: int, low: int, high: int) -> int:
    """Return ``value`` limited to the closed range ``[low, high]``."""

    return low if value < low else high if value > high else value


_DEFAULTS = GeneratorConfig()


@dataclass(slots=True)
class GeneratorState:
    """Mutable parameters edited by the generator's key dispatcher."""

    text: str = _DEFAULTS.default_text
    version: int = _DEFAULTS.default_version
    ecl: ErrorCorrection = ErrorCorrection[_DEFAULTS.default_ecl]
    scale: int = _DEFAULTS.default_scale
    quiet_zone: int = _DEFAULTS.default_quiet_zone
    show_help: bool = False
    output: Optional[str] = None
    # Shown after a save regardless of ``show_help``; cleared on the next edit.
    save_message: Optional[str] = None

    @classmethod
    def from_config(
        cls,
        config: GeneratorConfig,
        text: Optional[str] = None,
        output: Optional[str] = None,
    ) -> "GeneratorState":
        return cls(
            text=config.default_text if text is None else text,
            version=config.default_version,
            ecl=ErrorCorrection[config.default_ecl],
            scale=config.default_scale,
            quiet_zone=config.default_quiet_zone,
            output=output,
        )


__all__ = ["ErrorCorrection", "GeneratorState", "clamp"]
