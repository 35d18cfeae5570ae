"""Configuration data structures for the qrloop tools."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Tuple

Color = Tuple[int, int, int]


@dataclass(slots=True)
class CameraConfig:
    """Camera configuration used when opening a capture device."""

    width: int = 640
    height: int = 480
    indices: List[int] = field(default_factory=lambda: [0, 1])

    def get_indices(self) -> List[int]:
        """Return candidate camera indices in probe order."""

        return list(self.indices)


@dataclass(slots=True)
class DetectorConfig:
    """Static options for the live detector window."""

    window_title: str = "QR Detect"
    outline_color: Color = (0, 255, 0)
    outline_thickness: int = 3
    label_offset: Tuple[int, int] = (-20, -10)
    label_scale: float = 0.6
    status_anchor: Tuple[int, int] = (10, 30)
    status_scale: float = 0.8
    text_thickness: int = 2
    key_poll_ms: int = 1


@dataclass(slots=True)
class GeneratorConfig:
    """Defaults and limits for the interactive generator."""

    window_title: str = "QR Code Generator"
    default_text: str = "Hello, QR!"
    default_version: int = 0
    default_ecl: str = "M"
    default_scale: int = 15
    default_quiet_zone: int = 7
    max_version: int = 40
    min_scale: int = 1
    max_scale: int = 64
    max_quiet_zone: int = 16
    placeholder_size: int = 240
    blank_shade: int = 255
    error_shade: int = 200
    canvas_min_width: int = 640
    canvas_extra_height: int = 120
    canvas_top_margin: int = 10
    random_length: Tuple[int, int] = (12, 24)


def configure_logging(verbose: bool = False) -> None:
    """Configure the root logger for command line use."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = ["CameraConfig", "DetectorConfig", "GeneratorConfig", "configure_logging"]
