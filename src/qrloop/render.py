"""Canvas composition for the generator window."""
from __future__ import annotations

from typing import Optional, Tuple

import cv2
import numpy as np

from .config import GeneratorConfig
from .state import GeneratorState

FONT = cv2.FONT_HERSHEY_SIMPLEX
WHITE = (255, 255, 255)
GREEN = (0, 255, 0)
LIGHT_GRAY = (200, 200, 200)
ORANGE = (0, 128, 255)

HELP_LINES = (
    "Keys:",
    "  Type to append, Backspace to delete",
    "  v/V version, e/E error correction",
    "  +/- or =/_ scale, [/ ] or {/} quiet zone",
    "  r random, c clear, s save, h help, q/ESC quit",
)


def draw_outlined_text(
    canvas: np.ndarray,
    text: str,
    origin: Tuple[int, int],
    color: Tuple[int, int, int],
    scale: float = 0.6,
    thickness: int = 1,
) -> None:
    """Draw ``text`` with a dark outline so it reads on any background."""

    cv2.putText(canvas, text, origin, FONT, scale, (0, 0, 0), thickness + 1, cv2.LINE_AA)
    cv2.putText(canvas, text, origin, FONT, scale, color, thickness, cv2.LINE_AA)


def overlay_info(canvas: np.ndarray, state: GeneratorState) -> None:
    """Draw the parameter summary and key legend onto ``canvas``."""

    y = 20

    def put(line: str, color: Tuple[int, int, int] = GREEN) -> None:
        nonlocal y
        draw_outlined_text(canvas, line, (10, y), color)
        y += 22

    put("QR Code Generator (GUI)", WHITE)
    put("Text: " + (state.text or "<empty>"))
    put(f"Version: {state.version} (v/V)  ECL: {state.ecl.name} (e/E)")
    put(f"Scale: {state.scale} (+/- or =/_)  QuietZone: {state.quiet_zone} ([/ ] or {{/}})")
    put("Save: s -> " + (state.output or "auto name"))
    y += 8
    for line in HELP_LINES:
        put(line, LIGHT_GRAY)


def compose_canvas(
    qr: np.ndarray, state: GeneratorState, config: Optional[GeneratorConfig] = None
) -> np.ndarray:
    """Centre the QR image on a white BGR canvas and add the overlays."""

    config = config or GeneratorConfig()
    rows, cols = qr.shape[:2]
    height = rows + config.canvas_extra_height
    width = max(cols, config.canvas_min_width)
    canvas = np.full((height, width, 3), 255, dtype=np.uint8)

    x = (width - cols) // 2
    top = config.canvas_top_margin
    canvas[top:top + rows, x:x + cols] = cv2.cvtColor(qr, cv2.COLOR_GRAY2BGR) if qr.ndim == 2 else qr

    if state.show_help:
        overlay_info(canvas, state)
    if state.save_message:
        draw_outlined_text(canvas, state.save_message, (10, height - 15), ORANGE, thickness=2)
    return canvas


__all__ = ["compose_canvas", "draw_outlined_text", "overlay_info"]
