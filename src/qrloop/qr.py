"""QR code rendering utilities."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import cv2
import numpy as np

from .config import GeneratorConfig
from .state import GeneratorState

logger = logging.getLogger(__name__)


def auto_file_name(state: GeneratorState) -> str:
    """Return the default save name encoding the current parameters."""

    return f"qrcode_v{state.version}_ecl{state.ecl.name}_sc{state.scale}_qz{state.quiet_zone}.png"


@dataclass(slots=True)
class QRCodeManager:
    """Render QR codes as grayscale module images using :mod:`segno`."""

    config: GeneratorConfig = field(default_factory=GeneratorConfig)

    def is_available(self) -> bool:
        try:
            import segno  # type: ignore  # noqa: F401
        except Exception:
            return False
        return True

    def placeholder(self, shade: int) -> np.ndarray:
        size = self.config.placeholder_size
        return np.full((size, size), shade, dtype=np.uint8)

    def encode_modules(self, state: GeneratorState) -> np.ndarray:
        """Return the module matrix for ``state`` (dark = 0, light = 255).

        Raises :class:`ValueError` when the text does not fit the requested
        version and error correction level.
        """

        try:
            import segno  # type: ignore
        except Exception as exc:  # pragma: no cover - depends on environment
            raise RuntimeError("QR generation requires segno; install segno") from exc

        qr = segno.make(
            state.text,
            version=state.version or None,
            error=state.ecl.name,
            micro=False,
            boost_error=False,
        )
        dark = np.array([list(row) for row in qr.matrix], dtype=bool)
        return np.where(dark, 0, 255).astype(np.uint8)

    def render(self, state: GeneratorState) -> np.ndarray:
        """Return a single-channel image of the QR code for ``state``.

        Empty text yields a blank placeholder without touching the encoder; an
        encoder failure yields a mid-gray placeholder.  Modules are padded by
        the quiet zone and enlarged with nearest-neighbour scaling so they stay
        sharp.
        """

        if not state.text:
            return self.placeholder(self.config.blank_shade)

        try:
            modules = self.encode_modules(state)
        except ValueError as exc:
            logger.warning("cannot encode %d characters at v%d/%s: %s",
                           len(state.text), state.version, state.ecl.name, exc)
            return self.placeholder(self.config.error_shade)

        border = max(0, state.quiet_zone)
        if border:
            modules = np.pad(modules, border, mode="constant", constant_values=255)

        scale = max(1, state.scale)
        if scale == 1:
            return modules
        height, width = modules.shape
        return cv2.resize(modules, (width * scale, height * scale), interpolation=cv2.INTER_NEAREST)

    def save_png(self, state: GeneratorState, path: Optional[str] = None) -> str:
        """Write the rendered QR image and return the path used.

        ``path`` defaults to the state's configured output, then to
        :func:`auto_file_name`.  Raises :class:`OSError` if OpenCV cannot
        write the file.
        """

        target = path or state.output or auto_file_name(state)
        image = self.render(state)
        try:
            written = cv2.imwrite(target, image)
        except cv2.error as exc:
            raise OSError(f"Failed to write QR image to {target}: {exc}") from exc
        if not written:
            raise OSError(f"Failed to write QR image to {target}")
        logger.info("saved %dx%d QR image to %s", image.shape[1], image.shape[0], target)
        return target


__all__ = ["QRCodeManager", "auto_file_name"]
