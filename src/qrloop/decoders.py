"""QR decode backends for the live detector.

Each backend returns at most one :class:`Detection` per frame.  OpenCV's
``detectAndDecodeCurved`` is the default; :mod:`pyzbar` can be selected when it
is installed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

Point = Tuple[int, int]


@dataclass(slots=True)
class Detection:
    text: str
    polygon: List[Point]

    @property
    def drawable(self) -> bool:
        return bool(self.text) and len(self.polygon) >= 4


def _to_points(points) -> List[Point]:
    if points is None:
        return []
    array = np.asarray(points).reshape(-1, 2)
    return [(int(x), int(y)) for x, y in array]


class OpenCVDecoder:
    """Decode with :class:`cv2.QRCodeDetector`."""

    name = "opencv"

    def __init__(self) -> None:
        self._detector = cv2.QRCodeDetector()
        # Some builds ship without the curved decoder.
        self._decode = getattr(self._detector, "detectAndDecodeCurved", None) or self._detector.detectAndDecode

    def decode(self, frame: np.ndarray) -> Optional[Detection]:
        try:
            text, points, _ = self._decode(frame)
        except cv2.error as exc:
            logger.debug("OpenCV decode failed: %s", exc)
            return None
        if not text:
            return None
        return Detection(text=text, polygon=_to_points(points))


class PyzbarDecoder:
    """Decode with :mod:`pyzbar`, trying a few preprocessed variants."""

    name = "pyzbar"

    def __init__(self) -> None:
        try:
            from pyzbar import pyzbar  # type: ignore
        except Exception as exc:  # pragma: no cover - depends on environment
            raise RuntimeError("The pyzbar decoder requires pyzbar; install qrloop[pyzbar]") from exc
        self._pyzbar = pyzbar

    def decode(self, frame: np.ndarray) -> Optional[Detection]:
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY) if frame.ndim == 3 else frame
        candidates = (
            gray,
            cv2.GaussianBlur(gray, (5, 5), 0),
            cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)[1],
        )
        for processed in candidates:
            decoded = self._pyzbar.decode(processed, symbols=[self._pyzbar.ZBarSymbol.QRCODE])
            if decoded:
                result = decoded[0]
                return Detection(
                    text=result.data.decode("utf-8", errors="replace"),
                    polygon=[(int(p.x), int(p.y)) for p in result.polygon],
                )
        return None


DECODERS = {
    OpenCVDecoder.name: OpenCVDecoder,
    PyzbarDecoder.name: PyzbarDecoder,
}


def create_decoder(name: str = "opencv"):
    """Instantiate the decoder registered as ``name``."""

    try:
        factory = DECODERS[name]
    except KeyError as exc:
        raise ValueError(f"Unknown decoder: {name}") from exc
    return factory()


__all__ = ["DECODERS", "Detection", "OpenCVDecoder", "PyzbarDecoder", "create_decoder"]
