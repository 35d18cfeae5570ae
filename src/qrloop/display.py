"""Thin wrapper around the OpenCV HighGUI window functions."""
from __future__ import annotations

import cv2
import numpy as np


class Display:
    """One named window; loops talk to this instead of :mod:`cv2` directly."""

    def __init__(self, title: str, autosize: bool = True):
        self.title = title
        self._created = False
        self._autosize = autosize

    def show(self, image: np.ndarray) -> None:
        if not self._created:
            cv2.namedWindow(self.title, cv2.WINDOW_AUTOSIZE if self._autosize else cv2.WINDOW_NORMAL)
            self._created = True
        cv2.imshow(self.title, image)

    def wait_key(self, delay_ms: int) -> int:
        """Return the extended key code, or -1 when the delay elapsed."""

        return cv2.waitKeyEx(delay_ms)

    def is_open(self) -> bool:
        if not self._created:
            return False
        try:
            return cv2.getWindowProperty(self.title, cv2.WND_PROP_VISIBLE) >= 1
        except cv2.error:
            return False

    def close(self) -> None:
        cv2.destroyAllWindows()
        self._created = False


__all__ = ["Display"]
