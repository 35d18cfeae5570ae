"""Live camera QR detector with on-frame overlay."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .config import CameraConfig, DetectorConfig, configure_logging
from .coordinator import ExitCoordinator
from .decoders import DECODERS, Detection, create_decoder
from .display import Display
from .signals import ExitFlag, install_signal_handlers, restore_signal_handlers
from .stats import FpsStats, now_ms
from .terminal import RawTerminal

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_CAMERA = 1
EXIT_BAD_ARGUMENT = 2
EXIT_CAMERA_FAILED = 3

NO_CAMERA_HINT = (
    "Unable to open a camera (tried /dev/video0 and /dev/video1).\n"
    "Hints:\n"
    "  1) run: qrloop-detect --list to see available devices (0 and 1 only)\n"
    "  2) pick one: qrloop-detect 0  or  qrloop-detect 1\n"
    "  3) file, image and URL inputs are not supported\n"
)


class CameraError(RuntimeError):
    """Raised when no capture device could be opened."""


def parse_camera_index(value: str, allowed: Iterable[int] = (0, 1)) -> int:
    """Return ``value`` as a camera index or raise :class:`ValueError`."""

    allowed = list(allowed)
    if not value or not value.isdigit():
        raise ValueError("Only camera index 0 or 1 is supported (no image or video paths).")
    index = int(value)
    if index not in allowed:
        raise ValueError(f"Invalid camera index {index}. Only 0 or 1 is supported.")
    return index


def open_camera(index: int, config: CameraConfig):
    """Open camera ``index`` at the configured resolution, or return ``None``."""

    capture = cv2.VideoCapture(index)
    if not capture.isOpened():
        capture.release()
        return None
    capture.set(cv2.CAP_PROP_FRAME_WIDTH, config.width)
    capture.set(cv2.CAP_PROP_FRAME_HEIGHT, config.height)
    if not capture.isOpened():
        capture.release()
        return None
    logger.info("opened camera %d", index)
    return capture


def open_first_camera(config: CameraConfig, requested: Optional[int] = None):
    """Open the requested camera, or the first one that works.

    Raises :class:`CameraError` when nothing could be opened.
    """

    indices = [requested] if requested is not None else config.get_indices()
    for index in indices:
        capture = open_camera(index, config)
        if capture is not None:
            return capture
    raise CameraError(f"Unable to open camera index {indices}")


def list_cameras(config: CameraConfig, out=None) -> List[Tuple[int, int, int]]:
    """Probe the configured indices and print the ones that open."""

    out = out or sys.stdout
    found = []
    print("Probing V4L2 cameras...", file=out)
    for index in config.get_indices():
        capture = cv2.VideoCapture(index)
        if not capture.isOpened():
            capture.release()
            continue
        width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        line = f" - /dev/video{index} (opened)"
        if width > 0 and height > 0:
            line += f" default {width}x{height}"
        print(line, file=out)
        found.append((index, width, height))
        capture.release()
    return found


def centroid(points: Sequence[Tuple[int, int]]) -> Tuple[int, int]:
    """Integer average of ``points``, computed per axis."""

    count = len(points)
    return (
        int(sum(x for x, _ in points) / count),
        int(sum(y for _, y in points) / count),
    )


def annotate_frame(
    frame: np.ndarray,
    detection: Optional[Detection],
    avg_ms: float,
    avg_fps: float,
    config: Optional[DetectorConfig] = None,
) -> int:
    """Draw the detection and status line on ``frame``; return the QR count."""

    config = config or DetectorConfig()
    detected = 0
    if detection is not None and detection.drawable:
        polygon = np.array(detection.polygon, dtype=np.int32).reshape(-1, 1, 2)
        cv2.polylines(frame, [polygon], True, config.outline_color, config.outline_thickness, cv2.LINE_AA)
        cx, cy = centroid(detection.polygon)
        dx, dy = config.label_offset
        cv2.putText(frame, detection.text, (cx + dx, cy + dy), cv2.FONT_HERSHEY_SIMPLEX,
                    config.label_scale, config.outline_color, config.text_thickness, cv2.LINE_AA)
        detected = 1

    status = f"avg {avg_ms:.2f} ms  fps {avg_fps:.1f}  QR {detected}"
    cv2.putText(frame, status, config.status_anchor, cv2.FONT_HERSHEY_SIMPLEX,
                config.status_scale, config.outline_color, config.text_thickness)
    return detected


class DetectorApp:
    """Read frames, decode, draw, show and poll for exit until told to stop."""

    def __init__(self, capture, decoder, display, coordinator: ExitCoordinator,
                 config: Optional[DetectorConfig] = None, stats: Optional[FpsStats] = None):
        self.capture = capture
        self.decoder = decoder
        self.display = display
        self.coordinator = coordinator
        self.config = config or DetectorConfig()
        self.stats = stats or FpsStats()
        self.frames = 0

    def step(self) -> bool:
        """Process one frame; return ``False`` once the loop should stop."""

        start = now_ms()
        ok, frame = self.capture.read()
        if not ok or frame is None or frame.size == 0:
            logger.info("camera stream ended after %d frames", self.frames)
            return False

        detection = self.decoder.decode(frame)
        elapsed = now_ms() - start
        annotate_frame(frame, detection, self.stats.update_avg_ms(elapsed), self.stats.tick_fps(), self.config)
        if detection is not None and detection.drawable:
            logger.debug("decoded %r", detection.text)

        self.display.show(frame)
        self.frames += 1
        key = self.display.wait_key(self.config.key_poll_ms)
        return not self.coordinator.exit_requested(key)

    def run(self) -> int:
        try:
            while self.step():
                pass
        finally:
            self.capture.release()
            self.display.close()
        return self.frames


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qrloop-detect", description="Live QR code detector")
    parser.add_argument("--list", action="store_true", help="probe camera indices 0 and 1 and exit")
    parser.add_argument("index", nargs="?", help="camera index (0 or 1)")
    parser.add_argument("--decoder", choices=sorted(DECODERS), default="opencv", help="QR decode backend")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    camera_config = CameraConfig()

    if args.list:
        list_cameras(camera_config)
        return EXIT_OK

    requested = None
    if args.index is not None:
        try:
            requested = parse_camera_index(args.index, camera_config.get_indices())
        except ValueError as exc:
            print(exc, file=sys.stderr)
            return EXIT_BAD_ARGUMENT

    try:
        decoder = create_decoder(args.decoder)
    except RuntimeError as exc:
        print(exc, file=sys.stderr)
        return EXIT_BAD_ARGUMENT

    try:
        capture = open_first_camera(camera_config, requested)
    except CameraError:
        if requested is not None:
            print(f"Unable to open camera index {requested} (only 0 or 1 is supported).", file=sys.stderr)
            return EXIT_CAMERA_FAILED
        print(NO_CAMERA_HINT, file=sys.stderr, end="")
        return EXIT_NO_CAMERA

    config = DetectorConfig()
    flag = ExitFlag()
    try:
        with RawTerminal() as terminal:
            previous = install_signal_handlers(flag)
            try:
                app = DetectorApp(capture, decoder, Display(config.window_title),
                                  ExitCoordinator(terminal, flag), config)
                app.run()
            finally:
                restore_signal_handlers(previous)
    finally:
        capture.release()
    return EXIT_OK


__all__ = [
    "CameraError",
    "DetectorApp",
    "annotate_frame",
    "centroid",
    "list_cameras",
    "main",
    "open_camera",
    "open_first_camera",
    "parse_camera_index",
]


if __name__ == "__main__":  # pragma: no cover - manual launch only
    raise SystemExit(main())
