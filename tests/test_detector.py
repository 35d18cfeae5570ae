from __future__ import annotations

import signal

import cv2
import numpy as np
import pytest

from qrloop import detector
from qrloop.config import CameraConfig
from qrloop.coordinator import ExitCoordinator
from qrloop.decoders import Detection, create_decoder
from qrloop.detector import (
    DetectorApp,
    annotate_frame,
    centroid,
    list_cameras,
    open_camera,
    parse_camera_index,
)
from qrloop.signals import ExitFlag


class FakeCapture:
    opened_indices = set()
    instances = []

    def __init__(self, index, frames=None):
        self.index = index
        self.frames = list(frames or [])
        self.released = False
        self.props = {}
        FakeCapture.instances.append(self)

    def isOpened(self):
        return self.index in self.opened_indices and not self.released

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def get(self, prop):
        return {cv2.CAP_PROP_FRAME_WIDTH: 640.0, cv2.CAP_PROP_FRAME_HEIGHT: 480.0}.get(prop, 0.0)

    def read(self):
        if not self.frames:
            return False, None
        return True, self.frames.pop(0)

    def release(self):
        self.released = True


class FakeDecoder:
    def __init__(self, detection=None):
        self.detection = detection
        self.calls = 0

    def decode(self, _frame):
        self.calls += 1
        return self.detection


class FakeDisplay:
    def __init__(self, keys=None):
        self.keys = list(keys or [])
        self.shown = []
        self.closed = False

    def show(self, image):
        self.shown.append(image)

    def wait_key(self, _delay):
        return self.keys.pop(0) if self.keys else -1

    def close(self):
        self.closed = True


@pytest.fixture()
def cameras(monkeypatch):
    FakeCapture.opened_indices = set()
    FakeCapture.instances = []
    monkeypatch.setattr(cv2, "VideoCapture", FakeCapture)
    return FakeCapture


def blank_frames(count):
    return [np.zeros((120, 160, 3), dtype=np.uint8) for _ in range(count)]


@pytest.mark.parametrize("value, expected", [("0", 0), ("1", 1)])
def test_parse_camera_index_accepts_supported_indices(value, expected):
    assert parse_camera_index(value) == expected


@pytest.mark.parametrize("value", ["2", "10", "-1", "abc", "", "0.5", "video.mp4"])
def test_parse_camera_index_rejects_everything_else(value):
    with pytest.raises(ValueError):
        parse_camera_index(value)


@pytest.mark.parametrize("argv", [["2"], ["abc"], ["-1"]])
def test_main_invalid_index_exits_2(cameras, argv):
    assert detector.main(argv) == 2
    assert cameras.instances == []


def test_main_requested_camera_missing_exits_3(cameras, capsys):
    assert detector.main(["0"]) == 3
    assert [capture.index for capture in cameras.instances] == [0]
    assert "index 0" in capsys.readouterr().err


def test_main_no_camera_exits_1(cameras, capsys):
    assert detector.main([]) == 1
    assert [capture.index for capture in cameras.instances] == [0, 1]
    assert "--list" in capsys.readouterr().err


def test_main_list_probes_indices(cameras, capsys):
    cameras.opened_indices = {1}

    assert detector.main(["--list"]) == 0

    out = capsys.readouterr().out
    assert "/dev/video1 (opened) default 640x480" in out
    assert "/dev/video0" not in out


def test_list_cameras_reports_found_devices(cameras, capsys):
    cameras.opened_indices = {0, 1}

    found = list_cameras(CameraConfig())

    assert found == [(0, 640, 480), (1, 640, 480)]
    assert all(capture.released for capture in cameras.instances)


def test_open_camera_configures_resolution(cameras):
    cameras.opened_indices = {0}

    capture = open_camera(0, CameraConfig())

    assert capture.props[cv2.CAP_PROP_FRAME_WIDTH] == 640
    assert capture.props[cv2.CAP_PROP_FRAME_HEIGHT] == 480


def test_open_first_camera_falls_back_to_second_index(cameras):
    cameras.opened_indices = {1}

    capture = detector.open_first_camera(CameraConfig())

    assert capture.index == 1
    assert cameras.instances[0].released


def test_centroid_is_integer_average_per_axis():
    assert centroid([(0, 0), (10, 0), (10, 10), (0, 10)]) == (5, 5)
    assert centroid([(0, 0), (1, 0), (1, 1), (0, 1)]) == (0, 0)
    assert centroid([(10, 20), (31, 20), (31, 41), (10, 41)]) == (20, 30)


def test_annotate_frame_draws_outline_for_detection():
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    detection = Detection("hello", [(100, 100), (200, 100), (200, 200), (100, 200)])

    count = annotate_frame(frame, detection, avg_ms=12.5, avg_fps=29.9)

    assert count == 1
    assert tuple(frame[100, 150]) == (0, 255, 0)
    assert tuple(frame[150, 150]) == (0, 0, 0)


@pytest.mark.parametrize(
    "detection",
    [None, Detection("", [(1, 1)] * 4), Detection("text", [(100, 100), (200, 100), (200, 200)])],
)
def test_annotate_frame_skips_incomplete_detections(detection):
    frame = np.zeros((480, 640, 3), dtype=np.uint8)

    count = annotate_frame(frame, detection, avg_ms=0.0, avg_fps=0.0)

    assert count == 0
    assert frame[100:, :].sum() == 0
    # Status line is always drawn near the top-left corner.
    assert frame[:40, :300].any()


def test_detector_stops_when_stream_ends_and_releases():
    capture = FakeCapture(0, blank_frames(3))
    display = FakeDisplay()
    decoder = FakeDecoder()

    app = DetectorApp(capture, decoder, display, ExitCoordinator(None, ExitFlag()))

    assert app.run() == 3
    assert decoder.calls == 3
    assert len(display.shown) == 3
    assert capture.released
    assert display.closed


def test_detector_stops_on_exit_key():
    capture = FakeCapture(0, blank_frames(5))
    display = FakeDisplay([-1, ord("q")])

    app = DetectorApp(capture, FakeDecoder(), display, ExitCoordinator(None, ExitFlag()))

    assert app.run() == 2
    assert capture.released


def test_detector_ignores_extended_key_codes():
    capture = FakeCapture(0, blank_frames(2))
    display = FakeDisplay([0xFF51, 0xFF51])

    app = DetectorApp(capture, FakeDecoder(), display, ExitCoordinator(None, ExitFlag()))

    assert app.run() == 2


def test_detector_stops_on_signal_flag():
    flag = ExitFlag()
    flag.set()
    capture = FakeCapture(0, blank_frames(5))

    app = DetectorApp(capture, FakeDecoder(), FakeDisplay(), ExitCoordinator(None, flag))

    assert app.run() == 1


def test_detector_releases_on_decoder_error():
    class BrokenDecoder:
        def decode(self, _frame):
            raise RuntimeError("decoder crashed")

    capture = FakeCapture(0, blank_frames(1))
    display = FakeDisplay()

    with pytest.raises(RuntimeError):
        DetectorApp(capture, BrokenDecoder(), display, ExitCoordinator(None, ExitFlag())).run()

    assert capture.released
    assert display.closed


def test_opencv_decoder_returns_none_for_blank_frame():
    decoder = create_decoder("opencv")

    assert decoder.decode(np.full((240, 320, 3), 255, dtype=np.uint8)) is None


def test_create_decoder_rejects_unknown_name():
    with pytest.raises(ValueError):
        create_decoder("zxing")


class RecordingTerminal:
    instances = []

    def __init__(self):
        self.entered = False
        self.exited = False
        RecordingTerminal.instances.append(self)

    def read_key(self):
        return None

    def __enter__(self):
        self.entered = True
        return self

    def __exit__(self, *_exc_info):
        self.exited = True


def test_main_restores_terminal_and_signals_after_stream_ends(cameras, monkeypatch):
    class StreamingCapture(FakeCapture):
        def __init__(self, index):
            super().__init__(index, blank_frames(2))

    cameras.opened_indices = {0}
    monkeypatch.setattr(cv2, "VideoCapture", StreamingCapture)
    displays = []

    def make_display(_title):
        displays.append(FakeDisplay())
        return displays[-1]

    monkeypatch.setattr(detector, "Display", make_display)
    RecordingTerminal.instances = []
    monkeypatch.setattr(detector, "RawTerminal", RecordingTerminal)
    handled = [sig for sig in (signal.SIGINT, signal.SIGTERM, getattr(signal, "SIGHUP", None)) if sig is not None]
    originals = {sig: signal.getsignal(sig) for sig in handled}

    assert detector.main([]) == 0

    capture = cameras.instances[0]
    assert capture.released
    assert len(displays[0].shown) == 2
    assert displays[0].closed
    terminal = RecordingTerminal.instances[0]
    assert terminal.entered and terminal.exited
    assert {sig: signal.getsignal(sig) for sig in handled} == originals
