"""Behavior tests for frame capture and scene change detection."""

import base64

import cv2
import numpy as np
import pytest

from vid2sub import frames
from vid2sub.frames import SceneDetector, capture_frame, probe_video


class FakeCapture:
    """VideoCapture stand-in that plays back a list of frames."""

    def __init__(self, frame_list, fps=1.0, opened=True):
        self.frames = list(frame_list)
        self.fps = fps
        self.opened = opened
        self.position = 0
        self.released = False
        self.seeks = []

    def isOpened(self):
        return self.opened

    def get(self, prop):
        if prop == cv2.CAP_PROP_FPS:
            return self.fps
        if prop == cv2.CAP_PROP_FRAME_COUNT:
            return len(self.frames)
        if self.frames and prop == cv2.CAP_PROP_FRAME_WIDTH:
            return self.frames[0].shape[1]
        if self.frames and prop == cv2.CAP_PROP_FRAME_HEIGHT:
            return self.frames[0].shape[0]
        return 0

    def set(self, prop, value):
        self.seeks.append((prop, value))
        return True

    def read(self):
        if self.position >= len(self.frames):
            return False, None
        frame = self.frames[self.position]
        self.position += 1
        return True, frame

    def release(self):
        self.released = True


def _solid(value: int, shape=(48, 64, 3)) -> np.ndarray:
    return np.full(shape, value, dtype=np.uint8)


@pytest.fixture
def install_capture(monkeypatch: pytest.MonkeyPatch):
    def install(capture: FakeCapture) -> FakeCapture:
        monkeypatch.setattr(frames.cv2, "VideoCapture", lambda _path: capture)
        return capture

    return install


def test_identical_frames_are_not_a_scene_change() -> None:
    gray = np.full((48, 64), 90, dtype=np.uint8)

    assert SceneDetector(interval_seconds=1.0).is_scene_change(gray, gray.copy()) is False


def test_black_to_white_is_a_scene_change() -> None:
    black = np.zeros((48, 64), dtype=np.uint8)
    white = np.full((48, 64), 255, dtype=np.uint8)

    assert SceneDetector(interval_seconds=1.0).is_scene_change(black, white) is True


def test_capture_frame_returns_jpeg_data_url(install_capture, video_file) -> None:
    capture = install_capture(FakeCapture([_solid(120)]))

    data_url = capture_frame(video_file, 12.5)

    assert data_url.startswith("data:image/jpeg;base64,")
    jpeg = base64.b64decode(data_url.split(",", 1)[1])
    assert jpeg[:2] == b"\xff\xd8"
    assert capture.seeks == [(cv2.CAP_PROP_POS_MSEC, 12500.0)]
    assert capture.released


def test_capture_frame_returns_none_for_empty_frame(install_capture, video_file) -> None:
    install_capture(FakeCapture([np.zeros((0, 0, 3), dtype=np.uint8)]))

    assert capture_frame(video_file, 0.0) is None


def test_capture_frame_returns_none_when_video_cannot_open(install_capture, video_file) -> None:
    install_capture(FakeCapture([], opened=False))

    assert capture_frame(video_file, 0.0) is None


def test_capture_frame_returns_none_past_the_end(install_capture, video_file) -> None:
    install_capture(FakeCapture([]))

    assert capture_frame(video_file, 99.0) is None


def test_detect_scenes_keeps_first_frame_and_changes(install_capture, video_file) -> None:
    capture = install_capture(
        FakeCapture([_solid(0), _solid(0), _solid(255), _solid(255), _solid(0)], fps=1.0)
    )

    scenes = SceneDetector(interval_seconds=1.0).detect_scenes(video_file)

    assert [timestamp for timestamp, _ in scenes] == [0.0, 2.0, 4.0]
    assert all(url.startswith("data:image/jpeg;base64,") for _, url in scenes)
    assert capture.released


def test_detect_scenes_samples_on_interval(install_capture, video_file) -> None:
    # At 2 fps with a 1s interval, only even frame indices are inspected
    install_capture(FakeCapture([_solid(0), _solid(255), _solid(0), _solid(255)], fps=2.0))

    scenes = SceneDetector(interval_seconds=1.0).detect_scenes(video_file)

    assert [timestamp for timestamp, _ in scenes] == [0.0]


def test_detect_scenes_raises_when_video_cannot_open(install_capture, video_file) -> None:
    install_capture(FakeCapture([], opened=False))

    with pytest.raises(RuntimeError, match="Could not open video file"):
        SceneDetector().detect_scenes(video_file)


def test_probe_video_reports_duration(install_capture, video_file) -> None:
    install_capture(FakeCapture([_solid(0)] * 50, fps=25.0))

    info = probe_video(video_file)

    assert (info.width, info.height, info.frame_count) == (64, 48, 50)
    assert info.duration == pytest.approx(2.0)


def test_missing_video_raises_file_not_found(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        capture_frame(tmp_path / "missing.mp4", 0.0)
