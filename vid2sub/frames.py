"""Video frame capture and scene change detection."""

import base64
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import cv2
import numpy as np

from vid2sub.config import Config


@dataclass
class VideoInfo:
    """Basic properties of a video file."""
    fps: float
    width: int
    height: int
    frame_count: int

    @property
    def duration(self) -> float:
        return self.frame_count / self.fps if self.fps > 0 else 0.0


def _open(video_path: Path) -> cv2.VideoCapture:
    video_path = Path(video_path)
    if not video_path.exists():
        raise FileNotFoundError(f"Video file not found: {video_path}")
    return cv2.VideoCapture(str(video_path))


def encode_jpeg_data_url(frame: np.ndarray, quality: Optional[int] = None) -> Optional[str]:
    """Encode a BGR frame as a data:image/jpeg;base64 URL."""
    quality = quality if quality is not None else Config.FRAME_JPEG_QUALITY
    ok, buf = cv2.imencode('.jpg', frame, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    if not ok:
        return None
    return "data:image/jpeg;base64," + base64.b64encode(buf.tobytes()).decode('ascii')


def probe_video(video_path: Path) -> VideoInfo:
    """Read fps, resolution and frame count."""
    cap = _open(video_path)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open video file: {video_path}")
    try:
        return VideoInfo(
            fps=cap.get(cv2.CAP_PROP_FPS),
            width=int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            height=int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            frame_count=int(cap.get(cv2.CAP_PROP_FRAME_COUNT)),
        )
    finally:
        cap.release()


def capture_frame(video_path: Path, time_seconds: float) -> Optional[str]:
    """
    Grab the frame shown at a given time as a JPEG data URL.

    Returns None if the video can't be opened, no frame is available at
    that time, or the frame has no dimensions.
    """
    cap = _open(video_path)
    if not cap.isOpened():
        return None
    try:
        cap.set(cv2.CAP_PROP_POS_MSEC, max(0.0, time_seconds) * 1000.0)
        ret, frame = cap.read()
        if not ret or frame is None:
            return None
        height, width = frame.shape[:2]
        if width == 0 or height == 0:
            return None
        return encode_jpeg_data_url(frame)
    finally:
        cap.release()


class SceneDetector:
    """Find scene changes in a video and capture a keyframe for each."""

    def __init__(self, interval_seconds: Optional[float] = None, threshold: float = 0.25):
        """
        Args:
            interval_seconds: How often to sample frames (seconds)
            threshold: Sensitivity for detecting changes (0-1, lower = more sensitive)
        """
        self.interval_seconds = interval_seconds or Config.SCENE_INTERVAL_SECONDS
        self.threshold = threshold

    def is_scene_change(self, frame1: np.ndarray, frame2: np.ndarray) -> bool:
        """
        Compare two grayscale frames.

        Uses histogram difference, mean pixel difference and edge difference;
        any one of them crossing its threshold counts as a change.
        """
        h1, w1 = frame1.shape[:2]
        h2, w2 = frame2.shape[:2]
        target_h, target_w = min(h1, h2, 360), min(w1, w2, 640)

        f1 = cv2.resize(frame1, (target_w, target_h))
        f2 = cv2.resize(frame2, (target_w, target_h))

        hist1 = cv2.calcHist([f1], [0], None, [256], [0, 256])
        hist2 = cv2.calcHist([f2], [0], None, [256], [0, 256])
        hist_diff = cv2.compareHist(hist1, hist2, cv2.HISTCMP_BHATTACHARYYA)

        mean_diff = np.mean(cv2.absdiff(f1, f2)) / 255.0

        edges1 = cv2.Canny(f1, 50, 150)
        edges2 = cv2.Canny(f2, 50, 150)
        edge_change = np.sum(cv2.absdiff(edges1, edges2) > 0) / (target_h * target_w)

        return bool(
            (hist_diff > self.threshold) or (mean_diff > self.threshold) or (edge_change > 0.15)
        )

    def detect_scenes(self, video_path: Path) -> List[Tuple[float, str]]:
        """
        Scan a video and return (timestamp, jpeg_data_url) for each new scene.

        The first frame always counts as a scene.
        """
        cap = _open(video_path)
        if not cap.isOpened():
            raise RuntimeError(
                f"Could not open video file: {video_path}\n"
                f"The file may be corrupted or in an unsupported format."
            )

        fps = cap.get(cv2.CAP_PROP_FPS)
        frame_interval = max(1, int(fps * self.interval_seconds)) if fps > 0 else 1
        print(f"Detecting scene changes (checking every {self.interval_seconds}s)...")

        scenes = []
        previous_gray = None
        frame_index = 0
        try:
            while True:
                ret, frame = cap.read()
                if not ret:
                    break

                if frame_index % frame_interval == 0:
                    timestamp = frame_index / fps if fps > 0 else 0.0
                    gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)

                    if previous_gray is None or self.is_scene_change(previous_gray, gray):
                        data_url = encode_jpeg_data_url(frame)
                        if data_url:
                            scenes.append((timestamp, data_url))
                            print(f"  ✓ Scene {len(scenes)} at {timestamp:.1f}s")
                        previous_gray = gray

                frame_index += 1
        finally:
            cap.release()

        print(f"✓ Found {len(scenes)} scenes")
        return scenes
