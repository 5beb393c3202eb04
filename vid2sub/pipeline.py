"""Orchestration: frames and audio in, subtitle nodes out."""

import hashlib
import re
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from vid2sub.audio import extract_audio_from_video
from vid2sub.config import Config
from vid2sub.frames import SceneDetector, capture_frame
from vid2sub.gemini import analyze_audio_deeply, generate_scene_description, translate_batch
from vid2sub.models import SubtitleNode, SubtitleTrack
from vid2sub.writers.json_writer import format_json, read_json, write_json
from vid2sub.writers.srt_writer import format_srt
from vid2sub.writers.txt_writer import format_txt


AUDIO_CACHE = "audio_analysis.json"

# Export file name -> MIME type
OUTPUT_FILES = {
    "subtitles.srt": "text/plain",
    "subtitles_with_timestamps.txt": "text/plain",
    "subtitles.json": "application/json",
}


def scenes_cache_name(interval_seconds: Optional[float] = None) -> str:
    """Scene cache file name; each sampling interval gets its own file."""
    interval = interval_seconds or Config.SCENE_INTERVAL_SECONDS
    return f"scenes_{interval:g}s.json"


def slugify(text: str) -> str:
    """Convert text to a filesystem-safe slug."""
    if not text:
        return ""
    text = text.replace(':', '-')
    text = re.sub(r'[<>"/\\|?*]', '', text)
    text = re.sub(r'\s+', ' ', text)
    return text.strip()[:80]


def file_digest(path: Path, chunk_size: int = 1024 * 1024) -> str:
    """SHA-256 of a file's contents."""
    digest = hashlib.sha256()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(chunk_size), b''):
            digest.update(chunk)
    return digest.hexdigest()


def get_output_dir(video_path: Path, digest: Optional[str] = None) -> Path:
    """
    Output directory for a video, named after the file with a content hash suffix.

    Pass a precomputed digest to skip hashing the file again.
    """
    video_path = Path(video_path)
    short_hash = (digest or file_digest(video_path))[:12]
    slug = slugify(video_path.stem)
    folder_name = f"{slug} - {short_hash}" if slug else short_hash
    return Config.OUT_DIR / folder_name


def _load_cache(cache_path: Path, force: bool) -> Optional[list[SubtitleNode]]:
    if force or not cache_path.exists():
        return None
    print(f"✓ Using cached {cache_path.name}")
    return read_json(cache_path)


def describe_current_frame(video_path: Path, time_seconds: float) -> Optional[SubtitleNode]:
    """
    Capture the frame at the playhead and describe it.

    Returns None if no frame could be captured.
    """
    thumbnail = capture_frame(video_path, time_seconds)
    if thumbnail is None:
        print(f"⚠ No frame available at {time_seconds:.1f}s")
        return None

    text = generate_scene_description(thumbnail)
    return SubtitleNode(timestamp=time_seconds, text=text, type="scene", thumbnail=thumbnail)


def detect_visual_scenes(
    video_path: Path,
    force: bool = False,
    interval_seconds: Optional[float] = None
) -> list[SubtitleNode]:
    """
    Detect scene changes and caption each one.

    Args:
        video_path: Path to video file
        force: If True, re-run even if cached
        interval_seconds: Sampling interval for scene detection

    Returns:
        Scene nodes ordered by time
    """
    output_dir = get_output_dir(video_path)
    cache_path = output_dir / scenes_cache_name(interval_seconds)
    cached = _load_cache(cache_path, force)
    if cached is not None:
        return cached

    Config.validate()

    scenes = SceneDetector(interval_seconds=interval_seconds).detect_scenes(video_path)

    nodes = []
    for timestamp, thumbnail in tqdm(scenes, desc="Describing scenes", unit="scene", ncols=80, leave=False):
        text = generate_scene_description(thumbnail)
        nodes.append(SubtitleNode(timestamp=timestamp, text=text, type="scene", thumbnail=thumbnail))

    output_dir.mkdir(parents=True, exist_ok=True)
    write_json(nodes, cache_path, video=Path(video_path).name)
    print(f"✓ Described {len(nodes)} scenes")
    return nodes


def full_audio_analysis(video_path: Path, force: bool = False) -> list[SubtitleNode]:
    """
    Extract the audio track and break it into dialogue/music/silence nodes.

    Args:
        video_path: Path to video file
        force: If True, re-analyze even if cached

    Returns:
        Audio segment nodes
    """
    output_dir = get_output_dir(video_path)
    cache_path = output_dir / AUDIO_CACHE
    cached = _load_cache(cache_path, force)
    if cached is not None:
        return cached

    Config.validate()

    base64_audio = extract_audio_from_video(video_path)
    print("Analyzing audio with Gemini...")
    result = analyze_audio_deeply(base64_audio)

    nodes = []
    for segment in result.get('segments', []):
        try:
            nodes.append(SubtitleNode.from_segment(segment))
        except (ValueError, TypeError) as e:
            print(f"  ⚠ Skipping malformed segment: {e}")

    output_dir.mkdir(parents=True, exist_ok=True)
    write_json(nodes, cache_path, video=Path(video_path).name)
    print(f"✓ Audio analysis complete: {len(nodes)} segments")
    return nodes


def translate_track(nodes: list[SubtitleNode], target_language: str) -> list[SubtitleNode]:
    """Translate every node's text in one batch call, storing it in node.translation."""
    if not nodes:
        return nodes

    print(f"Translating {len(nodes)} subtitles into {target_language}...")
    track = SubtitleTrack(nodes=list(nodes))
    track.apply_translations(translate_batch(track.texts(), target_language))
    print("✓ Translation complete")
    return nodes


def render_outputs(nodes: list[SubtitleNode], video: Optional[str] = None) -> dict[str, str]:
    """Contents of every export file, keyed by file name."""
    return {
        "subtitles.srt": format_srt(nodes),
        "subtitles_with_timestamps.txt": format_txt(nodes),
        "subtitles.json": format_json(nodes, video=video),
    }


def write_outputs(nodes: list[SubtitleNode], output_dir: Path, video: Optional[str] = None) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in render_outputs(nodes, video=video).items():
        (output_dir / filename).write_text(content, encoding="utf-8")


def process_video(
    video_path: Path,
    scenes: bool = True,
    audio: bool = True,
    translate_to: Optional[str] = None,
    force: bool = False
):
    """
    Process a single video: caption scenes, analyze audio, translate, write outputs.

    Args:
        video_path: Path to the video file
        scenes: If True, detect and describe visual scenes
        audio: If True, run the full audio analysis
        translate_to: Target language for translation, or None to skip
        force: If True, ignore cached results

    Returns:
        Tuple of (output_dir, track)
    """
    video_path = Path(video_path)
    if not video_path.exists():
        raise FileNotFoundError(f"Video file not found: {video_path}")

    output_dir = get_output_dir(video_path)
    track = SubtitleTrack()

    if scenes:
        track.add(detect_visual_scenes(video_path, force=force))
    if audio:
        track.add(full_audio_analysis(video_path, force=force))
    if translate_to:
        translate_track(track.nodes, translate_to)

    print("Writing subtitle files...")
    write_outputs(track.sorted(), output_dir, video=video_path.name)
    print("✓ All files saved successfully!")
    return output_dir, track
