"""Audio track extraction: decode, resample to 16kHz mono, encode PCM16 WAV."""

import base64
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from vid2sub.config import Config


WAV_HEADER_SIZE = 44


@dataclass
class AudioBuffer:
    """Decoded audio as per-channel float samples in [-1, 1]."""
    sample_rate: int
    channels: list[Sequence[float]]

    @property
    def length(self) -> int:
        """Number of frames (samples per channel)."""
        return len(self.channels[0]) if self.channels else 0

    @property
    def duration(self) -> float:
        return self.length / self.sample_rate if self.sample_rate else 0.0

    @classmethod
    def from_segment(cls, segment: AudioSegment) -> "AudioBuffer":
        """Split a pydub segment into normalized float channels."""
        scale = float(1 << (8 * segment.sample_width - 1))
        samples = np.asarray(segment.get_array_of_samples(), dtype=np.float64)
        # Interleaved frames -> one row per channel
        channels = samples.reshape(-1, segment.channels).T / scale
        return cls(sample_rate=segment.frame_rate, channels=list(channels))


def decode_audio(video_path: Path) -> AudioSegment:
    """
    Decode the audio track of a video (or audio) file.

    Any container ffmpeg understands works here; pydub shells out to it.

    Args:
        video_path: Path to the media file

    Returns:
        Decoded AudioSegment at the source sample rate and channel count
    """
    video_path = Path(video_path)
    if not video_path.exists():
        raise FileNotFoundError(f"Video file not found: {video_path}")

    try:
        segment = AudioSegment.from_file(str(video_path))
    except CouldntDecodeError as e:
        raise RuntimeError(f"Could not decode audio track of {video_path.name}: {e}") from e

    if segment.frame_count() == 0:
        raise RuntimeError(f"Audio track of {video_path.name} contains no samples")
    return segment


def resample_to_mono(segment: AudioSegment, target_rate: int) -> AudioSegment:
    """
    Down-mix to a single channel and resample.

    The result always holds int(duration * target_rate) frames of 16-bit audio.
    """
    duration = segment.frame_count() / segment.frame_rate
    expected_frames = int(duration * target_rate)

    mono = segment.set_sample_width(2).set_channels(1).set_frame_rate(target_rate)

    # ratecv can land a frame or two off; pin the length
    samples = mono.get_array_of_samples()
    if len(samples) > expected_frames:
        samples = samples[:expected_frames]
    elif len(samples) < expected_frames:
        samples.extend([0] * (expected_frames - len(samples)))

    return mono._spawn(samples.tobytes())


def buffer_to_wav(buffer: AudioBuffer) -> bytes:
    """
    Encode an AudioBuffer as a 16-bit PCM WAV file.

    Samples are clamped to [-1, 1], scaled to signed 16-bit and interleaved.
    """
    num_channels = len(buffer.channels)
    if num_channels == 0:
        raise ValueError("AudioBuffer has no channels")

    data_length = buffer.length * num_channels * 2
    total_length = data_length + WAV_HEADER_SIZE

    header = struct.pack(
        '<4sI4s4sIHHIIHH4sI',
        b'RIFF',
        total_length - 8,
        b'WAVE',
        b'fmt ',
        16,                                    # fmt chunk length
        1,                                     # PCM (uncompressed)
        num_channels,
        buffer.sample_rate,
        buffer.sample_rate * 2 * num_channels,  # avg. bytes/sec
        num_channels * 2,                      # block-align
        16,                                    # bits per sample
        b'data',
        total_length - WAV_HEADER_SIZE,
    )

    frames = np.stack([np.asarray(c, dtype=np.float64) for c in buffer.channels], axis=1)
    interleaved = np.clip(frames, -1.0, 1.0)
    # astype truncates toward zero
    pcm = np.where(interleaved < 0, interleaved * 32768, interleaved * 32767).astype('<i2')

    return header + pcm.tobytes()


def extract_audio_from_video(video_path: Path, target_rate: Optional[int] = None) -> str:
    """
    Extract the audio track of a video as a base64 WAV string.

    Args:
        video_path: Path to the video file
        target_rate: Output sample rate (defaults to Config.TARGET_SAMPLE_RATE)

    Returns:
        Base64-encoded WAV bytes (no data URL prefix)
    """
    target_rate = target_rate or Config.TARGET_SAMPLE_RATE

    print("Decoding audio track...")
    segment = decode_audio(video_path)
    print(f"  Source: {segment.channels} channel(s) @ {segment.frame_rate} Hz, "
          f"{segment.duration_seconds:.1f}s")

    mono = resample_to_mono(segment, target_rate)
    wav_bytes = buffer_to_wav(AudioBuffer.from_segment(mono))

    size_mb = len(wav_bytes) / (1024 * 1024)
    if size_mb > Config.MAX_INLINE_MB:
        raise ValueError(
            f"Extracted audio is {size_mb:.1f} MB, over the {Config.MAX_INLINE_MB} MB inline request limit. "
            f"Trim the video or lower TARGET_SAMPLE_RATE."
        )

    print(f"✓ Audio extracted: {size_mb:.1f} MB WAV (mono, {target_rate} Hz)")
    return base64.b64encode(wav_bytes).decode('ascii')
