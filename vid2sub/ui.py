"""HTML rendering and upload helpers for the Streamlit subtitle list."""

import hashlib
import html
from pathlib import Path

from vid2sub.models import SubtitleNode, format_time


def clamp_playhead(timestamp: float, duration: float) -> float:
    """Playhead position for a jump, kept inside [0, duration] when the duration is known."""
    timestamp = max(0.0, float(timestamp))
    if duration and duration > 0:
        return min(timestamp, float(duration))
    return timestamp


def save_upload(name: str, data: bytes, uploads_dir: Path) -> tuple[Path, str]:
    """
    Persist uploaded bytes so ffmpeg and OpenCV can read them from disk.

    Files are keyed by content hash, so two different uploads with the same
    name never share a path.

    Returns:
        Tuple of (path, sha256 hex digest)
    """
    digest = hashlib.sha256(data).hexdigest()
    uploads_dir.mkdir(parents=True, exist_ok=True)
    target = uploads_dir / f"{digest[:12]}-{Path(name).name}"
    if not target.exists():
        target.write_bytes(data)
    return target, digest


def sentiment_class(score: float) -> str:
    # Only strictly positive scores are green; 0.0 counts as negative
    return "sub-positive" if score > 0 else "sub-negative"


def render_subtitle(node: SubtitleNode, current_time: float) -> str:
    """HTML card for one subtitle node."""
    classes = ["sub-card", node.type]
    if node.is_active(current_time):
        classes.append("active")

    parts = [f'<div class="{" ".join(classes)}">']
    if node.thumbnail:
        parts.append(f'<img class="sub-thumb" src="{html.escape(node.thumbnail)}" alt="Scene">')
    parts.append('<div class="sub-body">')

    span = format_time(node.timestamp)
    if node.end_time:
        span += f" - {format_time(node.end_time)}"
    parts.append(f'<span class="sub-time">{span}</span><span class="sub-type">{node.type}</span><div>')
    if node.speaker:
        parts.append(f'<span class="sub-speaker">{html.escape(node.speaker)}:</span>')
    parts.append(f'{html.escape(node.text)}</div>')

    if node.translation:
        parts.append(f'<div class="sub-translation">{html.escape(node.translation)}</div>')

    if node.type == 'dialogue' and node.emotion:
        parts.append(f'<span class="sub-chip">Emotion: {html.escape(node.emotion)}</span>')

    if node.type == 'music' and node.music_analysis:
        m = node.music_analysis
        parts.append(
            '<div class="sub-grid">'
            f'<div>Mode: {html.escape(str(m.harmonic_mode))}</div>'
            f'<div>Tempo: {html.escape(str(m.tempo))}</div>'
            f'<div>Dynamics: {html.escape(str(m.dynamics))}</div>'
            f'<div>Sentiment: <span class="{sentiment_class(m.sentiment_score)}">{m.sentiment_score}</span></div>'
            '</div>'
        )

    parts.append('</div></div>')
    return "".join(parts)
