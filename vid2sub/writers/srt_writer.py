"""Writer for SRT subtitle format."""

from pathlib import Path
from vid2sub.models import SubtitleNode, DEFAULT_ACTIVE_SECONDS


def format_timestamp(seconds: float) -> str:
    """Format seconds as SRT timestamp: HH:MM:SS,mmm."""
    total_ms = int(round(seconds * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def cue_text(node: SubtitleNode) -> str:
    """Subtitle body: optional speaker prefix, then the translation on its own line."""
    text = f"{node.speaker}: {node.text}" if node.speaker else node.text
    if node.translation:
        text += f"\n{node.translation}"
    return text


def format_srt(nodes: list[SubtitleNode]) -> str:
    """Subtitle nodes as SRT text, ordered by start time."""
    lines = []
    for index, node in enumerate(sorted(nodes, key=lambda n: n.timestamp), start=1):
        end = node.end_time if node.end_time else node.timestamp + DEFAULT_ACTIVE_SECONDS

        # SRT format: index, timestamps, text (with line breaks)
        lines.append(str(index))
        lines.append(f"{format_timestamp(node.timestamp)} --> {format_timestamp(end)}")
        lines.append(cue_text(node))
        lines.append("")  # Blank line between entries
    return "\n".join(lines) + "\n" if lines else ""


def write_srt(nodes: list[SubtitleNode], output_path: Path) -> None:
    """Write subtitle nodes to SRT file, ordered by start time."""
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(format_srt(nodes))
