"""Writer for TXT format with timestamps."""

from pathlib import Path
from vid2sub.models import SubtitleNode


def format_seconds(seconds: float) -> str:
    """Format seconds as HH:MM:SS."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_txt(nodes: list[SubtitleNode]) -> str:
    """
    Subtitle nodes as timestamped text, ordered by start time.

    Format: [HH:MM:SS] TYPE Speaker: text
    """
    lines = []
    for node in sorted(nodes, key=lambda n: n.timestamp):
        speaker = f"{node.speaker}: " if node.speaker else ""
        lines.append(f"[{format_seconds(node.timestamp)}] {node.type.upper()} {speaker}{node.text}\n")
        if node.translation:
            lines.append(f"    -> {node.translation}\n")
    return "".join(lines)


def write_txt(nodes: list[SubtitleNode], output_path: Path) -> None:
    """Write subtitle nodes to TXT file with timestamps."""
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(format_txt(nodes))
