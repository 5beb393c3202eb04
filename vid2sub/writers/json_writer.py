"""Writer and reader for the JSON subtitle format (also the cache format)."""

import json
from pathlib import Path
from typing import Optional
from vid2sub.models import SubtitleNode


def format_json(nodes: list[SubtitleNode], video: Optional[str] = None) -> str:
    """Subtitle nodes as a JSON document."""
    data = {
        'video': video,
        'subtitles': [node.to_dict() for node in nodes]
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def write_json(nodes: list[SubtitleNode], output_path: Path, video: Optional[str] = None) -> None:
    """Write subtitle nodes to JSON file."""
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(format_json(nodes, video=video))


def read_json(input_path: Path) -> list[SubtitleNode]:
    """Load subtitle nodes written by write_json."""
    with open(input_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    return [SubtitleNode.from_dict(item) for item in data.get('subtitles', [])]
