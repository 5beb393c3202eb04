"""Data models for subtitle nodes and the subtitle track."""

import uuid
from dataclasses import dataclass, field
from typing import Optional


SUBTITLE_TYPES = ("scene", "dialogue", "music", "silence")

# Nodes without an end time stay highlighted this long after they start
DEFAULT_ACTIVE_SECONDS = 2.0


def format_time(seconds: float) -> str:
    """Format seconds as M:SS for the subtitle list."""
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


@dataclass
class MusicAnalysis:
    """Musicology breakdown of a music segment."""
    source: Optional[str] = None         # Diegetic, Non-Diegetic, Silence/Ambient
    tempo: Optional[str] = None          # Slow, Medium, Fast
    dynamics: Optional[str] = None       # Low, Medium, High
    progression: Optional[str] = None    # Crescendo, Diminuendo, Sustained
    harmonic_mode: Optional[str] = None  # Major, Minor
    sentiment_score: float = 0.0         # -1.0 (fear/sadness) to 1.0 (joy/victory)

    @classmethod
    def from_dict(cls, data: dict) -> "MusicAnalysis":
        """Build from the camelCase payload returned by the model."""
        score = data.get('sentimentScore', data.get('sentiment_score', 0.0))
        try:
            score = float(score)
        except (TypeError, ValueError):
            score = 0.0
        return cls(
            source=data.get('source'),
            tempo=data.get('tempo'),
            dynamics=data.get('dynamics'),
            progression=data.get('progression'),
            harmonic_mode=data.get('harmonicMode', data.get('harmonic_mode')),
            sentiment_score=max(-1.0, min(1.0, score)),
        )

    def to_dict(self) -> dict:
        return {
            'source': self.source,
            'tempo': self.tempo,
            'dynamics': self.dynamics,
            'progression': self.progression,
            'harmonicMode': self.harmonic_mode,
            'sentimentScore': self.sentiment_score,
        }


@dataclass
class SubtitleNode:
    """A single entry of the subtitle list."""
    timestamp: float  # Start time in seconds
    text: str
    type: str = "scene"
    end_time: Optional[float] = None
    speaker: Optional[str] = None
    emotion: Optional[str] = None
    music_analysis: Optional[MusicAnalysis] = None
    thumbnail: Optional[str] = None  # JPEG data URL
    translation: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        """Reject unknown subtitle types."""
        if self.type not in SUBTITLE_TYPES:
            raise ValueError(f"Unknown subtitle type: {self.type!r}")

    def is_active(self, current_time: float) -> bool:
        """Whether the playhead is inside this node."""
        if current_time < self.timestamp:
            return False
        # An end time of 0 is treated as missing
        if self.end_time:
            return current_time <= self.end_time
        return current_time < self.timestamp + DEFAULT_ACTIVE_SECONDS

    @classmethod
    def from_segment(cls, segment: dict) -> "SubtitleNode":
        """
        Convert one audio analysis segment into a node.

        Args:
            segment: Segment dict as returned by the model (camelCase keys)

        Returns:
            SubtitleNode for the segment
        """
        missing = [k for k in ('startTime', 'endTime', 'type', 'text') if k not in segment]
        if missing:
            raise ValueError(f"Segment is missing required fields: {', '.join(missing)}")

        music = segment.get('musicAnalysis')
        if music and not isinstance(music, dict):
            raise ValueError(f"musicAnalysis must be an object, got {type(music).__name__}")
        return cls(
            timestamp=float(segment['startTime']),
            end_time=float(segment['endTime']),
            type=segment['type'],
            text=(segment['text'] or '').strip(),
            speaker=segment.get('speaker') or None,
            emotion=segment.get('emotion') or None,
            music_analysis=MusicAnalysis.from_dict(music) if music else None,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "SubtitleNode":
        music = data.get('musicAnalysis')
        kwargs = {}
        if data.get('id'):
            kwargs['id'] = data['id']
        return cls(
            timestamp=float(data['timestamp']),
            text=data.get('text', ''),
            type=data.get('type', 'scene'),
            end_time=data.get('endTime'),
            speaker=data.get('speaker'),
            emotion=data.get('emotion'),
            music_analysis=MusicAnalysis.from_dict(music) if music else None,
            thumbnail=data.get('thumbnail'),
            translation=data.get('translation'),
            **kwargs
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'timestamp': self.timestamp,
            'endTime': self.end_time,
            'type': self.type,
            'text': self.text,
            'speaker': self.speaker,
            'emotion': self.emotion,
            'musicAnalysis': self.music_analysis.to_dict() if self.music_analysis else None,
            'thumbnail': self.thumbnail,
            'translation': self.translation,
        }


@dataclass
class SubtitleTrack:
    """Ordered collection of subtitle nodes for one video."""
    nodes: list[SubtitleNode] = None

    def __post_init__(self):
        """Initialize nodes list if not provided."""
        if self.nodes is None:
            self.nodes = []

    def __len__(self) -> int:
        return len(self.nodes)

    def add(self, nodes: list[SubtitleNode]) -> int:
        """Append nodes whose id is not already in the track. Returns how many were added."""
        seen = {n.id for n in self.nodes}
        added = 0
        for node in nodes:
            if node.id in seen:
                continue
            seen.add(node.id)
            self.nodes.append(node)
            added += 1
        return added

    def delete(self, node_id: str) -> bool:
        """Remove a node by id. Returns True if a node was removed."""
        before = len(self.nodes)
        self.nodes = [n for n in self.nodes if n.id != node_id]
        return len(self.nodes) != before

    def sorted(self) -> list[SubtitleNode]:
        """Nodes ordered by start time; the stored order is left untouched."""
        return sorted(self.nodes, key=lambda n: n.timestamp)

    def active(self, current_time: float) -> Optional[SubtitleNode]:
        for node in self.sorted():
            if node.is_active(current_time):
                return node
        return None

    def jump_target(self, node_id: str) -> float:
        for node in self.nodes:
            if node.id == node_id:
                return node.timestamp
        raise KeyError(node_id)

    def texts(self) -> list[str]:
        return [n.text for n in self.nodes]

    def apply_translations(self, translations: list[str]) -> None:
        """Attach translations in the same order as texts()."""
        if len(translations) != len(self.nodes):
            raise ValueError(
                f"Got {len(translations)} translations for {len(self.nodes)} subtitles"
            )
        for node, translated in zip(self.nodes, translations):
            node.translation = translated
