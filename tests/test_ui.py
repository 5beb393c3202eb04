"""Behavior tests for the subtitle list rendering and upload handling."""

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from vid2sub.models import MusicAnalysis, SubtitleNode
from vid2sub.ui import clamp_playhead, render_subtitle, save_upload


APP_PATH = Path(__file__).resolve().parent.parent / "streamlit_app.py"


def _music(score: float) -> SubtitleNode:
    return SubtitleNode(
        timestamp=10.0, end_time=20.0, text="Strings", type="music",
        music_analysis=MusicAnalysis(harmonic_mode="Minor", tempo="Slow", dynamics="Low", sentiment_score=score),
    )


def test_active_node_gets_active_class() -> None:
    node = SubtitleNode(timestamp=5.0, end_time=8.0, text="Hello", type="dialogue")

    assert 'class="sub-card dialogue active"' in render_subtitle(node, 6.0)
    assert 'class="sub-card dialogue"' in render_subtitle(node, 9.0)


@pytest.mark.parametrize(
    "score, css_class",
    [(0.4, "sub-positive"), (0.0, "sub-negative"), (-0.4, "sub-negative")],
)
def test_music_sentiment_is_green_only_when_positive(score: float, css_class: str) -> None:
    card = render_subtitle(_music(score), 0.0)

    assert f'<span class="{css_class}">{score}</span>' in card
    assert "Mode: Minor" in card


def test_emotion_chip_only_on_dialogue() -> None:
    dialogue = SubtitleNode(timestamp=0.0, end_time=1.0, text="Hi", type="dialogue", emotion="Happy")
    scene = SubtitleNode(timestamp=0.0, text="A park", type="scene", emotion="Happy")

    assert "Emotion: Happy" in render_subtitle(dialogue, 0.0)
    assert "Emotion" not in render_subtitle(scene, 0.0)


def test_card_escapes_model_text() -> None:
    node = SubtitleNode(timestamp=0.0, end_time=1.0, text="<b>loud</b>", type="dialogue",
                        speaker="A&B", translation="<i>fuerte</i>")

    card = render_subtitle(node, 5.0)

    assert "&lt;b&gt;loud&lt;/b&gt;" in card
    assert "A&amp;B:" in card
    assert "&lt;i&gt;fuerte&lt;/i&gt;" in card


def test_card_shows_time_span_and_thumbnail() -> None:
    node = SubtitleNode(timestamp=65.0, end_time=70.0, text="Street", thumbnail="data:image/jpeg;base64,AAA")

    card = render_subtitle(node, 0.0)

    assert '<span class="sub-time">1:05 - 1:10</span>' in card
    assert 'src="data:image/jpeg;base64,AAA"' in card


@pytest.mark.parametrize(
    "timestamp, duration, expected",
    [(12.0, 30.0, 12.0), (45.0, 30.0, 30.0), (-1.0, 30.0, 0.0), (45.0, 0.0, 45.0)],
)
def test_jump_is_clamped_to_duration(timestamp: float, duration: float, expected: float) -> None:
    assert clamp_playhead(timestamp, duration) == expected


def test_uploads_with_same_name_but_different_content_do_not_collide(tmp_path) -> None:
    first, first_digest = save_upload("clip.mp4", b"first video", tmp_path)
    second, second_digest = save_upload("clip.mp4", b"other video", tmp_path)

    assert first != second
    assert first_digest != second_digest
    assert first.read_bytes() == b"first video"
    assert second.read_bytes() == b"other video"
    assert second.name == f"{second_digest[:12]}-clip.mp4"


def test_same_upload_reuses_existing_file(tmp_path) -> None:
    first, _ = save_upload("clip.mp4", b"video", tmp_path)
    again, _ = save_upload("../clip.mp4", b"video", tmp_path)

    assert again == first
    assert again.parent == tmp_path


def test_app_shows_placeholder_before_any_analysis() -> None:
    at = AppTest.from_file(str(APP_PATH), default_timeout=30).run()

    assert not at.exception
    assert any("No analysis data" in m.value for m in at.markdown)
