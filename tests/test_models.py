"""Behavior tests for subtitle nodes and the subtitle track."""

import pytest

from vid2sub.models import MusicAnalysis, SubtitleNode, SubtitleTrack, format_time


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, "0:00"), (9.99, "0:09"), (75.9, "1:15"), (600, "10:00")],
)
def test_format_time_floors_minutes_and_seconds(seconds: float, expected: str) -> None:
    assert format_time(seconds) == expected


def test_node_with_end_time_is_active_until_end_inclusive() -> None:
    node = SubtitleNode(timestamp=10.0, end_time=15.0, text="Hello", type="dialogue")

    assert not node.is_active(9.99)
    assert node.is_active(10.0)
    assert node.is_active(15.0)
    assert not node.is_active(15.01)


def test_node_without_end_time_is_active_for_two_seconds() -> None:
    node = SubtitleNode(timestamp=4.0, text="A dog runs")

    assert node.is_active(4.0)
    assert node.is_active(5.99)
    assert not node.is_active(6.0)


def test_zero_end_time_is_treated_as_missing() -> None:
    node = SubtitleNode(timestamp=0.0, end_time=0.0, text="Opening")

    assert node.is_active(1.5)
    assert not node.is_active(2.0)


def test_unknown_type_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown subtitle type"):
        SubtitleNode(timestamp=0.0, text="x", type="subtitle")


def test_from_segment_maps_dialogue_fields() -> None:
    node = SubtitleNode.from_segment({
        "startTime": 1.5,
        "endTime": 3.0,
        "type": "dialogue",
        "text": "  Where were you?  ",
        "speaker": "Woman",
        "emotion": "Angry",
        "musicAnalysis": None,
    })

    assert node.timestamp == 1.5
    assert node.end_time == 3.0
    assert node.text == "Where were you?"
    assert node.speaker == "Woman"
    assert node.emotion == "Angry"
    assert node.music_analysis is None


def test_from_segment_parses_music_and_clamps_sentiment() -> None:
    node = SubtitleNode.from_segment({
        "startTime": 20,
        "endTime": 42,
        "type": "music",
        "text": "Swelling strings",
        "musicAnalysis": {
            "source": "Non-Diegetic",
            "tempo": "Slow",
            "dynamics": "High",
            "progression": "Crescendo",
            "harmonicMode": "Minor",
            "sentimentScore": -1.7,
        },
    })

    assert node.music_analysis == MusicAnalysis(
        source="Non-Diegetic",
        tempo="Slow",
        dynamics="High",
        progression="Crescendo",
        harmonic_mode="Minor",
        sentiment_score=-1.0,
    )


def test_from_segment_requires_timing_type_and_text() -> None:
    with pytest.raises(ValueError, match="endTime"):
        SubtitleNode.from_segment({"startTime": 0, "type": "silence", "text": ""})


def test_from_segment_rejects_non_object_music_analysis() -> None:
    with pytest.raises(ValueError, match="musicAnalysis must be an object"):
        SubtitleNode.from_segment({
            "startTime": 0, "endTime": 5, "type": "music", "text": "Theme",
            "musicAnalysis": "Upbeat",
        })


def test_dict_round_trip_keeps_id_and_music() -> None:
    node = SubtitleNode(
        timestamp=3.0,
        end_time=9.0,
        text="Theme",
        type="music",
        music_analysis=MusicAnalysis(tempo="Fast", sentiment_score=0.6),
        translation="Tema",
    )

    restored = SubtitleNode.from_dict(node.to_dict())

    assert restored == node


def test_track_sorted_does_not_reorder_storage() -> None:
    late = SubtitleNode(timestamp=30.0, text="late")
    early = SubtitleNode(timestamp=5.0, text="early")
    track = SubtitleTrack(nodes=[late, early])

    assert [n.text for n in track.sorted()] == ["early", "late"]
    assert [n.text for n in track.nodes] == ["late", "early"]


def test_track_add_skips_nodes_already_present() -> None:
    first = SubtitleNode(timestamp=0.0, text="first")
    second = SubtitleNode(timestamp=1.0, text="second")
    track = SubtitleTrack(nodes=[first])

    assert track.add([first, second, second]) == 1
    assert track.nodes == [first, second]


def test_track_active_returns_first_match_in_time_order() -> None:
    scene = SubtitleNode(timestamp=10.0, text="scene")
    dialogue = SubtitleNode(timestamp=9.0, end_time=12.0, text="line", type="dialogue")
    track = SubtitleTrack(nodes=[scene, dialogue])

    assert track.active(10.5) is dialogue
    assert track.active(50.0) is None


def test_track_delete_and_jump_target() -> None:
    keep = SubtitleNode(timestamp=1.0, text="keep")
    drop = SubtitleNode(timestamp=2.0, text="drop")
    track = SubtitleTrack(nodes=[keep, drop])

    assert track.jump_target(drop.id) == 2.0
    assert track.delete(drop.id) is True
    assert track.delete(drop.id) is False
    assert track.nodes == [keep]
    with pytest.raises(KeyError):
        track.jump_target(drop.id)


def test_apply_translations_requires_matching_length() -> None:
    track = SubtitleTrack(nodes=[SubtitleNode(timestamp=0.0, text="Hi")])

    with pytest.raises(ValueError, match="2 translations for 1 subtitles"):
        track.apply_translations(["Hola", "Extra"])

    track.apply_translations(["Hola"])
    assert track.nodes[0].translation == "Hola"
