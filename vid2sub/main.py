"""Interactive main entry point for video subtitle analysis."""

import sys
from pathlib import Path
from vid2sub.config import Config, SUPPORTED_LANGUAGES
from vid2sub.models import format_time
from vid2sub.pipeline import process_video


def _ask_yes_no(prompt: str) -> bool:
    return input(f"{prompt} (y/n): ").strip().lower() in ('y', 'yes')


def _ask_language() -> str:
    choices = "/".join(SUPPORTED_LANGUAGES)
    while True:
        answer = input(f"Target language ({choices}): ").strip().capitalize()
        if answer in SUPPORTED_LANGUAGES:
            return answer
        print(f"Please choose one of: {', '.join(SUPPORTED_LANGUAGES)}")


def print_track(track) -> None:
    """Print the subtitle list to the console, ordered by time."""
    nodes = track.sorted()
    if not nodes:
        print("No analysis data")
        return

    for node in nodes:
        span = format_time(node.timestamp)
        if node.end_time:
            span += f" - {format_time(node.end_time)}"
        speaker = f"{node.speaker}: " if node.speaker else ""
        print(f"[{span}] {node.type.upper():<8} {speaker}{node.text}")
        if node.translation:
            print(f"{'':>10}-> {node.translation}")
        if node.type == 'dialogue' and node.emotion:
            print(f"{'':>10}Emotion: {node.emotion}")
        if node.type == 'music' and node.music_analysis:
            m = node.music_analysis
            print(f"{'':>10}Mode: {m.harmonic_mode}  Tempo: {m.tempo}  "
                  f"Dynamics: {m.dynamics}  Sentiment: {m.sentiment_score}")


def main():
    """Interactive main function."""
    print("=" * 60)
    print("Video Subtitle Analyzer")
    print("=" * 60)
    print()

    # Validate configuration
    try:
        Config.validate()
    except ValueError as e:
        print(f"✗ Configuration Error: {str(e)}", file=sys.stderr)
        print("\nPlease create a .env file with your GEMINI_API_KEY.")
        sys.exit(1)

    Config.OUT_DIR.mkdir(parents=True, exist_ok=True)

    while True:
        print()
        print("-" * 60)
        raw_path = input("Path of the video file to analyze: ").strip().strip('"')

        if not raw_path:
            print("No path provided. Exiting...")
            break

        video_path = Path(raw_path).expanduser()
        if not video_path.exists():
            print(f"✗ File not found: {video_path}")
            continue

        print()
        scenes = _ask_yes_no("Detect visual scenes?")
        audio = _ask_yes_no("Run full audio analysis?")
        translate_to = _ask_language() if _ask_yes_no("Translate subtitles?") else None

        print()
        print("Processing video...")
        print()

        try:
            output_dir, track = process_video(
                video_path, scenes=scenes, audio=audio, translate_to=translate_to
            )

            print()
            print("=" * 60)
            print_track(track)
            print("=" * 60)
            print(f"Files saved to: {output_dir}")

        except Exception as e:
            print()
            print("=" * 60)
            print(f"✗ Failed to process video: {str(e)}")
            print("=" * 60)

        print()
        if not _ask_yes_no("Would you like to analyze another video?"):
            break

    print()
    print("Thank you for using Video Subtitle Analyzer!")


if __name__ == "__main__":
    main()
