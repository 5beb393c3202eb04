"""Streamlit web application for video scene captioning, audio analysis and translation."""

import streamlit as st
import sys
from pathlib import Path

# Add the project root to the path so we can import vid2sub modules
project_root = Path(__file__).parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from vid2sub.config import Config, SUPPORTED_LANGUAGES
from vid2sub.frames import probe_video
from vid2sub.models import SubtitleTrack
from vid2sub.pipeline import (
    OUTPUT_FILES,
    describe_current_frame,
    detect_visual_scenes,
    full_audio_analysis,
    get_output_dir,
    render_outputs,
    translate_track,
    write_outputs,
)
from vid2sub.ui import clamp_playhead, render_subtitle, save_upload


# Page configuration
st.set_page_config(
    page_title="Video Subtitle Analyzer",
    page_icon="🎬",
    layout="wide",
    initial_sidebar_state="expanded"
)


def load_streamlit_secrets():
    """Load secrets from Streamlit Cloud into Config."""
    try:
        if not st.secrets:
            return
        for key in ('GEMINI_API_KEY', 'GEMINI_BASE_URL', 'MODEL'):
            if key in st.secrets:
                setattr(Config, key, st.secrets[key])
        if 'OUT_DIR' in st.secrets:
            Config.OUT_DIR = Path(st.secrets['OUT_DIR']).resolve()
        if 'MAX_RETRIES' in st.secrets:
            Config.MAX_RETRIES = int(st.secrets['MAX_RETRIES'])
    except (FileNotFoundError, AttributeError, TypeError, KeyError, ValueError):
        # No usable secrets.toml; .env values are used
        pass

load_streamlit_secrets()

st.markdown("""
    <style>
    .main-header {
        font-size: 2.2rem;
        font-weight: bold;
        text-align: center;
        margin-bottom: 1.5rem;
    }
    .stButton>button {
        width: 100%;
    }
    .sub-card {
        display: flex;
        border-radius: 8px;
        border: 1px solid #334155;
        background-color: #0f172a;
        margin-bottom: 0.4rem;
        overflow: hidden;
    }
    .sub-card.scene { background-color: #1e293b; }
    .sub-card.music { background-color: #2e1065; border-color: #581c87; }
    .sub-card.active { background-color: #172554; border-color: #3b82f6; }
    .sub-thumb { width: 96px; min-width: 96px; object-fit: cover; }
    .sub-body { flex: 1; padding: 0.6rem; color: #cbd5e1; font-size: 0.9rem; }
    .sub-time { font-family: monospace; font-weight: bold; color: #93c5fd; }
    .sub-card.music .sub-time { color: #d8b4fe; }
    .sub-type { float: right; font-size: 0.65rem; text-transform: uppercase; color: #64748b; }
    .sub-speaker { color: #60a5fa; font-weight: 600; margin-right: 0.25rem; }
    .sub-translation { color: #6ee7b7; font-style: italic; border-top: 1px solid #1e293b; margin-top: 0.25rem; }
    .sub-chip { font-size: 0.7rem; padding: 1px 8px; border-radius: 999px; border: 1px solid #334155; color: #94a3b8; }
    .sub-grid { display: grid; grid-template-columns: 1fr 1fr; font-size: 0.7rem; color: #94a3b8; margin-top: 0.4rem; }
    .sub-positive { color: #4ade80; }
    .sub-negative { color: #f87171; }
    </style>
""", unsafe_allow_html=True)

# Initialize session state
if 'video_path' not in st.session_state:
    st.session_state.video_path = None
if 'duration' not in st.session_state:
    st.session_state.duration = 0.0
if 'current_time' not in st.session_state:
    st.session_state.current_time = 0.0
if 'track' not in st.session_state:
    st.session_state.track = SubtitleTrack()
if 'output_dir' not in st.session_state:
    st.session_state.output_dir = None


def _jump_to(timestamp: float):
    st.session_state.current_time = clamp_playhead(timestamp, st.session_state.duration)


def _delete(node_id: str):
    st.session_state.track.delete(node_id)


def subtitle_list():
    """Subtitle list ordered by time, with jump and delete actions."""
    track = st.session_state.track
    if len(track) == 0:
        st.markdown("**No analysis data**")
        st.caption('Upload a video and click "Detect Visual Scenes" or "Full Audio Analysis".')
        return

    current_time = st.session_state.current_time
    for node in track.sorted():
        col_card, col_actions = st.columns([6, 1])
        with col_card:
            st.markdown(render_subtitle(node, current_time), unsafe_allow_html=True)
        with col_actions:
            st.button("▶", key=f"jump_{node.id}", help="Jump to", on_click=_jump_to, args=(node.timestamp,))
            st.button("🗑️", key=f"delete_{node.id}", help="Delete", on_click=_delete, args=(node.id,))


def run_step(label: str, func, *args, **kwargs):
    """Run a pipeline step behind a spinner and report errors in the page."""
    with st.spinner(label):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            st.error(f"✗ {label.rstrip('.')} failed: {str(e)}")
            return None


def main():
    """Main Streamlit application."""
    st.markdown('<div class="main-header">🎬 Video Subtitle Analyzer</div>', unsafe_allow_html=True)

    with st.sidebar:
        st.header("⚙️ Settings")
        try:
            Config.validate()
            st.success(f"✓ Using model {Config.MODEL}")
        except ValueError as e:
            st.error(str(e))

        force = st.checkbox("Ignore cached results", value=False)
        language = st.selectbox("Translate into", SUPPORTED_LANGUAGES)

        st.divider()
        st.subheader("📊 Current Status")
        track = st.session_state.track
        if len(track):
            st.success(f"✓ {len(track)} subtitles")
        else:
            st.info("No analysis yet")

    uploaded = st.file_uploader("Upload a video", type=["mp4", "mov", "webm", "mkv", "avi", "m4v"])
    if uploaded is not None:
        video_path, digest = save_upload(uploaded.name, uploaded.getvalue(), Config.OUT_DIR / "uploads")
        if st.session_state.video_path != video_path:
            st.session_state.video_path = video_path
            st.session_state.output_dir = get_output_dir(video_path, digest=digest)
            st.session_state.track = SubtitleTrack()
            st.session_state.current_time = 0.0
            try:
                st.session_state.duration = probe_video(video_path).duration
            except RuntimeError as e:
                st.error(str(e))
                st.session_state.duration = 0.0

    video_path = st.session_state.video_path
    col_player, col_list = st.columns([3, 2])

    with col_player:
        if video_path is None:
            st.info("No video loaded")
        else:
            st.video(str(video_path), start_time=int(st.session_state.current_time))
            if st.session_state.duration > 0:
                st.slider(
                    "Playhead (seconds)",
                    min_value=0.0,
                    max_value=float(st.session_state.duration),
                    step=0.1,
                    key="current_time",
                )

            c1, c2, c3, c4 = st.columns(4)
            with c1:
                if st.button("🖼️ Describe Current Frame"):
                    node = run_step("Describing frame...", describe_current_frame,
                                    video_path, st.session_state.current_time)
                    if node:
                        st.session_state.track.add([node])
                        st.rerun()
            with c2:
                if st.button("🎞️ Detect Visual Scenes"):
                    nodes = run_step("Detecting scenes...", detect_visual_scenes, video_path, force=force)
                    if nodes:
                        st.session_state.track.add(nodes)
                        st.rerun()
            with c3:
                if st.button("🎧 Full Audio Analysis"):
                    nodes = run_step("Analyzing audio...", full_audio_analysis, video_path, force=force)
                    if nodes:
                        st.session_state.track.add(nodes)
                        st.rerun()
            with c4:
                if st.button(f"🌐 Translate All ({language})", disabled=len(st.session_state.track) == 0):
                    result = run_step("Translating...", translate_track, st.session_state.track.nodes, language)
                    if result is not None:
                        st.rerun()

            if len(st.session_state.track):
                st.subheader("📥 Download Files")
                nodes = st.session_state.track.sorted()
                rendered = render_outputs(nodes, video=video_path.name)
                for col, (filename, mime) in zip(st.columns(len(OUTPUT_FILES)), OUTPUT_FILES.items()):
                    with col:
                        st.download_button(
                            f"📄 {filename}",
                            rendered[filename].encode("utf-8"),
                            file_name=filename,
                            mime=mime,
                            key=f"download_{filename}",
                        )
                if st.button("💾 Save to output folder"):
                    output_dir = st.session_state.output_dir
                    write_outputs(nodes, output_dir, video=video_path.name)
                    st.success(f"✓ Files saved to {output_dir}")

    with col_list:
        st.subheader("📝 Subtitles")
        subtitle_list()


if __name__ == "__main__":
    main()
