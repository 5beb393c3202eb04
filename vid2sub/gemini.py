"""Gemini API integration for scene description, audio analysis and translation."""

import json
import re
import sys
import time
from typing import Optional

from openai import OpenAI
from openai import APIError, RateLimitError, APIConnectionError

from vid2sub.config import Config, SUPPORTED_LANGUAGES


SCENE_PROMPT = (
    "Analyze this movie scene. Write a concise, single-sentence subtitle that describes "
    "exactly what is happening visually or what might be said. Keep it under 15 words. "
    "Do not add quotes."
)

TRANSLATE_PROMPT = """You are a professional translator. Translate the user text into {language}.
- Maintain the original tone, emotion, and brevity.
- Output ONLY the translated text.
- No preamble or explanations."""

BATCH_TRANSLATE_PROMPT = """You are a professional subtitle translator.
Translate the array of strings provided by the user into {language}.
- Maintain the context of a movie/video script.
- Return the translations in the EXACT same order as the input.
- Return strictly a JSON object with a "translations" array of strings."""

AUDIO_ANALYSIS_PROMPT = """Analyze this audio track from a video. Break it down into distinct chronological segments based on what is happening (Dialogue vs Music vs Silence).

For DIALOGUE segments:
- Identify the Speaker (e.g., "Man", "Woman", "Narrator" or name if known).
- Identify the Emotion.
- Transcribe the text.

For MUSIC segments, perform a deep musicology analysis:
- Music_Source: Diegetic (characters hear it), Non-Diegetic (score), or Silence/Ambient.
- Music_Tempo: Slow, Medium, Fast.
- Music_Dynamics: Low, Medium, High.
- Music_Progression: Crescendo, Diminuendo, or Sustained.
- Music_HarmonicMode: Major (Optimistic) or Minor (Melancholy/Scary).
- Music_Sentiment: A number between -1.0 (Fear/Sadness) to 1.0 (Joy/Victory).

Return a JSON object with a "segments" array."""

TRANSLATIONS_SCHEMA = {
    "type": "object",
    "properties": {
        "translations": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["translations"],
}

SEGMENTS_SCHEMA = {
    "type": "object",
    "properties": {
        "segments": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "startTime": {"type": "number", "description": "Start time in seconds"},
                    "endTime": {"type": "number", "description": "End time in seconds"},
                    "type": {"type": "string", "enum": ["dialogue", "music", "silence"]},
                    "text": {"type": "string", "description": "Transcript or description of sound"},
                    "speaker": {"type": "string"},
                    "emotion": {"type": "string"},
                    "musicAnalysis": {
                        "type": "object",
                        "properties": {
                            "source": {"type": "string", "enum": ["Diegetic", "Non-Diegetic", "Silence/Ambient"]},
                            "tempo": {"type": "string", "enum": ["Slow", "Medium", "Fast"]},
                            "dynamics": {"type": "string", "enum": ["Low", "Medium", "High"]},
                            "progression": {"type": "string", "enum": ["Crescendo", "Diminuendo", "Sustained"]},
                            "harmonicMode": {"type": "string", "enum": ["Major", "Minor"]},
                            "sentimentScore": {"type": "number", "description": "Between -1.0 and 1.0"},
                        },
                    },
                },
                "required": ["startTime", "endTime", "type", "text"],
            },
        },
    },
    "required": ["segments"],
}

_DATA_URL_PREFIX = re.compile(r'^data:image/(png|jpeg|jpg);base64,')

_client: Optional[OpenAI] = None


def get_client() -> OpenAI:
    """Return the shared client, creating it on first use."""
    global _client
    if _client is None:
        Config.validate()
        _client = OpenAI(
            api_key=Config.GEMINI_API_KEY,
            base_url=Config.GEMINI_BASE_URL,
            timeout=300.0  # 5 minute timeout
        )
    return _client


def _json_format(name: str, schema: dict) -> dict:
    return {"type": "json_schema", "json_schema": {"name": name, "schema": schema}}


def _check_language(target_language: str) -> None:
    if target_language not in SUPPORTED_LANGUAGES:
        raise ValueError(
            f"Unsupported target language: {target_language!r}. "
            f"Choose one of: {', '.join(SUPPORTED_LANGUAGES)}"
        )


def _complete(label: str, **request_params) -> str:
    """
    Run a chat completion with retries and return the message text.

    Rate limits, connection errors and 5xx responses are retried with
    exponential backoff; everything else is raised as RuntimeError.
    """
    client = get_client()
    request_params.setdefault("model", Config.MODEL)

    last_error = None
    for attempt in range(Config.MAX_RETRIES + 1):
        try:
            response = client.chat.completions.create(**request_params)
            content = response.choices[0].message.content if response.choices else None
            return (content or "").strip()

        except RateLimitError as e:
            last_error = e
            if attempt < Config.MAX_RETRIES:
                wait_time = 2 ** attempt
                print(f"Rate limit hit. Waiting {wait_time} seconds before retry...")
                time.sleep(wait_time)
                continue
            print(f"✗ {label} error: {e}", file=sys.stderr)
            raise RuntimeError(
                f"Rate limit exceeded after {Config.MAX_RETRIES + 1} attempts. "
                f"Please try again later."
            ) from e

        except APIConnectionError as e:
            last_error = e
            if attempt < Config.MAX_RETRIES:
                wait_time = 2 ** attempt
                print(f"Connection error. Waiting {wait_time} seconds before retry...")
                time.sleep(wait_time)
                continue
            print(f"✗ {label} error: {e}", file=sys.stderr)
            raise RuntimeError(
                f"Connection error after {Config.MAX_RETRIES + 1} attempts: {str(e)}"
            ) from e

        except APIError as e:
            error_msg = str(e)
            status_code = getattr(e, 'status_code', None)
            is_5xx_error = bool(status_code) and 500 <= status_code < 600

            if is_5xx_error and attempt < Config.MAX_RETRIES:
                last_error = e
                wait_time = 2 ** attempt
                print(f"Server error ({status_code}). Waiting {wait_time} seconds before retry...")
                time.sleep(wait_time)
                continue

            print(f"✗ {label} error: {error_msg}", file=sys.stderr)
            if "quota" in error_msg.lower() or "billing" in error_msg.lower():
                raise RuntimeError(
                    f"Gemini API quota/billing error: {error_msg}. "
                    f"Please check your Google AI Studio account."
                ) from e

            raise RuntimeError(f"Gemini API error: {error_msg}") from e

    raise RuntimeError(f"{label} failed after {Config.MAX_RETRIES + 1} attempts") from last_error


def generate_scene_description(base64_image: str) -> str:
    """
    Describe a video frame as a one-line subtitle.

    Args:
        base64_image: JPEG/PNG base64, with or without a data URL prefix

    Returns:
        Subtitle text
    """
    clean_base64 = _DATA_URL_PREFIX.sub('', base64_image)

    text = _complete(
        "Scene description",
        messages=[{
            "role": "user",
            "content": [
                {"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{clean_base64}"}},
                {"type": "text", "text": SCENE_PROMPT},
            ],
        }],
        temperature=0.4,
        max_tokens=50,
    )
    if not text:
        raise RuntimeError("No text generated from Gemini.")
    return text


def translate_text(text: str, target_language: str) -> str:
    """Translate a single subtitle text."""
    _check_language(target_language)
    if not text or not text.strip():
        return ""

    translated = _complete(
        "Translation",
        messages=[
            {"role": "system", "content": TRANSLATE_PROMPT.format(language=target_language)},
            {"role": "user", "content": text},
        ],
        temperature=0.3,
        max_tokens=200,
    )
    if not translated:
        raise RuntimeError("Translation returned empty text.")
    return translated


def translate_batch(texts: list[str], target_language: str) -> list[str]:
    """
    Translate many texts in one structured call.

    Returns the translations in input order.
    """
    _check_language(target_language)
    if not texts:
        return []

    raw = _complete(
        "Batch translation",
        messages=[
            {"role": "system", "content": BATCH_TRANSLATE_PROMPT.format(language=target_language)},
            {"role": "user", "content": json.dumps(texts, ensure_ascii=False)},
        ],
        response_format=_json_format("translations", TRANSLATIONS_SCHEMA),
    )
    if not raw:
        raise RuntimeError("No JSON generated for translation batch.")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Batch translation returned invalid JSON: {e}") from e

    translations = data.get("translations") if isinstance(data, dict) else data
    if not isinstance(translations, list) or not all(isinstance(t, str) for t in translations):
        raise RuntimeError("Batch translation did not return a list of strings.")
    if len(translations) != len(texts):
        raise RuntimeError(
            f"Batch translation returned {len(translations)} items for {len(texts)} inputs."
        )
    return translations


def analyze_audio_deeply(base64_audio: str) -> dict:
    """
    Split an audio track into dialogue, music and silence segments.

    Args:
        base64_audio: Base64 WAV bytes

    Returns:
        Dict with a "segments" list (see SEGMENTS_SCHEMA)
    """
    raw = _complete(
        "Audio analysis",
        messages=[{
            "role": "user",
            "content": [
                {"type": "input_audio", "input_audio": {"data": base64_audio, "format": "wav"}},
                {"type": "text", "text": AUDIO_ANALYSIS_PROMPT},
            ],
        }],
        temperature=0.2,
        response_format=_json_format("audio_segments", SEGMENTS_SCHEMA),
    )
    if not raw:
        raise RuntimeError("No JSON generated.")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Audio analysis returned invalid JSON: {e}") from e

    if isinstance(data, list):
        data = {"segments": data}
    if not isinstance(data, dict):
        raise RuntimeError("Audio analysis did not return a JSON object.")
    segments = data.get("segments")
    if segments is None:
        data["segments"] = []
    elif not isinstance(segments, list):
        raise RuntimeError(
            f"Audio analysis returned segments as {type(segments).__name__}, expected a list."
        )
    return data
