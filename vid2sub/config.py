"""Configuration management and environment variable loading."""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file (don't override existing env vars)
load_dotenv(override=False)


SUPPORTED_LANGUAGES = ("Spanish", "English")


class Config:
    """Application configuration."""

    # Gemini is reached through its OpenAI-compatible endpoint
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
    GEMINI_BASE_URL: str = os.getenv(
        "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/openai/"
    )
    MODEL: str = os.getenv("MODEL", "gemini-2.5-flash")
    MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "2"))
    OUT_DIR: Path = Path(os.getenv("OUT_DIR", "./out")).resolve()

    # 16kHz mono keeps the audio payload (and token count) small
    TARGET_SAMPLE_RATE: int = int(os.getenv("TARGET_SAMPLE_RATE", "16000"))
    FRAME_JPEG_QUALITY: int = int(os.getenv("FRAME_JPEG_QUALITY", "80"))
    SCENE_INTERVAL_SECONDS: float = float(os.getenv("SCENE_INTERVAL_SECONDS", "2.0"))

    # Inline request payloads are capped by the API
    MAX_INLINE_MB: int = int(os.getenv("MAX_INLINE_MB", "20"))

    @classmethod
    def validate(cls) -> None:
        """Validate that required configuration is present."""
        if not cls.GEMINI_API_KEY:
            raise ValueError(
                "GEMINI_API_KEY is required. Please set it in your .env file or environment variables."
            )
