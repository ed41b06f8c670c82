"""Configuration settings loaded from .env file."""

from pathlib import Path
from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings, loaded from .env file.

    Text generation goes through the Claude Agent SDK, which authenticates via
    the Claude Code CLI. Speech synthesis goes through Gemini and needs
    GOOGLE_API_KEY.
    """

    # LLM Models
    llm_model_fast: str = "claude-haiku-4-5"       # PremiseAgent
    llm_model_writing: str = "claude-sonnet-4-5"   # OutlineAgent / WriterAgent / TwistAgent

    # Speech
    google_api_key: Optional[str] = None
    tts_model: str = "gemini-2.5-flash-preview-tts"
    tts_voice: str = "Zephyr"
    audio_sample_rate: int = 24000
    audio_player_command: str = "ffplay -nodisp -autoexit -loglevel quiet"

    # Outline
    outline_min_chapters: int = 5
    outline_max_chapters: int = 10

    # Export
    export_dir: Path = Path("./data/exports")

    # Logging
    log_dir: Path = Path("./data/logs")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("outline_min_chapters", "outline_max_chapters")
    @classmethod
    def validate_chapter_counts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Outline chapter count must be >= 1")
        return v

    @field_validator("audio_sample_rate")
    @classmethod
    def validate_sample_rate(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("audio_sample_rate must be positive")
        return v

    @field_validator("export_dir", "log_dir")
    @classmethod
    def ensure_parent_dirs(cls, v: Path) -> Path:
        v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @model_validator(mode="after")
    def validate_chapter_range(self) -> "Settings":
        if self.outline_min_chapters > self.outline_max_chapters:
            raise ValueError(
                f"outline_min_chapters ({self.outline_min_chapters}) must not exceed "
                f"outline_max_chapters ({self.outline_max_chapters})"
            )
        return self


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
