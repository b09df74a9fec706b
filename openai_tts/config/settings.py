"""Application Settings - Environment-based configuration.

Uses Pydantic Settings for validation and type coercion.
Values are read from the environment (case-insensitive) or a `.env` file.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from openai_tts.config.constants import PCM
from openai_tts.tts.models import OpenAITTSModel, OpenAITTSVoice


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Credentials
    openai_api_key: str | None = Field(
        default=None, description="Bearer credential for the speech endpoint"
    )

    # Endpoint
    tts_endpoint: str = Field(
        default=PCM.SPEECH_ENDPOINT, description="Speech synthesis URL"
    )
    connect_timeout_s: float | None = Field(
        default=None,
        gt=0,
        le=120,
        description="Optional TCP/TLS connect timeout; unbounded when unset (reads are always unbounded)",
    )

    # Request defaults
    tts_default_voice: OpenAITTSVoice = Field(
        default=OpenAITTSVoice.ALLOY, description="Voice used when none is given"
    )
    tts_default_model: OpenAITTSModel = Field(
        default=OpenAITTSModel.TTS_1, description="Model used when none is given"
    )

    # Streaming playback
    pump_interval_ms: int = Field(
        default=PCM.PUMP_INTERVAL_MS,
        ge=5,
        le=200,
        description="Buffer pump tick period",
    )
    slice_bytes: int = Field(
        default=PCM.SLICE_BYTES,
        ge=256,
        le=65536,
        description="Bytes forwarded to the sink per pump tick",
    )
    player_backend: Literal["sounddevice", "mock"] = Field(
        default="sounddevice", description="Audio player implementation"
    )

    # Observability
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_json: bool = Field(default=False, description="Render logs as JSON")
    metrics_enabled: bool = Field(default=True, description="Record Prometheus metrics")

    @field_validator("slice_bytes")
    @classmethod
    def validate_slice_alignment(cls, v: int) -> int:
        """Slices must hold whole 16-bit mono frames."""
        frame_size = PCM.CHANNELS * PCM.BYTES_PER_SAMPLE
        if v % frame_size != 0:
            raise ValueError(f"slice_bytes must be a multiple of {frame_size}")
        return v

    @field_validator("tts_endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("tts_endpoint must be an http(s) URL")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
