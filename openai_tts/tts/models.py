"""Speech request vocabulary.

Voices, models and response formats accepted by the OpenAI speech
endpoint, plus the request body builder.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class OpenAITTSVoice(str, Enum):
    """Voices available on the speech endpoint."""

    ALLOY = "alloy"
    ASH = "ash"
    BALLAD = "ballad"
    CORAL = "coral"
    ECHO = "echo"
    FABLE = "fable"
    ONYX = "onyx"
    NOVA = "nova"
    SAGE = "sage"
    SHIMMER = "shimmer"
    VERSE = "verse"


class OpenAITTSModel(str, Enum):
    """Speech synthesis models."""

    TTS_1 = "tts-1"
    TTS_1_HD = "tts-1-hd"
    GPT_4O_MINI_TTS = "gpt-4o-mini-tts"


class ResponseFormat(str, Enum):
    """Audio encodings requested from the endpoint."""

    PCM = "pcm"  # Raw 16-bit LE mono 24kHz, streamable
    MP3 = "mp3"  # Complete file


@dataclass(frozen=True)
class SpeechRequest:
    """A single synthesis request."""

    text: str
    voice: OpenAITTSVoice = OpenAITTSVoice.ALLOY
    model: OpenAITTSModel = OpenAITTSModel.TTS_1
    response_format: ResponseFormat = ResponseFormat.PCM
    instructions: str | None = None

    def __post_init__(self) -> None:
        if not self.text or not self.text.strip():
            raise ValueError("text must not be empty")

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON request body."""
        payload: dict[str, Any] = {
            "model": OpenAITTSModel(self.model).value,
            "input": self.text,
            "voice": OpenAITTSVoice(self.voice).value,
            "response_format": ResponseFormat(self.response_format).value,
        }
        if self.instructions is not None:
            payload["instructions"] = self.instructions
        return payload
