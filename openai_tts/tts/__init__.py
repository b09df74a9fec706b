"""Speech request vocabulary and HTTP client."""

from openai_tts.tts.models import (
    OpenAITTSModel,
    OpenAITTSVoice,
    ResponseFormat,
    SpeechRequest,
)
from openai_tts.tts.client import SpeechClient, SpeechClientConfig

__all__ = [
    "OpenAITTSModel",
    "OpenAITTSVoice",
    "ResponseFormat",
    "SpeechRequest",
    "SpeechClient",
    "SpeechClientConfig",
]
