"""OpenAI TTS - streamed text-to-speech playback."""

__version__ = "1.0.0"

# Export exception hierarchy for easy importing
from openai_tts.exceptions import (
    OpenAITTSError,
    ConfigurationError,
    MissingConfigError,
    InvalidConfigError,
    SpeechError,
    RemoteServiceError,
    TransportError,
    StreamPlaybackError,
    PlaybackError,
    PlaybackBusyError,
    PlaybackStateError,
)
from openai_tts.tts.models import (
    OpenAITTSModel,
    OpenAITTSVoice,
    ResponseFormat,
    SpeechRequest,
)
from openai_tts.playback.status import PlaybackStatus
from openai_tts.playback.controller import OpenAITTS

__all__ = [
    "__version__",
    # Controller
    "OpenAITTS",
    "PlaybackStatus",
    # Request vocabulary
    "OpenAITTSModel",
    "OpenAITTSVoice",
    "ResponseFormat",
    "SpeechRequest",
    # Base
    "OpenAITTSError",
    # Configuration
    "ConfigurationError",
    "MissingConfigError",
    "InvalidConfigError",
    # Speech
    "SpeechError",
    "RemoteServiceError",
    "TransportError",
    "StreamPlaybackError",
    # Playback
    "PlaybackError",
    "PlaybackBusyError",
    "PlaybackStateError",
]
