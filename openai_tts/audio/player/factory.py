"""Player Factory - audio player selection.

Backends:
- sounddevice: real playback through PortAudio (needs the audio extra)
- mock: records calls, no sound
"""

import logging
from typing import Literal

from openai_tts.audio.player.interface import AudioPlayer
from openai_tts.audio.player.mock_player import MockAudioPlayer

logger = logging.getLogger(__name__)

PlayerBackend = Literal["sounddevice", "mock"]


def create_player(backend: PlayerBackend = "sounddevice", **kwargs) -> AudioPlayer:
    """Create an audio player instance.

    Args:
        backend: Player type ('sounddevice', 'mock')
        **kwargs: Backend-specific options (e.g. device for sounddevice)

    Returns:
        Audio player instance

    Raises:
        ImportError: If the sounddevice backend is requested but unavailable
        ValueError: For an unknown backend name
    """
    if backend == "mock":
        return MockAudioPlayer(**kwargs)

    if backend == "sounddevice":
        from openai_tts.audio.player.sounddevice_player import SoundDevicePlayer
        logger.info("Using sounddevice audio player")
        return SoundDevicePlayer(**kwargs)

    raise ValueError(f"Unknown player backend: {backend}")
