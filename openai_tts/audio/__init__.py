"""Audio primitives: PCM format arithmetic, playback clock, players."""

from openai_tts.audio.clock import PlaybackClock, get_playback_clock
from openai_tts.audio.pcm import DEFAULT_PCM_FORMAT, PCMFormat

__all__ = [
    "DEFAULT_PCM_FORMAT",
    "PCMFormat",
    "PlaybackClock",
    "get_playback_clock",
]
