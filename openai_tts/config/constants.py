"""Playback Constants - PCM format and pump timing.

The speech endpoint streams raw PCM with no container or header:
16-bit signed little-endian, mono, 24 kHz. The pump and the
completion estimator are both derived from these values.
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class PlaybackConstants:
    """Immutable PCM and pump parameters.

    All timing values in milliseconds unless otherwise noted.
    """

    # Endpoint
    SPEECH_ENDPOINT: Final[str] = "https://api.openai.com/v1/audio/speech"

    # PCM stream format
    SAMPLE_RATE: Final[int] = 24000  # Hz
    CHANNELS: Final[int] = 1  # Mono
    BYTES_PER_SAMPLE: Final[int] = 2  # 16-bit signed

    # Buffer pump
    SLICE_BYTES: Final[int] = 2048  # Bytes forwarded per tick, also sink buffer size
    PUMP_INTERVAL_MS: Final[int] = 20  # Tick period

    # Completion estimator
    MAX_COMPLETION_DELAY_MS: Final[int] = 1 << 31  # Upper clamp for remaining time


# Singleton instance for import convenience
PCM = PlaybackConstants()
