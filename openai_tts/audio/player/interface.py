"""AudioPlayer Interface - playback collaborator abstraction.

The controller only needs two capabilities from a platform player:
- a streaming sink that accepts raw PCM byte buffers
- one-shot playback of a complete encoded file (MP3)

Higher-level code is blind to which implementation is used.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum


class Codec(Enum):
    """Audio encodings understood by players."""

    PCM16 = "pcm16"  # Raw 16-bit signed little-endian
    MP3 = "mp3"


class AudioPlayer(ABC):
    """Canonical interface for audio players.

    Usage:
        player = SoundDevicePlayer()
        await player.open()

        # Streaming PCM
        await player.start_stream(24000, 1, Codec.PCM16, buffer_size=2048)
        player.feed(pcm_bytes)

        # One-shot file
        await player.play(mp3_bytes, Codec.MP3)

        await player.stop()
        await player.close()
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Player identifier (e.g. "sounddevice", "mock")."""
        ...

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether open() has been called without a matching close()."""
        ...

    @abstractmethod
    async def open(self) -> None:
        """Acquire the audio device."""
        ...

    @abstractmethod
    async def start_stream(
        self,
        sample_rate: int,
        channels: int,
        codec: Codec,
        buffer_size: int,
    ) -> None:
        """Configure the player for streamed raw input and start it."""
        ...

    @abstractmethod
    def feed(self, data: bytes) -> None:
        """Accept raw bytes into the streaming sink.

        Must not block: returns before the audio device has played the data.
        """
        ...

    @abstractmethod
    async def play(self, data: bytes, codec: Codec) -> None:
        """Start one-shot playback of a complete encoded buffer."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop any playback and discard queued audio."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the audio device. Safe to call when already closed."""
        ...

    async def wait(self) -> None:
        """Block until one-shot playback has finished. No-op by default."""
        return None
