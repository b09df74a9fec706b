"""SoundDevice Player - PortAudio playback for PCM streams and MP3 files.

Streaming PCM:
- A RawOutputStream runs in callback mode on a PortAudio thread
- feed() appends to a lock-protected byte buffer and returns immediately
- The callback drains the buffer and pads underruns with silence

One-shot MP3:
- Decoded with pydub (requires ffmpeg) off the event loop
- Played with sounddevice.play(), which does not block

Requirements:
- pip install "openai-tts-player[audio]"
- PortAudio shared library, ffmpeg for MP3
"""

from __future__ import annotations

import asyncio
import io
import threading

import numpy as np

try:
    import sounddevice as sd
    SOUNDDEVICE_AVAILABLE = True
except (ImportError, OSError):
    # OSError: package present but PortAudio library missing
    sd = None
    SOUNDDEVICE_AVAILABLE = False

try:
    from pydub import AudioSegment
    PYDUB_AVAILABLE = True
except ImportError:
    AudioSegment = None
    PYDUB_AVAILABLE = False

from openai_tts.audio.player.interface import AudioPlayer, Codec
from openai_tts.observability.logging import get_logger

logger = get_logger(__name__)


class SoundDevicePlayer(AudioPlayer):
    """Audio player backed by the sounddevice PortAudio bindings.

    Usage:
        player = SoundDevicePlayer()
        await player.open()
        await player.start_stream(24000, 1, Codec.PCM16, buffer_size=2048)
        player.feed(pcm_bytes)
        ...
        await player.stop()
        await player.close()
    """

    def __init__(self, device: int | str | None = None) -> None:
        if not SOUNDDEVICE_AVAILABLE:
            raise ImportError(
                "sounddevice package or PortAudio not available. "
                "Install with: pip install 'openai-tts-player[audio]'"
            )

        self._device = device
        self._open = False
        self._stream = None
        self._pending = bytearray()
        self._lock = threading.Lock()
        self._underruns = 0

    @property
    def name(self) -> str:
        return "sounddevice"

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def buffered(self) -> int:
        """Bytes accepted by feed() and not yet handed to the device."""
        with self._lock:
            return len(self._pending)

    @property
    def underruns(self) -> int:
        """Callbacks that had to pad with silence."""
        return self._underruns

    async def open(self) -> None:
        self._open = True
        logger.debug("sounddevice_player_opened", device=self._device)

    async def start_stream(
        self,
        sample_rate: int,
        channels: int,
        codec: Codec,
        buffer_size: int,
    ) -> None:
        if not self._open:
            raise RuntimeError("Player not open")
        if codec != Codec.PCM16:
            raise ValueError(f"Streaming supports PCM16 only, got {codec.value}")

        self._close_stream()
        with self._lock:
            self._pending.clear()

        frame_size = channels * 2
        self._stream = sd.RawOutputStream(
            samplerate=sample_rate,
            channels=channels,
            dtype="int16",
            blocksize=buffer_size // frame_size,
            device=self._device,
            callback=self._callback,
        )
        self._stream.start()
        logger.info(
            "sounddevice_stream_started",
            sample_rate=sample_rate,
            channels=channels,
            buffer_size=buffer_size,
        )

    def _callback(self, outdata, frames, time_info, status) -> None:
        """PortAudio thread: copy pending bytes into the device buffer."""
        wanted = len(outdata)
        with self._lock:
            n = min(wanted, len(self._pending))
            outdata[:n] = bytes(self._pending[:n])
            del self._pending[:n]
        if n < wanted:
            outdata[n:] = b"\x00" * (wanted - n)
            if n > 0:
                self._underruns += 1

    def feed(self, data: bytes) -> None:
        if self._stream is None:
            return
        with self._lock:
            self._pending.extend(data)

    async def play(self, data: bytes, codec: Codec) -> None:
        if not self._open:
            raise RuntimeError("Player not open")
        if codec != Codec.MP3:
            raise ValueError(f"One-shot playback supports MP3 only, got {codec.value}")

        samples, sample_rate = await asyncio.to_thread(decode_mp3, data)
        self._close_stream()
        sd.play(samples, samplerate=sample_rate, device=self._device)
        logger.info(
            "sounddevice_play_started",
            sample_rate=sample_rate,
            frames=len(samples),
        )

    async def wait(self) -> None:
        await asyncio.to_thread(sd.wait)

    async def stop(self) -> None:
        sd.stop()
        with self._lock:
            self._pending.clear()
        self._close_stream()

    async def close(self) -> None:
        if not self._open:
            return
        await self.stop()
        self._open = False
        logger.debug("sounddevice_player_closed")

    def _close_stream(self) -> None:
        if self._stream is not None:
            stream, self._stream = self._stream, None
            stream.stop()
            stream.close()


def decode_mp3(data: bytes) -> tuple[np.ndarray, int]:
    """Decode MP3 bytes to an int16 (frames, channels) array.

    Returns:
        Tuple of (samples, sample_rate)
    """
    if not PYDUB_AVAILABLE:
        raise ImportError(
            "pydub package not installed. "
            "Install with: pip install 'openai-tts-player[audio]'"
        )

    segment = AudioSegment.from_file(io.BytesIO(data), format="mp3")
    segment = segment.set_sample_width(2)
    samples = np.frombuffer(segment.raw_data, dtype=np.int16)
    return samples.reshape(-1, segment.channels), segment.frame_rate
