"""Mock Audio Player - for testing and dry runs.

Records every call instead of producing sound.
Does not require an audio device.
"""

from __future__ import annotations

from openai_tts.audio.player.interface import AudioPlayer, Codec


class MockAudioPlayer(AudioPlayer):
    """Audio player that records calls.

    Attributes:
        events: Ordered call names ("open", "start_stream", "play", "stop", "close")
        fed: Every buffer passed to feed(), in order
        played: Every (data, codec) passed to play()
    """

    def __init__(self, fail_on_feed: bool = False) -> None:
        self._open = False
        self._streaming = False
        self._fail_on_feed = fail_on_feed
        self.events: list[str] = []
        self.fed: list[bytes] = []
        self.played: list[tuple[bytes, Codec]] = []
        self.stream_config: dict | None = None

    @property
    def name(self) -> str:
        return "mock"

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def is_streaming(self) -> bool:
        return self._streaming

    @property
    def total_fed(self) -> int:
        """Total bytes accepted by the sink."""
        return sum(len(b) for b in self.fed)

    async def open(self) -> None:
        self.events.append("open")
        self._open = True

    async def start_stream(
        self,
        sample_rate: int,
        channels: int,
        codec: Codec,
        buffer_size: int,
    ) -> None:
        if not self._open:
            raise RuntimeError("Player not open")
        self.events.append("start_stream")
        self.stream_config = {
            "sample_rate": sample_rate,
            "channels": channels,
            "codec": codec,
            "buffer_size": buffer_size,
        }
        self._streaming = True

    def feed(self, data: bytes) -> None:
        if self._fail_on_feed:
            raise RuntimeError("Sink rejected data")
        if not self._streaming:
            # A closed sink drops data, like a null sink reference
            return
        self.fed.append(bytes(data))

    async def play(self, data: bytes, codec: Codec) -> None:
        if not self._open:
            raise RuntimeError("Player not open")
        self.events.append("play")
        self.played.append((bytes(data), codec))

    async def stop(self) -> None:
        self.events.append("stop")
        self._streaming = False

    async def close(self) -> None:
        self.events.append("close")
        self._streaming = False
        self._open = False
