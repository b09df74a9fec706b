"""Tests for audio players.

Tests cover:
- MockAudioPlayer call recording
- Player factory
- SoundDevicePlayer against a patched sounddevice module
- MP3 decoding
"""

import asyncio
from unittest.mock import MagicMock

import numpy as np
import pytest

from openai_tts.audio.player import AudioPlayer, Codec, MockAudioPlayer, create_player
from openai_tts.audio.player import sounddevice_player as sdp


class TestMockAudioPlayer:
    """Tests for MockAudioPlayer."""

    @pytest.mark.asyncio
    async def test_stream_lifecycle(self):
        """open → start_stream → feed → stop → close is recorded."""
        player = MockAudioPlayer()
        await player.open()
        await player.start_stream(24000, 1, Codec.PCM16, 2048)
        player.feed(b"\x00\x01")
        await player.stop()
        await player.close()

        assert player.events == ["open", "start_stream", "stop", "close"]
        assert player.fed == [b"\x00\x01"]
        assert player.total_fed == 2
        assert player.is_open is False

    @pytest.mark.asyncio
    async def test_feed_dropped_when_not_streaming(self):
        """Data fed to a stopped sink is discarded."""
        player = MockAudioPlayer()
        player.feed(b"\x00\x01")
        assert player.fed == []

    @pytest.mark.asyncio
    async def test_requires_open(self):
        """Starting or playing before open() fails."""
        player = MockAudioPlayer()
        with pytest.raises(RuntimeError):
            await player.start_stream(24000, 1, Codec.PCM16, 2048)
        with pytest.raises(RuntimeError):
            await player.play(b"ID3", Codec.MP3)

    def test_fail_on_feed(self):
        """fail_on_feed makes the sink raise."""
        with pytest.raises(RuntimeError):
            MockAudioPlayer(fail_on_feed=True).feed(b"\x00")

    @pytest.mark.asyncio
    async def test_default_wait_is_noop(self):
        """Base wait() returns immediately."""
        await MockAudioPlayer().wait()


class TestCreatePlayer:
    """Tests for the player factory."""

    def test_mock_backend(self):
        """'mock' returns a MockAudioPlayer."""
        player = create_player("mock")
        assert isinstance(player, MockAudioPlayer)
        assert isinstance(player, AudioPlayer)
        assert player.name == "mock"

    def test_unknown_backend(self):
        """Unknown names are rejected."""
        with pytest.raises(ValueError):
            create_player("alsa")

    def test_sounddevice_unavailable(self, monkeypatch):
        """Missing sounddevice raises ImportError at construction."""
        monkeypatch.setattr(sdp, "SOUNDDEVICE_AVAILABLE", False)
        with pytest.raises(ImportError):
            create_player("sounddevice")


@pytest.fixture
def fake_sd(monkeypatch):
    """Replace the sounddevice module with a MagicMock."""
    fake = MagicMock()
    monkeypatch.setattr(sdp, "sd", fake)
    monkeypatch.setattr(sdp, "SOUNDDEVICE_AVAILABLE", True)
    return fake


class TestSoundDevicePlayer:
    """Tests for SoundDevicePlayer with a patched backend."""

    @pytest.mark.asyncio
    async def test_start_stream_opens_raw_output(self, fake_sd):
        """A 16-bit raw output stream is created and started."""
        player = sdp.SoundDevicePlayer(device=3)
        await player.open()
        await player.start_stream(24000, 1, Codec.PCM16, 2048)

        fake_sd.RawOutputStream.assert_called_once()
        kwargs = fake_sd.RawOutputStream.call_args.kwargs
        assert kwargs["samplerate"] == 24000
        assert kwargs["channels"] == 1
        assert kwargs["dtype"] == "int16"
        assert kwargs["blocksize"] == 1024
        assert kwargs["device"] == 3
        fake_sd.RawOutputStream.return_value.start.assert_called_once()

    @pytest.mark.asyncio
    async def test_stream_requires_open_and_pcm(self, fake_sd):
        """Streaming needs an open player and PCM16."""
        player = sdp.SoundDevicePlayer()
        with pytest.raises(RuntimeError):
            await player.start_stream(24000, 1, Codec.PCM16, 2048)
        await player.open()
        with pytest.raises(ValueError):
            await player.start_stream(24000, 1, Codec.MP3, 2048)

    @pytest.mark.asyncio
    async def test_feed_and_callback(self, fake_sd):
        """Fed bytes reach the device callback; shortfall is silence."""
        player = sdp.SoundDevicePlayer()
        await player.open()
        await player.start_stream(24000, 1, Codec.PCM16, 2048)

        player.feed(b"\x01\x02\x03\x04")
        assert player.buffered == 4

        outdata = bytearray(8)
        player._callback(outdata, 4, None, None)

        assert bytes(outdata) == b"\x01\x02\x03\x04\x00\x00\x00\x00"
        assert player.buffered == 0
        assert player.underruns == 1

    @pytest.mark.asyncio
    async def test_feed_without_stream_dropped(self, fake_sd):
        """feed() before start_stream() is ignored."""
        player = sdp.SoundDevicePlayer()
        player.feed(b"\x00\x00")
        assert player.buffered == 0

    @pytest.mark.asyncio
    async def test_stop_and_close(self, fake_sd):
        """stop() halts output and discards pending audio; close() is idempotent."""
        player = sdp.SoundDevicePlayer()
        await player.open()
        await player.start_stream(24000, 1, Codec.PCM16, 2048)
        stream = fake_sd.RawOutputStream.return_value
        player.feed(b"\x00" * 100)

        await player.stop()
        fake_sd.stop.assert_called()
        stream.stop.assert_called_once()
        stream.close.assert_called_once()
        assert player.buffered == 0

        await player.close()
        await player.close()
        assert player.is_open is False

    @pytest.mark.asyncio
    async def test_play_mp3(self, fake_sd, monkeypatch):
        """MP3 is decoded off-loop and handed to sounddevice.play."""
        samples = np.zeros((10, 1), dtype=np.int16)
        monkeypatch.setattr(sdp, "decode_mp3", lambda data: (samples, 22050))

        player = sdp.SoundDevicePlayer()
        await player.open()
        await player.play(b"ID3", Codec.MP3)

        args, kwargs = fake_sd.play.call_args
        assert args[0] is samples
        assert kwargs["samplerate"] == 22050

    @pytest.mark.asyncio
    async def test_play_rejects_pcm(self, fake_sd):
        """One-shot playback is MP3 only."""
        player = sdp.SoundDevicePlayer()
        await player.open()
        with pytest.raises(ValueError):
            await player.play(b"\x00", Codec.PCM16)

    @pytest.mark.asyncio
    async def test_wait(self, fake_sd):
        """wait() blocks on sounddevice.wait in a thread."""
        player = sdp.SoundDevicePlayer()
        await asyncio.wait_for(player.wait(), timeout=1.0)
        fake_sd.wait.assert_called_once()


class TestDecodeMp3:
    """Tests for decode_mp3."""

    def test_decode(self, monkeypatch):
        """Decoded samples are shaped (frames, channels)."""
        segment = MagicMock()
        segment.set_sample_width.return_value = segment
        segment.raw_data = np.arange(8, dtype=np.int16).tobytes()
        segment.channels = 2
        segment.frame_rate = 44100
        fake_audio_segment = MagicMock()
        fake_audio_segment.from_file.return_value = segment

        monkeypatch.setattr(sdp, "AudioSegment", fake_audio_segment)
        monkeypatch.setattr(sdp, "PYDUB_AVAILABLE", True)

        samples, rate = sdp.decode_mp3(b"ID3")

        assert rate == 44100
        assert samples.shape == (4, 2)
        segment.set_sample_width.assert_called_once_with(2)

    def test_decode_without_pydub(self, monkeypatch):
        """Missing pydub raises ImportError."""
        monkeypatch.setattr(sdp, "PYDUB_AVAILABLE", False)
        with pytest.raises(ImportError):
            sdp.decode_mp3(b"ID3")
