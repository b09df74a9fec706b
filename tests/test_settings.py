"""Tests for Settings and constants."""

import pytest
from pydantic import ValidationError

from openai_tts.config import PCM, Settings, get_settings
from openai_tts.tts.models import OpenAITTSModel, OpenAITTSVoice


class TestPlaybackConstants:
    """Tests for the PCM constants singleton."""

    def test_stream_format(self):
        """Streamed PCM is 24 kHz mono 16-bit."""
        assert PCM.SAMPLE_RATE == 24000
        assert PCM.CHANNELS == 1
        assert PCM.BYTES_PER_SAMPLE == 2

    def test_pump_defaults(self):
        """Pump drains 2048 bytes every 20 ms."""
        assert PCM.SLICE_BYTES == 2048
        assert PCM.PUMP_INTERVAL_MS == 20

    def test_completion_delay_cap(self):
        """Completion delay is capped at 2^31 ms."""
        assert PCM.MAX_COMPLETION_DELAY_MS == 1 << 31

    def test_frozen(self):
        """Constants cannot be reassigned."""
        with pytest.raises(Exception):
            PCM.SLICE_BYTES = 1


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        """Defaults match the streaming constants."""
        settings = Settings(openai_api_key="k")
        assert settings.tts_endpoint == PCM.SPEECH_ENDPOINT
        assert settings.tts_default_voice == OpenAITTSVoice.ALLOY
        assert settings.tts_default_model == OpenAITTSModel.TTS_1
        assert settings.slice_bytes == 2048
        assert settings.pump_interval_ms == 20
        assert settings.connect_timeout_s is None

    def test_connect_timeout_opt_in(self, monkeypatch):
        """A connect timeout applies only when configured."""
        monkeypatch.setenv("CONNECT_TIMEOUT_S", "5")
        assert Settings().connect_timeout_s == 5.0
        with pytest.raises(ValidationError):
            Settings(openai_api_key="k", connect_timeout_s=0)

    def test_reads_environment(self, monkeypatch):
        """Values come from environment variables."""
        monkeypatch.setenv("TTS_DEFAULT_VOICE", "nova")
        monkeypatch.setenv("TTS_DEFAULT_MODEL", "tts-1-hd")
        monkeypatch.setenv("PUMP_INTERVAL_MS", "40")
        settings = Settings()
        assert settings.openai_api_key == "sk-test-key"
        assert settings.tts_default_voice == OpenAITTSVoice.NOVA
        assert settings.tts_default_model == OpenAITTSModel.TTS_1_HD
        assert settings.pump_interval_ms == 40
        assert settings.player_backend == "mock"

    def test_odd_slice_rejected(self):
        """Slices must hold whole frames."""
        with pytest.raises(ValidationError):
            Settings(slice_bytes=2047)

    def test_slice_bounds(self):
        """Slice size is bounded."""
        with pytest.raises(ValidationError):
            Settings(slice_bytes=128)

    def test_endpoint_must_be_http(self):
        """Endpoint must be an http(s) URL."""
        with pytest.raises(ValidationError):
            Settings(tts_endpoint="ftp://example.test/speech")

    def test_unknown_player_backend_rejected(self):
        """Only known player backends are accepted."""
        with pytest.raises(ValidationError):
            Settings(player_backend="alsa")

    def test_get_settings_cached(self):
        """get_settings returns the same instance."""
        assert get_settings() is get_settings()
