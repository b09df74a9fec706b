"""Pytest configuration and shared fixtures."""

import asyncio
import json
import os
from typing import Callable

import httpx
import pytest

# Set test environment variables before importing settings
os.environ.update({
    "OPENAI_API_KEY": "sk-test-key",
    "PLAYER_BACKEND": "mock",  # Never touch a real audio device in tests
    "LOG_LEVEL": "WARNING",
})


class RecordingHandler:
    """MockTransport handler that records requests and replays a response."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self._respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    @property
    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def pcm_body():
    """Factory for async response bodies that pause before each chunk."""

    def factory(chunks: list[bytes], delay_s: float = 0.0, tail_delay_s: float = 0.0):
        async def body():
            for chunk in chunks:
                if delay_s:
                    await asyncio.sleep(delay_s)
                yield chunk
            if tail_delay_s:
                await asyncio.sleep(tail_delay_s)

        return body()

    return factory


@pytest.fixture
def test_settings():
    """Provide test settings instance."""
    from openai_tts.config.settings import Settings
    return Settings(
        openai_api_key="sk-test-key",
        player_backend="mock",
        pump_interval_ms=20,
        slice_bytes=2048,
        metrics_enabled=True,
    )


@pytest.fixture
def player():
    """Provide a fresh recording player."""
    from openai_tts.audio.player import MockAudioPlayer
    return MockAudioPlayer()


@pytest.fixture
def make_controller(test_settings, player):
    """Factory building a controller wired to an httpx MockTransport.

    Returns (controller, http_client, handler); the test disposes the
    controller and closes the client.
    """
    from openai_tts.playback.controller import OpenAITTS

    def factory(respond, *, audio_player=None, settings=None):
        handler = RecordingHandler(respond)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        tts = OpenAITTS(
            settings=settings or test_settings,
            player=audio_player or player,
            http_client=http_client,
        )
        return tts, http_client, handler

    return factory


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    """Configure structlog once for the whole run."""
    from openai_tts.observability.logging import configure_logging
    configure_logging(level="WARNING", json_format=True)
