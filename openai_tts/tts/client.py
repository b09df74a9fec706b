"""Speech Client - HTTP access to the OpenAI speech endpoint.

Issues POST requests carrying a Bearer credential and a JSON body, either
as a streamed response (raw PCM) or as a single download (MP3).

Error mapping:
- Non-2xx status → RemoteServiceError (status code + body text)
- Network failure before a response → TransportError

Only the connect phase has a timeout; streamed reads may take as long as
the synthesized audio does.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx

from openai_tts.config.constants import PCM
from openai_tts.exceptions import RemoteServiceError, TransportError
from openai_tts.observability.logging import get_logger
from openai_tts.tts.models import SpeechRequest

logger = get_logger(__name__)


@dataclass
class SpeechClientConfig:
    """Configuration for the speech client."""

    api_key: str
    endpoint: str = PCM.SPEECH_ENDPOINT
    connect_timeout_s: float | None = None


class SpeechClient:
    """Async client for the speech endpoint.

    Usage:
        client = SpeechClient(SpeechClientConfig(api_key="sk-..."))

        # Streamed PCM
        async with client.open_stream(request) as response:
            async for chunk in client.iter_chunks(response):
                ...

        # Full MP3
        audio = await client.create(request)

        await client.aclose()
    """

    def __init__(
        self,
        config: SpeechClientConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(None, connect=config.connect_timeout_s),
        )

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }

    @asynccontextmanager
    async def open_stream(
        self, request: SpeechRequest
    ) -> AsyncIterator[httpx.Response]:
        """Send the request and yield the response once headers arrive.

        The body is left unread for the caller to iterate.

        Raises:
            RemoteServiceError: On a non-2xx status
            TransportError: If no response could be obtained
        """
        started = False
        try:
            async with self._http.stream(
                "POST",
                self._config.endpoint,
                headers=self._headers(),
                json=request.to_payload(),
            ) as response:
                started = True
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise RemoteServiceError(response.status_code, body)
                yield response
        except httpx.TransportError as e:
            if started:
                # Failure while the caller was reading the body
                raise
            raise TransportError(str(e) or e.__class__.__name__, url=self._config.endpoint) from e

    async def iter_chunks(self, response: httpx.Response) -> AsyncIterator[bytes]:
        """Yield body chunks in arrival order."""
        async for chunk in response.aiter_bytes():
            if chunk:
                yield chunk

    async def create(self, request: SpeechRequest) -> bytes:
        """Download the complete audio payload.

        Raises:
            RemoteServiceError: On a non-2xx status
            TransportError: If no response could be obtained
        """
        try:
            response = await self._http.post(
                self._config.endpoint,
                headers=self._headers(),
                json=request.to_payload(),
            )
        except httpx.TransportError as e:
            raise TransportError(str(e) or e.__class__.__name__, url=self._config.endpoint) from e

        if not response.is_success:
            raise RemoteServiceError(response.status_code, response.text)

        logger.debug(
            "speech_downloaded",
            bytes=len(response.content),
            response_format=request.response_format.value,
        )
        return response.content

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

