"""Playback Controller - speak operations over the speech endpoint.

Two modes:
- stream_speak: raw PCM streamed into the player in near real time
- create_speak: complete MP3 downloaded, then played once

Streaming pipeline:
    request → response headers → player started → chunks appended to the
    accumulator ← pump drains fixed slices to the sink → end of stream →
    aligned flush → completion estimated and scheduled

State transitions per invocation:
    IDLE → FETCHING → PLAYING → {STOPPED | COMPLETED} → IDLE

Only one invocation may be in flight per controller; a second concurrent
call is rejected with PlaybackBusyError. stop_player() may be called at
any time.
"""

from __future__ import annotations

import asyncio
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

import httpx

from openai_tts.audio.clock import PlaybackClock, get_playback_clock
from openai_tts.audio.pcm import DEFAULT_PCM_FORMAT
from openai_tts.audio.player import AudioPlayer, Codec, create_player
from openai_tts.config.settings import Settings, get_settings
from openai_tts.exceptions import (
    MissingConfigError,
    PlaybackBusyError,
    PlaybackError,
    RemoteServiceError,
    StreamPlaybackError,
    TransportError,
)
from openai_tts.observability import metrics
from openai_tts.observability.logging import (
    PlaybackLogger,
    bind_invocation,
    get_logger,
    unbind_invocation,
)
from openai_tts.playback.accumulator import ChunkAccumulator
from openai_tts.playback.cancellation import CancelEvent, CancelReason, CancellationToken
from openai_tts.playback.completion import CompletionEstimator
from openai_tts.playback.pump import BufferPump
from openai_tts.playback.state_machine import PlaybackState, PlaybackStateMachine
from openai_tts.playback.status import PlaybackStatus, StatusChannel, StatusSubscription
from openai_tts.tts.client import SpeechClient, SpeechClientConfig
from openai_tts.tts.models import (
    OpenAITTSModel,
    OpenAITTSVoice,
    ResponseFormat,
    SpeechRequest,
)

logger = get_logger(__name__)

ChunkObserver = Callable[[bytes], None]


class OpenAITTS:
    """Client for OpenAI text-to-speech with local playback.

    Usage:
        tts = OpenAITTS(api_key="sk-...")

        async for status in tts.status_stream():
            ...

        await tts.stream_speak("Hello there", voice=OpenAITTSVoice.NOVA)
        await tts.create_speak("Full MP3 please")

        await tts.stop_player()
        await tts.dispose()
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        settings: Settings | None = None,
        player: AudioPlayer | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: PlaybackClock | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        api_key = api_key or self._settings.openai_api_key
        if not api_key:
            raise MissingConfigError(
                "OPENAI_API_KEY", "pass api_key or set the environment variable"
            )

        metrics.set_metrics_enabled(self._settings.metrics_enabled)

        self._client = SpeechClient(
            SpeechClientConfig(
                api_key=api_key,
                endpoint=self._settings.tts_endpoint,
                connect_timeout_s=self._settings.connect_timeout_s,
            ),
            http_client=http_client,
        )
        self._player = player or create_player(self._settings.player_backend)
        self._format = DEFAULT_PCM_FORMAT
        self._clock = clock or get_playback_clock()

        self._channel = StatusChannel()
        self._fsm = PlaybackStateMachine(self._channel)
        self._cancellation = CancellationToken()
        self._cancellation.register(self._on_cancel)
        self._estimator = CompletionEstimator(self._format, clock=self._clock)

        self._accumulator: ChunkAccumulator | None = None
        self._pump: BufferPump | None = None
        self._busy = False
        self._disposed = False

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    async def stream_speak(
        self,
        text: str,
        voice: OpenAITTSVoice | None = None,
        model: OpenAITTSModel | None = None,
        instructions: str | None = None,
        on_chunk: ChunkObserver | None = None,
    ) -> None:
        """Stream raw PCM from the endpoint and play it as it arrives.

        Returns once the response stream has ended; `completed` is emitted
        later, when the estimated playback time has elapsed.

        Args:
            text: Text to speak
            voice: Voice (settings default if None)
            model: Model (settings default if None)
            instructions: Optional speaking-style instructions
            on_chunk: Observer called with every raw chunk

        Raises:
            RemoteServiceError: Non-2xx response
            TransportError: No response could be obtained
            StreamPlaybackError: Failure while consuming chunks or feeding the sink
            PlaybackBusyError: Another invocation is in flight
        """
        request = self._build_request(text, voice, model, instructions, ResponseFormat.PCM)
        async with self._invocation("stream_speak"):
            await self._run_stream(request, on_chunk)

    async def create_speak(
        self,
        text: str,
        voice: OpenAITTSVoice | None = None,
        model: OpenAITTSModel | None = None,
        instructions: str | None = None,
        on_chunk: ChunkObserver | None = None,
    ) -> bytes:
        """Download a complete MP3 and play it once.

        Emits `playing` when playback starts. No `completed` is emitted for
        this mode.

        Returns:
            The downloaded MP3 bytes (empty if stopped before download finished)
        """
        request = self._build_request(text, voice, model, instructions, ResponseFormat.MP3)
        async with self._invocation("create_speak"):
            return await self._run_download(request, on_chunk)

    async def stop_player(self) -> None:
        """Stop playback and clear streaming state.

        Emits `stopped` once if an invocation is fetching or playing, sets
        the cancellation flag, stops the pump, cancels any pending
        completion, then stops and closes the player.
        """
        await self._stop(CancelReason.USER_STOP)

    def status_stream(self) -> StatusSubscription:
        """Subscribe to status notifications emitted from now on."""
        return self._channel.subscribe()

    def on_status(self, callback: Callable[[PlaybackStatus], None]) -> Callable[[], None]:
        """Register a status callback. Returns an unsubscribe function."""
        return self._channel.listen(callback)

    async def dispose(self) -> None:
        """Release the player, timers, status channel and HTTP client. Idempotent."""
        if self._disposed:
            return
        self._disposed = True

        await self._cancellation.cancel(CancelReason.DISPOSE)
        try:
            await self._player.close()
        except Exception as e:
            logger.warning("player_close_error", error=str(e))
        self._channel.close()
        await self._client.aclose()
        logger.debug("controller_disposed")

    async def __aenter__(self) -> OpenAITTS:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.dispose()

    @property
    def status(self) -> PlaybackState:
        """Current playback state."""
        return self._fsm.state

    @property
    def is_busy(self) -> bool:
        """Whether a speak operation is in flight."""
        return self._busy

    @property
    def is_pumping(self) -> bool:
        return self._pump is not None and self._pump.is_running

    @property
    def completion_pending(self) -> bool:
        return self._estimator.pending

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def player(self) -> AudioPlayer:
        return self._player

    # ------------------------------------------------------------------
    # Streaming PCM
    # ------------------------------------------------------------------

    async def _run_stream(
        self,
        request: SpeechRequest,
        on_chunk: ChunkObserver | None,
    ) -> None:
        log = PlaybackLogger("stream")
        await self._prepare_invocation()
        self._fsm.begin("stream_speak")
        log.request_started(request.model.value, request.voice.value, len(request.text))

        accumulator = ChunkAccumulator(self._format, self._cancellation)
        self._accumulator = accumulator
        t_request_ms = self._clock.now_ms()

        try:
            async with self._client.open_stream(request) as response:
                elapsed_ms = self._clock.elapsed_ms(t_request_ms)
                log.response_received(response.status_code, elapsed_ms)
                metrics.record_time_to_headers("pcm", elapsed_ms)

                if self._cancellation.is_cancelled:
                    # Stopped while fetching: never open the player
                    metrics.record_request("pcm", "cancelled")
                    return

                await self._play_stream(response, accumulator, on_chunk, log)

        except (RemoteServiceError, TransportError) as e:
            outcome = "http_error" if isinstance(e, RemoteServiceError) else "transport_error"
            self._record_failure("pcm", outcome, e, log)
            if self._fsm.state == PlaybackState.FETCHING:
                self._fsm.reset("request_failed")
            raise

    async def _play_stream(
        self,
        response: httpx.Response,
        accumulator: ChunkAccumulator,
        on_chunk: ChunkObserver | None,
        log: PlaybackLogger,
    ) -> None:
        flushed = 0
        try:
            await self._start_stream_player()
            if self._cancellation.is_cancelled:
                # Stopped while the player was starting
                await self._player.stop()
                metrics.record_request("pcm", "cancelled")
                return

            self._fsm.transition_to(PlaybackState.PLAYING, "headers_received")
            log.playback_started(self._player.name)

            pump = BufferPump(
                accumulator,
                self._player.feed,
                slice_bytes=self._settings.slice_bytes,
                interval_ms=self._settings.pump_interval_ms,
                on_error=self._on_pump_error,
            )
            self._pump = pump
            pump.start()
            self._estimator.mark_start()

            await accumulator.consume(self._client.iter_chunks(response), on_chunk)
            if pump.error is not None:
                raise pump.error

            flushed = accumulator.flush(self._player.feed)

        except asyncio.CancelledError:
            await self._stop(CancelReason.USER_STOP)
            raise
        except Exception as e:
            error = StreamPlaybackError(str(e) or e.__class__.__name__, accumulator.total_bytes)
            self._record_failure("pcm", "stream_error", error, log)
            await self._stop_quietly(CancelReason.ERROR)
            raise error from e
        finally:
            self._stop_pump()

        metrics.record_bytes_received("pcm", accumulator.total_bytes)
        metrics.record_flush(flushed)
        log.stream_finished(
            total_bytes=accumulator.total_bytes,
            flushed_bytes=flushed,
            slices_sent=self._pump.slices_sent if self._pump else 0,
            chunks=accumulator.chunk_count,
            cancel_reason=self._cancel_reason(),
        )

        if self._cancellation.is_cancelled:
            metrics.record_request("pcm", "cancelled")
            return

        expected_ms = self._estimator.expected_duration_ms(accumulator.total_bytes)
        metrics.record_playback_duration(expected_ms)
        remaining_ms = self._estimator.schedule(
            accumulator.total_bytes,
            on_complete=lambda: self._complete(log),
            is_cancelled=lambda: self._cancellation.is_cancelled,
        )
        log.completion_scheduled(expected_ms, remaining_ms)
        metrics.record_request("pcm", "ok")

    async def _start_stream_player(self) -> None:
        if not self._player.is_open:
            await self._player.open()
        await self._player.start_stream(
            sample_rate=self._format.sample_rate,
            channels=self._format.channels,
            codec=Codec.PCM16,
            buffer_size=self._settings.slice_bytes,
        )

    def _complete(self, log: PlaybackLogger) -> None:
        if self._fsm.state != PlaybackState.PLAYING:
            return
        self._fsm.transition_to(PlaybackState.COMPLETED, "estimated_drain")
        log.completed()

    # ------------------------------------------------------------------
    # Full MP3
    # ------------------------------------------------------------------

    async def _run_download(
        self,
        request: SpeechRequest,
        on_chunk: ChunkObserver | None,
    ) -> bytes:
        log = PlaybackLogger("mp3")
        await self._prepare_invocation()
        self._fsm.begin("create_speak")
        log.request_started(request.model.value, request.voice.value, len(request.text))

        t_request_ms = self._clock.now_ms()
        try:
            audio = await self._client.create(request)
        except (RemoteServiceError, TransportError) as e:
            outcome = "http_error" if isinstance(e, RemoteServiceError) else "transport_error"
            self._record_failure("mp3", outcome, e, log)
            if self._fsm.state == PlaybackState.FETCHING:
                self._fsm.reset("request_failed")
            raise

        elapsed_ms = self._clock.elapsed_ms(t_request_ms)
        log.response_received(200, elapsed_ms)
        metrics.record_time_to_headers("mp3", elapsed_ms)
        metrics.record_bytes_received("mp3", len(audio))

        if self._cancellation.is_cancelled:
            metrics.record_request("mp3", "cancelled")
            return b""

        if on_chunk is not None:
            on_chunk(audio)

        try:
            if not self._player.is_open:
                await self._player.open()
            await self._player.play(audio, Codec.MP3)
        except Exception as e:
            self._record_failure("mp3", "player_error", e, log)
            self._fsm.reset("player_failed")
            raise

        self._fsm.transition_to(PlaybackState.PLAYING, "mp3_started")
        log.playback_started(self._player.name)
        metrics.record_request("mp3", "ok")
        return audio

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _build_request(
        self,
        text: str,
        voice: OpenAITTSVoice | None,
        model: OpenAITTSModel | None,
        instructions: str | None,
        response_format: ResponseFormat,
    ) -> SpeechRequest:
        return SpeechRequest(
            text=text,
            voice=voice or self._settings.tts_default_voice,
            model=model or self._settings.tts_default_model,
            response_format=response_format,
            instructions=instructions,
        )

    @asynccontextmanager
    async def _invocation(self, operation: str) -> AsyncIterator[None]:
        """Serialize speak operations on this controller."""
        if self._disposed:
            raise PlaybackError(f"Cannot start {operation}: controller disposed")
        if self._busy:
            raise PlaybackBusyError(operation)

        self._busy = True
        bind_invocation(uuid.uuid4().hex[:12])
        try:
            yield
        finally:
            self._busy = False
            unbind_invocation()

    async def _prepare_invocation(self) -> None:
        """Reset per-invocation state before a new request.

        Audio still playing from the previous invocation (MP3, or a stream
        awaiting completion) is superseded: `stopped` is emitted and the
        player is stopped before the new `fetching`.
        """
        if self._fsm.state == PlaybackState.PLAYING:
            self._fsm.transition_to(PlaybackState.STOPPED, "superseded")
            PlaybackLogger("stop").stopped(CancelReason.SUPERSEDED.value)
            await self._cancellation.cancel(CancelReason.SUPERSEDED)
            await self._player.stop()
        self._cancellation.reset()
        self._estimator.cancel()

    def _on_pump_error(self, error: Exception) -> None:
        # Ends the chunk loop at the next chunk; the stream path raises
        self._cancellation.trip(CancelReason.ERROR)

    def _cancel_reason(self) -> str | None:
        event = self._cancellation.last_cancel
        if not self._cancellation.is_cancelled or event is None:
            return None
        return event.reason.value

    def _on_cancel(self, event: CancelEvent) -> None:
        """Cancellation handler: drop buffered audio and cancel timers."""
        if self._accumulator is not None:
            self._accumulator.clear()
        self._stop_pump()
        self._estimator.cancel()

    async def _stop(self, reason: CancelReason) -> None:
        if self._fsm.is_active:
            self._fsm.transition_to(PlaybackState.STOPPED, reason.value.lower())
            PlaybackLogger("stop").stopped(reason.value)

        await self._cancellation.cancel(reason)
        await self._player.stop()
        await self._player.close()

    async def _stop_quietly(self, reason: CancelReason) -> None:
        """Best-effort stop used while another error is propagating."""
        try:
            await self._stop(reason)
        except Exception as e:
            logger.warning("cleanup_failed", reason=reason.value, error=str(e))

    def _stop_pump(self) -> None:
        if self._pump is not None:
            self._pump.stop()

    def _record_failure(
        self,
        response_format: str,
        outcome: str,
        error: Exception,
        log: PlaybackLogger,
    ) -> None:
        metrics.record_request(response_format, outcome)
        metrics.record_error(error.__class__.__name__)
        log.playback_failed(str(error), error.__class__.__name__)
