"""Completion Estimator - delayed `completed` notification.

Sink writes return before the audio device has played the samples, so
"last byte written" is too early to report completion. The estimator
derives the audio duration from the received byte count and the PCM
format, subtracts the time already spent playing, and fires the
notification after the remainder.

The estimate is a heuristic with roughly one pump interval of error and
no correction for device under- or overruns.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from openai_tts.audio.clock import PlaybackClock, get_playback_clock
from openai_tts.audio.pcm import DEFAULT_PCM_FORMAT, PCMFormat
from openai_tts.config.constants import PCM
from openai_tts.observability.logging import get_logger

logger = get_logger(__name__)


class CompletionEstimator:
    """Schedules completion after the estimated device drain time.

    Usage:
        estimator = CompletionEstimator()
        estimator.mark_start()              # player started
        ...
        estimator.schedule(total_bytes, on_complete, lambda: token.is_cancelled)
        ...
        estimator.cancel()                  # on stop
    """

    def __init__(
        self,
        pcm_format: PCMFormat = DEFAULT_PCM_FORMAT,
        clock: PlaybackClock | None = None,
        max_delay_ms: int = PCM.MAX_COMPLETION_DELAY_MS,
    ) -> None:
        self._format = pcm_format
        self._clock = clock or get_playback_clock()
        self._max_delay_ms = max_delay_ms
        self._start_ms: int | None = None
        self._task: asyncio.Task | None = None

    def mark_start(self) -> int:
        """Record the playback start timestamp."""
        self._start_ms = self._clock.now_ms()
        return self._start_ms

    def expected_duration_ms(self, total_bytes: int) -> float:
        return self._format.duration_ms(total_bytes)

    def remaining_ms(self, total_bytes: int) -> int:
        """Time left until the device has played total_bytes.

        Always within [0, max_delay_ms], however long playback has run.
        """
        if self._start_ms is None:
            elapsed = 0
        else:
            elapsed = self._clock.elapsed_ms(self._start_ms)

        remaining = int(self.expected_duration_ms(total_bytes)) - elapsed
        return max(0, min(remaining, self._max_delay_ms))

    def schedule(
        self,
        total_bytes: int,
        on_complete: Callable[[], None],
        is_cancelled: Callable[[], bool],
    ) -> int:
        """Fire on_complete after the remaining time unless cancelled.

        With nothing remaining, on_complete runs immediately (still subject
        to is_cancelled). A previously scheduled task is replaced.

        Returns:
            The delay used, in milliseconds
        """
        self.cancel()
        remaining = self.remaining_ms(total_bytes)

        if remaining > 0:
            self._task = asyncio.create_task(
                self._fire_after(remaining, on_complete, is_cancelled)
            )
        elif not is_cancelled():
            on_complete()

        return remaining

    async def _fire_after(
        self,
        delay_ms: int,
        on_complete: Callable[[], None],
        is_cancelled: Callable[[], bool],
    ) -> None:
        try:
            await asyncio.sleep(delay_ms / 1000.0)
        except asyncio.CancelledError:
            return

        self._task = None
        if is_cancelled():
            return
        on_complete()

    def cancel(self) -> None:
        """Cancel a pending completion. Idempotent."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    @property
    def pending(self) -> bool:
        """Whether a completion task is outstanding."""
        return self._task is not None and not self._task.done()

    @property
    def start_ms(self) -> int | None:
        return self._start_ms
