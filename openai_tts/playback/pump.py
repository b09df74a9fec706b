"""Buffer Pump - steady-rate feed from the drain buffer to the sink.

Network delivery is bursty. A periodic tick independent of chunk
arrival removes at most one fixed-size slice per interval and writes it
to the player's sink, which bounds the sink call rate.

Lifecycle:
- Start only after the player is open and streaming
- Stop whenever playback stops, completes, or the owner is disposed
"""

from __future__ import annotations

import asyncio
from typing import Callable

from openai_tts.config.constants import PCM
from openai_tts.observability import metrics
from openai_tts.observability.logging import get_logger
from openai_tts.playback.accumulator import ChunkAccumulator

logger = get_logger(__name__)


class BufferPump:
    """Periodic drain of fixed-size slices into a sink.

    Usage:
        pump = BufferPump(accumulator, player.feed)
        pump.start()
        ...
        pump.stop()
    """

    def __init__(
        self,
        accumulator: ChunkAccumulator,
        sink: Callable[[bytes], None],
        slice_bytes: int = PCM.SLICE_BYTES,
        interval_ms: int = PCM.PUMP_INTERVAL_MS,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        if slice_bytes <= 0:
            raise ValueError("slice_bytes must be positive")
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")

        self._accumulator = accumulator
        self._sink = sink
        self._slice_bytes = slice_bytes
        self._interval_ms = interval_ms
        self._on_error = on_error

        self._running = False
        self._task: asyncio.Task | None = None
        self._slices_sent = 0
        self._error: Exception | None = None

    def start(self) -> None:
        """Start ticking. No-op if already running."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._pump_loop())
        metrics.pump_started()

    def stop(self) -> None:
        """Cancel the timer and clear the task reference. Idempotent."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None
        metrics.pump_stopped()

    def tick(self) -> bool:
        """Forward one slice if enough bytes are buffered.

        Returns:
            True if a slice was forwarded
        """
        piece = self._accumulator.take_slice(self._slice_bytes)
        if piece is None:
            return False

        self._sink(piece)
        self._slices_sent += 1
        metrics.record_slice_pumped()
        return True

    async def _pump_loop(self) -> None:
        """Background loop: one tick per interval."""
        interval_s = self._interval_ms / 1000.0

        while self._running:
            try:
                await asyncio.sleep(interval_s)

                if not self._running:
                    break

                self.tick()

            except asyncio.CancelledError:
                break
            except Exception as e:
                self._fail(e)
                break

    def _fail(self, error: Exception) -> None:
        """Sink write failed: stop ticking and notify the owner."""
        self._error = error
        self._running = False
        self._task = None
        metrics.pump_stopped()
        logger.warning(
            "buffer_pump_error",
            error=str(error),
            buffered=self._accumulator.buffered,
        )
        if self._on_error is not None:
            self._on_error(error)

    @property
    def is_running(self) -> bool:
        """Whether the pump is ticking."""
        return self._running

    @property
    def slices_sent(self) -> int:
        """Slices forwarded since construction."""
        return self._slices_sent

    @property
    def error(self) -> Exception | None:
        """Sink failure that ended the loop, if any."""
        return self._error
