"""Chunk Accumulator - collects streamed PCM for the buffer pump.

Network chunks carry no frame boundaries: a 16-bit sample may be split
across two chunks. The accumulator appends everything to a drain buffer
that the pump consumes from the front in fixed-size slices. At the end
of the stream one flush forwards the frame-aligned remainder, so a
trailing partial frame is never written to the sink.
"""

from __future__ import annotations

from typing import AsyncIterable, Callable

from openai_tts.audio.pcm import DEFAULT_PCM_FORMAT, PCMFormat
from openai_tts.playback.cancellation import CancellationToken

ChunkObserver = Callable[[bytes], None]
Sink = Callable[[bytes], None]


class ChunkAccumulator:
    """Drain buffer plus running byte total for one invocation.

    Usage:
        accumulator = ChunkAccumulator(DEFAULT_PCM_FORMAT, token)
        await accumulator.consume(chunks, on_chunk=observer)
        accumulator.flush(player.feed)
    """

    def __init__(
        self,
        pcm_format: PCMFormat = DEFAULT_PCM_FORMAT,
        cancellation: CancellationToken | None = None,
    ) -> None:
        self._format = pcm_format
        self._cancellation = cancellation or CancellationToken()
        self._buffer = bytearray()
        self._total_bytes = 0
        self._chunk_count = 0

    @property
    def total_bytes(self) -> int:
        """All bytes received for this invocation."""
        return self._total_bytes

    @property
    def buffered(self) -> int:
        """Bytes waiting in the drain buffer."""
        return len(self._buffer)

    @property
    def chunk_count(self) -> int:
        return self._chunk_count

    async def consume(
        self,
        chunks: AsyncIterable[bytes],
        on_chunk: ChunkObserver | None = None,
    ) -> int:
        """Append chunks in arrival order until the sequence ends or is cancelled.

        The cancellation flag is checked as each chunk arrives; once set, no
        further chunks are processed and the buffer is left for the flush.

        Returns:
            Number of chunks processed
        """
        processed = 0
        async for chunk in chunks:
            if self._cancellation.is_cancelled:
                break

            self.append(chunk)
            processed += 1

            if on_chunk is not None:
                on_chunk(bytes(chunk))

        return processed

    def append(self, chunk: bytes) -> None:
        """Add one chunk to the drain buffer and the running total."""
        self._buffer.extend(chunk)
        self._total_bytes += len(chunk)
        self._chunk_count += 1

    def take_slice(self, size: int) -> bytes | None:
        """Remove exactly size bytes from the front, or None if fewer are buffered."""
        if len(self._buffer) < size:
            return None
        piece = bytes(self._buffer[:size])
        del self._buffer[:size]
        return piece

    def flush(self, sink: Sink) -> int:
        """Forward the frame-aligned remainder and discard the buffer.

        Returns:
            Number of bytes forwarded (always a multiple of the frame size)
        """
        flush_length = self._format.aligned_length(len(self._buffer))
        if flush_length > 0:
            sink(bytes(self._buffer[:flush_length]))
        self._buffer.clear()
        return flush_length

    def clear(self) -> None:
        """Discard buffered bytes without forwarding them."""
        self._buffer.clear()
