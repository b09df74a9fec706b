"""Tests for the chunk accumulator.

Tests cover:
- Byte conservation across pump slices and the final flush
- Frame alignment of the flush
- Cancellation between chunks
"""

import random

import pytest

from openai_tts.audio.pcm import PCMFormat
from openai_tts.playback.accumulator import ChunkAccumulator
from openai_tts.playback.cancellation import CancellationToken


async def _chunks(sizes):
    for i, size in enumerate(sizes):
        yield bytes([i % 256]) * size


def _drain(accumulator, slice_bytes, sink):
    while (piece := accumulator.take_slice(slice_bytes)) is not None:
        sink(piece)


class TestChunkAccumulator:
    """Tests for ChunkAccumulator."""

    @pytest.mark.asyncio
    async def test_consume_counts_bytes(self):
        """All chunk bytes are counted and buffered."""
        accumulator = ChunkAccumulator()
        processed = await accumulator.consume(_chunks([100, 200, 300]))
        assert processed == 3
        assert accumulator.total_bytes == 600
        assert accumulator.buffered == 600
        assert accumulator.chunk_count == 3

    @pytest.mark.asyncio
    async def test_observer_sees_every_chunk(self):
        """on_chunk receives each chunk in order."""
        accumulator = ChunkAccumulator()
        seen = []
        await accumulator.consume(_chunks([3, 5]), on_chunk=seen.append)
        assert seen == [b"\x00" * 3, b"\x01" * 5]

    def test_take_slice_exact_size(self):
        """Slices are exactly the requested size, from the front."""
        accumulator = ChunkAccumulator()
        accumulator.append(b"abcdef")
        assert accumulator.take_slice(4) == b"abcd"
        assert accumulator.take_slice(4) is None
        assert accumulator.buffered == 2

    def test_flush_aligned_remainder(self):
        """Flush forwards the whole-frame part and clears the buffer."""
        accumulator = ChunkAccumulator()
        accumulator.append(b"\x01" * 1809)
        sent = []
        flushed = accumulator.flush(sent.append)
        assert flushed == 1808
        assert [len(s) for s in sent] == [1808]
        assert accumulator.buffered == 0

    def test_flush_single_byte_forwards_nothing(self):
        """A lone trailing byte is never written."""
        accumulator = ChunkAccumulator()
        accumulator.append(b"\x01")
        sent = []
        assert accumulator.flush(sent.append) == 0
        assert sent == []

    def test_flush_stereo_alignment(self):
        """Alignment follows the frame size of the format."""
        accumulator = ChunkAccumulator(PCMFormat(channels=2))
        accumulator.append(b"\x00" * 11)
        assert accumulator.flush(lambda data: None) == 8

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", range(20))
    async def test_conservation_random_chunking(self, seed):
        """Slices plus flush equal the total minus under one frame."""
        rng = random.Random(seed)
        sizes = [rng.randint(1, 5000) for _ in range(rng.randint(1, 12))]
        total = sum(sizes)

        accumulator = ChunkAccumulator()
        forwarded = []

        async def interleaved():
            async for chunk in _chunks(sizes):
                yield chunk
                if rng.random() < 0.5:
                    _drain(accumulator, 2048, forwarded.append)

        await accumulator.consume(interleaved())
        _drain(accumulator, 2048, forwarded.append)
        slices = list(forwarded)
        flushed = accumulator.flush(forwarded.append)

        sent = sum(len(piece) for piece in forwarded)
        assert total - 1 <= sent <= total
        assert sent == total - (total % 2)
        assert all(len(piece) == 2048 for piece in slices)
        assert flushed % 2 == 0

    @pytest.mark.asyncio
    async def test_stops_on_cancellation(self):
        """No chunks are processed once the token is cancelled."""
        token = CancellationToken()
        accumulator = ChunkAccumulator(cancellation=token)

        async def chunks():
            yield b"\x00" * 10
            await token.cancel()
            yield b"\x00" * 10
            yield b"\x00" * 10

        processed = await accumulator.consume(chunks())
        assert processed == 1
        assert accumulator.total_bytes == 10

    def test_clear(self):
        """clear() drops buffered bytes but keeps the total."""
        accumulator = ChunkAccumulator()
        accumulator.append(b"\x00" * 100)
        accumulator.clear()
        assert accumulator.buffered == 0
        assert accumulator.total_bytes == 100
