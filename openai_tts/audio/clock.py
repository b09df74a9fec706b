"""Playback Clock - monotonic time source for playback timing.

The completion estimator compares elapsed playback time against the
duration implied by the received PCM. Wall-clock time can jump, so
every reading comes from the monotonic clock.

Platform notes:
- Linux: CLOCK_MONOTONIC via time.monotonic_ns()
- Windows: QueryPerformanceCounter
- macOS: mach_absolute_time
"""

import time
from typing import Final


class PlaybackClock:
    """Monotonic millisecond clock.

    Usage:
        clock = get_playback_clock()
        start_ms = clock.now_ms()
        ...
        elapsed = clock.elapsed_ms(start_ms)
    """

    NS_PER_MS: Final[int] = 1_000_000

    def __init__(self) -> None:
        self._origin_ns = self._now_ns()

    def _now_ns(self) -> int:
        return time.monotonic_ns()

    def now_ms(self) -> int:
        """Milliseconds since this clock was created."""
        return (self._now_ns() - self._origin_ns) // self.NS_PER_MS

    def elapsed_ms(self, start_ms: int) -> int:
        """Milliseconds elapsed since a previous now_ms() reading."""
        return self.now_ms() - start_ms


_playback_clock: PlaybackClock | None = None


def get_playback_clock() -> PlaybackClock:
    """Get the global playback clock instance."""
    global _playback_clock
    if _playback_clock is None:
        _playback_clock = PlaybackClock()
    return _playback_clock
