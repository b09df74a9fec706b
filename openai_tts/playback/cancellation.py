"""Cancellation Token - cooperative stop flag for a streaming invocation.

Setting the flag never interrupts an in-flight network read. The chunk
loop observes it between chunks, and the completion estimator checks it
before emitting `completed`.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from openai_tts.audio.clock import get_playback_clock
from openai_tts.observability.logging import get_logger

logger = get_logger(__name__)


class CancelReason(Enum):
    """Reasons for cancellation."""

    USER_STOP = "USER_STOP"
    DISPOSE = "DISPOSE"
    SUPERSEDED = "SUPERSEDED"
    ERROR = "ERROR"


@dataclass
class CancelEvent:
    """Record of a cancellation."""

    reason: CancelReason
    t_event_ms: int

    def to_dict(self) -> dict:
        return {
            "type": "CANCEL",
            "reason": self.reason.value,
            "t_event_ms": self.t_event_ms,
        }


CancelHandler = Callable[[CancelEvent], None]
AsyncCancelHandler = Callable[[CancelEvent], asyncio.Future]


class CancellationToken:
    """Process-wide-per-controller cancellation flag.

    Usage:
        token = CancellationToken()
        token.register(pump_stop)

        token.reset()               # start of each streaming invocation
        ...
        if token.is_cancelled:      # between chunks
            break
        ...
        await token.cancel(CancelReason.USER_STOP)
    """

    def __init__(self) -> None:
        self._handlers: list[CancelHandler | AsyncCancelHandler] = []
        self._cancelled: bool = False
        self._last_cancel: CancelEvent | None = None

    def register(self, handler: CancelHandler | AsyncCancelHandler) -> None:
        """Register a handler run on every cancel()."""
        self._handlers.append(handler)

    async def cancel(self, reason: CancelReason = CancelReason.USER_STOP) -> CancelEvent:
        """Set the flag and run registered handlers in order.

        Handler failures are logged and do not stop the remaining handlers.

        Returns:
            The recorded cancel event
        """
        event = self.trip(reason)

        for handler in list(self._handlers):
            try:
                if inspect.iscoroutinefunction(handler):
                    await handler(event)
                else:
                    handler(event)
            except Exception as e:
                logger.warning(
                    "cancel_handler_error",
                    reason=reason.value,
                    error=str(e),
                )

        return event

    def trip(self, reason: CancelReason) -> CancelEvent:
        """Set the flag without running handlers.

        For synchronous callers (such as a failing pump) that must stop the
        chunk loop before the owner gets to run the full cancel().
        """
        event = CancelEvent(
            reason=reason,
            t_event_ms=get_playback_clock().now_ms(),
        )
        self._last_cancel = event
        self._cancelled = True
        return event

    def reset(self) -> None:
        """Clear the flag for a new invocation."""
        self._cancelled = False

    @property
    def is_cancelled(self) -> bool:
        """Whether cancellation is in effect."""
        return self._cancelled

    @property
    def last_cancel(self) -> CancelEvent | None:
        """Most recent cancel event."""
        return self._last_cancel
