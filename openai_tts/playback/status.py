"""Status Channel - broadcast of playback status notifications.

Single producer, any number of consumers. A consumer receives every
status emitted after it subscribed, in emission order. Past values are
never replayed. Once the channel is closed, emit() is silently inert
and every open subscription finishes its iteration.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Callable

from openai_tts.observability.logging import get_logger

logger = get_logger(__name__)


class PlaybackStatus(Enum):
    """Notifications observers receive."""

    FETCHING = "fetching"
    PLAYING = "playing"
    STOPPED = "stopped"
    COMPLETED = "completed"


StatusCallback = Callable[[PlaybackStatus], None]

_CLOSED = object()


class StatusSubscription:
    """Async iterator over statuses emitted after subscription.

    Usage:
        async for status in channel.subscribe():
            if status is PlaybackStatus.COMPLETED:
                break
    """

    def __init__(self, channel: StatusChannel) -> None:
        self._channel = channel
        self._queue: asyncio.Queue = asyncio.Queue()
        self._done = False

    def _deliver(self, item: object) -> None:
        if not self._done:
            self._queue.put_nowait(item)

    def __aiter__(self) -> StatusSubscription:
        return self

    async def __anext__(self) -> PlaybackStatus:
        if self._done:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            self._done = True
            raise StopAsyncIteration
        return item

    def get_nowait(self) -> PlaybackStatus | None:
        """Pop the next delivered status without waiting, or None."""
        if self._queue.empty():
            return None
        item = self._queue.get_nowait()
        if item is _CLOSED:
            self._done = True
            return None
        return item

    def drain(self) -> list[PlaybackStatus]:
        """Pop every status delivered so far."""
        items: list[PlaybackStatus] = []
        while (item := self.get_nowait()) is not None:
            items.append(item)
        return items

    def cancel(self) -> None:
        """Stop receiving statuses."""
        self._channel._remove(self)
        self._deliver(_CLOSED)

    @property
    def is_closed(self) -> bool:
        return self._done


class StatusChannel:
    """Broadcast channel of PlaybackStatus values.

    Usage:
        channel = StatusChannel()
        subscription = channel.subscribe()
        unsubscribe = channel.listen(print)

        channel.emit(PlaybackStatus.FETCHING)

        channel.close()
    """

    def __init__(self) -> None:
        self._subscriptions: list[StatusSubscription] = []
        self._callbacks: list[StatusCallback] = []
        self._closed = False

    def subscribe(self) -> StatusSubscription:
        """Create a subscription for future statuses.

        Subscribing to a closed channel yields an already finished iterator.
        """
        subscription = StatusSubscription(self)
        if self._closed:
            subscription._deliver(_CLOSED)
        else:
            self._subscriptions.append(subscription)
        return subscription

    def listen(self, callback: StatusCallback) -> Callable[[], None]:
        """Register a callback subscriber.

        Returns:
            Function that removes the callback
        """
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def emit(self, status: PlaybackStatus) -> None:
        """Deliver status to every current subscriber. No-op once closed."""
        if self._closed:
            return
        for subscription in list(self._subscriptions):
            subscription._deliver(status)
        for callback in list(self._callbacks):
            try:
                callback(status)
            except Exception as e:
                # A failing listener must not break delivery to the others
                logger.warning(
                    "status_listener_error",
                    status=status.value,
                    error=str(e),
                )

    def close(self) -> None:
        """Close the channel and finish all subscriptions. Idempotent."""
        if self._closed:
            return
        self._closed = True
        for subscription in self._subscriptions:
            subscription._deliver(_CLOSED)
        self._subscriptions.clear()
        self._callbacks.clear()

    def _remove(self, subscription: StatusSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions) + len(self._callbacks)
