"""Tests for the cancellation token."""

import pytest

from openai_tts.playback.cancellation import (
    CancelEvent,
    CancelReason,
    CancellationToken,
)


class TestCancelReason:
    """Tests for CancelReason enum."""

    def test_all_reasons_exist(self):
        """All expected reasons exist."""
        assert CancelReason.USER_STOP.value == "USER_STOP"
        assert CancelReason.DISPOSE.value == "DISPOSE"
        assert CancelReason.SUPERSEDED.value == "SUPERSEDED"
        assert CancelReason.ERROR.value == "ERROR"


class TestCancelEvent:
    """Tests for CancelEvent dataclass."""

    def test_to_dict(self):
        """Serialize to dictionary."""
        event = CancelEvent(reason=CancelReason.USER_STOP, t_event_ms=42)
        assert event.to_dict() == {
            "type": "CANCEL",
            "reason": "USER_STOP",
            "t_event_ms": 42,
        }


class TestCancellationToken:
    """Tests for CancellationToken."""

    def test_initial_state(self):
        """Token starts uncancelled."""
        token = CancellationToken()
        assert token.is_cancelled is False
        assert token.last_cancel is None

    @pytest.mark.asyncio
    async def test_cancel_sets_flag(self):
        """cancel() sets the flag and records the event."""
        token = CancellationToken()
        event = await token.cancel(CancelReason.DISPOSE)
        assert token.is_cancelled is True
        assert token.last_cancel is event
        assert event.reason == CancelReason.DISPOSE

    @pytest.mark.asyncio
    async def test_reset_clears_flag(self):
        """reset() clears the flag for the next invocation."""
        token = CancellationToken()
        await token.cancel()
        token.reset()
        assert token.is_cancelled is False

    @pytest.mark.asyncio
    async def test_sync_and_async_handlers(self):
        """Both handler kinds run in registration order."""
        token = CancellationToken()
        calls = []

        def sync_handler(event):
            calls.append(("sync", event.reason))

        async def async_handler(event):
            calls.append(("async", event.reason))

        token.register(sync_handler)
        token.register(async_handler)
        await token.cancel(CancelReason.USER_STOP)

        assert calls == [
            ("sync", CancelReason.USER_STOP),
            ("async", CancelReason.USER_STOP),
        ]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self):
        """Handler errors are logged, later handlers still run."""
        token = CancellationToken()
        calls = []

        def broken(event):
            raise RuntimeError("handler bug")

        token.register(broken)
        token.register(lambda event: calls.append(event))
        await token.cancel()

        assert len(calls) == 1
        assert token.is_cancelled

    def test_trip_sets_flag_without_handlers(self):
        """trip() flags cancellation synchronously and skips handlers."""
        token = CancellationToken()
        calls = []
        token.register(lambda event: calls.append(event))

        event = token.trip(CancelReason.ERROR)

        assert token.is_cancelled is True
        assert token.last_cancel is event
        assert event.reason == CancelReason.ERROR
        assert calls == []
