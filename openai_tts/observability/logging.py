"""Structured Logging - JSON or console logs with correlation.

Provides structured logging for:
- Speech requests (start, response headers)
- Playback lifecycle (playing, stream finished, completed, stopped)
- Error tracking

Logs emitted during one speak invocation carry its invocation_id.
"""

import logging
import sys

import structlog


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON; else human-readable
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


def bind_invocation(invocation_id: str) -> None:
    """Bind invocation_id to all logs in current context."""
    structlog.contextvars.bind_contextvars(invocation_id=invocation_id)


def unbind_invocation() -> None:
    """Remove invocation_id from log context."""
    structlog.contextvars.unbind_contextvars("invocation_id")


class PlaybackLogger:
    """Logger for speech request and playback lifecycle events."""

    def __init__(self, mode: str) -> None:
        self._mode = mode
        self._log = get_logger("playback").bind(mode=mode)

    def request_started(self, model: str, voice: str, text_length: int) -> None:
        """Log outbound speech request."""
        self._log.info(
            "request_started",
            event_type="speech.request_started",
            model=model,
            voice=voice,
            text_length=text_length,
        )

    def response_received(self, status_code: int, elapsed_ms: float) -> None:
        """Log response headers."""
        self._log.debug(
            "response_received",
            event_type="speech.response_received",
            status_code=status_code,
            elapsed_ms=elapsed_ms,
        )

    def playback_started(self, player: str) -> None:
        """Log player start."""
        self._log.info(
            "playback_started",
            event_type="playback.started",
            player=player,
        )

    def stream_finished(
        self,
        total_bytes: int,
        flushed_bytes: int,
        slices_sent: int,
        chunks: int,
        cancel_reason: str | None = None,
    ) -> None:
        """Log end of the chunk sequence."""
        self._log.info(
            "stream_finished",
            event_type="playback.stream_finished",
            total_bytes=total_bytes,
            flushed_bytes=flushed_bytes,
            slices_sent=slices_sent,
            chunks=chunks,
            cancelled=cancel_reason is not None,
            cancel_reason=cancel_reason,
        )

    def completion_scheduled(self, expected_ms: float, remaining_ms: int) -> None:
        """Log delayed completion."""
        self._log.debug(
            "completion_scheduled",
            event_type="playback.completion_scheduled",
            expected_ms=expected_ms,
            remaining_ms=remaining_ms,
        )

    def completed(self) -> None:
        """Log playback completion."""
        self._log.info("completed", event_type="playback.completed")

    def stopped(self, reason: str) -> None:
        """Log explicit stop."""
        self._log.info(
            "stopped",
            event_type="playback.stopped",
            reason=reason,
        )

    def playback_failed(self, error: str, error_type: str) -> None:
        """Log a failed invocation."""
        self._log.error(
            "playback_failed",
            event_type="playback.failed",
            error=error,
            error_type=error_type,
        )


def init_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Initialize logging with defaults.

    Call this once at application startup.
    """
    configure_logging(level=level, json_format=json_format)
