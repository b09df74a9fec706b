"""OpenAI TTS Exception Hierarchy.

Provides structured exception classes for the speech client and player.

Hierarchy:
    OpenAITTSError (base)
    ├── ConfigurationError
    │   ├── MissingConfigError
    │   └── InvalidConfigError
    ├── SpeechError
    │   ├── RemoteServiceError
    │   ├── TransportError
    │   └── StreamPlaybackError
    └── PlaybackError
        ├── PlaybackBusyError
        └── PlaybackStateError
"""

from typing import Any


class OpenAITTSError(Exception):
    """Base exception for all openai_tts errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the caller may simply re-invoke
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(OpenAITTSError):
    """Base exception for configuration errors."""

    pass


class MissingConfigError(ConfigurationError):
    """Raised when a required configuration value is missing."""

    def __init__(self, config_key: str, description: str | None = None) -> None:
        message = f"Missing required configuration: {config_key}"
        if description:
            message = f"{message} - {description}"
        super().__init__(
            message=message,
            details={"config_key": config_key},
            recoverable=False,
        )
        self.config_key = config_key


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(
        self,
        config_key: str,
        value: Any,
        reason: str,
    ) -> None:
        super().__init__(
            message=f"Invalid configuration for {config_key}: {reason}",
            details={
                "config_key": config_key,
                "value": str(value),
                "reason": reason,
            },
            recoverable=False,
        )
        self.config_key = config_key
        self.value = value


# =============================================================================
# Speech Errors
# =============================================================================


class SpeechError(OpenAITTSError):
    """Base exception for speech request and playback errors."""

    pass


class RemoteServiceError(SpeechError):
    """Raised when the TTS endpoint answers with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(
            message=f"TTS request failed with HTTP {status_code}",
            details={
                "status_code": status_code,
                "body": body[:500],
            },
            recoverable=status_code == 429 or status_code >= 500,
        )
        self.status_code = status_code
        self.body = body


class TransportError(SpeechError):
    """Raised when the request fails before any response arrives."""

    def __init__(self, reason: str, url: str | None = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if url:
            details["url"] = url
        super().__init__(
            message=f"TTS transport error: {reason}",
            details=details,
            recoverable=True,
        )
        self.reason = reason


class StreamPlaybackError(SpeechError):
    """Raised when consuming streamed audio or writing to the sink fails."""

    def __init__(self, reason: str, bytes_received: int | None = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if bytes_received is not None:
            details["bytes_received"] = bytes_received
        super().__init__(
            message=f"TTS stream playback error: {reason}",
            details=details,
            recoverable=True,
        )
        self.reason = reason


# =============================================================================
# Playback Errors
# =============================================================================


class PlaybackError(OpenAITTSError):
    """Base exception for playback controller errors."""

    pass


class PlaybackBusyError(PlaybackError):
    """Raised when a speak operation is invoked while another is in flight."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            message=f"Cannot start {operation}: another invocation is in progress",
            details={"operation": operation},
            recoverable=True,
        )
        self.operation = operation


class PlaybackStateError(PlaybackError):
    """Raised for invalid playback state transitions."""

    def __init__(self, current_state: str, target_state: str) -> None:
        super().__init__(
            message=f"Invalid transition: {current_state} → {target_state}",
            details={
                "current_state": current_state,
                "target_state": target_state,
            },
            recoverable=False,
        )
        self.current_state = current_state
        self.target_state = target_state
