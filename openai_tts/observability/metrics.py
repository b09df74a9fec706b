"""Prometheus Metrics - speech request and playback observability.

Exports:
- Time to response headers
- Expected playback duration
- Bytes received, slices pumped, flushed bytes
- Status transitions and errors
"""

from prometheus_client import Counter, Gauge, Histogram

# -----------------------------------------------------------------------------
# Histograms
# -----------------------------------------------------------------------------

# Request issued → response headers received
TIME_TO_HEADERS = Histogram(
    "openai_tts_time_to_headers_seconds",
    "Time from request to response headers",
    ["format"],  # pcm, mp3
    buckets=[0.05, 0.1, 0.2, 0.3, 0.5, 0.75, 1.0, 2.0, 5.0],
)

# Estimated audio duration of a completed stream
PLAYBACK_DURATION = Histogram(
    "openai_tts_playback_duration_seconds",
    "Expected playback duration derived from PCM byte count",
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0],
)

# -----------------------------------------------------------------------------
# Counters
# -----------------------------------------------------------------------------

REQUESTS = Counter(
    "openai_tts_requests_total",
    "Speech requests by format and outcome",
    ["format", "outcome"],  # outcome: ok, http_error, transport_error, stream_error, cancelled
)

BYTES_RECEIVED = Counter(
    "openai_tts_bytes_received_total",
    "Audio bytes received from the endpoint",
    ["format"],
)

SLICES_PUMPED = Counter(
    "openai_tts_slices_pumped_total",
    "Fixed-size slices forwarded to the sink by the buffer pump",
)

FLUSH_BYTES = Counter(
    "openai_tts_flush_bytes_total",
    "Bytes forwarded by the end-of-stream flush",
)

STATUS_TRANSITIONS = Counter(
    "openai_tts_status_transitions_total",
    "Playback status notifications emitted",
    ["status"],  # fetching, playing, stopped, completed
)

ERRORS = Counter(
    "openai_tts_errors_total",
    "Errors by type",
    ["type"],
)

# -----------------------------------------------------------------------------
# Gauges
# -----------------------------------------------------------------------------

ACTIVE_PUMPS = Gauge(
    "openai_tts_active_pumps",
    "Buffer pumps currently running",
)


# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------

_enabled = True


def set_metrics_enabled(enabled: bool) -> None:
    """Turn recording on or off process-wide."""
    global _enabled
    _enabled = enabled


def metrics_enabled() -> bool:
    return _enabled


def record_time_to_headers(response_format: str, latency_ms: float) -> None:
    """Record time to response headers in milliseconds."""
    if not _enabled:
        return
    TIME_TO_HEADERS.labels(format=response_format).observe(latency_ms / 1000.0)


def record_playback_duration(duration_ms: float) -> None:
    """Record expected playback duration in milliseconds."""
    if not _enabled:
        return
    PLAYBACK_DURATION.observe(duration_ms / 1000.0)


def record_request(response_format: str, outcome: str) -> None:
    """Record a finished request."""
    if not _enabled:
        return
    REQUESTS.labels(format=response_format, outcome=outcome).inc()


def record_bytes_received(response_format: str, count: int) -> None:
    """Record received audio bytes."""
    if not _enabled:
        return
    BYTES_RECEIVED.labels(format=response_format).inc(count)


def record_slice_pumped() -> None:
    """Record one pump slice."""
    if not _enabled:
        return
    SLICES_PUMPED.inc()


def record_flush(count: int) -> None:
    """Record bytes forwarded by the final flush."""
    if not _enabled:
        return
    FLUSH_BYTES.inc(count)


def record_status(status: str) -> None:
    """Record an emitted status notification."""
    if not _enabled:
        return
    STATUS_TRANSITIONS.labels(status=status).inc()


def record_error(error_type: str) -> None:
    """Record error by type."""
    if not _enabled:
        return
    ERRORS.labels(type=error_type).inc()


def pump_started() -> None:
    if not _enabled:
        return
    ACTIVE_PUMPS.inc()


def pump_stopped() -> None:
    if not _enabled:
        return
    ACTIVE_PUMPS.dec()
