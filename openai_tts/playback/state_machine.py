"""Playback State Machine - per-invocation status transitions.

States:
- IDLE: No invocation in progress
- FETCHING: Request issued, waiting for response headers
- PLAYING: Player started (streamed PCM or one-shot MP3)
- STOPPED: Explicit cancellation
- COMPLETED: Estimated end of streamed playback

Entering any state other than IDLE emits the matching PlaybackStatus on
the status channel, so observers see every transition in order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from openai_tts.audio.clock import get_playback_clock
from openai_tts.exceptions import PlaybackStateError
from openai_tts.observability.metrics import record_status
from openai_tts.playback.status import PlaybackStatus, StatusChannel


class PlaybackState(Enum):
    """Controller state."""

    IDLE = "idle"
    FETCHING = "fetching"
    PLAYING = "playing"
    STOPPED = "stopped"
    COMPLETED = "completed"


# Valid state transitions
VALID_TRANSITIONS: dict[PlaybackState, set[PlaybackState]] = {
    PlaybackState.IDLE: {PlaybackState.FETCHING},
    PlaybackState.FETCHING: {PlaybackState.PLAYING, PlaybackState.STOPPED, PlaybackState.IDLE},
    PlaybackState.PLAYING: {PlaybackState.STOPPED, PlaybackState.COMPLETED, PlaybackState.IDLE},
    PlaybackState.STOPPED: {PlaybackState.IDLE},
    PlaybackState.COMPLETED: {PlaybackState.IDLE},
}

# Status emitted on entering a state
STATE_STATUS: dict[PlaybackState, PlaybackStatus] = {
    PlaybackState.FETCHING: PlaybackStatus.FETCHING,
    PlaybackState.PLAYING: PlaybackStatus.PLAYING,
    PlaybackState.STOPPED: PlaybackStatus.STOPPED,
    PlaybackState.COMPLETED: PlaybackStatus.COMPLETED,
}

ACTIVE_STATES = frozenset({PlaybackState.FETCHING, PlaybackState.PLAYING})


@dataclass
class StateTransition:
    """Record of a state transition."""

    old_state: PlaybackState
    new_state: PlaybackState
    t_ms: int
    reason: str
    metadata: dict = field(default_factory=dict)


class PlaybackStateMachine:
    """FSM for one controller.

    Usage:
        fsm = PlaybackStateMachine(channel)
        fsm.begin("stream_speak")              # → FETCHING
        fsm.transition_to(PlaybackState.PLAYING, "headers_received")
        fsm.transition_to(PlaybackState.COMPLETED, "estimated_drain")
    """

    def __init__(self, channel: StatusChannel, max_history: int = 100) -> None:
        self._channel = channel
        self._state = PlaybackState.IDLE
        self._history: list[StateTransition] = []
        self._max_history = max_history

    @property
    def state(self) -> PlaybackState:
        """Current state."""
        return self._state

    @property
    def is_active(self) -> bool:
        """Whether fetching or playing."""
        return self._state in ACTIVE_STATES

    def can_transition(self, new_state: PlaybackState) -> bool:
        return new_state in VALID_TRANSITIONS.get(self._state, set())

    def transition_to(
        self,
        new_state: PlaybackState,
        reason: str = "",
        metadata: dict | None = None,
    ) -> StateTransition:
        """Transition to a new state and emit its status.

        Raises:
            PlaybackStateError: If transition is not allowed
        """
        old_state = self._state

        if not self.can_transition(new_state):
            raise PlaybackStateError(old_state.value, new_state.value)

        transition = StateTransition(
            old_state=old_state,
            new_state=new_state,
            t_ms=get_playback_clock().now_ms(),
            reason=reason,
            metadata=metadata or {},
        )

        self._state = new_state

        status = STATE_STATUS.get(new_state)
        if status is not None:
            record_status(status.value)
            self._channel.emit(status)

        self._history.append(transition)
        if len(self._history) > self._max_history:
            self._history.pop(0)

        return transition

    def begin(self, reason: str) -> StateTransition:
        """Start a new invocation: return to IDLE if needed, then FETCHING.

        Terminal states (and a lingering PLAYING left by one-shot playback)
        return to IDLE implicitly; no status is emitted for IDLE.
        """
        if self._state != PlaybackState.IDLE:
            self.transition_to(PlaybackState.IDLE, "next_invocation")
        return self.transition_to(PlaybackState.FETCHING, reason)

    def reset(self, reason: str = "reset") -> StateTransition | None:
        """Return to IDLE without emitting a status."""
        if self._state == PlaybackState.IDLE:
            return None
        return self.transition_to(PlaybackState.IDLE, reason)

    @property
    def history(self) -> list[StateTransition]:
        """Transition history (most recent last)."""
        return self._history.copy()
