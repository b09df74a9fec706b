"""Playback module - streaming pipeline and status reporting.

Provides:
- OpenAITTS: Speak/stop/dispose controller
- PlaybackStateMachine: Per-invocation FSM
- StatusChannel: Multi-subscriber status notifications
- ChunkAccumulator, BufferPump: Drain buffer and steady-rate feed
- CompletionEstimator: Delayed `completed` notification
"""

from openai_tts.playback.accumulator import ChunkAccumulator
from openai_tts.playback.cancellation import CancelEvent, CancelReason, CancellationToken
from openai_tts.playback.completion import CompletionEstimator
from openai_tts.playback.controller import OpenAITTS
from openai_tts.playback.pump import BufferPump
from openai_tts.playback.state_machine import PlaybackState, PlaybackStateMachine
from openai_tts.playback.status import PlaybackStatus, StatusChannel, StatusSubscription

__all__ = [
    "OpenAITTS",
    "PlaybackState",
    "PlaybackStateMachine",
    "PlaybackStatus",
    "StatusChannel",
    "StatusSubscription",
    "CancelEvent",
    "CancelReason",
    "CancellationToken",
    "ChunkAccumulator",
    "BufferPump",
    "CompletionEstimator",
]
