"""Command line entry point.

Usage:
    python -m openai_tts "Hello there" --voice nova
    python -m openai_tts "Full file" --mp3 --save out.mp3
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from typing import BinaryIO

from openai_tts.config.settings import get_settings
from openai_tts.exceptions import ConfigurationError, SpeechError
from openai_tts.observability.logging import configure_logging
from openai_tts.playback.controller import OpenAITTS
from openai_tts.playback.status import PlaybackStatus
from openai_tts.tts.models import OpenAITTSModel, OpenAITTSVoice

TERMINAL_STATUSES = frozenset({PlaybackStatus.COMPLETED, PlaybackStatus.STOPPED})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openai_tts",
        description="Speak text through the OpenAI speech endpoint",
    )
    parser.add_argument("text", help="Text to speak")
    parser.add_argument(
        "--voice",
        choices=[v.value for v in OpenAITTSVoice],
        default=None,
        help="Voice (default from TTS_DEFAULT_VOICE)",
    )
    parser.add_argument(
        "--model",
        choices=[m.value for m in OpenAITTSModel],
        default=None,
        help="Model (default from TTS_DEFAULT_MODEL)",
    )
    parser.add_argument("--instructions", default=None, help="Speaking-style instructions")
    parser.add_argument("--mp3", action="store_true", help="Download a full MP3 instead of streaming PCM")
    parser.add_argument("--save", metavar="PATH", default=None, help="Write received audio bytes to PATH")
    parser.add_argument(
        "--player",
        choices=["sounddevice", "mock"],
        default=None,
        help="Audio player backend (default from PLAYER_BACKEND)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level (default from LOG_LEVEL)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Render logs as JSON")
    return parser


async def run(args: argparse.Namespace) -> int:
    """Run one speak invocation. Returns the process exit code."""
    settings = get_settings()
    updates = {}
    if args.player:
        updates["player_backend"] = args.player
    if args.log_level:
        updates["log_level"] = args.log_level
    if args.json_logs:
        updates["log_json"] = True
    if updates:
        settings = settings.model_copy(update=updates)

    configure_logging(settings.log_level, settings.log_json)

    if not args.text.strip():
        print("error: text must not be empty", file=sys.stderr)
        return 2

    try:
        tts = OpenAITTS(settings=settings)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    finished = asyncio.Event()

    def on_status(status: PlaybackStatus) -> None:
        print(f"status: {status.value}")
        if status in TERMINAL_STATUSES:
            finished.set()

    tts.on_status(on_status)
    _install_interrupt_handler(tts)

    save_file: BinaryIO | None = open(args.save, "wb") if args.save else None
    on_chunk = save_file.write if save_file else None
    voice = OpenAITTSVoice(args.voice) if args.voice else None
    model = OpenAITTSModel(args.model) if args.model else None

    try:
        if args.mp3:
            await tts.create_speak(args.text, voice, model, args.instructions, on_chunk)
            await tts.player.wait()
        else:
            await tts.stream_speak(args.text, voice, model, args.instructions, on_chunk)
            await finished.wait()
    except SpeechError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    finally:
        if save_file is not None:
            save_file.close()
        await tts.dispose()

    return 0


def _install_interrupt_handler(tts: OpenAITTS) -> None:
    """Route Ctrl-C to stop_player()."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(
            signal.SIGINT, lambda: loop.create_task(tts.stop_player())
        )
    except NotImplementedError:
        # Windows event loops: default KeyboardInterrupt handling applies
        pass


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
