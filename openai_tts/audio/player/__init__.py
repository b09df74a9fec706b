"""Audio players.

Provides the playback collaborator used by the controller.

Available players:
- SoundDevicePlayer: PortAudio output (optional audio extra)
- MockAudioPlayer: Testing only (records calls)

Usage:
    from openai_tts.audio.player import create_player

    player = create_player("sounddevice")
"""

from openai_tts.audio.player.factory import create_player
from openai_tts.audio.player.interface import AudioPlayer, Codec
from openai_tts.audio.player.mock_player import MockAudioPlayer

__all__ = [
    "AudioPlayer",
    "Codec",
    "MockAudioPlayer",
    "create_player",
]
