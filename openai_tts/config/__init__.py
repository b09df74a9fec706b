"""Configuration module."""

from openai_tts.config.constants import PCM, PlaybackConstants
from openai_tts.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "PlaybackConstants", "PCM"]
