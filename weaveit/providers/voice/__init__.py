"""
Voice/TTS providers.
"""
from .base import BaseVoiceProvider
from .openai_tts import OpenAITTSProvider
from .edge import EdgeTTSProvider
from .factory import VoiceProviderFactory, get_voice_provider

__all__ = [
    "BaseVoiceProvider",
    "OpenAITTSProvider",
    "EdgeTTSProvider",
    "VoiceProviderFactory",
    "get_voice_provider",
]
