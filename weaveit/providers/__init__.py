"""
Providers Layer.

Unified access to the external backends the pipeline talks to:
- Language generation (script enhancement)
- Voice/TTS (narration)
"""
from .exceptions import ProviderError, ProviderUnavailable, ProviderResponseError

from .llm import (
    BaseLLMProvider,
    OpenAIChatProvider,
    LLMProviderFactory,
    get_llm_provider,
)

from .voice import (
    BaseVoiceProvider,
    OpenAITTSProvider,
    EdgeTTSProvider,
    VoiceProviderFactory,
    get_voice_provider,
)

__all__ = [
    # Exceptions
    "ProviderError",
    "ProviderUnavailable",
    "ProviderResponseError",

    # LLM
    "BaseLLMProvider",
    "OpenAIChatProvider",
    "LLMProviderFactory",
    "get_llm_provider",

    # Voice
    "BaseVoiceProvider",
    "OpenAITTSProvider",
    "EdgeTTSProvider",
    "VoiceProviderFactory",
    "get_voice_provider",
]
