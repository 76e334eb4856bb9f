"""
Voice provider factory.
"""
import logging
from typing import Literal, Optional

from .base import BaseVoiceProvider
from .openai_tts import OpenAITTSProvider
from .edge import EdgeTTSProvider
from ..exceptions import ProviderUnavailable

logger = logging.getLogger(__name__)


ProviderType = Literal["auto", "openai", "edge"]


class VoiceProviderFactory:
    """Factory for creating voice providers. `auto` prefers OpenAI when a key is configured."""

    @classmethod
    def _build(cls, name: str) -> BaseVoiceProvider:
        from weaveit.config import config

        if name == "openai":
            return OpenAITTSProvider(
                api_key=config.ai.openai_api_key,
                model=config.voice.openai_tts_model,
                voice=config.voice.openai_tts_voice,
                base_url=config.ai.openai_base_url,
                timeout=config.voice.timeout_seconds,
            )
        if name == "edge":
            return EdgeTTSProvider(voice=config.voice.edge_voice, rate=config.voice.edge_rate)
        raise ProviderUnavailable(name, "unknown voice provider")

    @classmethod
    def create(cls, provider: ProviderType = "auto") -> BaseVoiceProvider:
        if provider == "auto":
            return cls._create_auto()
        return cls._build(provider)

    @classmethod
    def _create_auto(cls) -> BaseVoiceProvider:
        from weaveit.config import config

        # Building the OpenAI provider opens an HTTP client
        candidates = ("openai", "edge") if config.ai.has_openai else ("edge",)
        for name in candidates:
            p = cls._build(name)
            if p.is_available:
                logger.info(f"[TTS] Using {p.name} voice provider")
                return p
        raise ProviderUnavailable("auto", "no voice provider configured")


def get_voice_provider(provider: Optional[str] = None) -> BaseVoiceProvider:
    """Get the configured voice provider."""
    from weaveit.config import config

    return VoiceProviderFactory.create(provider or config.voice.provider)
