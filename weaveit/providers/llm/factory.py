"""
LLM provider factory.
"""
from typing import Literal, Optional

from .base import BaseLLMProvider
from .openai_chat import OpenAIChatProvider
from ..exceptions import ProviderUnavailable


ProviderType = Literal["openai"]


class LLMProviderFactory:
    """Factory for language-generation providers."""

    _providers = {
        "openai": OpenAIChatProvider,
    }

    @classmethod
    def create(cls, provider: ProviderType = "openai", **kwargs) -> BaseLLMProvider:
        if provider not in cls._providers:
            raise ProviderUnavailable(provider, "unknown LLM provider")
        return cls._providers[provider](**kwargs)


def get_llm_provider(provider: Optional[str] = None) -> BaseLLMProvider:
    """Build the configured LLM provider."""
    from weaveit.config import config

    return LLMProviderFactory.create(
        provider or config.ai.llm_provider,
        api_key=config.ai.openai_api_key,
        model=config.ai.openai_model,
        base_url=config.ai.openai_base_url,
        timeout=config.ai.timeout_seconds,
        max_tokens=config.ai.max_tokens,
    )
