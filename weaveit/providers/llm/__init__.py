"""
Language-generation providers.
"""
from .base import BaseLLMProvider
from .openai_chat import OpenAIChatProvider
from .factory import LLMProviderFactory, get_llm_provider

__all__ = [
    "BaseLLMProvider",
    "OpenAIChatProvider",
    "LLMProviderFactory",
    "get_llm_provider",
]
