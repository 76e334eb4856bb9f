"""
Base class for language-generation providers.
"""
from abc import ABC, abstractmethod


class BaseLLMProvider(ABC):
    """Abstract base class for chat-style text generation backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if provider is available."""
        pass

    @abstractmethod
    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Run one completion.

        Args:
            system_prompt: Fixed instruction for the model
            user_prompt: Content to work on

        Returns:
            Generated text

        Raises:
            ProviderError: On any backend or transport failure
        """
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None
