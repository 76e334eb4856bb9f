"""
Base class for voice/TTS providers.
"""
from abc import ABC, abstractmethod
from pathlib import Path


class BaseVoiceProvider(ABC):
    """Abstract base class for voice/TTS providers."""

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
    async def synthesize(self, text: str, output_path: Path) -> Path:
        """
        Synthesize speech from text.

        Args:
            text: Text to synthesize, may span several paragraphs
            output_path: File to write encoded MP3 audio to

        Returns:
            output_path, once fully written
        """
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None
