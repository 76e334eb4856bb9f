"""
Edge neural voice provider (edge-tts).
"""
import logging
from pathlib import Path

import aiofiles
import aiohttp

from .base import BaseVoiceProvider
from ..exceptions import ProviderError, ProviderUnavailable

logger = logging.getLogger(__name__)


class EdgeTTSProvider(BaseVoiceProvider):
    """Free Microsoft Edge voices. Handles arbitrarily long input in one stream."""

    def __init__(self, voice: str = "en-US-GuyNeural", rate: str = "+0%"):
        self.voice = voice
        self.rate = rate

    @property
    def name(self) -> str:
        return "edge"

    @property
    def is_available(self) -> bool:
        try:
            import edge_tts  # noqa: F401
        except ImportError:
            return False
        return True

    async def synthesize(self, text: str, output_path: Path) -> Path:
        try:
            import edge_tts
        except ImportError as e:
            raise ProviderUnavailable(self.name, "edge-tts not installed") from e

        communicate = edge_tts.Communicate(text, self.voice, rate=self.rate)
        written = 0

        try:
            async with aiofiles.open(output_path, "wb") as audio_file:
                async for chunk in communicate.stream():
                    if chunk["type"] == "audio":
                        await audio_file.write(chunk["data"])
                        written += len(chunk["data"])
        except edge_tts.exceptions.NoAudioReceived as e:
            raise ProviderError(self.name, "No audio received") from e
        except (edge_tts.exceptions.EdgeTTSException, aiohttp.ClientError, OSError) as e:
            raise ProviderError(self.name, f"Stream failed: {e}") from e

        logger.debug(f"[TTS] edge: wrote {written} bytes with {self.voice}")
        return output_path
