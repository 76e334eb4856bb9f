"""
Speech Synthesizer - narration text to an MP3 file with an authoritative duration.

The duration comes from probing the written file, never from a text-length
estimate, because it drives the video timeline.
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional

from weaveit.exceptions import SynthesisFailed
from weaveit.persistence.content_store import atomic_destination
from weaveit.providers.exceptions import ProviderError
from weaveit.providers.voice import BaseVoiceProvider, get_voice_provider
from weaveit.rendering.models import NarrationAudio

from .media_probe import MediaProbeError, probe_duration

logger = logging.getLogger(__name__)


class SpeechSynthesizer:
    """Writes narration audio atomically to a destination path and probes its length."""

    def __init__(
        self,
        provider: Optional[BaseVoiceProvider] = None,
        ffprobe_path: Optional[str] = None,
    ):
        self._provider = provider
        self.ffprobe_path = ffprobe_path

    @property
    def provider(self) -> BaseVoiceProvider:
        if self._provider is None:
            self._provider = get_voice_provider()
        return self._provider

    async def synthesize(
        self,
        text: str,
        destination: Path,
        content_id: Optional[str] = None,
    ) -> NarrationAudio:
        """
        Synthesize `text` into `destination`.

        Raises:
            SynthesisFailed: backend error, zero-length output, or unprobeable audio.
                Nothing is left at `destination` in that case.
        """
        if not text or not text.strip():
            raise SynthesisFailed("Narration text is empty", content_id=content_id)

        destination = Path(destination)
        log_prefix = f"[{content_id}] " if content_id else ""
        try:
            provider = self.provider
        except ProviderError as e:
            raise SynthesisFailed(f"No TTS backend: {e}", content_id=content_id, cause=e) from e
        logger.info(f"{log_prefix}Synthesizing {len(text)} chars via {provider.name}")

        try:
            with atomic_destination(destination) as tmp_path:
                await provider.synthesize(text, tmp_path)

                if not tmp_path.exists() or tmp_path.stat().st_size == 0:
                    raise SynthesisFailed("TTS backend produced no audio", content_id=content_id)

                duration = await asyncio.to_thread(probe_duration, tmp_path, self.ffprobe_path)
        except SynthesisFailed:
            raise
        except ProviderError as e:
            logger.error(f"{log_prefix}Synthesis failed: {e}")
            raise SynthesisFailed(f"TTS backend failed: {e}", content_id=content_id, cause=e) from e
        except MediaProbeError as e:
            logger.error(f"{log_prefix}Synthesized audio is unreadable: {e}")
            raise SynthesisFailed(f"Could not probe synthesized audio: {e}", content_id=content_id, cause=e) from e
        except (OSError, ValueError) as e:
            raise SynthesisFailed(f"Could not write audio: {e}", content_id=content_id, cause=e) from e

        logger.info(f"{log_prefix}Narration audio: {duration:.2f}s -> {destination.name}")
        return NarrationAudio(path=destination, duration_seconds=duration)

    async def close(self) -> None:
        if self._provider is not None:
            await self._provider.close()
