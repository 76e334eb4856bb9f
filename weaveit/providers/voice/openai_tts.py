"""
OpenAI text-to-speech provider.
"""
import logging
import re
from pathlib import Path
from typing import List, Optional

import aiofiles
import httpx

from .base import BaseVoiceProvider
from ..exceptions import ProviderError, ProviderResponseError, ProviderUnavailable

logger = logging.getLogger(__name__)

# /audio/speech rejects inputs above 4096 characters
MAX_INPUT_CHARS = 4000


def split_for_tts(text: str, limit: int = MAX_INPUT_CHARS) -> List[str]:
    """Split text into chunks under `limit`, preferring paragraph then sentence breaks."""
    text = text.strip()
    if len(text) <= limit:
        return [text] if text else []

    chunks: List[str] = []
    current = ""
    pieces: List[str] = []
    for paragraph in re.split(r"\n\s*\n", text):
        if len(paragraph) <= limit:
            pieces.append(paragraph)
            continue
        for sentence in re.split(r"(?<=[.!?])\s+", paragraph):
            while len(sentence) > limit:
                pieces.append(sentence[:limit])
                sentence = sentence[limit:]
            pieces.append(sentence)

    for piece in pieces:
        piece = piece.strip()
        if not piece:
            continue
        candidate = f"{current}\n\n{piece}" if current else piece
        if len(candidate) <= limit:
            current = candidate
        else:
            chunks.append(current)
            current = piece
    if current:
        chunks.append(current)
    return chunks


class OpenAITTSProvider(BaseVoiceProvider):
    """OpenAI /audio/speech provider. Long narration is sent in chunks and the MP3 streams appended."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "tts-1",
        voice: str = "alloy",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 180.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key or ""
        if self._api_key.startswith("PASTE_"):
            self._api_key = ""
        self.model = model
        self.voice = voice
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def name(self) -> str:
        return "openai"

    @property
    def is_available(self) -> bool:
        return bool(self._api_key)

    async def synthesize(self, text: str, output_path: Path) -> Path:
        if not self.is_available:
            raise ProviderUnavailable(self.name, "Missing OPENAI_API_KEY")

        chunks = split_for_tts(text)
        if not chunks:
            raise ProviderError(self.name, "Nothing to synthesize")

        logger.info(f"[TTS] openai: {len(text)} chars in {len(chunks)} request(s)")

        async with aiofiles.open(output_path, "wb") as audio_file:
            for chunk in chunks:
                audio = await self._request(chunk)
                await audio_file.write(audio)

        return output_path

    async def _request(self, text: str) -> bytes:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "voice": self.voice,
            "input": text,
            "response_format": "mp3",
        }
        try:
            response = await self.client.post(
                f"{self.base_url}/audio/speech",
                headers=headers,
                json=payload,
            )
        except httpx.TimeoutException as e:
            raise ProviderError(self.name, f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"Transport error: {e}") from e

        if response.status_code != 200:
            raise ProviderResponseError(
                self.name,
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        if not response.content:
            raise ProviderResponseError(self.name, "Empty audio response", status_code=200)
        return response.content

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()
