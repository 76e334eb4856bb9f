"""
WeaveIt Client - async HTTP client for the WeaveIt API.

Mirrors what the browser does: start a job, then poll status at a fixed
interval until the content is ready, the job fails, or attempts run out.
"""
import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import aiofiles
import httpx

from weaveit.keys import AUDIO_SUFFIX, VIDEO_SUFFIX, OutputType

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 120
DEFAULT_POLL_INTERVAL = 5.0


class GenerationTimeout(Exception):
    """Content did not become ready within the attempt budget."""

    def __init__(self, content_id: str, attempts: int):
        self.content_id = content_id
        self.attempts = attempts
        super().__init__(f"[{content_id}] generation failed or timed out after {attempts} attempts")


class GenerationFailed(Exception):
    """Server reported the job as failed."""

    def __init__(self, content_id: str, error: Optional[str] = None):
        self.content_id = content_id
        self.error = error
        super().__init__(f"[{content_id}] generation failed: {error or 'unknown error'}")


class WeaveItClient:
    """Client for a running WeaveIt API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self._owns_client:
            await self._client.aclose()

    async def generate(
        self,
        script: str,
        title: str = "Untitled",
        output_type: Union[OutputType, str] = OutputType.VIDEO,
        content_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {
            "script": script,
            "title": title,
            "outputType": OutputType(output_type).value,
        }
        if content_id:
            payload["contentId"] = content_id

        response = await self._client.post("/api/generate", json=payload)
        response.raise_for_status()
        return response.json()

    async def status(self, content_id: str) -> Dict[str, Any]:
        response = await self._client.get(f"/api/status/{content_id}")
        response.raise_for_status()
        return response.json()

    async def estimate(self, script: str) -> Dict[str, Any]:
        response = await self._client.post("/api/estimate", json={"script": script})
        response.raise_for_status()
        return response.json()

    async def wait_for(
        self,
        content_id: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval: float = DEFAULT_POLL_INTERVAL,
        on_poll: Optional[Callable[[int, Dict[str, Any]], None]] = None,
    ) -> Dict[str, Any]:
        """
        Poll until the content is ready.

        Raises:
            GenerationFailed: status reported "failed"
            GenerationTimeout: still processing after `max_attempts` polls
        """
        for attempt in range(1, max_attempts + 1):
            state = await self.status(content_id)
            if on_poll is not None:
                on_poll(attempt, state)

            if state.get("ready"):
                logger.info(f"[{content_id}] Ready after {attempt} polls")
                return state
            if state.get("status") == "failed":
                raise GenerationFailed(content_id, state.get("error"))

            if attempt < max_attempts:
                await asyncio.sleep(interval)

        raise GenerationTimeout(content_id, max_attempts)

    async def download(self, content_id: str, suffix: str, destination: Union[str, Path]) -> Path:
        """Stream an artifact to `destination`."""
        if suffix not in (AUDIO_SUFFIX, VIDEO_SUFFIX):
            raise ValueError(f"Unsupported artifact suffix: {suffix}")

        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        async with self._client.stream("GET", f"/api/content/{content_id}.{suffix}") as response:
            response.raise_for_status()
            async with aiofiles.open(destination, "wb") as f:
                async for chunk in response.aiter_bytes():
                    await f.write(chunk)

        logger.info(f"[{content_id}] Downloaded {destination}")
        return destination
