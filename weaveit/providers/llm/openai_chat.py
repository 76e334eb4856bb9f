"""
OpenAI chat-completions provider.
"""
import logging
from typing import Optional

import httpx

from .base import BaseLLMProvider
from ..exceptions import ProviderError, ProviderResponseError, ProviderUnavailable

logger = logging.getLogger(__name__)


class OpenAIChatProvider(BaseLLMProvider):
    """Chat completions over plain httpx, compatible with any OpenAI-style endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 120.0,
        max_tokens: int = 1200,
        temperature: float = 0.7,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key or ""
        if self._api_key.startswith("PASTE_"):
            self._api_key = ""
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def name(self) -> str:
        return "openai"

    @property
    def is_available(self) -> bool:
        return bool(self._api_key)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        if not self.is_available:
            raise ProviderUnavailable(self.name, "Missing OPENAI_API_KEY")

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        try:
            response = await self.client.post(
                f"{self.base_url}/chat/completions",
                headers=headers,
                json=payload,
            )
        except httpx.TimeoutException as e:
            raise ProviderError(self.name, f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"Transport error: {e}") from e

        if response.status_code != 200:
            logger.error(f"[LLM] API error: {response.status_code}")
            raise ProviderResponseError(
                self.name,
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderResponseError(self.name, f"Malformed response body: {e}") from e

        if not isinstance(content, str):
            raise ProviderResponseError(self.name, "Response content is not text")

        return content

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client:
            await self.client.aclose()
