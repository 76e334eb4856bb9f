"""
Script Enhancer - turns an author's script into spoken narration.

The narration explains the script for a listener; it is used only for
speech synthesis. The video always shows the original script.
"""
import logging
from typing import Optional

from weaveit.exceptions import EnhancementFailed
from weaveit.providers.exceptions import ProviderError
from weaveit.providers.llm import BaseLLMProvider, get_llm_provider

logger = logging.getLogger(__name__)


NARRATION_SYSTEM_PROMPT = """You are an expert teacher who records narrated tutorials.

You will receive a script written by an author. It may be prose, notes, or
source code. Explain and narrate this content for an audience that is
listening, not reading:

- Walk through the content in the order it appears.
- Explain what each part does and why it matters, in plain spoken language.
- Do not read code symbols aloud character by character; describe them.
- No markdown, no bullet points, no headings, no stage directions.
- Write continuous paragraphs ready to be read aloud by a narrator."""


class ScriptEnhancer:
    """Single-call narration generator. No retries, no fallback to the raw script."""

    def __init__(self, provider: Optional[BaseLLMProvider] = None):
        self._provider = provider

    @property
    def provider(self) -> BaseLLMProvider:
        if self._provider is None:
            self._provider = get_llm_provider()
        return self._provider

    async def enhance(self, script: str, content_id: Optional[str] = None) -> str:
        """
        Generate narration text for `script`.

        Raises:
            EnhancementFailed: empty input, backend error, or empty/malformed response
        """
        if not script or not script.strip():
            raise EnhancementFailed("Script is empty", content_id=content_id)

        log_prefix = f"[{content_id}] " if content_id else ""
        try:
            provider = self.provider
        except ProviderError as e:
            raise EnhancementFailed(f"No language backend: {e}", content_id=content_id, cause=e) from e
        logger.info(f"{log_prefix}Enhancing script ({len(script)} chars) via {provider.name}")

        try:
            narration = await provider.complete(
                NARRATION_SYSTEM_PROMPT,
                f"Explain and narrate this content:\n\n{script}",
            )
        except ProviderError as e:
            reason = "rate limited" if getattr(e, "is_rate_limited", False) else str(e)
            logger.error(f"{log_prefix}Enhancement failed: {reason}")
            raise EnhancementFailed(f"Language backend failed: {reason}", content_id=content_id, cause=e) from e

        narration = narration.strip()
        if not narration:
            raise EnhancementFailed("Language backend returned empty narration", content_id=content_id)

        logger.info(f"{log_prefix}Narration ready: {len(narration)} chars")
        return narration

    async def close(self) -> None:
        if self._provider is not None:
            await self._provider.close()
