"""
Pipeline exceptions.

Every stage failure is fatal to its job. Stages raise the matching
subclass; the orchestrator records it and re-raises.
"""
from typing import Optional


class PipelineError(Exception):
    """Base error for the content-generation pipeline."""

    stage = "pipeline"
    code = "PIPELINE_ERROR"

    def __init__(
        self,
        message: str,
        content_id: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.message = message
        self.content_id = content_id
        self.cause = cause
        prefix = f"[{content_id}] " if content_id else ""
        super().__init__(f"{prefix}{message}")

    def to_dict(self) -> dict:
        return {
            "stage": self.stage,
            "code": self.code,
            "error": self.message,
            "cause": repr(self.cause) if self.cause else None,
        }


class EnhancementFailed(PipelineError):
    """Language backend did not return usable narration."""

    stage = "enhancing"
    code = "ENHANCEMENT_FAILED"


class SynthesisFailed(PipelineError):
    """TTS backend failed or produced no audio."""

    stage = "synthesizing"
    code = "SYNTHESIS_FAILED"


class RenderFailed(PipelineError):
    """Video encode failed."""

    stage = "rendering"
    code = "RENDER_FAILED"


class StoreWriteFailed(PipelineError):
    """Disk or permission error while publishing an artifact."""

    stage = "storing"
    code = "STORE_WRITE_FAILED"


class NotFound(PipelineError):
    """Artifact requested before it was produced, or never produced."""

    code = "NOT_FOUND"

    def __init__(self, content_id: str, suffix: str):
        self.suffix = suffix
        super().__init__(f"Artifact not found: {content_id}.{suffix}", content_id=content_id)


class InvalidContentId(ValueError):
    """Content id is not a safe file stem."""

    def __init__(self, content_id: str, reason: str = "malformed content id"):
        self.content_id = content_id
        self.reason = reason
        super().__init__(f"{reason}: {content_id!r}")
