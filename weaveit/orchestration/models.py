"""
Job request and result models.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from weaveit.keys import ContentKey, OutputType

from .enums import JobState


class ContentJob(BaseModel):
    """One generation request. Lives in memory only while it runs."""
    key: ContentKey
    script: str = Field(..., min_length=1)
    title: str = ""

    @field_validator("script")
    @classmethod
    def validate_script(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("script is blank")
        return v

    @classmethod
    def create(
        cls,
        script: str,
        output_type: OutputType = OutputType.VIDEO,
        title: str = "",
        content_id: Optional[str] = None,
    ) -> "ContentJob":
        return cls(key=ContentKey.for_request(output_type, content_id), script=script, title=title)

    @property
    def content_id(self) -> str:
        return self.key.content_id

    @property
    def output_type(self) -> OutputType:
        return self.key.output_type


@dataclass
class JobResult:
    """Outcome of a finished job."""
    content_id: str
    output_type: OutputType
    state: JobState = JobState.ENHANCING
    audio_path: Optional[Path] = None
    video_path: Optional[Path] = None
    duration_seconds: Optional[float] = None
    elapsed_seconds: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content_id": self.content_id,
            "output_type": self.output_type.value,
            "state": self.state.value,
            "audio_path": str(self.audio_path) if self.audio_path else None,
            "video_path": str(self.video_path) if self.video_path else None,
            "duration_seconds": self.duration_seconds,
            "elapsed_seconds": self.elapsed_seconds,
            "metadata": self.metadata,
        }
