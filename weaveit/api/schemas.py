"""
Pydantic schemas for API requests and responses.

Field names on the wire are camelCase to match the browser client.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from weaveit.keys import OutputType
from weaveit.orchestration import ContentStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GenerateRequest(CamelModel):
    """Start a narration job."""
    script: str = Field(..., min_length=1)
    title: str = Field(default="Untitled", max_length=200)
    output_type: OutputType = Field(default=OutputType.VIDEO, alias="outputType")
    content_id: Optional[str] = Field(default=None, alias="contentId")

    @field_validator("script")
    @classmethod
    def validate_script(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("script must not be blank")
        return v

    @field_validator("output_type", mode="before")
    @classmethod
    def normalize_output_type(cls, v):
        if isinstance(v, str):
            return OutputType.from_string(v)
        return v


class GenerateResponse(CamelModel):
    content_id: str = Field(..., alias="contentId")
    title: str
    output_type: OutputType = Field(..., alias="outputType")
    status: ContentStatus = ContentStatus.PROCESSING


class StatusResponse(CamelModel):
    content_id: str = Field(..., alias="contentId")
    output_type: OutputType = Field(..., alias="outputType")
    status: ContentStatus
    ready: bool
    content_url: Optional[str] = Field(default=None, alias="contentUrl")
    audio_url: Optional[str] = Field(default=None, alias="audioUrl")
    error: Optional[str] = None


class EstimateRequest(BaseModel):
    script: str = Field(default="")


class EstimateResponse(CamelModel):
    words: int
    estimated_minutes: int = Field(..., alias="estimatedMinutes")
    quality: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    content_dir_writable: bool
    ffmpeg_available: bool
    timestamp: datetime
