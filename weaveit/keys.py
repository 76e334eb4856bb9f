"""
Content identifiers.

A content id keys every artifact of one job, and its prefix encodes the
output type (`audio_`, `video_`, `both_`; anything else means video).
`ContentKey` carries the id and its type together so callers never have to
re-parse the prefix.
"""
import re
import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .exceptions import InvalidContentId

CONTENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")

AUDIO_SUFFIX = "mp3"
VIDEO_SUFFIX = "mp4"
FAILURE_SUFFIX = "failed"

MEDIA_TYPES = {
    AUDIO_SUFFIX: "audio/mpeg",
    VIDEO_SUFFIX: "video/mp4",
}


class OutputType(str, Enum):
    """Which artifacts a job produces."""
    AUDIO = "audio"
    VIDEO = "video"
    BOTH = "both"

    @classmethod
    def from_string(cls, value: str) -> "OutputType":
        value_lower = value.lower()
        for output_type in cls:
            if output_type.value == value_lower:
                return output_type
        raise ValueError(f"Unknown output type: {value}")

    @classmethod
    def from_content_id(cls, content_id: str) -> "OutputType":
        """Derive the type from the id prefix, defaulting to video."""
        for output_type in cls:
            if content_id.startswith(f"{output_type.value}_"):
                return output_type
        return cls.VIDEO

    @property
    def expected_suffixes(self) -> tuple[str, ...]:
        return {
            OutputType.AUDIO: (AUDIO_SUFFIX,),
            OutputType.VIDEO: (VIDEO_SUFFIX,),
            OutputType.BOTH: (AUDIO_SUFFIX, VIDEO_SUFFIX),
        }[self]

    @property
    def renders_video(self) -> bool:
        return self is not OutputType.AUDIO

    @property
    def publishes_audio(self) -> bool:
        return self is not OutputType.VIDEO


def validate_content_id(content_id: str) -> str:
    if not isinstance(content_id, str) or not CONTENT_ID_PATTERN.match(content_id):
        raise InvalidContentId(str(content_id))
    return content_id


class ContentKey(BaseModel):
    """A content id together with the output type its prefix encodes."""

    model_config = ConfigDict(frozen=True)

    content_id: str
    output_type: OutputType

    @field_validator("content_id")
    @classmethod
    def check_content_id(cls, v: str) -> str:
        if not CONTENT_ID_PATTERN.match(v):
            raise ValueError(f"malformed content id: {v!r}")
        return v

    @classmethod
    def parse(cls, content_id: str) -> "ContentKey":
        """Key for an existing id. Raises InvalidContentId for unsafe ids."""
        validate_content_id(content_id)
        return cls(content_id=content_id, output_type=OutputType.from_content_id(content_id))

    @classmethod
    def new(cls, output_type: OutputType) -> "ContentKey":
        """Fresh id carrying the type prefix."""
        return cls(content_id=f"{output_type.value}_{uuid.uuid4().hex}", output_type=output_type)

    @classmethod
    def for_request(cls, output_type: OutputType, content_id: Optional[str] = None) -> "ContentKey":
        """
        Key for an inbound request.

        A supplied id must encode the same type the request asks for,
        otherwise status polling would look for the wrong artifacts.
        """
        if not content_id:
            return cls.new(output_type)
        key = cls.parse(content_id)
        if key.output_type is not output_type:
            raise InvalidContentId(
                content_id,
                f"id prefix implies {key.output_type.value!r}, request asks for {output_type.value!r}",
            )
        return key

    @property
    def expected_suffixes(self) -> tuple[str, ...]:
        return self.output_type.expected_suffixes

    def filename(self, suffix: str) -> str:
        return f"{self.content_id}.{suffix}"

    def __str__(self) -> str:
        return self.content_id
