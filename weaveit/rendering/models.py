"""
Value objects for narration and scrolling-script rendering.

DisplayScript (what is shown) and NarrationAudio (what is heard) are kept
apart on purpose; a job joins them only through its content id.
"""
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator


class DisplayScript(BaseModel):
    """The author's original text, rendered verbatim."""
    text: str = Field(..., min_length=1)
    tab_size: int = Field(default=4, ge=1, le=16)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("script is blank")
        if "\x00" in v:
            raise ValueError("script contains NUL characters")
        return v

    @classmethod
    def from_raw(cls, raw: Union[str, bytes]) -> "DisplayScript":
        """Build from text or UTF-8 bytes. Undecodable bytes raise UnicodeDecodeError."""
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return cls(text=raw)

    @property
    def lines(self) -> list[str]:
        normalized = self.text.replace("\r\n", "\n").replace("\r", "\n")
        return [line.expandtabs(self.tab_size).rstrip() for line in normalized.split("\n")]


class NarrationAudio(BaseModel):
    """Synthesized speech on disk plus its probed duration."""
    path: Path
    duration_seconds: float = Field(..., gt=0)


@dataclass(frozen=True)
class ScrollSchedule:
    """
    Constant-velocity mapping from playback time to vertical offset.

    offset(t) = clamp(velocity * t, 0, total_scroll) with
    velocity = total_scroll / duration, so the end of the column reaches the
    bottom of the viewport exactly when the narration ends.
    """
    duration: float
    total_scroll: float
    fps: int

    def __post_init__(self):
        if self.duration <= 0:
            raise ValueError("duration must be positive")
        if self.total_scroll < 0:
            raise ValueError("total_scroll must be >= 0")
        if self.fps < 1:
            raise ValueError("fps must be >= 1")

    @classmethod
    def build(
        cls,
        content_height: int,
        viewport_height: int,
        duration: float,
        fps: int,
        min_duration: float = 1.0,
    ) -> "ScrollSchedule":
        """Schedule for a column of `content_height` px, clamping short durations up."""
        return cls(
            duration=max(float(duration), float(min_duration)),
            total_scroll=float(max(0, content_height - viewport_height)),
            fps=fps,
        )

    @property
    def velocity(self) -> float:
        """Pixels per second."""
        return self.total_scroll / self.duration

    @property
    def is_static(self) -> bool:
        return self.total_scroll == 0

    @property
    def frame_interval(self) -> float:
        return 1.0 / self.fps

    @property
    def frame_count(self) -> int:
        return max(1, math.ceil(self.duration * self.fps))

    def offset_at(self, t: float) -> float:
        if self.is_static:
            return 0.0
        return min(max(self.velocity * t, 0.0), self.total_scroll)

    def exceeds_readable_speed(self, pixels_per_second: float) -> bool:
        return self.velocity > pixels_per_second


class RenderResult(BaseModel):
    """Outcome of one scrolling-script render."""
    output_path: Path
    duration_seconds: float = Field(..., gt=0)
    total_scroll: float = Field(..., ge=0)
    velocity: float = Field(..., ge=0)
    fps: int = Field(..., ge=1)
    resolution: str
    line_count: int = Field(..., ge=0)
    exceeds_readable_speed: bool = False
    file_size_mb: Optional[float] = None
    render_time_seconds: Optional[float] = None
