"""
Job and content status enumerations.
"""
from enum import Enum


class JobState(str, Enum):
    """
    Lifecycle of one in-process job.

    ENHANCING -> SYNTHESIZING -> RENDERING -> DONE, or FAILED from any
    stage. Audio-only jobs skip RENDERING.
    """
    ENHANCING = "enhancing"
    SYNTHESIZING = "synthesizing"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"


class ContentStatus(str, Enum):
    """Status reported to pollers, derived from the content store only."""
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
