"""
Job orchestration and status.
"""
from .enums import ContentStatus, JobState
from .models import ContentJob, JobResult
from .orchestrator import BACKGROUND_TASKS, JobOrchestrator
from .status import StatusPoller, StatusReport

__all__ = [
    "ContentStatus",
    "JobState",
    "ContentJob",
    "JobResult",
    "BACKGROUND_TASKS",
    "JobOrchestrator",
    "StatusPoller",
    "StatusReport",
]
