"""
Shared dependencies for API routes.
"""
import logging
import os
import shutil
from functools import lru_cache
from pathlib import Path

from weaveit.orchestration import JobOrchestrator, StatusPoller
from weaveit.persistence import ContentStore, get_content_store

logger = logging.getLogger(__name__)


def get_store() -> ContentStore:
    return get_content_store()


@lru_cache()
def get_orchestrator() -> JobOrchestrator:
    """Get the process-wide JobOrchestrator."""
    return JobOrchestrator(store=get_content_store())


@lru_cache()
def get_status_poller() -> StatusPoller:
    """Get cached StatusPoller instance."""
    return StatusPoller(store=get_content_store())


def check_content_dir() -> bool:
    """Check if the content directory is writable."""
    root = get_content_store().root
    return root.is_dir() and os.access(root, os.W_OK)


def check_ffmpeg() -> bool:
    from weaveit.config import config

    ffmpeg = config.paths.ffmpeg_path
    return Path(ffmpeg).is_file() or shutil.which(ffmpeg) is not None
