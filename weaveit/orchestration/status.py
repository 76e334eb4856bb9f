"""
Status Poller.

Answers "is this content ready?" purely from the content store, so any
process that can see the store directory can serve status.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from weaveit.keys import AUDIO_SUFFIX, VIDEO_SUFFIX, ContentKey, OutputType
from weaveit.persistence import ContentStore, get_content_store

from .enums import ContentStatus

logger = logging.getLogger(__name__)


@dataclass
class StatusReport:
    content_id: str
    output_type: OutputType
    status: ContentStatus
    content_url: Optional[str] = None
    audio_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.status is ContentStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "contentId": self.content_id,
            "outputType": self.output_type.value,
            "status": self.status.value,
            "ready": self.ready,
        }
        if self.content_url:
            data["contentUrl"] = self.content_url
        if self.audio_url:
            data["audioUrl"] = self.audio_url
        if self.error:
            data["error"] = self.error
        return data


class StatusPoller:
    """Read-only status checks against the content store."""

    def __init__(self, store: Optional[ContentStore] = None, public_base_path: Optional[str] = None):
        if public_base_path is None:
            from weaveit.config import config

            public_base_path = config.public_base_path
        self.store = store or get_content_store()
        self.public_base_path = public_base_path.rstrip("/")

    def url_for(self, content_id: str, suffix: str) -> str:
        return f"{self.public_base_path}/{content_id}.{suffix}"

    def check(self, content_id: str) -> StatusReport:
        """
        Status of `content_id`.

        Raises:
            InvalidContentId: id is not a safe file stem
        """
        key = ContentKey.parse(content_id)
        present = {suffix: self.store.exists(content_id, suffix) for suffix in key.expected_suffixes}

        report = StatusReport(
            content_id=content_id,
            output_type=key.output_type,
            status=ContentStatus.PROCESSING,
        )

        if key.output_type is OutputType.BOTH and present[AUDIO_SUFFIX]:
            report.audio_url = self.url_for(content_id, AUDIO_SUFFIX)

        if all(present.values()):
            report.status = ContentStatus.COMPLETED
            main_suffix = AUDIO_SUFFIX if key.output_type is OutputType.AUDIO else VIDEO_SUFFIX
            report.content_url = self.url_for(content_id, main_suffix)
            return report

        failure = self.store.read_failure(content_id)
        if failure is not None:
            report.status = ContentStatus.FAILED
            report.error = failure.get("error") or "generation failed"
            logger.debug(f"[{content_id}] Reporting failed ({failure.get('stage')})")

        return report
