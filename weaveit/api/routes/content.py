"""
Content generation, status and retrieval endpoints.
"""
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import FileResponse

from weaveit.keys import MEDIA_TYPES, ContentKey, validate_content_id
from weaveit.orchestration import ContentJob, JobOrchestrator, StatusPoller
from weaveit.persistence import ContentStore
from weaveit.services import preview_script

from ..dependencies import get_orchestrator, get_status_poller, get_store
from ..exceptions import ContentNotFoundError
from ..schemas import (
    EstimateRequest,
    EstimateResponse,
    GenerateRequest,
    GenerateResponse,
    StatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Content"])


@router.post(
    "/generate",
    response_model=GenerateResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start narration job",
    description="Start generating narrated audio, a scrolling-script video, or both. Poll /api/status for readiness.",
)
async def generate(
    request: GenerateRequest,
    orchestrator: JobOrchestrator = Depends(get_orchestrator),
) -> GenerateResponse:
    key = ContentKey.for_request(request.output_type, request.content_id)
    job = ContentJob(key=key, script=request.script, title=request.title)

    orchestrator.submit(job)
    logger.info(f"[{key.content_id}] Accepted {key.output_type.value} job: {request.title!r}")

    return GenerateResponse(
        content_id=key.content_id,
        title=request.title,
        output_type=key.output_type,
    )


@router.get(
    "/status/{content_id}",
    response_model=StatusResponse,
    response_model_exclude_none=True,
    summary="Content status",
)
async def get_status(
    content_id: str,
    poller: StatusPoller = Depends(get_status_poller),
) -> StatusResponse:
    report = poller.check(content_id)
    return StatusResponse(
        content_id=report.content_id,
        output_type=report.output_type,
        status=report.status,
        ready=report.ready,
        content_url=report.content_url,
        audio_url=report.audio_url,
        error=report.error,
    )


@router.api_route(
    "/content/{content_id}.{suffix}",
    methods=["GET", "HEAD"],
    summary="Download artifact",
    response_class=FileResponse,
)
async def get_content(
    content_id: str,
    suffix: str,
    store: ContentStore = Depends(get_store),
):
    media_type = MEDIA_TYPES.get(suffix)
    if media_type is None:
        raise ContentNotFoundError(f"{content_id}.{suffix}")
    validate_content_id(content_id)

    if not store.exists(content_id, suffix):
        raise ContentNotFoundError(f"{content_id}.{suffix}")

    return FileResponse(
        store.path_for(content_id, suffix),
        media_type=media_type,
        filename=f"{content_id}.{suffix}",
        content_disposition_type="inline",
    )


@router.post(
    "/estimate",
    response_model=EstimateResponse,
    summary="Script preview",
    description="Word count, estimated minutes of content and a quality band.",
)
async def estimate(request: EstimateRequest) -> EstimateResponse:
    preview = preview_script(request.script)
    return EstimateResponse(
        words=preview.words,
        estimated_minutes=preview.estimated_minutes,
        quality=preview.quality,
    )
