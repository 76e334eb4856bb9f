"""
Health check endpoints.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, status

from weaveit import __version__

from ..dependencies import check_content_dir, check_ffmpeg
from ..schemas import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health Check",
    description="Check API, content store and encoder availability.",
)
async def health_check() -> HealthResponse:
    content_ok = check_content_dir()
    ffmpeg_ok = check_ffmpeg()

    return HealthResponse(
        status="healthy" if (content_ok and ffmpeg_ok) else "degraded",
        service="weaveit-api",
        version=__version__,
        content_dir_writable=content_ok,
        ffmpeg_available=ffmpeg_ok,
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/health/config",
    status_code=status.HTTP_200_OK,
    summary="Configuration Status",
    description="Check API key configuration status (does not expose actual keys).",
)
async def config_status() -> dict:
    """
    Configuration status endpoint.
    Returns which backends are configured without exposing sensitive keys.
    """
    from weaveit.config import config

    state = config.validate()

    return {
        "status": "configured" if state["ready_for_generation"] else "partial",
        "apis": {
            "openai": "configured" if state["ai"]["openai_configured"] else "missing",
        },
        "voice_provider": state["voice"]["provider"],
        "render": state["render"],
        "limits": state["limits"],
        "notes": [] if state["ready_for_generation"] else ["Set OPENAI_API_KEY to enable script enhancement"],
    }
