"""
API Exceptions and Error Handlers.
"""
import logging
from typing import Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from weaveit.exceptions import InvalidContentId, NotFound, PipelineError

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standard error response format."""
    error: str
    detail: Optional[str] = None
    code: str
    status_code: int


class APIError(Exception):
    """Base API exception."""

    def __init__(
        self,
        message: str,
        code: str = "API_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: Optional[str] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=self.message,
            detail=self.detail,
            code=self.code,
            status_code=self.status_code,
        )


class ValidationError(APIError):
    """400 - Bad Request / Validation Error."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


class NotFoundError(APIError):
    """404 - Resource Not Found."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} not found: {resource_id}",
            code="NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
        )


class ContentNotFoundError(NotFoundError):
    """404 - Artifact not produced (yet)."""

    def __init__(self, filename: str):
        super().__init__(resource="Content", resource_id=filename)


class InternalError(APIError):
    """500 - Internal Server Error."""

    def __init__(self, message: str = "Internal server error", detail: Optional[str] = None):
        super().__init__(
            message=message,
            code="INTERNAL_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
        )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def invalid_content_id_handler(request: Request, exc: InvalidContentId) -> JSONResponse:
    return await api_error_handler(request, ValidationError("Invalid content id", detail=str(exc)))


async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    """Map pipeline errors that escape a route: NotFound to 404, the rest to 500."""
    if isinstance(exc, NotFound):
        return await api_error_handler(request, ContentNotFoundError(f"{exc.content_id}.{exc.suffix}"))

    logger.error(f"Pipeline error in {request.url.path}: {exc}")
    error = APIError(
        message=exc.message,
        code=exc.code,
        detail=f"stage={exc.stage}" if request.app.debug else None,
    )
    return await api_error_handler(request, error)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body/path validation failures as 400 in the standard error shape."""
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return await api_error_handler(request, ValidationError("Invalid request", detail=details))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled error in {request.url.path}")
    return await api_error_handler(request, InternalError(detail=str(exc) if request.app.debug else None))
