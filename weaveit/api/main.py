"""
FastAPI Application - WeaveIt Gateway.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from weaveit import __version__
from weaveit.exceptions import InvalidContentId, PipelineError

from .dependencies import get_orchestrator
from .exceptions import (
    APIError,
    api_error_handler,
    generic_exception_handler,
    invalid_content_id_handler,
    pipeline_error_handler,
    request_validation_handler,
)
from .routes import content_router, health_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan handler."""
    logger.info("=" * 60)
    logger.info("Starting WeaveIt API...")
    logger.info("=" * 60)

    from weaveit.config import config
    config.log_status()

    yield

    logger.info("Shutting down WeaveIt API...")
    if get_orchestrator.cache_info().currsize:
        await get_orchestrator().close()


def create_app(debug: Optional[bool] = None) -> FastAPI:
    """Create and configure FastAPI application."""
    if debug is None:
        from weaveit.config import config
        debug = config.debug

    app = FastAPI(
        title="WeaveIt API",
        description="Narrated audio and scrolling-script videos from text scripts",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        debug=debug,
    )

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(InvalidContentId, invalid_content_id_handler)
    app.add_exception_handler(PipelineError, pipeline_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(health_router)
    app.include_router(content_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "weaveit.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
