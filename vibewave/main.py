import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vibewave.api import discovery_router, health_router
from vibewave.config import settings
from vibewave.models.failure import KnownError, create_unknown_failure, finalize_response

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Starting %s (candidate source: %s)", settings.app_name, settings.candidate_source)
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("vibewave"),
    lifespan=lifespan,
)

app.include_router(discovery_router)
app.include_router(health_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Classify engine and data-access errors as known failures."""
    logger.info(
        "KNOWN_FAILURE",
        extra={"kind": exc.kind.value, "status_code": exc.status_code},
    )
    response = finalize_response(exc.to_response())
    return JSONResponse(status_code=exc.status_code, content=response.model_dump(mode="json"))


@app.exception_handler(Exception)
async def unknown_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: no raw 500 bodies reach the client."""
    logger.exception("UNKNOWN_FAILURE")
    response = create_unknown_failure(exc)
    return JSONResponse(status_code=500, content=response.model_dump(mode="json"))
