"""
Main FastAPI application
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from worksafe.core.config import get_settings
from worksafe.core.deps import get_provider_api_key
from worksafe.core.errors import INVALID_REQUEST_BODY, RelayError
from worksafe.core.logger import configure_logging, get_logger
from worksafe.api.routes import analysis, health, reports

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    configure_logging()
    if get_provider_api_key() is None:
        logger.warning("OPENAI_API_KEY is not set; analysis requests will fail")
    yield


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Render relay errors as {"error": message}"""
    logger.info(
        "%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.kind.value
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies share the relay's error shape"""
    logger.info("%s %s -> 400 invalid body", request.method, request.url.path)
    return JSONResponse(status_code=400, content={"error": INVALID_REQUEST_BODY})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="AI-Powered Workplace Safety Analysis from a single photo",
        lifespan=lifespan,
    )

    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Include routers
    app.include_router(analysis.router, prefix="/api")
    app.include_router(reports.router, prefix="/api")
    app.include_router(health.router, prefix="/api")

    return app


app = create_app()
