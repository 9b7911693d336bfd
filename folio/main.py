"""FastAPI application entrypoint. No business logic; only wiring, middleware and error rendering."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from folio import __version__
from folio.api.v1 import router as v1_router
from folio.core.config import Settings, get_settings
from folio.core.errors import AuthError, FolioError, PermissionDenied
from folio.core.tokens import TokenService
from folio.schemas.common import failure
from folio.services.auth_service import AuthService
from folio.services.permission_catalog import PermissionCache, PermissionCatalog

logger = logging.getLogger(__name__)


async def handle_folio_error(request: Request, exc: FolioError) -> JSONResponse:
    """Render domain errors in the standard envelope."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            extra={
                "path": request.url.path,
                "error_code": exc.code,
                "cause": type(exc.cause).__name__ if exc.cause else None,
            },
        )
    elif isinstance(exc, PermissionDenied):
        logger.info("Request forbidden", extra={"path": request.url.path, "reason": exc.reason.value})
    return JSONResponse(
        status_code=exc.status_code,
        content=failure(exc.code, exc.message),
        headers=headers,
    )


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=failure(f"HTTP_{exc.status_code}", message),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg', 'invalid value')}" if location else "Invalid request"
    return JSONResponse(status_code=422, content=failure("VALIDATION_ERROR", message))


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application and its auth services for the given settings."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )

    app = FastAPI(
        title="Folio API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    catalog = PermissionCatalog(PermissionCache() if settings.PERMISSION_CACHE_ENABLED else None)
    app.state.settings = settings
    app.state.permission_catalog = catalog
    app.state.auth_service = AuthService(settings, TokenService(settings), catalog)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(FolioError, handle_folio_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Folio API"}

    return app


app = create_app()
