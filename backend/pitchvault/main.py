"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pitchvault.config import Settings, settings as default_settings
from pitchvault.database import JsonFileBackend
from pitchvault.errors import RegistryError
from pitchvault.services.auth import StaticTokenAuthenticator
from pitchvault.services.file_storage import FileStorageService
from pitchvault.services.registry import FileRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the registry, storage and authenticator, then load records from disk."""
    cfg: Settings = app.state.settings

    if not hasattr(app.state, "registry"):
        app.state.registry = FileRegistry(JsonFileBackend(cfg.FILES_DB_PATH))
    if not hasattr(app.state, "file_storage"):
        app.state.file_storage = FileStorageService(cfg.FILE_STORAGE_PATH, cfg.STATIC_ROOT)
    if not hasattr(app.state, "authenticator"):
        app.state.authenticator = StaticTokenAuthenticator(cfg.ADMIN_TOKEN)

    await app.state.registry.load()

    if not cfg.ADMIN_TOKEN:
        logger.warning("ADMIN_TOKEN is not set; registry writes will be rejected")
    logger.info(f"Upload directory: {cfg.FILE_STORAGE_PATH}")
    logger.info(f"Files database: {cfg.FILES_DB_PATH}")
    logger.info(f"Static root: {cfg.STATIC_ROOT}")

    yield


def create_app(cfg: Optional[Settings] = None) -> FastAPI:
    cfg = cfg or default_settings

    app = FastAPI(
        title="PitchVault API",
        version="1.0.0",
        description="File registry and token-gated access for pitch deck files.",
        lifespan=lifespan,
    )
    app.state.settings = cfg

    # CORS
    origins = [o.strip() for o in cfg.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            loc = ".".join(str(p) for p in errors[0].get("loc", ()) if p != "body")
            message = f"Invalid request: {loc} {errors[0].get('msg', '')}".strip()
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/health")
    async def health_check(request: Request):
        """Liveness plus a breakdown of registered files by access mode."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **request.app.state.registry.counts(),
        }

    # Register routers
    from pitchvault.routes.files import legacy_router as legacy_files_router, router as files_router
    from pitchvault.routes.downloads import router as downloads_router
    app.include_router(files_router, prefix=cfg.API_PREFIX)
    app.include_router(legacy_files_router, prefix=cfg.API_PREFIX)
    app.include_router(downloads_router, prefix=cfg.API_PREFIX)

    return app


app = create_app()


def run():
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=default_settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "pitchvault.main:app",
        host="0.0.0.0",
        port=default_settings.API_PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )
