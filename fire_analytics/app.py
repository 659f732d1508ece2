import logging
import os
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fire_analytics.application import get_record_repository
from fire_analytics.core.errors import ExportError, RecordSourceError, UnknownFamilyError
from fire_analytics.infrastructure import setup_logging
from fire_analytics.routes import analysis, exports, records

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RecordSourceError)
    async def record_source_error_handler(request: Request, exc: RecordSourceError) -> JSONResponse:
        logger.error("record source unavailable", extra={"path": request.url.path, "error": str(exc)})
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(ExportError)
    async def export_error_handler(request: Request, exc: ExportError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": exc.message})

    @app.exception_handler(UnknownFamilyError)
    async def unknown_family_handler(request: Request, exc: UnknownFamilyError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})


def create_app() -> FastAPI:
    setup_logging(os.getenv("LOG_LEVEL", "INFO"), os.getenv("LOG_FORMAT", "json"))

    app = FastAPI(title="Fire Analytics API", version="0.1.0")

    snapshot_path = os.getenv("RECORDS_SNAPSHOT")
    if snapshot_path:
        get_record_repository().load_snapshot_file(Path(snapshot_path).expanduser())

    origins_env = os.getenv("API_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    if not origins:
        origins = ["http://localhost:3000", "http://127.0.0.1:3000"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)
    app.include_router(records.router, prefix="/api")
    app.include_router(analysis.router, prefix="/api")
    app.include_router(exports.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Fire Analytics API",
                "docs": "/docs",
                "health": "/api/analysis/options",
            }
        )

    return app


app = create_app()
