"""Decaping Operations Tracker - FastAPI Backend

Records overburden removal operations (transport, poussage, casement),
the machines that perform them, safety incidents and reference documents,
with an audit trail of user activity and login sessions.
"""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from decaping.api import activities, auth, dashboard, documents, machines, operations, safety_incidents, users
from decaping.core.config import Settings, settings as default_settings
from decaping.core.errors import AppError, ValidationError
from decaping.database.engine import Database
from decaping.database.seed import bootstrap
from decaping.observability import bind_request_id, setup_structured_logging

setup_structured_logging(default_settings.ENVIRONMENT)
logger = logging.getLogger(__name__)


def _field_name(loc) -> str:
    # Drop the "body"/"query"/"path" prefix FastAPI puts in front of the field
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def _error_body(request: Request, exc: AppError) -> dict:
    content = {
        "category": exc.category,
        "detail": exc.message,
        "request_id": getattr(request.state, "request_id", "unknown"),
    }
    if isinstance(exc, ValidationError):
        content["errors"] = exc.field_errors()
    return content


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    database = Database(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Decaping tracker starting up")
        bootstrap(database, settings)
        yield
        database.dispose()
        logger.info("Decaping tracker shutting down")

    app = FastAPI(
        title="Decaping Operations Tracker API",
        description="Operations, machines, safety incidents and audit trail "
                    "for overburden removal at the mine site.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.settings = settings

    # -----------------------------------------------------------------------
    # Middleware
    # -----------------------------------------------------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        bind_request_id(request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=_error_body(request, exc), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        fields = {}
        for error in exc.errors():
            fields.setdefault(_field_name(error.get("loc", ())), error.get("msg", "Invalid value"))
        return JSONResponse(
            status_code=422,
            content=_error_body(request, ValidationError("Invalid request data", fields)),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error("Unhandled error on request %s", request_id, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"category": "internal_error", "detail": "Internal server error", "request_id": request_id},
        )

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------

    for module in (auth, machines, operations, safety_incidents, documents, activities, dashboard, users):
        app.include_router(module.router, prefix=settings.API_PREFIX)

    # -----------------------------------------------------------------------
    # Prometheus
    # -----------------------------------------------------------------------

    if settings.METRICS_ENABLED:
        Instrumentator().instrument(app).expose(app, include_in_schema=False)

    # -----------------------------------------------------------------------
    # Health check
    # -----------------------------------------------------------------------

    @app.get("/health", tags=["system"])
    def health():
        return {"status": "ok"}

    return app


app = create_app()
