# backend/househunt/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .clients import Backend, BackendError, create_backend
from .config import Settings, settings as default_settings
from .logging_config import configure_logging
from .middleware.request_id import RequestIDMiddleware
from .middleware.structured_logging import StructuredLoggingMiddleware

from .routers.auth import router as auth_router
from .routers.health import router as health_router
from .routers.homes import router as homes_router
from .routers.checklists import router as checklists_router
from .routers.status_updates import router as status_router
from .routers.notes import router as notes_router
from .routers.images import router as images_router
from .routers.evaluations import router as evaluations_router

API_PREFIX = "/api"

log = logging.getLogger("househunt.api")


def _cors_origins(cfg: Settings) -> list[str]:
    val = getattr(cfg, "cors_allow_origins", ["*"])
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(val, list) and val:
        return val
    return ["*"]


def _http_status(err: BackendError) -> int:
    if err.is_no_rows:
        return 404
    if err.status_code in (401, 403):
        return err.status_code
    if err.is_validation:
        return 400
    return 502


async def backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
    status = _http_status(exc)
    if status >= 500:
        log.error(
            "backend failure: %s",
            exc.message,
            extra={"status_code": exc.status_code, "error_code": exc.code},
        )
    else:
        log.warning(
            "backend rejected request: %s",
            exc.message,
            extra={"status_code": exc.status_code, "error_code": exc.code},
        )
    return JSONResponse(status_code=status, content={"error": exc.to_dict()})


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    app.state.backend.close()


def create_app(cfg: Optional[Settings] = None, backend: Optional[Backend] = None) -> FastAPI:
    cfg = cfg or default_settings

    app = FastAPI(title="Househunt", version="0.1.0", lifespan=_lifespan)
    app.state.settings = cfg
    app.state.backend = backend or create_backend(cfg)

    app.add_middleware(StructuredLoggingMiddleware)
    # Added last so it wraps the request logger and the id is set before that line is written.
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(cfg),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BackendError, backend_error_handler)

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(auth_router, prefix=API_PREFIX)

    app.include_router(homes_router, prefix=API_PREFIX)
    app.include_router(checklists_router, prefix=API_PREFIX)
    app.include_router(status_router, prefix=API_PREFIX)
    app.include_router(notes_router, prefix=API_PREFIX)
    app.include_router(images_router, prefix=API_PREFIX)
    app.include_router(evaluations_router, prefix=API_PREFIX)

    return app


configure_logging()
app = create_app()
