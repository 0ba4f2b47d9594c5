# backend/househunt/clients/__init__.py
from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..config import Settings
from .demo import DemoBackend, DemoStorage
from .query import Backend, QuerySpec, TableQuery
from .rest import RestBackend
from .results import NO_ROWS_CODE, AuthSession, BackendError, Result
from .storage import RestStorage, StorageAPI

log = logging.getLogger("househunt.backend")

__all__ = [
    "AuthSession",
    "Backend",
    "BackendError",
    "DemoBackend",
    "DemoStorage",
    "NO_ROWS_CODE",
    "QuerySpec",
    "RestBackend",
    "RestStorage",
    "Result",
    "StorageAPI",
    "TableQuery",
    "create_backend",
]


def create_backend(settings: Settings, *, transport: Optional[httpx.BaseTransport] = None) -> Backend:
    """
    The one place the backend is chosen. Missing or placeholder credentials
    give a DemoBackend (Settings refuses that combination in prod).
    """
    if settings.demo_mode:
        log.warning("hosted backend not configured; running in demo mode (nothing is persisted)")
        return DemoBackend(
            database_url=settings.demo_database_url,
            jwt_secret=settings.demo_jwt_secret,
            session_minutes=settings.demo_session_minutes,
        )

    return RestBackend(
        str(settings.supabase_url),
        str(settings.supabase_anon_key),
        timeout=settings.http_timeout_seconds,
        transport=transport,
    )
