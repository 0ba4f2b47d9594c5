# backend/househunt/auth.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from .clients import AuthSession, Backend
from .config import Settings


def get_backend(request: Request) -> Backend:
    return request.app.state.backend


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _bearer(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Not authenticated")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Expected 'Authorization: Bearer <token>'")
    return token.strip()


def get_auth_session(
    request: Request,
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    backend: Backend = Depends(get_backend),
) -> AuthSession:
    """
    Resolve the caller's bearer token with the backend. The resulting session
    is handed to every backend call made for this request.
    """
    token = _bearer(authorization)
    session = backend.get_session(token).unwrap()
    if session is None or session.expired:
        raise HTTPException(status_code=401, detail="Session expired or invalid")

    request.state.user_id = session.user_id
    return session
