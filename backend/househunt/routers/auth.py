# backend/househunt/routers/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..auth import get_auth_session, get_backend
from ..clients import AuthSession, Backend
from ..schemas import LoginIn, SessionOut

router = APIRouter(prefix="/auth", tags=["auth"])


def _session_out(backend: Backend, s: AuthSession) -> SessionOut:
    return SessionOut(
        access_token=s.access_token,
        user_id=s.user_id,
        email=s.email,
        expires_at=s.expires_at,
        demo=backend.demo,
    )


@router.post("/login", response_model=SessionOut)
def login(payload: LoginIn, backend: Backend = Depends(get_backend)):
    res = backend.sign_in_with_password(payload.email.strip(), payload.password)
    if res.error is not None:
        if res.error.status_code in (400, 401, 403, 422):
            raise HTTPException(status_code=401, detail=res.error.message or "Invalid login credentials")
        raise res.error
    return _session_out(backend, res.data)


@router.post("/logout", status_code=204)
def logout(session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    backend.sign_out(session).unwrap()
    return None


@router.get("/session", response_model=SessionOut)
def current_session(session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    return _session_out(backend, session)
