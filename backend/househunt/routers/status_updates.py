# backend/househunt/routers/status_updates.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth import get_auth_session, get_backend, get_settings
from ..clients import AuthSession, Backend
from ..config import Settings
from ..schemas import StatusUpdateCreate, StatusUpdateOut
from ..services import status_history as svc

router = APIRouter(tags=["status"])


@router.get("/homes/{home_id}/status", response_model=list[StatusUpdateOut])
def list_status(home_id: str, session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    return svc.list_status_updates(backend, session=session, home_id=home_id)


@router.post("/homes/{home_id}/status", response_model=StatusUpdateOut, status_code=201)
def record_status(
    home_id: str,
    payload: StatusUpdateCreate,
    session: AuthSession = Depends(get_auth_session),
    backend: Backend = Depends(get_backend),
    cfg: Settings = Depends(get_settings),
):
    return svc.record_status(backend, session=session, home_id=home_id, payload=payload, mode=cfg.status_history_mode)


@router.delete("/status-updates/{status_update_id}", status_code=204)
def delete_status(
    status_update_id: str,
    session: AuthSession = Depends(get_auth_session),
    backend: Backend = Depends(get_backend),
):
    svc.delete_status_update(backend, session=session, status_update_id=status_update_id)
    return None
