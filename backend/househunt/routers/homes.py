# backend/househunt/routers/homes.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth import get_auth_session, get_backend
from ..clients import AuthSession, Backend
from ..schemas import HomeCardOut, HomeCreate, HomeOut, HomeUpdate
from ..services import homes as svc

router = APIRouter(prefix="/homes", tags=["homes"])


@router.get("", response_model=list[HomeOut])
def list_homes(session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    return svc.list_homes(backend, session=session)


@router.get("/overview", response_model=list[HomeCardOut])
def overview(session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    return svc.home_overview(backend, session=session)


@router.post("", response_model=HomeOut, status_code=201)
def create_home(
    payload: HomeCreate,
    session: AuthSession = Depends(get_auth_session),
    backend: Backend = Depends(get_backend),
):
    return svc.create_home(backend, session=session, payload=payload)


@router.get("/{home_id}", response_model=HomeOut)
def get_home(home_id: str, session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    return svc.get_home(backend, session=session, home_id=home_id)


@router.patch("/{home_id}", response_model=HomeOut)
def update_home(
    home_id: str,
    patch: HomeUpdate,
    session: AuthSession = Depends(get_auth_session),
    backend: Backend = Depends(get_backend),
):
    return svc.update_home(backend, session=session, home_id=home_id, patch=patch)


@router.delete("/{home_id}", status_code=204)
def delete_home(home_id: str, session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    svc.delete_home(backend, session=session, home_id=home_id)
    return None
