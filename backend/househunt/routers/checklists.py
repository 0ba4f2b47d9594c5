# backend/househunt/routers/checklists.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth import get_auth_session, get_backend
from ..clients import AuthSession, Backend
from ..schemas import ChecklistOut, ChecklistPatch, ChecklistSummaryOut
from ..services import checklists as svc

router = APIRouter(prefix="/homes/{home_id}/checklist", tags=["checklist"])


@router.get("", response_model=ChecklistOut)
def get_checklist(home_id: str, session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    return svc.get_or_create_checklist(backend, session=session, home_id=home_id)


@router.patch("", response_model=ChecklistOut)
def patch_checklist(
    home_id: str,
    patch: ChecklistPatch,
    session: AuthSession = Depends(get_auth_session),
    backend: Backend = Depends(get_backend),
):
    return svc.update_checklist(backend, session=session, home_id=home_id, patch=patch)


@router.get("/summary", response_model=ChecklistSummaryOut)
def checklist_summary(
    home_id: str, session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)
):
    return svc.checklist_summary(backend, session=session, home_id=home_id)
