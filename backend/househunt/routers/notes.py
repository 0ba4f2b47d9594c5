# backend/househunt/routers/notes.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth import get_auth_session, get_backend
from ..clients import AuthSession, Backend
from ..schemas import NoteCreate, NoteOut
from ..services import notes as svc

router = APIRouter(prefix="/homes/{home_id}/notes", tags=["notes"])


@router.get("", response_model=list[NoteOut])
def list_notes(home_id: str, session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    return svc.list_notes(backend, session=session, home_id=home_id)


@router.post("", response_model=NoteOut, status_code=201)
def add_note(
    home_id: str,
    payload: NoteCreate,
    session: AuthSession = Depends(get_auth_session),
    backend: Backend = Depends(get_backend),
):
    return svc.add_note(backend, session=session, home_id=home_id, payload=payload)
