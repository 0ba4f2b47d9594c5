# backend/househunt/services/notes.py
from __future__ import annotations

from datetime import datetime, timezone

from ..clients import AuthSession, Backend
from ..schemas import NoteCreate, NoteOut
from .ownership import must_get_home


def list_notes(backend: Backend, *, session: AuthSession | None, home_id: str) -> list[NoteOut]:
    rows = (
        backend.table("home_notes", session=session)
        .select()
        .eq("home_id", home_id)
        .order("date", ascending=False)
        .execute()
        .unwrap()
    )
    return [NoteOut.model_validate(r) for r in rows or []]


def add_note(backend: Backend, *, session: AuthSession | None, home_id: str, payload: NoteCreate) -> NoteOut:
    # The note keeps the status the home had when it was written.
    home = must_get_home(backend, session=session, home_id=home_id)
    record = {
        "home_id": home_id,
        "note": payload.note,
        "status": home.current_status,
        "date": datetime.now(timezone.utc),
    }
    rows = backend.table("home_notes", session=session).insert(record).execute().unwrap()
    return NoteOut.model_validate(rows[0])
