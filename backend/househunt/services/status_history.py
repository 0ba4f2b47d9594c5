# backend/househunt/services/status_history.py
from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..clients import AuthSession, Backend
from ..config import settings as default_settings
from ..schemas import StatusUpdateCreate, StatusUpdateOut
from .ownership import must_get_home, must_get_row

log = logging.getLogger("househunt.status")

APPEND = "append"
PER_STATUS = "per_status"


def list_status_updates(backend: Backend, *, session: AuthSession | None, home_id: str) -> list[StatusUpdateOut]:
    rows = (
        backend.table("status_updates", session=session)
        .select()
        .eq("home_id", home_id)
        .order("date", ascending=False)
        .execute()
        .unwrap()
    )
    return [StatusUpdateOut.model_validate(r) for r in rows or []]


def record_status(
    backend: Backend,
    *,
    session: AuthSession | None,
    home_id: str,
    payload: StatusUpdateCreate,
    mode: str | None = None,
) -> StatusUpdateOut:
    """
    Record a status for a home and make it the home's current status.

    mode "append" keeps every transition as its own row. mode "per_status"
    keeps one row per (home, status): recording a status again overwrites
    that row's notes, offer and date.
    """
    mode = mode or default_settings.status_history_mode
    must_get_home(backend, session=session, home_id=home_id)

    record = {
        "home_id": home_id,
        "status": payload.status,
        "notes": payload.notes,
        "offer_amount": payload.offer_amount,
        "date": payload.date or datetime.now(timezone.utc),
    }

    table = backend.table("status_updates", session=session)
    existing = None
    if mode == PER_STATUS:
        rows = (
            table.select("id")
            .eq("home_id", home_id)
            .eq("status", payload.status)
            .order("date", ascending=False)
            .limit(1)
            .execute()
            .unwrap()
        )
        existing = rows[0]["id"] if rows else None

    if existing:
        changes = {k: v for k, v in record.items() if k not in ("home_id", "status")}
        rows = table.update(changes).eq("id", existing).execute().unwrap()
    else:
        rows = table.insert(record).execute().unwrap()

    backend.table("homes", session=session).update({"current_status": payload.status}).eq("id", home_id).execute().unwrap()

    log.info(
        "status recorded",
        extra={"home_id": home_id, "user_id": session.user_id if session else None},
    )
    return StatusUpdateOut.model_validate(rows[0])


def delete_status_update(backend: Backend, *, session: AuthSession | None, status_update_id: str) -> None:
    must_get_row(backend, "status_updates", session=session, row_id=status_update_id, what="status update")
    backend.table("status_updates", session=session).delete().eq("id", status_update_id).execute().unwrap()
