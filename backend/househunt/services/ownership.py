# backend/househunt/services/ownership.py
from __future__ import annotations

from fastapi import HTTPException

from ..clients import AuthSession, Backend
from ..schemas import HomeOut


def must_get_home(backend: Backend, *, session: AuthSession | None, home_id: str) -> HomeOut:
    res = backend.table("homes", session=session).select().eq("id", home_id).single().execute()
    if res.error is not None and res.error.is_no_rows:
        raise HTTPException(status_code=404, detail="home not found")
    return HomeOut.model_validate(res.unwrap())


def must_get_row(backend: Backend, table: str, *, session: AuthSession | None, row_id: str, what: str) -> dict:
    res = backend.table(table, session=session).select().eq("id", row_id).single().execute()
    if res.error is not None and res.error.is_no_rows:
        raise HTTPException(status_code=404, detail=f"{what} not found")
    return res.unwrap()
