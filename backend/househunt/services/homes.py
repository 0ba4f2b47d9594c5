# backend/househunt/services/homes.py
from __future__ import annotations

import logging

from fastapi import HTTPException

from ..clients import AuthSession, Backend
from ..domain.eligibility import checklist_completion, meets_criteria
from ..domain.statuses import DEFAULT_STATUS
from ..schemas import CompletionOut, HomeCardOut, HomeCreate, HomeOut, HomeUpdate
from .ownership import must_get_home

log = logging.getLogger("househunt.homes")


def list_homes(backend: Backend, *, session: AuthSession | None) -> list[HomeOut]:
    rows = backend.table("homes", session=session).select().order("created_at", ascending=False).execute().unwrap()
    return [HomeOut.model_validate(r) for r in rows or []]


def get_home(backend: Backend, *, session: AuthSession | None, home_id: str) -> HomeOut:
    return must_get_home(backend, session=session, home_id=home_id)


def create_home(backend: Backend, *, session: AuthSession | None, payload: HomeCreate) -> HomeOut:
    record = payload.model_dump()
    record["current_status"] = DEFAULT_STATUS
    record["owner_id"] = session.user_id if session else None

    rows = backend.table("homes", session=session).insert(record).execute().unwrap()
    home = HomeOut.model_validate(rows[0])
    log.info("home created", extra={"home_id": home.id, "user_id": record["owner_id"]})
    return home


def update_home(backend: Backend, *, session: AuthSession | None, home_id: str, patch: HomeUpdate) -> HomeOut:
    changes = patch.model_dump(exclude_unset=True)
    if not changes:
        return must_get_home(backend, session=session, home_id=home_id)

    rows = backend.table("homes", session=session).update(changes).eq("id", home_id).execute().unwrap()
    if not rows:
        raise HTTPException(status_code=404, detail="home not found")
    return HomeOut.model_validate(rows[0])


def delete_home(backend: Backend, *, session: AuthSession | None, home_id: str) -> None:
    must_get_home(backend, session=session, home_id=home_id)
    backend.table("homes", session=session).delete().eq("id", home_id).execute().unwrap()
    log.info("home deleted", extra={"home_id": home_id})


def home_overview(backend: Backend, *, session: AuthSession | None) -> list[HomeCardOut]:
    """
    The home list with each home's criteria progress and primary photo.
    Three reads, joined here rather than one request per home.
    """
    homes = list_homes(backend, session=session)

    checklists = backend.table("home_checklists", session=session).select().execute().unwrap() or []
    by_home = {c["home_id"]: c for c in checklists}

    primaries = (
        backend.table("home_images", session=session)
        .select("home_id,image_url")
        .eq("is_primary", True)
        .execute()
        .unwrap()
        or []
    )
    image_by_home = {p["home_id"]: p["image_url"] for p in primaries}

    cards: list[HomeCardOut] = []
    for h in homes:
        checklist = by_home.get(h.id)
        completion = checklist_completion(checklist)
        cards.append(
            HomeCardOut(
                home=h,
                meets_criteria=meets_criteria(checklist),
                completion=CompletionOut(met=completion.met, total=completion.total, ratio=completion.ratio),
                primary_image_url=image_by_home.get(h.id),
            )
        )
    return cards
