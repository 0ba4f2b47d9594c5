# backend/househunt/services/checklists.py
from __future__ import annotations

import logging

from ..clients import AuthSession, Backend
from ..domain.eligibility import checklist_completion, criteria_status, meets_criteria
from ..schemas import (
    ChecklistFields,
    ChecklistOut,
    ChecklistSummaryOut,
    CompletionOut,
    CriterionOut,
)
from .ownership import must_get_home

log = logging.getLogger("househunt.checklists")


def get_or_create_checklist(backend: Backend, *, session: AuthSession | None, home_id: str) -> ChecklistOut:
    """
    A home's checklist row is created lazily: a "no rows" answer means
    insert the all-false default. Any other failure propagates.
    """
    res = backend.table("home_checklists", session=session).select().eq("home_id", home_id).single().execute()
    if res.ok:
        return ChecklistOut.model_validate(res.data)
    if not res.error.is_no_rows:
        raise res.error

    must_get_home(backend, session=session, home_id=home_id)
    record = {"home_id": home_id, **ChecklistFields().model_dump()}
    rows = backend.table("home_checklists", session=session).insert(record).execute().unwrap()
    log.info("checklist created", extra={"home_id": home_id})
    return ChecklistOut.model_validate(rows[0])


def update_checklist(backend: Backend, *, session: AuthSession | None, home_id: str, patch) -> ChecklistOut:
    current = get_or_create_checklist(backend, session=session, home_id=home_id)
    changes = patch.model_dump(exclude_unset=True) if hasattr(patch, "model_dump") else dict(patch)
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        return current

    rows = (
        backend.table("home_checklists", session=session)
        .update(changes)
        .eq("home_id", home_id)
        .execute()
        .unwrap()
    )
    return ChecklistOut.model_validate(rows[0]) if rows else current


def checklist_summary(backend: Backend, *, session: AuthSession | None, home_id: str) -> ChecklistSummaryOut:
    checklist = get_or_create_checklist(backend, session=session, home_id=home_id)
    completion = checklist_completion(checklist)
    return ChecklistSummaryOut(
        home_id=home_id,
        meets_criteria=meets_criteria(checklist),
        completion=CompletionOut(met=completion.met, total=completion.total, ratio=completion.ratio),
        criteria=[CriterionOut(**row) for row in criteria_status(checklist)],
    )
