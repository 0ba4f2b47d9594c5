# backend/househunt/services/evaluations.py
from __future__ import annotations

import logging
from typing import Any, Callable

from ..clients import AuthSession, Backend, BackendError
from ..domain.eligibility import evaluate_eligibility, evaluation_summary
from ..models import CONFLICT_TARGETS
from ..schemas import (
    BasicSystems,
    Bedroom,
    CategoryOut,
    EligibilityOut,
    HomeEvaluation,
    Interior,
    SiteVicinity,
    Structure,
)
from .ownership import must_get_home

log = logging.getLogger("househunt.evaluations")

# section attribute -> (table, schema)
SECTIONS: tuple[tuple[str, str, type], ...] = (
    ("basic_systems", "home_basic_systems", BasicSystems),
    ("structure", "home_structure", Structure),
    ("interior", "home_interior", Interior),
    ("site_vicinity", "home_site_vicinity", SiteVicinity),
)


class EvaluationSaveError(Exception):
    """
    Raised when an evaluation save stops part-way. The parts in `saved` were
    written and stay written; `failed` is the part that was rejected and
    `skipped` the ones never attempted.
    """

    def __init__(self, failed: str, error: BackendError, *, saved: list[str], skipped: list[str]) -> None:
        self.failed = failed
        self.error = error
        self.saved = list(saved)
        self.skipped = list(skipped)
        done = ", ".join(self.saved) or "nothing"
        super().__init__(f"saving {failed} failed ({error.message}); already saved: {done}")


def save_evaluation(
    backend: Backend,
    *,
    session: AuthSession | None,
    home_id: str,
    evaluation: HomeEvaluation,
) -> HomeEvaluation:
    """
    Write every section as its own upsert: four single-row sections, one row
    per bedroom, then the home's video link when given. There is no
    transaction across them.
    """
    must_get_home(backend, session=session, home_id=home_id)

    steps: list[tuple[str, Callable[[], Any]]] = []
    for attr, table, _schema in SECTIONS:
        record = {"home_id": home_id, **getattr(evaluation, attr).model_dump()}
        steps.append((attr, _upsert(backend, session, table, record)))
    for bedroom in evaluation.bedrooms:
        record = {"home_id": home_id, **bedroom.model_dump()}
        steps.append((f"bedroom:{bedroom.bedroom_name}", _upsert(backend, session, "home_bedrooms", record)))
    if evaluation.video_link is not None:
        patch = {"video_link": evaluation.video_link or None}
        steps.append(
            (
                "video_link",
                lambda: backend.table("homes", session=session).update(patch).eq("id", home_id).execute(),
            )
        )

    saved: list[str] = []
    for i, (name, run) in enumerate(steps):
        res = run()
        if res.error is not None:
            skipped = [n for n, _ in steps[i + 1 :]]
            log.warning(
                "evaluation save stopped at %s",
                name,
                extra={"home_id": home_id, "error_code": res.error.code},
            )
            raise EvaluationSaveError(name, res.error, saved=saved, skipped=skipped)
        saved.append(name)

    log.info("evaluation saved", extra={"home_id": home_id})
    return fetch_evaluation(backend, session=session, home_id=home_id)


def _upsert(backend: Backend, session: AuthSession | None, table: str, record: dict) -> Callable[[], Any]:
    def run():
        return backend.table(table, session=session).upsert(record, on_conflict=CONFLICT_TARGETS[table]).execute()

    return run


def fetch_evaluation(backend: Backend, *, session: AuthSession | None, home_id: str) -> HomeEvaluation:
    """Assemble the record set. Sections never saved come back as defaults."""
    home = must_get_home(backend, session=session, home_id=home_id)

    sections: dict[str, Any] = {}
    for attr, table, schema in SECTIONS:
        res = backend.table(table, session=session).select().eq("home_id", home_id).single().execute()
        if res.error is not None and res.error.is_no_rows:
            sections[attr] = schema()
        else:
            sections[attr] = schema.model_validate(res.unwrap())

    rows = (
        backend.table("home_bedrooms", session=session)
        .select()
        .eq("home_id", home_id)
        .order("bedroom_name")
        .execute()
        .unwrap()
    )
    bedrooms = [Bedroom.model_validate(r) for r in rows or []]

    return HomeEvaluation(**sections, bedrooms=bedrooms, video_link=home.video_link)


def home_eligibility(backend: Backend, *, session: AuthSession | None, home_id: str) -> EligibilityOut:
    evaluation = fetch_evaluation(backend, session=session, home_id=home_id)
    report = evaluate_eligibility(evaluation)
    data = report.to_dict()
    return EligibilityOut(
        home_id=home_id,
        eligible=data["eligible"],
        passed=data["passed"],
        total=data["total"],
        ratio=data["ratio"],
        categories=[CategoryOut(**c) for c in data["categories"]],
        summary=evaluation_summary(evaluation),
    )
