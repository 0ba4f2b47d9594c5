# backend/tests/test_evaluations.py
from __future__ import annotations

import pytest

from househunt.clients import BackendError, Result
from househunt.schemas import BasicSystems, Bedroom, HomeEvaluation, Interior, Structure
from househunt.services import evaluations, homes


def test_fetch_before_any_save_returns_defaults(backend, session, home):
    ev = evaluations.fetch_evaluation(backend, session=session, home_id=home.id)
    assert ev == HomeEvaluation()


def test_save_then_fetch_round_trip(backend, session, home):
    ev = HomeEvaluation(
        basic_systems=BasicSystems(hvac_type=["Central", "Mini-Split"], heating_type="Gas", roof_year="2012"),
        structure=Structure(attic_insulation_present=True),
        interior=Interior(flooring_type=["Hardwood"], appliances_present=["Stove", "Fridge"]),
        bedrooms=[Bedroom(bedroom_name="Primary", closet_present=True), Bedroom(bedroom_name="Guest")],
        video_link="https://video.example/tour",
    )

    saved = evaluations.save_evaluation(backend, session=session, home_id=home.id, evaluation=ev)

    assert saved.basic_systems.hvac_type == ["Central", "Mini-Split"]
    assert saved.interior.appliances_present == ["Stove", "Fridge"]
    assert [b.bedroom_name for b in saved.bedrooms] == ["Guest", "Primary"]
    assert saved.video_link == "https://video.example/tour"
    assert homes.get_home(backend, session=session, home_id=home.id).video_link == "https://video.example/tour"


def test_saving_again_overwrites_instead_of_duplicating(backend, session, home):
    evaluations.save_evaluation(
        backend, session=session, home_id=home.id, evaluation=HomeEvaluation(bedrooms=[Bedroom(bedroom_name="A")])
    )
    evaluations.save_evaluation(
        backend,
        session=session,
        home_id=home.id,
        evaluation=HomeEvaluation(
            structure=Structure(foundation_cracks=True),
            bedrooms=[Bedroom(bedroom_name="A", adequate_size=True)],
        ),
    )

    assert len(backend.table("home_structure").select().eq("home_id", home.id).execute().data) == 1
    ev = evaluations.fetch_evaluation(backend, session=session, home_id=home.id)
    assert ev.structure.foundation_cracks is True
    assert [(b.bedroom_name, b.adequate_size) for b in ev.bedrooms] == [("A", True)]


def test_duplicate_bedroom_names_are_rejected():
    with pytest.raises(ValueError):
        HomeEvaluation(bedrooms=[Bedroom(bedroom_name="A"), Bedroom(bedroom_name="A")])


def test_partial_failure_names_saved_and_failed_parts(backend, session, home, monkeypatch):
    real = backend.run_query

    def failing(spec, s):
        if spec.table == "home_interior":
            return Result(error=BackendError("boom", code="XX000", status_code=500))
        return real(spec, s)

    monkeypatch.setattr(backend, "run_query", failing)

    with pytest.raises(evaluations.EvaluationSaveError) as e:
        evaluations.save_evaluation(
            backend,
            session=session,
            home_id=home.id,
            evaluation=HomeEvaluation(structure=Structure(crawl_space_accessible=True), bedrooms=[Bedroom(bedroom_name="A")]),
        )

    err = e.value
    assert err.saved == ["basic_systems", "structure"]
    assert err.failed == "interior"
    assert err.skipped == ["site_vicinity", "bedroom:A"]

    # no rollback: earlier sections stay written
    monkeypatch.setattr(backend, "run_query", real)
    ev = evaluations.fetch_evaluation(backend, session=session, home_id=home.id)
    assert ev.structure.crawl_space_accessible is True
    assert ev.bedrooms == []


def test_eligibility_for_home(backend, session, home):
    out = evaluations.home_eligibility(backend, session=session, home_id=home.id)
    assert out.eligible is False
    assert [c.name for c in out.categories] == ["Site & Vicinity", "Systems & Safety", "Bedrooms"]
    assert out.summary.splitlines()[1] == "HVAC: None"
