# backend/househunt/cli/seed_demo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..clients import AuthSession, Backend, DemoBackend
from ..domain.eligibility import evaluate_eligibility
from ..schemas import (
    BasicSystems,
    Bedroom,
    ChecklistPatch,
    HomeCardOut,
    HomeCreate,
    HomeEvaluation,
    NoteCreate,
    SiteVicinity,
    StatusUpdateCreate,
    Structure,
)
from ..services import checklists, evaluations, homes, notes, status_history


@dataclass(frozen=True)
class SeedResult:
    user_email: str
    user_id: Optional[str]
    home_id: str
    eligible: bool
    overview: list[HomeCardOut]


def _sample_evaluation() -> HomeEvaluation:
    return HomeEvaluation(
        basic_systems=BasicSystems(
            roof_year="2015",
            hvac_type=["Central"],
            heating_type="Gas",
            water_heater_present=True,
            smoke_alarms_installed=True,
            smoke_alarms_working=True,
            co_detectors_installed=True,
            co_detectors_working=True,
            fire_extinguisher_present=True,
        ),
        structure=Structure(attic_insulation_present=True, crawl_space_accessible=True, doors_locking_properly=True),
        bedrooms=[
            Bedroom(
                bedroom_name="Bedroom 1",
                adequate_size=True,
                closet_present=True,
                entry_door_present=True,
                egress_present=True,
                window_size_meets_code=True,
                window_sill_height_ok=True,
                smoke_detector_present=True,
            ),
        ],
        site_vicinity=SiteVicinity(),
    )


def seed_demo(
    backend: Optional[Backend] = None,
    *,
    user_email: str = "demo@househunt.local",
    password: str = "demo",
) -> SeedResult:
    """
    Sign in, add one sample home with a checklist, status history, a note and
    an evaluation, then return the overview. Defaults to a fresh DemoBackend.
    """
    backend = backend or DemoBackend()
    session: AuthSession = backend.sign_in_with_password(user_email, password).unwrap()

    home = homes.create_home(
        backend,
        session=session,
        payload=HomeCreate(
            address="1420 Maple St, Springfield",
            listing_url="https://www.zillow.com/homedetails/1420-Maple-St/",
            asking_price=Decimal("189900"),
            agent_name="Pat Realtor",
        ),
    )

    checklists.update_checklist(
        backend,
        session=session,
        home_id=home.id,
        patch=ChecklistPatch(
            three_bed=True,
            two_bath=True,
            under_200k=True,
            no_basement=True,
            brick=True,
            updated=True,
            ranch=True,
            has_central_air=True,
        ),
    )

    status_history.record_status(
        backend, session=session, home_id=home.id, payload=StatusUpdateCreate(status="Seen", notes="Walked through")
    )
    notes.add_note(backend, session=session, home_id=home.id, payload=NoteCreate(note="Large back yard, no trees"))

    evaluation = evaluations.save_evaluation(
        backend, session=session, home_id=home.id, evaluation=_sample_evaluation()
    )

    return SeedResult(
        user_email=user_email,
        user_id=session.user_id,
        home_id=home.id,
        eligible=evaluate_eligibility(evaluation).eligible,
        overview=homes.home_overview(backend, session=session),
    )
