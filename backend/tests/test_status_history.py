# backend/tests/test_status_history.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from househunt.schemas import NoteCreate, StatusUpdateCreate
from househunt.services import homes, notes, status_history


def _at(minutes: int) -> datetime:
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc) + timedelta(minutes=minutes)


def test_append_mode_keeps_every_transition(backend, session, home):
    for i, s in enumerate(["Contacted", "Seen", "Contacted"]):
        status_history.record_status(
            backend, session=session, home_id=home.id, payload=StatusUpdateCreate(status=s, date=_at(i)), mode="append"
        )

    history = status_history.list_status_updates(backend, session=session, home_id=home.id)
    assert [u.status for u in history] == ["Contacted", "Seen", "Contacted"]
    assert homes.get_home(backend, session=session, home_id=home.id).current_status == "Contacted"


def test_per_status_mode_overwrites_the_row_for_that_status(backend, session, home):
    rec = lambda s, n, m: status_history.record_status(  # noqa: E731
        backend, session=session, home_id=home.id, payload=StatusUpdateCreate(status=s, notes=n, date=_at(m)), mode="per_status"
    )
    first = rec("Seen", "first look", 0)
    rec("Liked", None, 1)
    again = rec("Seen", "second look", 2)

    assert again.id == first.id
    history = status_history.list_status_updates(backend, session=session, home_id=home.id)
    assert [(u.status, u.notes) for u in history] == [("Seen", "second look"), ("Liked", None)]


def test_offer_amount_round_trips_exactly(backend, session, home):
    status_history.record_status(
        backend,
        session=session,
        home_id=home.id,
        payload=StatusUpdateCreate(status="Offer Made", offer_amount=Decimal("185000")),
    )
    [update] = status_history.list_status_updates(backend, session=session, home_id=home.id)
    assert update.status == "Offer Made"
    assert update.offer_amount == Decimal("185000")


def test_status_spelling_is_normalized_and_unknown_rejected():
    assert StatusUpdateCreate(status="offer_made").status == "Offer Made"
    with pytest.raises(ValueError):
        StatusUpdateCreate(status="Maybe")


def test_delete_status_update(backend, session, home):
    u = status_history.record_status(backend, session=session, home_id=home.id, payload=StatusUpdateCreate(status="Seen"))
    status_history.delete_status_update(backend, session=session, status_update_id=u.id)
    assert status_history.list_status_updates(backend, session=session, home_id=home.id) == []


def test_note_snapshots_the_status_at_the_time(backend, session, home):
    notes.add_note(backend, session=session, home_id=home.id, payload=NoteCreate(note="first"))
    status_history.record_status(backend, session=session, home_id=home.id, payload=StatusUpdateCreate(status="Liked"))
    notes.add_note(backend, session=session, home_id=home.id, payload=NoteCreate(note="second"))

    by_note = {n.note: n.status for n in notes.list_notes(backend, session=session, home_id=home.id)}
    assert by_note == {"first": "New", "second": "Liked"}
