# backend/tests/test_checklist_criteria.py
from __future__ import annotations

from itertools import product

import pytest

from househunt.domain.eligibility import CRITERIA_FIELDS, checklist_completion, criteria_status, meets_criteria
from househunt.models import HomeChecklist
from househunt.schemas import ChecklistFields


def _all_true() -> dict:
    return {f: True for f in CRITERIA_FIELDS}


def test_all_eight_true_meets_criteria():
    c = _all_true()
    assert meets_criteria(c) is True
    assert checklist_completion(c).met == 8
    assert checklist_completion(c).total == 8


@pytest.mark.parametrize("field", CRITERIA_FIELDS)
def test_any_single_false_breaks_criteria(field):
    c = _all_true()
    c[field] = False
    assert meets_criteria(c) is False
    assert checklist_completion(c).met == 7


def test_completion_counts_true_fields_for_every_combination():
    for values in product([False, True], repeat=len(CRITERIA_FIELDS)):
        c = dict(zip(CRITERIA_FIELDS, values))
        comp = checklist_completion(c)
        assert comp.met == sum(values)
        assert comp.total == 8
        assert meets_criteria(c) is all(values)


def test_all_but_trees_is_seven_of_eight():
    c = _all_true()
    c["no_trees_back"] = False
    comp = checklist_completion(c)
    assert (comp.met, comp.total) == (7, 8)
    assert comp.ratio == 0.875
    assert meets_criteria(c) is False


def test_missing_checklist_is_zero_not_an_error():
    assert meets_criteria(None) is False
    assert checklist_completion(None).met == 0
    assert checklist_completion(None).total == 8


def test_feature_flags_never_count_toward_criteria():
    c = ChecklistFields(has_central_air=True, has_pool=True, has_basement=True, is_open_concept=True)
    assert checklist_completion(c).met == 0


def test_works_with_orm_rows_and_models():
    row = HomeChecklist(home_id="h1", **_all_true())
    model = ChecklistFields(**_all_true())
    assert meets_criteria(row) is True
    assert meets_criteria(model) is True


def test_criteria_status_is_in_display_order_with_labels():
    rows = criteria_status({"brick": True})
    assert [r["field"] for r in rows] == list(CRITERIA_FIELDS)
    assert rows[0]["label"] == "3 Bedroom"
    assert rows[2]["label"] == "Under $200K"
    assert [r["met"] for r in rows if r["field"] == "brick"] == [True]
