# backend/tests/test_eligibility_report.py
from __future__ import annotations

from datetime import date

from househunt.domain.eligibility import (
    BEDROOMS,
    SITE_VICINITY,
    SYSTEMS_SAFETY,
    evaluate_eligibility,
    evaluation_summary,
)
from househunt.schemas import BasicSystems, Bedroom, HomeEvaluation, SiteVicinity, Structure


def _good_bedroom(name: str = "Bedroom 1", **overrides) -> Bedroom:
    fields = dict(
        bedroom_name=name,
        adequate_size=True,
        closet_present=True,
        entry_door_present=True,
        egress_present=True,
        egress_type="Window",
        window_size_meets_code=True,
        window_sill_height_ok=True,
        smoke_detector_present=True,
    )
    fields.update(overrides)
    return Bedroom(**fields)


def _passing(**overrides) -> HomeEvaluation:
    ev = dict(
        basic_systems=BasicSystems(hvac_type=["Central"], co_detectors_installed=True, fire_extinguisher_present=True),
        structure=Structure(attic_insulation_present=True, crawl_space_accessible=True),
        site_vicinity=SiteVicinity(),
        bedrooms=[_good_bedroom()],
    )
    ev.update(overrides)
    return HomeEvaluation(**ev)


def test_passing_evaluation_is_eligible():
    report = evaluate_eligibility(_passing())
    assert report.eligible is True
    assert report.passed_count == report.total == 6 + 5 + 8
    assert report.ratio == 1.0
    assert report.failed_checks() == []


def test_empty_bedroom_set_passes_vacuously():
    report = evaluate_eligibility(_passing(bedrooms=[]))
    bedrooms = report.category(BEDROOMS)
    assert bedrooms.total == 0
    assert bedrooms.passed is True
    assert report.eligible is True


def test_defaults_fail_systems_but_pass_site():
    report = evaluate_eligibility(HomeEvaluation())
    assert report.category(SITE_VICINITY).passed is True
    assert report.category(SYSTEMS_SAFETY).passed is False
    assert report.eligible is False


def test_any_adjacent_problem_fails_the_combined_check():
    for flag in ("adjacent_dilapidated", "vacant_units_next_door", "fire_damage_nearby"):
        report = evaluate_eligibility(_passing(site_vicinity=SiteVicinity(**{flag: True})))
        site = report.category(SITE_VICINITY)
        assert site.passed is False
        assert [c.label for c in site.checks if not c.passed] == ["No adjacent vacant/dilapidated units"]


def test_no_hvac_fails_air_conditioning():
    for hvac in ([], "None", ""):
        ev = _passing()
        ev.basic_systems = BasicSystems(hvac_type=hvac, co_detectors_installed=True, fire_extinguisher_present=True)
        report = evaluate_eligibility(ev)
        failed = [c.label for c in report.failed_checks()]
        assert failed == ["Air conditioning provided"]


def test_single_string_hvac_is_accepted():
    ev = BasicSystems(hvac_type="Window")
    assert ev.hvac_type == ["Window"]


def test_co_detector_only_required_with_gas_appliance():
    no_gas = evaluate_eligibility(_passing(bedrooms=[_good_bedroom(co_detector_present=False)]))
    assert no_gas.category(BEDROOMS).passed is True

    gas = evaluate_eligibility(
        _passing(bedrooms=[_good_bedroom(gas_appliance_present=True, co_detector_present=False)])
    )
    assert gas.category(BEDROOMS).passed is False

    gas_with_co = evaluate_eligibility(
        _passing(bedrooms=[_good_bedroom(gas_appliance_present=True, co_detector_present=True)])
    )
    assert gas_with_co.category(BEDROOMS).passed is True


def test_window_egress_needs_size_and_sill_but_door_does_not():
    small_window = _good_bedroom(window_size_meets_code=False)
    assert evaluate_eligibility(_passing(bedrooms=[small_window])).eligible is False

    door = _good_bedroom(egress_type="Door", window_size_meets_code=False, window_sill_height_ok=False)
    assert evaluate_eligibility(_passing(bedrooms=[door])).eligible is True


def test_one_bad_bedroom_fails_category_and_names_it():
    bad = _good_bedroom("Bedroom 2", connects_to_garage=True)
    report = evaluate_eligibility(_passing(bedrooms=[_good_bedroom(), bad]))
    failed = report.failed_checks()
    assert [(c.label, c.subject) for c in failed] == [("Does not connect to garage", "Bedroom 2")]
    assert report.eligible is False


def test_plain_dict_input_matches_model_input():
    as_model = _passing()
    as_dict = as_model.model_dump()
    assert evaluate_eligibility(as_dict).to_dict() == evaluate_eligibility(as_model).to_dict()


def test_summary_text():
    ev = _passing(site_vicinity=SiteVicinity(graffiti_present=True, excessive_noise=True))
    text = evaluation_summary(ev, on=date(2024, 5, 1))
    lines = text.splitlines()
    assert lines[0] == "Evaluation completed: 2024-05-01"
    assert "HVAC: Central" in lines
    assert "Flooring: None" in lines
    assert "CO Detectors: Yes" in lines
    assert "Foundation Issues: No" in lines
    assert lines[-1] == "Site Issues: excessive noise, graffiti present"
