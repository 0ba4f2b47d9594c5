# backend/househunt/domain/eligibility.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional

# (field, label) for the eight buying criteria, in display order.
CRITERIA: tuple[tuple[str, str], ...] = (
    ("three_bed", "3 Bedroom"),
    ("two_bath", "2 Bathroom"),
    ("under_200k", "Under $200K"),
    ("no_basement", "No Basement"),
    ("no_trees_back", "No Trees in Back"),
    ("brick", "Brick Construction"),
    ("updated", "Updated"),
    ("ranch", "Ranch Style"),
)
CRITERIA_FIELDS: tuple[str, ...] = tuple(f for f, _ in CRITERIA)

SITE_VICINITY = "Site & Vicinity"
SYSTEMS_SAFETY = "Systems & Safety"
BEDROOMS = "Bedrooms"


def get_field(obj: Any, key: str, default: Any = None) -> Any:
    """Read a field from a dict, pydantic model or ORM row alike."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _flag(obj: Any, key: str) -> bool:
    return bool(get_field(obj, key, False))


def normalize_multi(raw: Any) -> list[str]:
    """
    Multi-select values (hvac_type, flooring_type) were stored both as a
    single string and as a list. "None" or empty means nothing selected.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        items = [p.strip() for p in raw.split(",")]
    else:
        items = [str(p).strip() for p in raw]
    return [p for p in items if p and p.lower() != "none"]


# -----------------------------
# Basic variant: the eight criteria
# -----------------------------
@dataclass(frozen=True)
class Completion:
    met: int
    total: int = len(CRITERIA)

    @property
    def ratio(self) -> float:
        return round(self.met / self.total, 4) if self.total else 0.0


def criteria_status(checklist: Any) -> list[dict]:
    """Per-criterion rows for display: [{"field", "label", "met"}]."""
    return [{"field": f, "label": label, "met": _flag(checklist, f)} for f, label in CRITERIA]


def meets_criteria(checklist: Any) -> bool:
    if checklist is None:
        return False
    return all(_flag(checklist, f) for f in CRITERIA_FIELDS)


def checklist_completion(checklist: Any) -> Completion:
    if checklist is None:
        return Completion(met=0)
    return Completion(met=sum(1 for f in CRITERIA_FIELDS if _flag(checklist, f)))


# -----------------------------
# Extended variant: evaluation record set
# -----------------------------
@dataclass(frozen=True)
class CheckResult:
    label: str
    passed: bool
    subject: Optional[str] = None  # bedroom name for per-bedroom checks


@dataclass(frozen=True)
class CategoryResult:
    name: str
    checks: tuple[CheckResult, ...] = ()

    @property
    def passed(self) -> bool:
        # all() of an empty set is True: a home with no bedrooms recorded passes
        # the bedroom category. Kept as-is pending a product decision.
        return all(c.passed for c in self.checks)

    @property
    def passed_count(self) -> int:
        return sum(1 for c in self.checks if c.passed)

    @property
    def total(self) -> int:
        return len(self.checks)


@dataclass(frozen=True)
class EligibilityReport:
    categories: tuple[CategoryResult, ...] = field(default_factory=tuple)

    @property
    def eligible(self) -> bool:
        return all(c.passed for c in self.categories)

    @property
    def passed_count(self) -> int:
        return sum(c.passed_count for c in self.categories)

    @property
    def total(self) -> int:
        return sum(c.total for c in self.categories)

    @property
    def ratio(self) -> float:
        return round(self.passed_count / self.total, 4) if self.total else 0.0

    def category(self, name: str) -> CategoryResult:
        for c in self.categories:
            if c.name == name:
                return c
        raise KeyError(name)

    def failed_checks(self) -> list[CheckResult]:
        return [chk for c in self.categories for chk in c.checks if not chk.passed]

    def to_dict(self) -> dict:
        return {
            "eligible": self.eligible,
            "passed": self.passed_count,
            "total": self.total,
            "ratio": self.ratio,
            "categories": [
                {
                    "name": c.name,
                    "passed": c.passed,
                    "passed_count": c.passed_count,
                    "total": c.total,
                    "checks": [
                        {"label": chk.label, "passed": chk.passed, "subject": chk.subject} for chk in c.checks
                    ],
                }
                for c in self.categories
            ],
        }


def site_vicinity_checks(site: Any) -> CategoryResult:
    adjacent = (
        _flag(site, "adjacent_dilapidated")
        or _flag(site, "vacant_units_next_door")
        or _flag(site, "fire_damage_nearby")
    )
    return CategoryResult(
        SITE_VICINITY,
        (
            CheckResult("No adjacent vacant/dilapidated units", not adjacent),
            CheckResult("No illegal repair shops nearby", not _flag(site, "illegal_repairs_nearby")),
            CheckResult("No excessive noise", not _flag(site, "excessive_noise")),
            CheckResult("No trash or dumping", not _flag(site, "trash_dumping_present")),
            CheckResult("No graffiti", not _flag(site, "graffiti_present")),
            CheckResult("Not isolated", not _flag(site, "isolated_location")),
        ),
    )


def systems_safety_checks(basic_systems: Any, structure: Any) -> CategoryResult:
    return CategoryResult(
        SYSTEMS_SAFETY,
        (
            CheckResult("Air conditioning provided", bool(normalize_multi(get_field(basic_systems, "hvac_type")))),
            CheckResult("CO detectors installed", _flag(basic_systems, "co_detectors_installed")),
            CheckResult("Fire extinguisher present", _flag(basic_systems, "fire_extinguisher_present")),
            CheckResult("Attic insulation present", _flag(structure, "attic_insulation_present")),
            CheckResult("Crawl space accessible", _flag(structure, "crawl_space_accessible")),
        ),
    )


def _egress_ok(bedroom: Any) -> bool:
    if not _flag(bedroom, "egress_present"):
        return False
    if (get_field(bedroom, "egress_type") or "Window") == "Window":
        return _flag(bedroom, "window_size_meets_code") and _flag(bedroom, "window_sill_height_ok")
    return True


def bedroom_checks(bedroom: Any) -> tuple[CheckResult, ...]:
    name = str(get_field(bedroom, "bedroom_name") or "Bedroom")
    return (
        CheckResult("Adequate size", _flag(bedroom, "adequate_size"), name),
        CheckResult("Closet present", _flag(bedroom, "closet_present"), name),
        CheckResult("Entry door present", _flag(bedroom, "entry_door_present"), name),
        CheckResult("Egress present", _egress_ok(bedroom), name),
        CheckResult("Smoke detector present", _flag(bedroom, "smoke_detector_present"), name),
        CheckResult(
            "CO detector present or no gas appliance",
            _flag(bedroom, "co_detector_present") or not _flag(bedroom, "gas_appliance_present"),
            name,
        ),
        CheckResult("Not accessed through another bedroom", not _flag(bedroom, "accessed_through_another"), name),
        CheckResult("Does not connect to garage", not _flag(bedroom, "connects_to_garage"), name),
    )


def _bedroom_list(raw: Any) -> list[Any]:
    if raw is None:
        return []
    if isinstance(raw, dict):
        # keyed by bedroom name
        out = []
        for name, b in raw.items():
            if isinstance(b, dict) and not b.get("bedroom_name"):
                b = {**b, "bedroom_name": name}
            out.append(b)
        return out
    return list(raw)


def bedrooms_category(bedrooms: Iterable[Any] | dict | None) -> CategoryResult:
    checks: list[CheckResult] = []
    for b in _bedroom_list(bedrooms):
        checks.extend(bedroom_checks(b))
    return CategoryResult(BEDROOMS, tuple(checks))


def evaluate_eligibility(evaluation: Any) -> EligibilityReport:
    """
    Three-category eligibility over an evaluation record set. Works with the
    HomeEvaluation schema or a plain dict with the same section keys
    (basic_systems, structure, interior, bedrooms, site_vicinity). Missing
    sections evaluate as their defaults.

    Eligible = every category passes.
    """
    basic = get_field(evaluation, "basic_systems")
    structure = get_field(evaluation, "structure")
    site = get_field(evaluation, "site_vicinity")
    bedrooms = get_field(evaluation, "bedrooms")

    return EligibilityReport(
        (
            site_vicinity_checks(site),
            systems_safety_checks(basic, structure),
            bedrooms_category(bedrooms),
        )
    )


def _yes_no(v: bool) -> str:
    return "Yes" if v else "No"


def evaluation_summary(evaluation: Any, *, on: Optional[date] = None) -> str:
    """Plain-text summary of an evaluation, the form kept in checklist notes."""
    basic = get_field(evaluation, "basic_systems")
    structure = get_field(evaluation, "structure")
    interior = get_field(evaluation, "interior")
    site = get_field(evaluation, "site_vicinity")

    site_issues = [
        key.replace("_", " ")
        for key in (
            "adjacent_dilapidated",
            "vacant_units_next_door",
            "fire_damage_nearby",
            "trash_dumping_present",
            "illegal_repairs_nearby",
            "excessive_noise",
            "graffiti_present",
            "isolated_location",
        )
        if _flag(site, key)
    ]

    lines = [
        f"Evaluation completed: {(on or date.today()).isoformat()}",
        f"HVAC: {', '.join(normalize_multi(get_field(basic, 'hvac_type'))) or 'None'}",
        f"Flooring: {', '.join(normalize_multi(get_field(interior, 'flooring_type'))) or 'None'}",
        f"Paint: {get_field(basic, 'paint_condition') or 'Good'}",
        f"Plumbing: {get_field(basic, 'plumbing_condition') or 'Good'}",
        f"Electrical Panel Updated: {_yes_no(_flag(basic, 'electrical_panel_updated'))}",
        f"Smoke Alarms: {_yes_no(_flag(basic, 'smoke_alarms_installed'))}",
        f"CO Detectors: {_yes_no(_flag(basic, 'co_detectors_installed'))}",
        f"Foundation Issues: {_yes_no(_flag(structure, 'foundation_cracks'))}",
        f"Attic Insulation: {_yes_no(_flag(structure, 'attic_insulation_present'))}",
        f"Site Issues: {', '.join(site_issues) or 'None'}",
    ]
    return "\n".join(lines)
