# backend/househunt/schemas.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, create_model, field_validator

from .domain.eligibility import CRITERIA_FIELDS, normalize_multi
from .domain.statuses import DEFAULT_STATUS, normalize_status

Condition = Literal["Good", "Fair", "Poor"]


# -------------------- Auth --------------------

class LoginIn(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class SessionOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: Optional[str] = None
    email: Optional[str] = None
    expires_at: Optional[int] = None
    demo: bool = False


# -------------------- Homes --------------------

class HomeBase(BaseModel):
    address: str = Field(min_length=1)
    listing_url: Optional[str] = None
    asking_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    agent_name: Optional[str] = None
    video_link: Optional[str] = None


class HomeCreate(HomeBase):
    pass


class HomeUpdate(BaseModel):
    address: Optional[str] = Field(default=None, min_length=1)
    listing_url: Optional[str] = None
    asking_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    agent_name: Optional[str] = None
    video_link: Optional[str] = None
    current_status: Optional[str] = None

    @field_validator("current_status")
    @classmethod
    def _status(cls, v: Optional[str]) -> Optional[str]:
        return normalize_status(v) if v is not None else None


class HomeOut(HomeBase):
    id: str
    current_status: str = DEFAULT_STATUS
    owner_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# -------------------- Checklist --------------------

CHECKLIST_FEATURE_FLAGS: tuple[str, ...] = (
    # hvac
    "has_central_air",
    "has_heat_pump",
    "has_gas_furnace",
    "has_window_units",
    # flooring
    "has_hardwood",
    "has_carpet",
    "has_tile",
    "has_laminate",
    # kitchen
    "has_kitchen_island",
    "has_pantry",
    "has_updated_appliances",
    "is_open_concept",
    # bathrooms
    "has_master_bath",
    "has_updated_fixtures",
    "has_separate_tub_shower",
    "has_double_vanity",
    # exterior
    "has_garage",
    "has_deck_patio",
    "has_fenced_yard",
    "has_pool",
    # other
    "has_basement",
    "has_attic",
    "has_fireplace",
    "has_security_system",
)

CHECKLIST_FIELDS: tuple[str, ...] = CRITERIA_FIELDS + CHECKLIST_FEATURE_FLAGS


class ChecklistFields(BaseModel):
    three_bed: bool = False
    two_bath: bool = False
    under_200k: bool = False
    no_basement: bool = False
    no_trees_back: bool = False
    brick: bool = False
    updated: bool = False
    ranch: bool = False

    has_central_air: bool = False
    has_heat_pump: bool = False
    has_gas_furnace: bool = False
    has_window_units: bool = False
    has_hardwood: bool = False
    has_carpet: bool = False
    has_tile: bool = False
    has_laminate: bool = False
    has_kitchen_island: bool = False
    has_pantry: bool = False
    has_updated_appliances: bool = False
    is_open_concept: bool = False
    has_master_bath: bool = False
    has_updated_fixtures: bool = False
    has_separate_tub_shower: bool = False
    has_double_vanity: bool = False
    has_garage: bool = False
    has_deck_patio: bool = False
    has_fenced_yard: bool = False
    has_pool: bool = False
    has_basement: bool = False
    has_attic: bool = False
    has_fireplace: bool = False
    has_security_system: bool = False

    notes: str = ""


class ChecklistOut(ChecklistFields):
    id: str
    home_id: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Every checklist field optional; only the fields sent are written.
ChecklistPatch = create_model(
    "ChecklistPatch",
    __config__=ConfigDict(extra="forbid"),
    notes=(Optional[str], None),
    **{name: (Optional[bool], None) for name in CHECKLIST_FIELDS},
)


class CriterionOut(BaseModel):
    field: str
    label: str
    met: bool


class CompletionOut(BaseModel):
    met: int
    total: int
    ratio: float


class ChecklistSummaryOut(BaseModel):
    home_id: str
    meets_criteria: bool
    completion: CompletionOut
    criteria: list[CriterionOut]


class HomeCardOut(BaseModel):
    home: HomeOut
    meets_criteria: bool
    completion: CompletionOut
    primary_image_url: Optional[str] = None


# -------------------- Status / notes / images --------------------

class StatusUpdateCreate(BaseModel):
    status: str
    notes: Optional[str] = None
    offer_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    date: Optional[datetime] = None

    @field_validator("status")
    @classmethod
    def _status(cls, v: str) -> str:
        return normalize_status(v)


class StatusUpdateOut(BaseModel):
    id: str
    home_id: str
    status: str
    notes: Optional[str] = None
    offer_amount: Optional[Decimal] = None
    date: datetime
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class NoteCreate(BaseModel):
    note: str = Field(min_length=1)


class NoteOut(BaseModel):
    id: str
    home_id: str
    note: str
    status: str
    date: datetime
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ImageOut(BaseModel):
    id: str
    home_id: str
    image_url: str
    is_primary: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# -------------------- Evaluation record set --------------------

class _Section(BaseModel):
    # Rows read back from the backend carry id/home_id/timestamps; they are not part of the form.
    model_config = ConfigDict(extra="ignore", from_attributes=True)


class BasicSystems(_Section):
    roof_year: str = ""
    paint_condition: Condition = "Good"
    hvac_type: list[Literal["Central", "Window", "Mini-Split"]] = Field(default_factory=list)
    hvac_year: str = ""
    ac_unit_year_month: str = ""
    heating_type: Literal["Gas", "Electric"] = "Electric"
    water_heater_present: bool = False
    water_heater_year: str = ""
    hot_water_test: Literal["Instant", "Delay", "None"] = "None"
    plumbing_condition: Condition = "Good"
    electrical_panel_updated: bool = False
    gfci_present: bool = False
    outlets_grounded: bool = False
    lights_working: Literal["All", "Some", "None"] = "None"
    smoke_alarms_installed: bool = False
    smoke_alarms_working: bool = False
    co_detectors_installed: bool = False
    co_detectors_working: bool = False
    fire_extinguisher_present: bool = False

    @field_validator("hvac_type", mode="before")
    @classmethod
    def _hvac(cls, v):
        return normalize_multi(v)


class Structure(_Section):
    foundation_cracks: bool = False
    crawl_space_accessible: bool = False
    vapor_barrier_present: bool = False
    attic_insulation_present: bool = False
    double_glazed_windows: bool = False
    doors_locking_properly: bool = False


class Interior(_Section):
    flooring_type: list[Literal["Hardwood", "Carpet", "Tile", "Laminate"]] = Field(default_factory=list)
    hardwood_condition: Condition = "Good"
    ceiling_issues: bool = False
    cabinet_condition: Condition = "Good"
    appliances_present: list[str] = Field(default_factory=list)
    fixtures_operational: bool = False

    @field_validator("flooring_type", mode="before")
    @classmethod
    def _flooring(cls, v):
        return normalize_multi(v)

    @field_validator("appliances_present", mode="before")
    @classmethod
    def _appliances(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v


class Bedroom(_Section):
    bedroom_name: str = Field(min_length=1)
    adequate_size: bool = False
    closet_present: bool = False
    entry_door_present: bool = False
    egress_present: bool = False
    egress_type: Literal["Window", "Door"] = "Window"
    window_size_meets_code: bool = False
    window_sill_height_ok: bool = False
    smoke_detector_present: bool = False
    co_detector_present: bool = False
    gas_appliance_present: bool = False
    accessed_through_another: bool = False
    connects_to_garage: bool = False


class SiteVicinity(_Section):
    adjacent_dilapidated: bool = False
    vacant_units_next_door: bool = False
    fire_damage_nearby: bool = False
    trash_dumping_present: bool = False
    illegal_repairs_nearby: bool = False
    excessive_noise: bool = False
    graffiti_present: bool = False
    isolated_location: bool = False


class HomeEvaluation(BaseModel):
    basic_systems: BasicSystems = Field(default_factory=BasicSystems)
    structure: Structure = Field(default_factory=Structure)
    interior: Interior = Field(default_factory=Interior)
    bedrooms: list[Bedroom] = Field(default_factory=list)
    site_vicinity: SiteVicinity = Field(default_factory=SiteVicinity)
    video_link: Optional[str] = None

    @field_validator("bedrooms")
    @classmethod
    def _unique_bedrooms(cls, v: list[Bedroom]) -> list[Bedroom]:
        seen: set[str] = set()
        for b in v:
            if b.bedroom_name in seen:
                raise ValueError(f"duplicate bedroom_name: {b.bedroom_name!r}")
            seen.add(b.bedroom_name)
        return v


class CheckOut(BaseModel):
    label: str
    passed: bool
    subject: Optional[str] = None


class CategoryOut(BaseModel):
    name: str
    passed: bool
    passed_count: int
    total: int
    checks: list[CheckOut]


class EligibilityOut(BaseModel):
    home_id: str
    eligible: bool
    passed: int
    total: int
    ratio: float
    categories: list[CategoryOut]
    summary: str
