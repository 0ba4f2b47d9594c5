# backend/househunt/models.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    false,
    func,
    text,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql.functions import FunctionElement

from .db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    # Columns hold naive UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


class new_uuid(FunctionElement):
    """Server-side default for text UUID primary keys."""

    type = String(36)
    inherit_cache = True


@compiles(new_uuid, "postgresql")
def _new_uuid_pg(element, compiler, **kw):
    return "gen_random_uuid()::text"


@compiles(new_uuid)
def _new_uuid_default(element, compiler, **kw):
    return "lower(hex(randomblob(16)))"


def _flag():
    return mapped_column(Boolean, nullable=False, default=False, server_default=false())


# -----------------------------
# Core: homes + lightweight checklist
# -----------------------------
class Home(Base):
    __tablename__ = "homes"
    __table_args__ = (Index("ix_homes_created_at", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid, server_default=new_uuid())
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    listing_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    asking_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    agent_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    current_status: Mapped[str] = mapped_column(String(30), nullable=False, default="New", server_default="New")
    video_link: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    owner_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, server_default=func.now())


class HomeChecklist(Base):
    __tablename__ = "home_checklists"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid, server_default=new_uuid())
    home_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("homes.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )

    # the eight buying criteria
    three_bed: Mapped[bool] = _flag()
    two_bath: Mapped[bool] = _flag()
    under_200k: Mapped[bool] = _flag()
    no_basement: Mapped[bool] = _flag()
    no_trees_back: Mapped[bool] = _flag()
    brick: Mapped[bool] = _flag()
    updated: Mapped[bool] = _flag()
    ranch: Mapped[bool] = _flag()

    # informational feature flags
    has_central_air: Mapped[bool] = _flag()
    has_heat_pump: Mapped[bool] = _flag()
    has_gas_furnace: Mapped[bool] = _flag()
    has_window_units: Mapped[bool] = _flag()
    has_hardwood: Mapped[bool] = _flag()
    has_carpet: Mapped[bool] = _flag()
    has_tile: Mapped[bool] = _flag()
    has_laminate: Mapped[bool] = _flag()
    has_kitchen_island: Mapped[bool] = _flag()
    has_pantry: Mapped[bool] = _flag()
    has_updated_appliances: Mapped[bool] = _flag()
    is_open_concept: Mapped[bool] = _flag()
    has_master_bath: Mapped[bool] = _flag()
    has_updated_fixtures: Mapped[bool] = _flag()
    has_separate_tub_shower: Mapped[bool] = _flag()
    has_double_vanity: Mapped[bool] = _flag()
    has_garage: Mapped[bool] = _flag()
    has_deck_patio: Mapped[bool] = _flag()
    has_fenced_yard: Mapped[bool] = _flag()
    has_pool: Mapped[bool] = _flag()
    has_basement: Mapped[bool] = _flag()
    has_attic: Mapped[bool] = _flag()
    has_fireplace: Mapped[bool] = _flag()
    has_security_system: Mapped[bool] = _flag()

    notes: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, server_default=func.now())


# -----------------------------
# Child records
# -----------------------------
class StatusUpdate(Base):
    __tablename__ = "status_updates"
    __table_args__ = (Index("ix_status_updates_home_date", "home_id", "date"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid, server_default=new_uuid())
    home_id: Mapped[str] = mapped_column(String(36), ForeignKey("homes.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[str] = mapped_column(String(30), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    offer_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, server_default=func.now())
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, server_default=func.now())


class HomeNote(Base):
    __tablename__ = "home_notes"
    __table_args__ = (Index("ix_home_notes_home_date", "home_id", "date"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid, server_default=new_uuid())
    home_id: Mapped[str] = mapped_column(String(36), ForeignKey("homes.id", ondelete="CASCADE"), nullable=False)
    note: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(30), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, server_default=func.now())
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, server_default=func.now())


class HomeImage(Base):
    __tablename__ = "home_images"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid, server_default=new_uuid())
    home_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("homes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    is_primary: Mapped[bool] = _flag()
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, server_default=func.now())


# -----------------------------
# Evaluation record set (one row per home, bedrooms per name)
# -----------------------------
class HomeBasicSystems(Base):
    __tablename__ = "home_basic_systems"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid, server_default=new_uuid())
    home_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("homes.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )

    roof_year: Mapped[str] = mapped_column(String(20), nullable=False, default="", server_default="")
    paint_condition: Mapped[str] = mapped_column(String(10), nullable=False, default="Good", server_default="Good")
    hvac_type: Mapped[list] = mapped_column(JSON, nullable=False, default=list, server_default=text("'[]'"))
    hvac_year: Mapped[str] = mapped_column(String(20), nullable=False, default="", server_default="")
    ac_unit_year_month: Mapped[str] = mapped_column(String(20), nullable=False, default="", server_default="")
    heating_type: Mapped[str] = mapped_column(String(20), nullable=False, default="Electric", server_default="Electric")
    water_heater_present: Mapped[bool] = _flag()
    water_heater_year: Mapped[str] = mapped_column(String(20), nullable=False, default="", server_default="")
    hot_water_test: Mapped[str] = mapped_column(String(10), nullable=False, default="None", server_default="None")
    plumbing_condition: Mapped[str] = mapped_column(String(10), nullable=False, default="Good", server_default="Good")
    electrical_panel_updated: Mapped[bool] = _flag()
    gfci_present: Mapped[bool] = _flag()
    outlets_grounded: Mapped[bool] = _flag()
    lights_working: Mapped[str] = mapped_column(String(10), nullable=False, default="None", server_default="None")
    smoke_alarms_installed: Mapped[bool] = _flag()
    smoke_alarms_working: Mapped[bool] = _flag()
    co_detectors_installed: Mapped[bool] = _flag()
    co_detectors_working: Mapped[bool] = _flag()
    fire_extinguisher_present: Mapped[bool] = _flag()

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class HomeStructure(Base):
    __tablename__ = "home_structure"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid, server_default=new_uuid())
    home_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("homes.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )

    foundation_cracks: Mapped[bool] = _flag()
    crawl_space_accessible: Mapped[bool] = _flag()
    vapor_barrier_present: Mapped[bool] = _flag()
    attic_insulation_present: Mapped[bool] = _flag()
    double_glazed_windows: Mapped[bool] = _flag()
    doors_locking_properly: Mapped[bool] = _flag()

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class HomeInterior(Base):
    __tablename__ = "home_interior"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid, server_default=new_uuid())
    home_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("homes.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )

    flooring_type: Mapped[list] = mapped_column(JSON, nullable=False, default=list, server_default=text("'[]'"))
    hardwood_condition: Mapped[str] = mapped_column(String(10), nullable=False, default="Good", server_default="Good")
    ceiling_issues: Mapped[bool] = _flag()
    cabinet_condition: Mapped[str] = mapped_column(String(10), nullable=False, default="Good", server_default="Good")
    appliances_present: Mapped[list] = mapped_column(JSON, nullable=False, default=list, server_default=text("'[]'"))
    fixtures_operational: Mapped[bool] = _flag()

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class HomeBedroom(Base):
    __tablename__ = "home_bedrooms"
    __table_args__ = (UniqueConstraint("home_id", "bedroom_name", name="uq_home_bedrooms_home_name"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid, server_default=new_uuid())
    home_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("homes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    bedroom_name: Mapped[str] = mapped_column(String(100), nullable=False)

    adequate_size: Mapped[bool] = _flag()
    closet_present: Mapped[bool] = _flag()
    entry_door_present: Mapped[bool] = _flag()
    egress_present: Mapped[bool] = _flag()
    egress_type: Mapped[str] = mapped_column(String(10), nullable=False, default="Window", server_default="Window")
    window_size_meets_code: Mapped[bool] = _flag()
    window_sill_height_ok: Mapped[bool] = _flag()
    smoke_detector_present: Mapped[bool] = _flag()
    co_detector_present: Mapped[bool] = _flag()
    gas_appliance_present: Mapped[bool] = _flag()
    accessed_through_another: Mapped[bool] = _flag()
    connects_to_garage: Mapped[bool] = _flag()

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class HomeSiteVicinity(Base):
    __tablename__ = "home_site_vicinity"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid, server_default=new_uuid())
    home_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("homes.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )

    adjacent_dilapidated: Mapped[bool] = _flag()
    vacant_units_next_door: Mapped[bool] = _flag()
    fire_damage_nearby: Mapped[bool] = _flag()
    trash_dumping_present: Mapped[bool] = _flag()
    illegal_repairs_nearby: Mapped[bool] = _flag()
    excessive_noise: Mapped[bool] = _flag()
    graffiti_present: Mapped[bool] = _flag()
    isolated_location: Mapped[bool] = _flag()

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


# Table name -> model, used by the demo store.
TABLE_MODELS: dict[str, type[Base]] = {
    m.__tablename__: m
    for m in (
        Home,
        HomeChecklist,
        StatusUpdate,
        HomeNote,
        HomeImage,
        HomeBasicSystems,
        HomeStructure,
        HomeInterior,
        HomeBedroom,
        HomeSiteVicinity,
    )
}

# Upsert conflict targets per table.
CONFLICT_TARGETS: dict[str, tuple[str, ...]] = {
    "home_checklists": ("home_id",),
    "home_basic_systems": ("home_id",),
    "home_structure": ("home_id",),
    "home_interior": ("home_id",),
    "home_site_vicinity": ("home_id",),
    "home_bedrooms": ("home_id", "bedroom_name"),
}
