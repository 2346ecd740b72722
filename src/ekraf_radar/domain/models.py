"""Domain models for the creative-economy investment dashboard.

Central data structures of the domain layer. The models are defined
framework-independently (Pydantic only for validation and serialization)
and have no dependencies on outer layers (API, infrastructure).
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Enumerations ---

class Subsector(StrEnum):
    """The 16 creative-economy (ekraf) subsectors."""

    FESYEN = "FESYEN"
    KRIYA = "KRIYA"
    KULINER = "KULINER"
    DESAIN_PRODUK = "DESAIN PRODUK"
    PENERBITAN = "PENERBITAN"
    FILM = "FILM"
    ANIMASI = "ANIMASI"
    VIDEO = "VIDEO"
    APLIKASI = "APLIKASI"
    PERIKLANAN = "PERIKLANAN"
    SENI_PERTUNJUKAN = "SENI PERTUNJUKAN"
    TV_RADIO = "TV_RADIO"
    DESAIN_INTERIOR = "DESAIN INTERIOR"
    GAME_DEVELOPER = "GAME DEVELOPER"
    ARSITEKTUR = "ARSITEKTUR"
    FOTOGRAFI = "FOTOGRAFI"


class CapitalStatus(StrEnum):
    """Capital origin: domestic (PMDN) or foreign (PMA)."""

    PMDN = "PMDN"
    PMA = "PMA"


class MetricSelector(StrEnum):
    """Region metric used for ranking and visual encoding."""

    COMPANIES = "companies"
    INVESTMENT = "investment"
    WORKERS = "workers"


class SortDirection(StrEnum):
    DESC = "desc"
    ASC = "asc"


# --- Records ---

class InvestmentRecord(BaseModel):
    """One filed investment entry. Read-only for the engine."""

    model_config = ConfigDict(frozen=True)

    company_name: str
    nib: str = ""
    kbli_code: str = ""
    kbli_title: str = ""
    subsector: Subsector
    region: str
    investment_amount: Decimal = Decimal("0")
    workers_count: int = Field(0, ge=0)
    status: CapitalStatus
    year: int
    quarter: int = Field(1, ge=1, le=4)


class RecordPage(BaseModel):
    """One page of raw records for the table view."""

    items: list[InvestmentRecord] = []
    total: int = 0
    page: int = 1
    page_size: int = 10
    total_pages: int = 0


# --- Derived metrics ---

class RegionMetric(BaseModel):
    """Aggregate of one region in one year.

    growth_rate is None when no prior-year data exists; callers must
    render "no data" instead of 0%.
    """

    model_config = ConfigDict(frozen=True)

    region: str
    year: int | None = None
    company_count: int = 0
    total_investment: Decimal = Decimal("0")
    total_workers: int = 0
    growth_rate: float | None = None

    def value(self, metric: MetricSelector) -> Decimal:
        """Value of the selected metric (Decimal for uniform comparison)."""
        if metric is MetricSelector.COMPANIES:
            return Decimal(self.company_count)
        if metric is MetricSelector.WORKERS:
            return Decimal(self.total_workers)
        return self.total_investment


class DashboardMetric(BaseModel):
    """Global summary for the current filter scope."""

    model_config = ConfigDict(frozen=True)

    total_companies: int = 0
    total_investment: Decimal = Decimal("0")
    total_workers: int = 0
    growth_rate: float | None = None


# --- Visual encoding ---

class VisualEncoding(BaseModel):
    """Relative magnitude of one region, recomputed per render."""

    model_config = ConfigDict(frozen=True)

    region: str
    metric: MetricSelector
    value: Decimal
    intensity: float
    fill_opacity: float
    stroke_opacity: float


class RegionStyle(BaseModel):
    """Style handed to the map collaborator for one polygon."""

    model_config = ConfigDict(frozen=True)

    fill_color: str
    fill_opacity: float
    stroke_color: str
    stroke_opacity: float
    stroke_weight: float


class RegionGeometry(BaseModel):
    """Closed boundary ring of (latitude, longitude) vertices."""

    model_config = ConfigDict(frozen=True)

    name: str
    boundary: tuple[tuple[float, float], ...]

    @field_validator("boundary")
    @classmethod
    def _closed_ring(
        cls, value: tuple[tuple[float, float], ...]
    ) -> tuple[tuple[float, float], ...]:
        if len(value) < 3:
            raise ValueError("boundary needs at least three vertices")
        if value[0] != value[-1]:
            value = (*value, value[0])
        return value


# --- Filter ---

class FilterState(BaseModel):
    """Current filter selection. All dimensions are optional and conjunctive."""

    model_config = ConfigDict(frozen=True)

    year: int | None = None
    subsector: Subsector | None = None
    city: str | None = None
    status: CapitalStatus | None = None
    search: str | None = None


# --- Snapshot handed to views ---

SnapshotStatus = Literal["ok", "empty", "unavailable"]


class DashboardSnapshot(BaseModel):
    """Consistent result for one filter state.

    status "unavailable" carries no metrics so views can tell a failed
    load apart from a year without investment ("empty").
    """

    model_config = ConfigDict(frozen=True)

    status: SnapshotStatus
    filter: FilterState
    dashboard: DashboardMetric | None = None
    regions: tuple[RegionMetric, ...] = ()
    encodings: tuple[VisualEncoding, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def available(self) -> bool:
        return self.status != "unavailable"
