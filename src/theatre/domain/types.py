"""Common types and enums."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class Side(str, Enum):
    A = "sideA"
    B = "sideB"


class Control(str, Enum):
    """Who holds a city or capital."""

    SIDE_A = "sideA"
    SIDE_B = "sideB"
    CONTESTED = "contested"


class SegmentStatus(str, Enum):
    STABLE = "stable"
    CONTESTED = "contested"
    ACTIVE = "active"


class UnitType(str, Enum):
    INFANTRY = "infantry"
    MECHANIZED = "mechanized"
    ARMOR = "armor"
    ARTILLERY = "artillery"
    MARINES = "marines"


class UnitSize(str, Enum):
    BATTALION = "battalion"
    REGIMENT = "regiment"
    BRIGADE = "brigade"
    DIVISION = "division"
    CORPS = "corps"


@dataclass(frozen=True)
class LngLat:
    lon: float
    lat: float


@dataclass(frozen=True)
class ScreenPoint:
    x: float
    y: float


@dataclass(frozen=True)
class FrontlineSegment:
    id: str
    label: str
    as_of: date
    status: SegmentStatus
    points: tuple[tuple[float, float], ...]  # (lon, lat), insertion order is render order

    @property
    def midpoint(self) -> tuple[float, float]:
        return self.points[len(self.points) // 2]


@dataclass(frozen=True)
class Unit:
    id: str
    side: Side
    unit_type: UnitType
    unit_size: UnitSize
    name: str
    lat: float
    lon: float
    sector: str


@dataclass(frozen=True)
class SideReport:
    commander: str = ""
    troops: str = ""
    equipment: str = ""
    casualties: str = ""


@dataclass(frozen=True)
class BattleSite:
    id: str
    name: str
    lat: float
    lon: float
    date: str
    result: str
    note: str = ""
    side_a: SideReport = field(default_factory=SideReport)
    side_b: SideReport = field(default_factory=SideReport)
    significance: str = ""


@dataclass(frozen=True)
class InfrastructureItem:
    id: str
    side: Side
    lat: float
    lon: float
    type: str
    name: str
    note: str = ""


@dataclass(frozen=True)
class NavalPosition:
    id: str
    side: Side
    lat: float
    lon: float
    type: str
    name: str
    note: str = ""
    vessels: str = ""
    status: str = "active"


@dataclass(frozen=True)
class NuclearPlant:
    id: str
    country: Control
    lat: float
    lon: float
    name: str
    note: str = ""
    status: str = "operational"


@dataclass(frozen=True)
class CityMarker:
    id: str
    country: Control
    lat: float
    lon: float
    name: str
    note: str = ""


@dataclass(frozen=True)
class CapitalMarker:
    id: str
    country: Control
    lat: float
    lon: float
    name: str
    note: str = ""


@dataclass(frozen=True)
class FortificationLine:
    id: str
    name: str
    points: tuple[tuple[float, float], ...]
    note: str = ""
    closed: bool = False


@dataclass(frozen=True)
class OccupiedTerritory:
    side: Side
    label: str
    rings: tuple[tuple[tuple[float, float], ...], ...]


@dataclass(frozen=True)
class CoatOfArms:
    side: Side
    name: str
    lat: float
    lon: float


@dataclass(frozen=True)
class SideInfo:
    name: str
    short_name: str
    color: str
    accent: str = "#ffffff"


@dataclass(frozen=True)
class ConflictSummary:
    id: str
    name: str
    side_a: SideInfo
    side_b: SideInfo

    def side(self, side: Side) -> SideInfo:
        return self.side_a if side == Side.A else self.side_b


@dataclass(frozen=True)
class ConflictBundle:
    """Read-only snapshot of one conflict's overlay data."""

    summary: ConflictSummary
    frontlines: tuple[FrontlineSegment, ...] = ()
    units: tuple[Unit, ...] = ()
    battles: tuple[BattleSite, ...] = ()
    infrastructure: tuple[InfrastructureItem, ...] = ()
    naval: tuple[NavalPosition, ...] = ()
    nuclear_plants: tuple[NuclearPlant, ...] = ()
    capitals: tuple[CapitalMarker, ...] = ()
    cities: tuple[CityMarker, ...] = ()
    fortifications: tuple[FortificationLine, ...] = ()
    occupied: OccupiedTerritory | None = None
    coats_of_arms: tuple[CoatOfArms, ...] = ()

    @property
    def id(self) -> str:
        return self.summary.id

    def battle(self, battle_id: str) -> BattleSite | None:
        return next((site for site in self.battles if site.id == battle_id), None)

    def unit(self, unit_id: str) -> Unit | None:
        return next((unit for unit in self.units if unit.id == unit_id), None)
