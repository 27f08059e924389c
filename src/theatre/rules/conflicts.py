"""Conflict bundle loading: the data contract for everything the overlay draws."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Callable, TypeVar

from theatre.domain.types import (
    BattleSite,
    CapitalMarker,
    CityMarker,
    CoatOfArms,
    ConflictBundle,
    ConflictSummary,
    Control,
    FortificationLine,
    FrontlineSegment,
    InfrastructureItem,
    NavalPosition,
    NuclearPlant,
    OccupiedTerritory,
    SegmentStatus,
    Side,
    SideInfo,
    SideReport,
    Unit,
    UnitSize,
    UnitType,
)

logger = logging.getLogger(__name__)

CONFLICTS_DIR = Path(__file__).resolve().parents[1] / "data" / "conflicts"

T = TypeVar("T")


class ConflictDataError(ValueError):
    """Error loading or validating a conflict bundle."""


def load_conflict(path: Path) -> ConflictBundle:
    data = _load_json(path)
    try:
        return _parse_bundle(data)
    except ConflictDataError:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise ConflictDataError(f"Invalid conflict data in {path}: {exc!r}") from exc


@dataclass(frozen=True)
class ConflictCatalog:
    """Directory of conflict bundles, one JSON file per conflict id."""

    data_dir: Path = CONFLICTS_DIR

    def ids(self) -> list[str]:
        return sorted(p.stem for p in self.data_dir.glob("*.json"))

    def load(self, conflict_id: str) -> ConflictBundle:
        path = self.data_dir / f"{conflict_id}.json"
        if not path.exists():
            raise ConflictDataError(f"Unknown conflict: {conflict_id}")
        bundle = load_conflict(path)
        if bundle.id != conflict_id:
            raise ConflictDataError(f"Conflict file {path.name} declares id {bundle.id!r}")
        return bundle

    def summaries(self) -> list[ConflictSummary]:
        return [self.load(conflict_id).summary for conflict_id in self.ids()]


def _load_json(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError as exc:
        raise ConflictDataError(f"Conflict file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConflictDataError(f"Invalid JSON in {path}: {exc}") from exc


def _points(raw: Any) -> tuple[tuple[float, float], ...]:
    return tuple((float(lon), float(lat)) for lon, lat in raw)


def _many(data: dict[str, Any], key: str, parse: Callable[[dict[str, Any]], T]) -> tuple[T, ...]:
    return tuple(parse(item) for item in data.get(key) or [])


def _side_info(raw: dict[str, Any]) -> SideInfo:
    return SideInfo(
        name=raw["name"],
        short_name=raw["shortName"],
        color=raw["color"],
        accent=raw.get("accent", "#ffffff"),
    )


def _segment(raw: dict[str, Any]) -> FrontlineSegment:
    points = _points(raw["points"])
    if len(points) < 2:
        raise ConflictDataError(f"Frontline segment {raw['id']!r} needs at least 2 points")
    return FrontlineSegment(
        id=raw["id"],
        label=raw["label"],
        as_of=date.fromisoformat(raw["asOf"]),
        status=SegmentStatus(raw["status"]),
        points=points,
    )


def _unit(raw: dict[str, Any]) -> Unit:
    return Unit(
        id=raw["id"],
        side=Side(raw["side"]),
        unit_type=UnitType(raw["unitType"]),
        unit_size=UnitSize(raw["unitSize"]),
        name=raw["name"],
        lat=float(raw["lat"]),
        lon=float(raw["lon"]),
        sector=raw.get("sector", ""),
    )


def _side_report(raw: dict[str, Any], prefix: str) -> SideReport:
    return SideReport(
        commander=raw.get(f"{prefix}Commander", ""),
        troops=raw.get(f"{prefix}Troops", ""),
        equipment=raw.get(f"{prefix}Equipment", ""),
        casualties=raw.get(f"{prefix}Casualties", ""),
    )


def _battle(raw: dict[str, Any]) -> BattleSite:
    return BattleSite(
        id=raw["id"],
        name=raw["name"],
        lat=float(raw["lat"]),
        lon=float(raw["lon"]),
        date=raw.get("date", ""),
        result=raw.get("result", ""),
        note=raw.get("note", ""),
        side_a=_side_report(raw, "sideA"),
        side_b=_side_report(raw, "sideB"),
        significance=raw.get("significance", ""),
    )


def _infrastructure(raw: dict[str, Any]) -> InfrastructureItem:
    return InfrastructureItem(
        id=raw["id"],
        side=Side(raw["side"]),
        lat=float(raw["lat"]),
        lon=float(raw["lon"]),
        type=raw["type"],
        name=raw["name"],
        note=raw.get("note", ""),
    )


def _naval(raw: dict[str, Any]) -> NavalPosition:
    return NavalPosition(
        id=raw["id"],
        side=Side(raw["side"]),
        lat=float(raw["lat"]),
        lon=float(raw["lon"]),
        type=raw["type"],
        name=raw["name"],
        note=raw.get("note", ""),
        vessels=raw.get("vessels", ""),
        status=raw.get("status", "active"),
    )


def _nuclear_plant(raw: dict[str, Any]) -> NuclearPlant:
    return NuclearPlant(
        id=raw["id"],
        country=Control(raw["country"]),
        lat=float(raw["lat"]),
        lon=float(raw["lon"]),
        name=raw["name"],
        note=raw.get("note", ""),
        status=raw.get("status", "operational"),
    )


def _city(raw: dict[str, Any]) -> CityMarker:
    return CityMarker(
        id=raw["id"],
        country=Control(raw["country"]),
        lat=float(raw["lat"]),
        lon=float(raw["lon"]),
        name=raw["name"],
        note=raw.get("note", ""),
    )


def _capital(raw: dict[str, Any]) -> CapitalMarker:
    return CapitalMarker(
        id=raw["id"],
        country=Control(raw["country"]),
        lat=float(raw["lat"]),
        lon=float(raw["lon"]),
        name=raw["name"],
        note=raw.get("note", ""),
    )


def _fortification(raw: dict[str, Any]) -> FortificationLine:
    points = _points(raw["points"])
    if len(points) < 2:
        raise ConflictDataError(f"Fortification {raw['id']!r} needs at least 2 points")
    return FortificationLine(
        id=raw["id"],
        name=raw["name"],
        points=points,
        note=raw.get("note", ""),
        closed=bool(raw.get("closed", False)),
    )


def _occupied(raw: dict[str, Any] | None) -> OccupiedTerritory | None:
    if not raw:
        return None
    return OccupiedTerritory(
        side=Side(raw["side"]),
        label=raw.get("label", ""),
        rings=tuple(_points(ring) for ring in raw["rings"]),
    )


def _coat_of_arms(raw: dict[str, Any]) -> CoatOfArms:
    return CoatOfArms(
        side=Side(raw["side"]),
        name=raw["name"],
        lat=float(raw["lat"]),
        lon=float(raw["lon"]),
    )


def _parse_bundle(data: dict[str, Any]) -> ConflictBundle:
    summary_raw = data["summary"]
    summary = ConflictSummary(
        id=summary_raw["id"],
        name=summary_raw["name"],
        side_a=_side_info(summary_raw["sideA"]),
        side_b=_side_info(summary_raw["sideB"]),
    )
    bundle = ConflictBundle(
        summary=summary,
        frontlines=_many(data, "frontlines", _segment),
        units=_many(data, "troops", _unit),
        battles=_many(data, "battles", _battle),
        infrastructure=_many(data, "infrastructure", _infrastructure),
        naval=_many(data, "naval", _naval),
        nuclear_plants=_many(data, "nuclearPlants", _nuclear_plant),
        capitals=_many(data, "capitals", _capital),
        cities=_many(data, "cities", _city),
        fortifications=_many(data, "fortifications", _fortification),
        occupied=_occupied(data.get("occupiedTerritory")),
        coats_of_arms=_many(data, "coatsOfArms", _coat_of_arms),
    )
    logger.debug(
        "Loaded conflict %s: %d frontline segments, %d units, %d battle sites",
        summary.id,
        len(bundle.frontlines),
        len(bundle.units),
        len(bundle.battles),
    )
    return bundle
