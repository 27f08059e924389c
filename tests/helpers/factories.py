from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Callable

from theatre.domain.types import (
    BattleSite,
    CityMarker,
    ConflictBundle,
    ConflictSummary,
    Control,
    FrontlineSegment,
    InfrastructureItem,
    LngLat,
    ScreenPoint,
    SegmentStatus,
    Side,
    SideInfo,
    SideReport,
    Unit,
    UnitSize,
    UnitType,
)
from theatre.rules.conflicts import ConflictCatalog
from theatre.rules.settings import OverlaySettings

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, *, days: int = 0, seconds: float = 0) -> None:
        self.now = self.now + timedelta(days=days, seconds=seconds)


def days_ago(days: int, now: datetime = FIXED_NOW) -> date:
    return (now - timedelta(days=days)).date()


def make_settings() -> OverlaySettings:
    return OverlaySettings.default()


def make_summary(conflict_id: str = "test") -> ConflictSummary:
    return ConflictSummary(
        id=conflict_id,
        name=f"Test Conflict {conflict_id}",
        side_a=SideInfo(name="Blue Force", short_name="BLU", color="#0057b7", accent="#ffd700"),
        side_b=SideInfo(name="Red Force", short_name="RED", color="#d52b1e", accent="#ffffff"),
    )


def make_segment(
    segment_id: str = "seg-1",
    *,
    as_of: date | None = None,
    status: SegmentStatus = SegmentStatus.ACTIVE,
    points: tuple[tuple[float, float], ...] = ((30.0, 48.0), (30.5, 48.2), (31.0, 48.5)),
) -> FrontlineSegment:
    return FrontlineSegment(
        id=segment_id,
        label=f"Sector {segment_id}",
        as_of=as_of or days_ago(3),
        status=status,
        points=points,
    )


def make_battle(battle_id: str = "battle-a", *, result: str = "Contested", lon: float = 31.0, lat: float = 48.0) -> BattleSite:
    return BattleSite(
        id=battle_id,
        name=f"Battle of {battle_id.title()}",
        lat=lat,
        lon=lon,
        date="Jan 2026",
        result=result,
        note="test note",
        side_a=SideReport(commander="Cmdr A", troops="1,000"),
        side_b=SideReport(commander="Cmdr B", troops="2,000"),
        significance="Test significance",
    )


def make_unit(unit_id: str = "unit-a", *, side: Side = Side.A) -> Unit:
    return Unit(
        id=unit_id,
        side=side,
        unit_type=UnitType.MECHANIZED,
        unit_size=UnitSize.BRIGADE,
        name=f"{unit_id} Brigade",
        lat=48.3,
        lon=31.2,
        sector="Test",
    )


def make_bundle(
    conflict_id: str = "test",
    *,
    apply: Callable[[ConflictBundle], ConflictBundle] | None = None,
) -> ConflictBundle:
    """A small bundle with one of every gated category plus a co-located city/infra pair."""
    bundle = ConflictBundle(
        summary=make_summary(conflict_id),
        frontlines=(
            make_segment("seg-1", as_of=days_ago(3)),
            make_segment("seg-2", as_of=days_ago(90), status=SegmentStatus.STABLE),
        ),
        units=(make_unit("unit-a"), make_unit("unit-b", side=Side.B)),
        battles=(make_battle("battle-a", result="BLU victory"), make_battle("battle-b", lon=32.0)),
        infrastructure=(
            InfrastructureItem(
                id="port-x", side=Side.A, lat=46.4825, lon=30.7233, type="port", name="Harbour Port", note="n"
            ),
        ),
        cities=(
            CityMarker(id="harbour", country=Control.SIDE_A, lat=46.4830, lon=30.7240, name="Harbour"),
            CityMarker(id="inland", country=Control.SIDE_B, lat=48.0, lon=37.8, name="Inland"),
        ),
    )
    if apply is not None:
        bundle = apply(bundle)
    return bundle


def load_bundled(conflict_id: str) -> ConflictBundle:
    return ConflictCatalog().load(conflict_id)


class FakeMap:
    """Host map whose projection results are scripted by the test."""

    def __init__(
        self,
        project: Callable[[LngLat], ScreenPoint],
        *,
        center: LngLat = LngLat(lon=0.0, lat=0.0),
        globe: bool = True,
        bearing: float = 0.0,
        pitch: float = 0.0,
    ) -> None:
        self._project = project
        self.center = center
        self.is_globe = globe
        self.bearing = bearing
        self.pitch = pitch
        self.project_calls = 0
        self.listeners: dict[str, list[Callable[[], None]]] = {}

    def project(self, point: LngLat) -> ScreenPoint:
        self.project_calls += 1
        return self._project(point)

    def get_center(self) -> LngLat:
        return self.center

    def on(self, event: str, listener: Callable[[], None]) -> None:
        self.listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: Callable[[], None]) -> None:
        self.listeners.get(event, []).remove(listener)

    def fire(self, event: str = "render") -> None:
        for listener in list(self.listeners.get(event, [])):
            listener()


def radial_projection(distances: tuple[float, float, float, float]) -> Callable[[LngLat], ScreenPoint]:
    """Projection placing the centre at (0, 0) and the four probes at the given distances.

    Probe order: east, west, north, south.
    """
    east, west, north, south = distances

    def project(point: LngLat) -> ScreenPoint:
        if point.lon > 0:
            return ScreenPoint(east, 0.0)
        if point.lon < 0:
            return ScreenPoint(-west, 0.0)
        if point.lat > 0:
            return ScreenPoint(0.0, -north)
        if point.lat < 0:
            return ScreenPoint(0.0, south)
        return ScreenPoint(0.0, 0.0)

    return project
