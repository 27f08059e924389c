"""Single-selection state for battle sites and troop markers, plus popup view models."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from theatre.domain.types import BattleSite, ConflictSummary, LngLat, ScreenPoint, Side, Unit
from theatre.globe.host import RENDER_EVENT, MapHost
from theatre.overlay.symbols import ECHELON_PIPS, UNIT_ICONS, battle_result_class
from theatre.sim.signals import Signal, Subscription

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SelectionError(ValueError):
    """Raised when a click refers to an item the current conflict does not contain."""


class Selection(Generic[T]):
    """Idle (``None``) or Selected(item); at most one item at a time.

    Clicking another item swaps directly to it with a single notification.
    Clicking the selected item again, or ``close()``, returns to Idle.
    """

    def __init__(self, key: Callable[[T], str]) -> None:
        self._key = key
        self._current: Signal[T | None] = Signal(None)

    @property
    def selected(self) -> T | None:
        return self._current.value

    @property
    def is_idle(self) -> bool:
        return self._current.value is None

    def click(self, item: T) -> T | None:
        current = self._current.value
        if current is not None and self._key(current) == self._key(item):
            self._current.set(None)
        else:
            self._current.set(item)
        return self._current.value

    def close(self) -> None:
        self._current.set(None)

    def subscribe(self, listener: Callable[[T | None], None]) -> Subscription:
        return self._current.subscribe(listener)


class BattleSelection(Selection[BattleSite]):
    def __init__(self) -> None:
        super().__init__(key=lambda site: site.id)


class TroopSelection(Selection[Unit]):
    def __init__(self) -> None:
        super().__init__(key=lambda unit: unit.id)


@dataclass(frozen=True)
class PopupSide:
    name: str
    color: str
    rows: tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class BattlePopup:
    id: str
    title: str
    result: str
    result_class: str
    date: str
    sides: tuple[PopupSide, ...]
    significance: str
    note: str
    lon: float
    lat: float
    anchor: str = "bottom"
    screen: ScreenPoint | None = None


@dataclass(frozen=True)
class TroopPopup:
    id: str
    title: str
    side_name: str
    color: str
    unit_type: str
    unit_size: str
    icon: str
    pips: str
    sector: str
    lon: float
    lat: float
    anchor: str = "bottom"
    screen: ScreenPoint | None = None


def battle_popup(site: BattleSite, summary: ConflictSummary, screen: ScreenPoint | None = None) -> BattlePopup:
    sides = []
    for side, report in ((Side.A, site.side_a), (Side.B, site.side_b)):
        info = summary.side(side)
        sides.append(
            PopupSide(
                name=info.name,
                color=info.color,
                rows=(
                    ("Commander", report.commander),
                    ("Troops", report.troops),
                    ("Equipment", report.equipment),
                    ("Casualties", report.casualties),
                ),
            )
        )
    return BattlePopup(
        id=site.id,
        title=site.name,
        result=site.result,
        result_class=battle_result_class(site.result, summary),
        date=site.date,
        sides=tuple(sides),
        significance=site.significance,
        note=site.note,
        lon=site.lon,
        lat=site.lat,
        screen=screen,
    )


def troop_popup(unit: Unit, summary: ConflictSummary, screen: ScreenPoint | None = None) -> TroopPopup:
    info = summary.side(unit.side)
    return TroopPopup(
        id=unit.id,
        title=unit.name,
        side_name=info.name,
        color=info.color,
        unit_type=unit.unit_type.value.capitalize(),
        unit_size=unit.unit_size.value.capitalize(),
        icon=UNIT_ICONS[unit.unit_type],
        pips=ECHELON_PIPS[unit.unit_size],
        sector=unit.sector,
        lon=unit.lon,
        lat=unit.lat,
        screen=screen,
    )


POINTER_EVENTS = frozenset({"click", "dblclick", "mousedown", "pointerdown", "touchstart", "wheel"})


class PopupAnchor:
    """Keeps a popup pinned to a map coordinate across view changes.

    The popup captures pointer events: clicks and wheel input inside it are
    consumed and never forwarded to the map.
    """

    captures_pointer = True

    def __init__(self, host: MapHost, lon: float, lat: float) -> None:
        self._host = host
        self.point = LngLat(lon=lon, lat=lat)
        self.screen: ScreenPoint | None = None
        self._subscription: Subscription | None = None

    def attach(self) -> Subscription:
        if self._subscription is not None and self._subscription.active:
            return self._subscription
        self._host.on(RENDER_EVENT, self.reproject)
        self.reproject()
        self._subscription = Subscription(lambda: self._host.off(RENDER_EVENT, self.reproject))
        return self._subscription

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()

    def reproject(self) -> None:
        try:
            self.screen = self._host.project(self.point)
        except Exception:
            logger.debug("Popup anchor projection failed", exc_info=True)
            self.screen = None

    @property
    def attached(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def handle_pointer(self, event: str) -> bool:
        """Return True when the event is consumed by the popup."""
        return self.captures_pointer and event in POINTER_EVENTS
