"""Live overlay composition: geometry layers, gated markers, and popups for one conflict."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from theatre.domain.events import UiEvent
from theatre.domain.types import BattleSite, ConflictBundle, ScreenPoint, Unit
from theatre.globe.hemisphere import MarkerFilter
from theatre.globe.host import MapHost
from theatre.overlay import geometry
from theatre.overlay.geometry import FeatureCollection, LayerSpec, SectorLabel
from theatre.overlay.legend import LegendSection, build_legend
from theatre.overlay.lod import MarkerCategory, Visibility, suppressed_city_labels, visibility
from theatre.overlay.recency import Clock, utc_now
from theatre.overlay.selection import (
    BattlePopup,
    BattleSelection,
    PopupAnchor,
    SelectionError,
    TroopPopup,
    TroopSelection,
    battle_popup,
    troop_popup,
)
from theatre.overlay.symbols import (
    Glyph,
    Palette,
    battle_glyph,
    capital_glyph,
    city_glyph,
    coat_of_arms_glyph,
    infrastructure_glyph,
    naval_glyph,
    nuclear_plant_glyph,
    sector_label_glyph,
    unit_glyph,
)
from theatre.rules.settings import OverlaySettings
from theatre.sim.signals import Signal, Subscription

logger = logging.getLogger(__name__)

TroopClickHandler = Callable[[Unit], None]


@dataclass(frozen=True)
class StaticLayers:
    """Everything derived from a bundle that does not depend on the clock or the view."""

    fortifications: FeatureCollection
    occupied: FeatureCollection
    sector_labels: tuple[SectorLabel, ...]
    suppressed_labels: frozenset[str]
    legend: tuple[LegendSection, ...]


@dataclass()
class OverlayCache:
    """Per-conflict static layers, owned by the caller and shared across composers."""

    _entries: dict[str, StaticLayers] = field(default_factory=dict)
    builds: int = 0

    def __contains__(self, conflict_id: object) -> bool:
        return conflict_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, bundle: ConflictBundle, *, epsilon_km: float) -> StaticLayers:
        entry = self._entries.get(bundle.id)
        if entry is None:
            entry = StaticLayers(
                fortifications=geometry.compose_fortifications(bundle.fortifications),
                occupied=geometry.compose_occupied(bundle.occupied),
                sector_labels=geometry.sector_labels(bundle.frontlines),
                suppressed_labels=suppressed_city_labels(bundle.cities, bundle.infrastructure, epsilon_km),
                legend=build_legend(bundle),
            )
            self._entries[bundle.id] = entry
            self.builds += 1
        return entry

    def invalidate(self, conflict_id: str) -> None:
        self._entries.pop(conflict_id, None)

    def clear(self) -> None:
        self._entries.clear()


@dataclass(frozen=True)
class MarkerView:
    id: str
    category: MarkerCategory
    lon: float
    lat: float
    glyph: Glyph
    anchor: str = "center"
    clickable: bool = False


@dataclass(frozen=True)
class OverlayFrame:
    conflict_id: str
    visible: bool
    visibility: Visibility
    sources: dict[str, FeatureCollection]
    layers: list[LayerSpec]
    markers: tuple[MarkerView, ...]
    popup: BattlePopup | None
    troop_popup: TroopPopup | None
    legend: tuple[LegendSection, ...]

    def markers_of(self, category: MarkerCategory) -> list[MarkerView]:
        return [m for m in self.markers if m.category == category]


class OverlayComposer:
    """Turns one conflict bundle plus the host's toggles into renderable frames.

    ``visible``, ``zoom`` and ``show_troops`` are signals owned by the host;
    the composer subscribes on construction and ``stop()`` releases them.
    """

    def __init__(
        self,
        bundle: ConflictBundle,
        *,
        settings: OverlaySettings,
        cache: OverlayCache | None = None,
        clock: Clock = utc_now,
        visible: Signal[bool] | None = None,
        zoom: Signal[float] | None = None,
        show_troops: Signal[bool] | None = None,
        on_troop_click: TroopClickHandler | None = None,
        marker_filter: MarkerFilter | None = None,
        host: MapHost | None = None,
    ) -> None:
        self.bundle = bundle
        self.settings = settings
        self.cache = cache if cache is not None else OverlayCache()
        self.clock = clock
        self.visible = visible if visible is not None else Signal(True)
        self.zoom = zoom if zoom is not None else Signal(0.0)
        self.show_troops = show_troops if show_troops is not None else Signal(True)
        self.on_troop_click = on_troop_click
        self.marker_filter = marker_filter
        self.host = host
        self.battle_anchor: PopupAnchor | None = None
        self.troop_anchor: PopupAnchor | None = None
        self.battles = BattleSelection()
        self.troops = TroopSelection()
        self.visibility = visibility(self.zoom.value, settings.zoom)
        self.revision = 0
        self._events: list[UiEvent] = []
        self._subscriptions: list[Subscription] = [
            self.visible.subscribe(self._on_toggle),
            self.show_troops.subscribe(self._on_toggle),
            self.zoom.subscribe(self._on_zoom),
            self.battles.subscribe(self._on_battle),
            self.troops.subscribe(self._on_troop),
        ]

    @property
    def selected_battle(self) -> BattleSite | None:
        return self.battles.selected

    @property
    def selected_troop(self) -> Unit | None:
        return self.troops.selected

    @property
    def stopped(self) -> bool:
        return not any(sub.active for sub in self._subscriptions)

    def stop(self) -> None:
        for sub in self._subscriptions:
            sub.cancel()
        self.battle_anchor = self._reanchor(self.battle_anchor, None)
        self.troop_anchor = self._reanchor(self.troop_anchor, None)

    def drain_events(self) -> list[UiEvent]:
        events, self._events = self._events, []
        return events

    def set_marker_filter(self, marker_filter: MarkerFilter | None) -> None:
        self.marker_filter = marker_filter
        self.revision += 1

    # Interaction

    def click_battle(self, battle_id: str) -> BattleSite | None:
        site = self.bundle.battle(battle_id)
        if site is None:
            raise SelectionError(f"Unknown battle site: {battle_id}")
        return self.battles.click(site)

    def close_battle(self) -> None:
        self.battles.close()

    def click_troop(self, unit_id: str) -> Unit | None:
        unit = self.bundle.unit(unit_id)
        if unit is None:
            raise SelectionError(f"Unknown unit: {unit_id}")
        if self.on_troop_click is not None:
            self.on_troop_click(unit)
        return self.troops.click(unit)

    def close_troop(self) -> None:
        self.troops.close()

    def select_conflict(self, bundle: ConflictBundle) -> None:
        """Swap the whole entity set; the previous conflict's cache entry is dropped."""
        if bundle.id == self.bundle.id and bundle is self.bundle:
            return
        previous = self.bundle.id
        self.cache.invalidate(previous)
        self.battles.close()
        self.troops.close()
        self.bundle = bundle
        self.revision += 1
        logger.info("Switched conflict %s -> %s", previous, bundle.id)
        self._events.append(
            UiEvent(
                kind="conflict_switched",
                message=f"Showing {bundle.summary.name}",
                data={"from": previous, "to": bundle.id},
            )
        )

    # Composition

    def compose(self) -> OverlayFrame:
        bundle = self.bundle
        summary = bundle.summary
        static = self.cache.get(bundle, epsilon_km=self.settings.label_epsilon_km)
        shown = bool(self.visible.value)
        layer_visibility = "visible" if shown else "none"

        sources = {
            geometry.OCCUPIED_SOURCE: static.occupied,
            geometry.FORTIFICATION_SOURCE: static.fortifications,
            geometry.FRONTLINE_SOURCE: geometry.compose_frontlines(bundle.frontlines, now=self.clock()),
        }
        layers: list[LayerSpec] = []
        layers.extend(geometry.occupied_layers(summary, bundle.occupied, visibility=layer_visibility))
        if bundle.fortifications:
            layers.extend(geometry.fortification_layers(summary, visibility=layer_visibility))
        layers.extend(geometry.frontline_layers(summary, visibility=layer_visibility))

        markers: tuple[MarkerView, ...] = ()
        popup = None
        troop = None
        if shown:
            markers = tuple(self._markers(static))
            if self.battles.selected is not None:
                popup = battle_popup(self.battles.selected, summary, _screen(self.battle_anchor))
            if self.troops.selected is not None and self.show_troops.value:
                troop = troop_popup(self.troops.selected, summary, _screen(self.troop_anchor))

        return OverlayFrame(
            conflict_id=bundle.id,
            visible=shown,
            visibility=self.visibility,
            sources=sources,
            layers=layers,
            markers=markers,
            popup=popup,
            troop_popup=troop,
            legend=static.legend,
        )

    def _markers(self, static: StaticLayers) -> list[MarkerView]:
        bundle = self.bundle
        summary = bundle.summary
        palette = Palette.from_summary(summary)
        vis = self.visibility
        keep = self.marker_filter or (lambda lon, lat: True)
        out: list[MarkerView] = []

        def add(category: MarkerCategory, item_id: str, lon: float, lat: float, glyph: Glyph, **extra: Any) -> None:
            if keep(lon, lat):
                out.append(MarkerView(item_id, category, lon, lat, glyph, **extra))

        if vis.detail:
            for label in static.sector_labels:
                add(MarkerCategory.SECTOR_LABEL, label.id, label.lon, label.lat, sector_label_glyph(label), anchor="right")
            for site in bundle.battles:
                add(MarkerCategory.BATTLE, site.id, site.lon, site.lat, battle_glyph(site, palette, summary), clickable=True)
            for plant in bundle.nuclear_plants:
                add(MarkerCategory.NUCLEAR_PLANT, plant.id, plant.lon, plant.lat, nuclear_plant_glyph(plant, palette))
        for capital in bundle.capitals:
            add(MarkerCategory.CAPITAL, capital.id, capital.lon, capital.lat, capital_glyph(capital, palette))
        if vis.detail:
            for city in bundle.cities:
                hide = city.id in static.suppressed_labels
                add(MarkerCategory.CITY, city.id, city.lon, city.lat, city_glyph(city, palette, hide_label=hide), anchor="left")
            for item in bundle.infrastructure:
                glyph = infrastructure_glyph(item, palette, show_label=vis.labels)
                add(MarkerCategory.INFRASTRUCTURE, item.id, item.lon, item.lat, glyph)
            for position in bundle.naval:
                add(MarkerCategory.NAVAL, position.id, position.lon, position.lat, naval_glyph(position, palette))
        for index, coat in enumerate(bundle.coats_of_arms):
            add(MarkerCategory.COAT_OF_ARMS, f"coa-{coat.side.value}-{index}", coat.lon, coat.lat, coat_of_arms_glyph(coat, palette))
        if vis.detail and self.show_troops.value:
            for unit in bundle.units:
                add(MarkerCategory.UNIT, unit.id, unit.lon, unit.lat, unit_glyph(unit, palette), clickable=True)
        return out

    # Signal handlers

    def _on_toggle(self, _value: bool) -> None:
        self.revision += 1

    def _on_zoom(self, zoom: float) -> None:
        updated = visibility(zoom, self.settings.zoom)
        if updated != self.visibility:
            self.visibility = updated
            self.revision += 1

    def _on_battle(self, site: BattleSite | None) -> None:
        self.revision += 1
        self.battle_anchor = self._reanchor(self.battle_anchor, site)
        if site is None:
            self._events.append(UiEvent(kind="battle_closed", message="Battle details closed"))
        else:
            self._events.append(UiEvent(kind="battle_selected", message=site.name, data={"id": site.id}))

    def _on_troop(self, unit: Unit | None) -> None:
        self.revision += 1
        self.troop_anchor = self._reanchor(self.troop_anchor, unit)
        if unit is not None:
            self._events.append(UiEvent(kind="troop_clicked", message=unit.name, data={"id": unit.id}))

    def _reanchor(self, anchor: PopupAnchor | None, item: BattleSite | Unit | None) -> PopupAnchor | None:
        if anchor is not None:
            anchor.detach()
        if item is None or self.host is None:
            return None
        anchor = PopupAnchor(self.host, lon=item.lon, lat=item.lat)
        anchor.attach()
        return anchor


def _screen(anchor: PopupAnchor | None) -> ScreenPoint | None:
    return anchor.screen if anchor is not None else None
