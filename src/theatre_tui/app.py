from __future__ import annotations

import argparse
import logging
import os
from random import Random

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll

from theatre.globe.hemisphere import hemisphere_filter
from theatre.globe.projection import GlobeView
from theatre.globe.sampler import GlobeRadiusTracker
from theatre.overlay.composer import OverlayCache, OverlayComposer
from theatre.rules.conflicts import ConflictCatalog, ConflictDataError
from theatre.rules.settings import OverlaySettings
from theatre.sim.signals import ScalarChannel, Signal, Subscription
from theatre.starfield.engine import StarfieldEngine
from theatre_tui.widgets import CellCanvas, HeaderBar, OverlayPanel, StarfieldWidget, TextualScheduler

logger = logging.getLogger(__name__)

# Terminal cells stand in for this many map pixels.
CELL_PX = 8.0
ZOOM_STEP = 0.5
REDUCED_MOTION_ENV = "THEATRE_REDUCED_MOTION"


def prefers_reduced_motion() -> bool:
    return os.environ.get(REDUCED_MOTION_ENV, "").lower() in ("1", "true", "yes")


class TheatreApp(App[None]):
    CSS_PATH = "app.tcss"

    BINDINGS = [
        Binding("+", "zoom(1)", "Zoom In"),
        Binding("=", "zoom(1)", "Zoom In", show=False),
        Binding("-", "zoom(-1)", "Zoom Out"),
        Binding("c", "next_conflict", "Next Conflict"),
        Binding("g", "toggle_globe", "Globe"),
        Binding("t", "toggle_troops", "Troops"),
        Binding("v", "toggle_overlay", "Overlay"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        conflict_id: str | None = None,
        settings: OverlaySettings | None = None,
        catalog: ConflictCatalog | None = None,
        reduced_motion: bool | None = None,
        seed: int | None = None,
    ) -> None:
        super().__init__()
        self.settings = settings or OverlaySettings.default()
        self.catalog = catalog if catalog is not None else ConflictCatalog()
        self.conflict_ids = self.catalog.ids()
        if not self.conflict_ids:
            raise RuntimeError(f"No conflict data found in {self.catalog.data_dir}")
        first = conflict_id or self.conflict_ids[0]
        try:
            bundle = self.catalog.load(first)
        except ConflictDataError as exc:
            raise RuntimeError(f"Failed to load conflict: {exc}") from exc

        self.reduced_motion = prefers_reduced_motion() if reduced_motion is None else reduced_motion
        self.rng = Random(seed)
        self.view = GlobeView(width=800, height=600, zoom=1.0, globe=True)
        self.radius_px = ScalarChannel()
        self.radius_cells = ScalarChannel()
        self.tracker = GlobeRadiusTracker(self.view, self.radius_px, self.settings.sampler)
        self.zoom: Signal[float] = Signal(self.view.zoom)
        self.visible: Signal[bool] = Signal(True)
        self.show_troops: Signal[bool] = Signal(True)
        self.composer = OverlayComposer(
            bundle,
            settings=self.settings,
            cache=OverlayCache(),
            visible=self.visible,
            zoom=self.zoom,
            show_troops=self.show_troops,
            on_troop_click=lambda unit: self.notify(unit.name),
            host=self.view,
        )
        self._subscriptions: list[Subscription] = []

    def compose(self) -> ComposeResult:
        yield HeaderBar(self.composer, self.radius_px, classes="header-bar")
        with Horizontal(id="main"):
            yield StarfieldWidget(self._build_engine, id="starfield")
            with VerticalScroll(id="overlay-panel", classes="box"):
                yield OverlayPanel(self.composer)

    def _build_engine(self, widget: StarfieldWidget, canvas: CellCanvas) -> StarfieldEngine:
        config = self.settings.starfield
        return StarfieldEngine(
            config,
            canvas,
            TextualScheduler(widget, config.frame_interval_s),
            radius=self.radius_cells,
            view=self.view,
            rng=self.rng,
            reduced_motion=self.reduced_motion,
        )

    def on_mount(self) -> None:
        self._subscriptions.append(self.radius_px.subscribe(lambda r: self.radius_cells.publish(r / CELL_PX)))
        self._subscriptions.append(self.tracker.start())
        self._sync_view()

    def on_unmount(self) -> None:
        for sub in self._subscriptions:
            sub.cancel()
        self.composer.stop()

    def on_resize(self) -> None:
        widgets = self.query(StarfieldWidget)
        if not widgets:
            return
        starfield = widgets.first()
        width = max(1, int(starfield.size.width * CELL_PX))
        height = max(1, int(starfield.size.height * CELL_PX))
        self.view.resize(width, height)

    def action_zoom(self, direction: int) -> None:
        zoom = max(0.0, min(8.0, self.view.zoom + direction * ZOOM_STEP))
        self.view.jump_to(zoom=zoom)
        self._sync_view()

    def action_next_conflict(self) -> None:
        current = self.conflict_ids.index(self.composer.bundle.id)
        next_id = self.conflict_ids[(current + 1) % len(self.conflict_ids)]
        try:
            bundle = self.catalog.load(next_id)
        except ConflictDataError as exc:
            self.notify(str(exc), severity="error")
            return
        self.composer.select_conflict(bundle)
        self._sync_view()

    def action_toggle_globe(self) -> None:
        self.view.set_globe(not self.view.is_globe)
        self._sync_view()

    def action_toggle_troops(self) -> None:
        self.show_troops.set(not self.show_troops.value)
        self._refresh_panels()

    def action_toggle_overlay(self) -> None:
        self.visible.set(not self.visible.value)
        self._refresh_panels()

    def _sync_view(self) -> None:
        self.zoom.set(self.view.zoom)
        self.composer.set_marker_filter(hemisphere_filter(self.view.center, globe=self.view.is_globe))
        self._refresh_panels()

    def _refresh_panels(self) -> None:
        for event in self.composer.drain_events():
            logger.info("%s: %s", event.kind, event.message)
        self.query_one(OverlayPanel).refresh_frame()
        self.query_one(HeaderBar).refresh()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="theatre-tui",
        description="Terminal preview of the conflict overlay and starfield.",
    )
    parser.add_argument("--conflict", default=None, help="Conflict id to open first.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for star placement.")
    parser.add_argument("--reduced-motion", action="store_true", help="Do not animate the starfield.")
    args = parser.parse_args(argv)

    app = TheatreApp(
        conflict_id=args.conflict,
        reduced_motion=True if args.reduced_motion else None,
        seed=args.seed,
    )
    app.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
