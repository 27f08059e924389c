from __future__ import annotations

import time
from typing import Any, Callable

from rich.text import Text
from textual.timer import Timer
from textual.widget import Widget
from textual.widgets import Static

from theatre.overlay.composer import OverlayComposer, OverlayFrame
from theatre.overlay.lod import MarkerCategory
from theatre.sim.signals import ScalarChannel
from theatre.starfield.engine import StarfieldEngine
from theatre.starfield.scheduler import FrameCallback

# Glyphs by drawn radius, smallest first.
STAR_CHARS = ("·", "∙", "•", "*")

CATEGORY_TITLES = {
    MarkerCategory.CAPITAL: "Capitals",
    MarkerCategory.COAT_OF_ARMS: "Coats of arms",
    MarkerCategory.SECTOR_LABEL: "Sectors",
    MarkerCategory.BATTLE: "Battles",
    MarkerCategory.NUCLEAR_PLANT: "Nuclear plants",
    MarkerCategory.CITY: "Cities",
    MarkerCategory.INFRASTRUCTURE: "Infrastructure",
    MarkerCategory.NAVAL: "Naval",
    MarkerCategory.UNIT: "Units",
}


class TextualScheduler:
    """Frame scheduler backed by widget timers; repaints the widget after each frame."""

    def __init__(self, widget: Widget, interval: float) -> None:
        self._widget = widget
        self._interval = interval

    def request(self, callback: FrameCallback) -> Timer:
        def fire() -> None:
            callback(time.monotonic())
            self._widget.refresh()

        return self._widget.set_timer(self._interval, fire)

    def cancel(self, handle: Any) -> None:
        handle.stop()


class CellCanvas:
    """Character-cell drawing surface; one star per cell, brightest wins."""

    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self._cells: dict[tuple[int, int], tuple[str, str, float]] = {}

    def clear(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._cells = {}

    def fill_circle(self, x: float, y: float, radius: float, color: str, alpha: float) -> None:
        cell = (int(x), int(y))
        current = self._cells.get(cell)
        if current is not None and current[2] >= alpha:
            return
        index = min(len(STAR_CHARS) - 1, int(radius / 0.5))
        self._cells[cell] = (STAR_CHARS[index], color, alpha)

    def to_text(self) -> Text:
        text = Text(no_wrap=True)
        for row in range(self.height):
            for col in range(self.width):
                entry = self._cells.get((col, row))
                if entry is None:
                    text.append(" ")
                    continue
                char, color, alpha = entry
                text.append(char, style=color if alpha >= 0.5 else f"dim {color}")
            if row < self.height - 1:
                text.append("\n")
        return text


class StarfieldWidget(Widget):
    """Hosts a StarfieldEngine; the engine's loop is driven by widget timers."""

    def __init__(self, engine_factory: Callable[["StarfieldWidget", CellCanvas], StarfieldEngine], **kwargs) -> None:
        super().__init__(**kwargs)
        self.canvas = CellCanvas()
        self.engine = engine_factory(self, self.canvas)

    def on_mount(self) -> None:
        self.engine.resize(self.size.width, self.size.height)
        self.engine.start()

    def on_resize(self) -> None:
        self.engine.resize(self.size.width, self.size.height)
        self.refresh()

    def on_unmount(self) -> None:
        self.engine.stop()

    def render(self) -> Text:
        return self.canvas.to_text()


class HeaderBar(Static):
    """Single-line status header."""

    def __init__(self, composer: OverlayComposer, radius: ScalarChannel, **kwargs) -> None:
        super().__init__(**kwargs)
        self.composer = composer
        self.radius = radius

    def render(self) -> Text:
        composer = self.composer
        vis = composer.visibility
        text = Text(no_wrap=True)
        text.append("CONFLICT: ", style="bold")
        text.append(composer.bundle.summary.name)
        text.append("  |  ")
        text.append("ZOOM: ", style="bold")
        text.append(f"{composer.zoom.value:.1f}")
        text.append("  |  ")
        text.append("DETAIL: ", style="bold")
        text.append("on" if vis.detail else "off")
        text.append("  |  ")
        text.append("LABELS: ", style="bold")
        text.append("on" if vis.labels else "off")
        text.append("  |  ")
        text.append("GLOBE MASK: ", style="bold")
        text.append(self.radius.css_value())
        return text


class OverlayPanel(Static):
    """Lists the markers of the most recently composed frame, grouped by category."""

    def __init__(self, composer: OverlayComposer, **kwargs) -> None:
        super().__init__(**kwargs)
        self.composer = composer
        self.frame: OverlayFrame | None = None

    def refresh_frame(self) -> None:
        self.frame = self.composer.compose()
        self.refresh()

    def render(self) -> Text:
        frame = self.frame
        text = Text()
        if frame is None:
            return text
        if not frame.visible:
            text.append("Overlay hidden", style="dim")
            return text
        for feature in frame.sources["conflict-frontline"]["features"]:
            props = feature["properties"]
            text.append("━━ ", style=props["color"])
            text.append(f"{props['label']} ({props['status']})\n")
        for category, title in CATEGORY_TITLES.items():
            markers = frame.markers_of(category)
            if not markers:
                continue
            text.append(f"\n{title}\n", style="bold")
            for marker in markers:
                glyph = marker.glyph
                icon = glyph.pips + glyph.icon if category == MarkerCategory.UNIT else glyph.icon
                if glyph.shape == "star":
                    icon = "★"
                text.append(f" {icon} " if icon else "   ", style=glyph.fill or None)
                text.append(f"{glyph.label or glyph.title}\n")
        if frame.popup is not None:
            popup = frame.popup
            text.append(f"\n⚔ {popup.title}\n", style="bold")
            text.append(f"{popup.result}  {popup.date}\n")
            for side in popup.sides:
                text.append(f"{side.name}\n", style=side.color)
                for label, value in side.rows:
                    if value:
                        text.append(f"  {label}: {value}\n")
            if popup.significance:
                text.append(f"{popup.significance}\n", style="italic")
        if frame.troop_popup is not None:
            troop = frame.troop_popup
            text.append(f"\n{troop.pips} {troop.icon} {troop.title}\n", style=troop.color)
            text.append(f"  {troop.unit_size} {troop.unit_type}, {troop.sector}\n")
        return text
