from __future__ import annotations

from theatre.overlay.composer import OverlayFrame
from theatre.overlay.lod import GATED, MarkerCategory
from theatre.starfield.engine import StarfieldEngine


def assert_no_gated_markers(frame: OverlayFrame) -> None:
    assert not [m for m in frame.markers if m.category in GATED]


def assert_categories_present(frame: OverlayFrame, *categories: MarkerCategory) -> None:
    present = {m.category for m in frame.markers}
    for category in categories:
        assert category in present, f"expected {category.value} markers"


def assert_stars_in_bounds(engine: StarfieldEngine) -> None:
    for star in engine.stars:
        assert 0 <= star.x < engine.width or engine.width == 0
        assert 0 <= star.y < engine.height or engine.height == 0


def assert_layer_counts(engine: StarfieldEngine) -> None:
    assert engine.layer_counts() == [layer.count for layer in engine.config.layers]
