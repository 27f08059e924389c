from __future__ import annotations

import pytest

from theatre.domain.types import LngLat
from theatre.globe.projection import GlobeView, MapTornDown, globe_radius_px


def test_center_projects_to_canvas_middle() -> None:
    view = GlobeView(width=800, height=600, center=LngLat(lon=30.0, lat=48.0))
    point = view.project(LngLat(lon=30.0, lat=48.0))
    assert point.x == pytest.approx(400.0)
    assert point.y == pytest.approx(300.0)


def test_globe_radius_doubles_per_zoom_level() -> None:
    assert globe_radius_px(3.0) == pytest.approx(2 * globe_radius_px(2.0))


def test_bearing_rotates_and_pitch_foreshortens() -> None:
    east = LngLat(lon=45.0, lat=0.0)
    north = LngLat(lon=0.0, lat=45.0)
    flat = GlobeView(zoom=2.0)
    rotated = GlobeView(zoom=2.0, bearing=90.0)
    tilted = GlobeView(zoom=2.0, pitch=60.0)

    plain = flat.project(east)
    turned = rotated.project(east)
    assert plain.x > 400
    assert turned.x == pytest.approx(400.0, abs=1e-6)
    assert turned.y == pytest.approx(300.0 - (plain.x - 400.0))

    upright = 300.0 - flat.project(north).y
    leaning = 300.0 - tilted.project(north).y
    assert leaning == pytest.approx(upright * 0.5)


def test_mercator_mode_projects_linearly_in_longitude() -> None:
    view = GlobeView(zoom=0.0, globe=False)
    point = view.project(LngLat(lon=90.0, lat=0.0))
    assert point.x == pytest.approx(400.0 + 128.0)
    assert point.y == pytest.approx(300.0)


def test_view_changes_fire_events() -> None:
    view = GlobeView()
    fired: list[str] = []
    view.on("render", lambda: fired.append("render"))
    view.on("resize", lambda: fired.append("resize"))

    view.jump_to(zoom=3.0)
    view.set_globe(False)
    view.resize(1024, 768)
    assert fired == ["render", "render", "resize", "render"]
    assert (view.width, view.height) == (1024, 768)


def test_teardown_makes_projection_fail() -> None:
    view = GlobeView()
    view.on("render", lambda: None)
    view.teardown()
    assert view.listener_count() == 0
    with pytest.raises(MapTornDown):
        view.project(LngLat(lon=0.0, lat=0.0))
    with pytest.raises(MapTornDown):
        view.get_center()
