from __future__ import annotations

import pytest

from theatre.domain.types import LngLat
from theatre.globe.hemisphere import cos_angle, hemisphere_filter

CENTER = LngLat(lon=0.0, lat=0.0)


def test_cos_angle_extremes() -> None:
    assert cos_angle(CENTER, 0.0, 0.0) == pytest.approx(1.0)
    assert cos_angle(CENTER, 180.0, 0.0) == pytest.approx(-1.0)
    assert cos_angle(CENTER, 90.0, 0.0) == pytest.approx(0.0, abs=1e-12)


def test_markers_just_past_the_horizon_stay_visible() -> None:
    keep = hemisphere_filter(CENTER, globe=True)
    assert keep(0.0, 0.0)
    assert keep(92.0, 0.0)
    assert not keep(94.0, 0.0)
    assert not keep(180.0, 0.0)


def test_flat_map_and_transparent_globe_show_everything() -> None:
    assert hemisphere_filter(CENTER, globe=False)(180.0, 0.0)
    assert hemisphere_filter(CENTER, globe=True, transparent=True)(180.0, 0.0)
