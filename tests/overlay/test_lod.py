from __future__ import annotations

from hypothesis import given, settings

from theatre.overlay.lod import (
    GATED,
    UNGATED,
    MarkerCategory,
    haversine_km,
    same_location,
    suppressed_city_labels,
    visibility,
)
from tests.helpers.factories import load_bundled, make_bundle, make_settings
from tests.helpers.strategies import zoom_strategy

THRESHOLDS = make_settings().zoom


def _shown(zoom: float) -> set[MarkerCategory]:
    vis = visibility(zoom, THRESHOLDS)
    return {category for category in MarkerCategory if vis.shows(category)}


def test_thresholds_gate_detail_and_labels() -> None:
    assert visibility(3.99, THRESHOLDS).detail is False
    at_detail = visibility(4.0, THRESHOLDS)
    assert at_detail.detail is True
    assert at_detail.labels is False
    assert visibility(5.0, THRESHOLDS).labels is True


def test_orientation_anchors_show_at_any_zoom() -> None:
    assert _shown(0.0) == set(UNGATED)
    assert _shown(4.0) == set(MarkerCategory)
    assert GATED.isdisjoint(UNGATED)


@given(a=zoom_strategy(), b=zoom_strategy())
@settings(max_examples=50)
def test_zooming_in_never_hides_a_category(a: float, b: float) -> None:
    low, high = min(a, b), max(a, b)
    assert _shown(low) <= _shown(high)
    if visibility(low, THRESHOLDS).labels:
        assert visibility(high, THRESHOLDS).labels


def test_same_location_uses_distance_tolerance() -> None:
    odesa = (46.4825, 30.7233)
    assert same_location(odesa, odesa, 1.1)
    assert same_location(odesa, (46.4870, 30.7233), 1.1)
    assert not same_location(odesa, (46.5025, 30.7233), 1.1)
    assert abs(haversine_km(0.0, 0.0, 1.0, 0.0) - 111.19) < 0.1


def test_city_label_hidden_when_infrastructure_sits_on_it() -> None:
    bundle = make_bundle()
    assert suppressed_city_labels(bundle.cities, bundle.infrastructure, 1.1) == frozenset({"harbour"})
    assert suppressed_city_labels(bundle.cities, (), 1.1) == frozenset()


def test_bundled_port_cities_have_suppressed_labels() -> None:
    bundle = load_bundled("ukraine")
    suppressed = suppressed_city_labels(bundle.cities, bundle.infrastructure, 1.1)
    assert {"odesa", "sevastopol"} <= suppressed
    assert "kharkiv" not in suppressed
