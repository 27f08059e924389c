from __future__ import annotations

from theatre.domain.types import FortificationLine, OccupiedTerritory, SegmentStatus, Side
from theatre.overlay.geometry import (
    FRONTLINE_SOURCE,
    compose_fortifications,
    compose_frontlines,
    compose_occupied,
    frontline_layers,
    frontline_passes,
    occupied_layers,
    sector_labels,
)
from tests.helpers.factories import FIXED_NOW, days_ago, make_segment, make_summary


def test_frontline_features_keep_insertion_order_and_recency_colour() -> None:
    segments = [
        make_segment("late", as_of=days_ago(90)),
        make_segment("fresh", as_of=days_ago(2)),
        make_segment("mid", as_of=days_ago(20)),
    ]
    collection = compose_frontlines(segments, now=FIXED_NOW)

    assert collection["type"] == "FeatureCollection"
    features = collection["features"]
    assert [f["properties"]["id"] for f in features] == ["late", "fresh", "mid"]
    assert [f["properties"]["color"] for f in features] == ["#999999", "#ff3333", "#ff9933"]
    assert features[0]["geometry"] == {
        "type": "LineString",
        "coordinates": [[30.0, 48.0], [30.5, 48.2], [31.0, 48.5]],
    }


def test_frontline_passes_are_drawn_glow_first_with_symmetric_side_strokes() -> None:
    summary = make_summary()
    passes = frontline_passes(summary)

    assert [p.id for p in passes] == [
        "conflict-fl-glow",
        "conflict-fl-side-a",
        "conflict-fl-center",
        "conflict-fl-side-b",
    ]
    glow, side_a, center, side_b = passes
    assert (glow.width, glow.opacity, glow.blur) == (14, 0.10, 4)
    assert side_a.offset == -side_b.offset != 0
    assert center.offset == 0
    assert side_a.color == summary.side_a.color
    assert side_b.color == summary.side_b.color


def test_frontline_layers_follow_visibility_toggle() -> None:
    layers = frontline_layers(make_summary(), visibility="none")
    assert len(layers) == 4
    assert all(layer["source"] == FRONTLINE_SOURCE for layer in layers)
    assert all(layer["layout"]["visibility"] == "none" for layer in layers)
    assert layers[0]["paint"]["line-color"] == ["get", "color"]


def test_closed_fortification_becomes_closed_polygon() -> None:
    lines = [
        FortificationLine(id="open", name="Open line", points=((1.0, 1.0), (2.0, 2.0))),
        FortificationLine(
            id="ring", name="Salient", points=((0.0, 0.0), (1.0, 0.0), (1.0, 1.0)), closed=True
        ),
    ]
    features = compose_fortifications(lines)["features"]

    assert features[0]["geometry"]["type"] == "LineString"
    polygon = features[1]["geometry"]
    assert polygon["type"] == "Polygon"
    ring = polygon["coordinates"][0]
    assert ring[0] == ring[-1]
    assert len(ring) == 4


def test_occupied_territory_rings_are_closed() -> None:
    territory = OccupiedTerritory(
        side=Side.B,
        label="Occupied",
        rings=(((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0)), ((5.0, 5.0), (6.0, 5.0), (6.0, 6.0))),
    )
    feature = compose_occupied(territory)["features"][0]
    rings = feature["geometry"]["coordinates"]
    assert len(rings[0]) == 4
    assert rings[1][0] == rings[1][-1]
    assert feature["properties"]["side"] == "sideB"

    layers = occupied_layers(make_summary(), territory, visibility="visible")
    assert layers[0]["paint"]["fill-color"] == make_summary().side_b.color


def test_missing_occupied_territory_yields_empty_collection() -> None:
    assert compose_occupied(None) == {"type": "FeatureCollection", "features": []}
    assert occupied_layers(make_summary(), None, visibility="visible") == []


def test_sector_labels_sit_at_segment_midpoint() -> None:
    labels = sector_labels([make_segment("s", status=SegmentStatus.ACTIVE)])
    assert len(labels) == 1
    label = labels[0]
    assert (label.lon, label.lat) == (30.5, 48.2)
    assert label.caption == "Active Combat"
