"""GeoJSON feature collections and MapLibre-style layer descriptors for overlay geometry."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from theatre.domain.types import (
    ConflictSummary,
    FortificationLine,
    FrontlineSegment,
    OccupiedTerritory,
    SegmentStatus,
)
from theatre.overlay.recency import recency_color

FeatureCollection = dict[str, Any]
LayerSpec = dict[str, Any]

RECENCY_COLOR = ["get", "color"]  # data-driven paint expression
SIDE_OFFSET_PX = 3.0

FRONTLINE_SOURCE = "conflict-frontline"
FORTIFICATION_SOURCE = "conflict-fortifications"
OCCUPIED_SOURCE = "conflict-occupied"

FORTIFICATION_COLOR = "#ff8c00"
OCCUPIED_BORDER_COLOR = "#ffa500"

STATUS_CAPTIONS = {
    SegmentStatus.ACTIVE: "Active Combat",
    SegmentStatus.CONTESTED: "Contested",
    SegmentStatus.STABLE: "Stable",
}


@dataclass(frozen=True)
class StrokePass:
    """One of the strokes drawn over each frontline feature."""

    id: str
    color: str | list[str]
    width: float
    opacity: float = 1.0
    offset: float = 0.0  # screen pixels, applied by the renderer
    blur: float = 0.0


@dataclass(frozen=True)
class SectorLabel:
    id: str
    label: str
    status: SegmentStatus
    caption: str
    lon: float
    lat: float


def _collection(features: list[dict[str, Any]]) -> FeatureCollection:
    return {"type": "FeatureCollection", "features": features}


def _line_layout(visibility: str) -> dict[str, Any]:
    return {"visibility": visibility, "line-cap": "round", "line-join": "round"}


def compose_frontlines(segments: Iterable[FrontlineSegment], *, now: datetime) -> FeatureCollection:
    """One LineString per segment, in insertion order, tagged with its recency colour."""
    features = [
        {
            "type": "Feature",
            "properties": {
                "id": seg.id,
                "label": seg.label,
                "status": seg.status.value,
                "color": recency_color(seg.as_of, now=now),
            },
            "geometry": {"type": "LineString", "coordinates": [list(p) for p in seg.points]},
        }
        for seg in segments
    ]
    return _collection(features)


def frontline_passes(summary: ConflictSummary) -> tuple[StrokePass, ...]:
    return (
        StrokePass("conflict-fl-glow", RECENCY_COLOR, width=14, opacity=0.10, blur=4),
        StrokePass("conflict-fl-side-a", summary.side_a.color, width=2, opacity=0.8, offset=-SIDE_OFFSET_PX),
        StrokePass("conflict-fl-center", RECENCY_COLOR, width=2.5),
        StrokePass("conflict-fl-side-b", summary.side_b.color, width=2, opacity=0.8, offset=SIDE_OFFSET_PX),
    )


def _pass_paint(stroke: StrokePass) -> dict[str, Any]:
    paint: dict[str, Any] = {"line-color": stroke.color, "line-width": stroke.width}
    if stroke.opacity != 1.0:
        paint["line-opacity"] = stroke.opacity
    if stroke.offset:
        paint["line-offset"] = stroke.offset
    if stroke.blur:
        paint["line-blur"] = stroke.blur
    return paint


def frontline_layers(summary: ConflictSummary, *, visibility: str) -> list[LayerSpec]:
    return [
        {
            "id": stroke.id,
            "type": "line",
            "source": FRONTLINE_SOURCE,
            "layout": _line_layout(visibility),
            "paint": _pass_paint(stroke),
        }
        for stroke in frontline_passes(summary)
    ]


def compose_fortifications(lines: Iterable[FortificationLine]) -> FeatureCollection:
    features = []
    for line in lines:
        coords = [list(p) for p in line.points]
        if line.closed:
            if coords[0] != coords[-1]:
                coords.append(list(coords[0]))
            geometry = {"type": "Polygon", "coordinates": [coords]}
        else:
            geometry = {"type": "LineString", "coordinates": coords}
        features.append(
            {
                "type": "Feature",
                "properties": {"id": line.id, "name": line.name, "note": line.note},
                "geometry": geometry,
            }
        )
    return _collection(features)


def fortification_layers(summary: ConflictSummary, *, visibility: str) -> list[LayerSpec]:
    return [
        {
            "id": "conflict-fort-line",
            "type": "line",
            "source": FORTIFICATION_SOURCE,
            "filter": ["==", ["geometry-type"], "LineString"],
            "layout": _line_layout(visibility),
            "paint": {
                "line-color": FORTIFICATION_COLOR,
                "line-width": 2,
                "line-dasharray": [4, 3],
                "line-opacity": 0.6,
            },
        },
        {
            "id": "conflict-fort-fill",
            "type": "fill",
            "source": FORTIFICATION_SOURCE,
            "filter": ["==", ["geometry-type"], "Polygon"],
            "layout": {"visibility": visibility},
            "paint": {"fill-color": summary.side_a.color, "fill-opacity": 0.12},
        },
        {
            "id": "conflict-fort-outline",
            "type": "line",
            "source": FORTIFICATION_SOURCE,
            "filter": ["==", ["geometry-type"], "Polygon"],
            "layout": _line_layout(visibility),
            "paint": {
                "line-color": summary.side_a.color,
                "line-width": 2,
                "line-dasharray": [3, 2],
                "line-opacity": 0.7,
            },
        },
    ]


def compose_occupied(territory: OccupiedTerritory | None) -> FeatureCollection:
    if territory is None:
        return _collection([])
    rings = []
    for ring in territory.rings:
        coords = [list(p) for p in ring]
        if coords and coords[0] != coords[-1]:
            coords.append(list(coords[0]))
        rings.append(coords)
    return _collection(
        [
            {
                "type": "Feature",
                "properties": {"side": territory.side.value, "label": territory.label},
                "geometry": {"type": "Polygon", "coordinates": rings},
            }
        ]
    )


def occupied_layers(summary: ConflictSummary, territory: OccupiedTerritory | None, *, visibility: str) -> list[LayerSpec]:
    if territory is None:
        return []
    fill = summary.side(territory.side).color
    return [
        {
            "id": "conflict-occupied-fill",
            "type": "fill",
            "source": OCCUPIED_SOURCE,
            "layout": {"visibility": visibility},
            "paint": {"fill-color": fill, "fill-opacity": 0.12},
        },
        {
            "id": "conflict-occupied-glow",
            "type": "line",
            "source": OCCUPIED_SOURCE,
            "layout": _line_layout(visibility),
            "paint": {"line-color": OCCUPIED_BORDER_COLOR, "line-width": 5, "line-blur": 4, "line-opacity": 0.15},
        },
        {
            "id": "conflict-occupied-line",
            "type": "line",
            "source": OCCUPIED_SOURCE,
            "layout": _line_layout(visibility),
            "paint": {
                "line-color": OCCUPIED_BORDER_COLOR,
                "line-width": 1.5,
                "line-dasharray": [6, 4],
                "line-opacity": 0.55,
            },
        },
    ]


def sector_labels(segments: Iterable[FrontlineSegment]) -> tuple[SectorLabel, ...]:
    labels = []
    for seg in segments:
        lon, lat = seg.midpoint
        labels.append(
            SectorLabel(
                id=seg.id,
                label=seg.label,
                status=seg.status,
                caption=STATUS_CAPTIONS[seg.status],
                lon=lon,
                lat=lat,
            )
        )
    return tuple(labels)
