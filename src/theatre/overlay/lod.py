"""Zoom-based level-of-detail gating and co-located label suppression."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from theatre.domain.types import CityMarker, InfrastructureItem
from theatre.rules.settings import ZoomThresholds

EARTH_RADIUS_KM = 6371.0088


class MarkerCategory(str, Enum):
    CAPITAL = "capital"
    COAT_OF_ARMS = "coat_of_arms"
    SECTOR_LABEL = "sector_label"
    CITY = "city"
    INFRASTRUCTURE = "infrastructure"
    NAVAL = "naval"
    BATTLE = "battle"
    NUCLEAR_PLANT = "nuclear_plant"
    UNIT = "unit"


# Orientation anchors render at any zoom.
UNGATED = frozenset({MarkerCategory.CAPITAL, MarkerCategory.COAT_OF_ARMS})
GATED = frozenset(MarkerCategory) - UNGATED


@dataclass(frozen=True)
class Visibility:
    detail: bool
    labels: bool

    def shows(self, category: MarkerCategory) -> bool:
        return category in UNGATED or self.detail


def visibility(zoom: float, thresholds: ZoomThresholds) -> Visibility:
    return Visibility(detail=zoom >= thresholds.detail, labels=zoom >= thresholds.labels)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = phi2 - phi1
    dlam = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def same_location(a: tuple[float, float], b: tuple[float, float], epsilon_km: float) -> bool:
    """True when two (lat, lon) points are within ``epsilon_km`` of each other."""
    return haversine_km(a[0], a[1], b[0], b[1]) <= epsilon_km


def suppressed_city_labels(
    cities: Iterable[CityMarker],
    infrastructure: Iterable[InfrastructureItem],
    epsilon_km: float,
) -> frozenset[str]:
    """Ids of cities whose text label is hidden because an infrastructure marker sits on them."""
    infra_points = [(item.lat, item.lon) for item in infrastructure]
    return frozenset(
        city.id
        for city in cities
        if any(same_location((city.lat, city.lon), point, epsilon_km) for point in infra_points)
    )
