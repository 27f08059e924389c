"""Far-side culling for markers on the 3D globe."""

from __future__ import annotations

import math
from typing import Callable

from theatre.domain.types import LngLat

MarkerFilter = Callable[[float, float], bool]

HORIZON_COS = -0.05


def cos_angle(center: LngLat, lon: float, lat: float) -> float:
    """Cosine of the great-circle angle between the view centre and a point."""
    phi0 = math.radians(center.lat)
    phi = math.radians(lat)
    dlam = math.radians(lon - center.lon)
    return math.sin(phi0) * math.sin(phi) + math.cos(phi0) * math.cos(phi) * math.cos(dlam)


def hemisphere_filter(center: LngLat, *, globe: bool, transparent: bool = False) -> MarkerFilter:
    """Predicate hiding markers behind the globe. Flat maps and see-through globes show everything."""
    if not globe or transparent:
        return lambda lon, lat: True
    return lambda lon, lat: cos_angle(center, lon, lat) > HORIZON_COS
