"""A pure-Python host map: orthographic globe or flat Web Mercator."""

from __future__ import annotations

import logging
import math

from theatre.domain.types import LngLat, ScreenPoint
from theatre.globe.host import RENDER_EVENT, MapListener

logger = logging.getLogger(__name__)

TILE_SIZE = 512
MAX_MERCATOR_LAT = 85.051129


class MapTornDown(RuntimeError):
    """Raised by ``project`` once the map has been torn down."""


def globe_radius_px(zoom: float) -> float:
    return TILE_SIZE * 2**zoom / (2 * math.pi)


class GlobeView:
    """View state plus projection, emitting ``render`` synchronously on every change."""

    def __init__(
        self,
        *,
        width: int = 800,
        height: int = 600,
        center: LngLat | None = None,
        zoom: float = 2.0,
        bearing: float = 0.0,
        pitch: float = 0.0,
        globe: bool = True,
    ) -> None:
        self.width = width
        self.height = height
        self.center = center or LngLat(lon=0.0, lat=0.0)
        self.zoom = zoom
        self._bearing = bearing
        self._pitch = pitch
        self._globe = globe
        self._listeners: dict[str, list[MapListener]] = {}
        self._torn_down = False

    @property
    def bearing(self) -> float:
        return self._bearing

    @property
    def pitch(self) -> float:
        return self._pitch

    @property
    def is_globe(self) -> bool:
        return self._globe

    def get_center(self) -> LngLat:
        if self._torn_down:
            raise MapTornDown("map has been removed")
        return self.center

    def on(self, event: str, listener: MapListener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: MapListener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: str = RENDER_EVENT) -> int:
        return len(self._listeners.get(event, []))

    def fire(self, event: str = RENDER_EVENT) -> None:
        for listener in list(self._listeners.get(event, [])):
            listener()

    def jump_to(
        self,
        *,
        center: LngLat | None = None,
        zoom: float | None = None,
        bearing: float | None = None,
        pitch: float | None = None,
    ) -> None:
        if center is not None:
            self.center = center
        if zoom is not None:
            self.zoom = zoom
        if bearing is not None:
            self._bearing = bearing
        if pitch is not None:
            self._pitch = pitch
        self.fire(RENDER_EVENT)

    def set_globe(self, globe: bool) -> None:
        self._globe = globe
        self.fire(RENDER_EVENT)

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.fire("resize")
        self.fire(RENDER_EVENT)

    def teardown(self) -> None:
        self._torn_down = True
        self._listeners.clear()

    def project(self, point: LngLat) -> ScreenPoint:
        if self._torn_down:
            raise MapTornDown("map has been removed")
        if self._globe:
            dx, dy = self._orthographic(point)
        else:
            dx, dy = self._mercator(point)
        # Screen y grows downwards; bearing rotates the image, pitch foreshortens it.
        theta = math.radians(self._bearing)
        rx = dx * math.cos(theta) - dy * math.sin(theta)
        ry = dx * math.sin(theta) + dy * math.cos(theta)
        ry *= math.cos(math.radians(self._pitch))
        return ScreenPoint(x=self.width / 2 + rx, y=self.height / 2 - ry)

    def _orthographic(self, point: LngLat) -> tuple[float, float]:
        radius = globe_radius_px(self.zoom)
        lam = math.radians(point.lon - self.center.lon)
        phi = math.radians(point.lat)
        phi0 = math.radians(self.center.lat)
        x = radius * math.cos(phi) * math.sin(lam)
        y = radius * (math.cos(phi0) * math.sin(phi) - math.sin(phi0) * math.cos(phi) * math.cos(lam))
        return x, y

    def _mercator(self, point: LngLat) -> tuple[float, float]:
        world = TILE_SIZE * 2**self.zoom
        x, y = _mercator_xy(point, world)
        cx, cy = _mercator_xy(self.center, world)
        return x - cx, cy - y


def _mercator_xy(point: LngLat, world: float) -> tuple[float, float]:
    lat = max(-MAX_MERCATOR_LAT, min(MAX_MERCATOR_LAT, point.lat))
    x = (point.lon + 180.0) / 360.0 * world
    phi = math.radians(lat)
    y = (1 - math.log(math.tan(math.pi / 4 + phi / 2)) / math.pi) / 2 * world
    return x, y
