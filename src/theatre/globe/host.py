"""The host map contract consumed by the sampler, the starfield and popup anchors."""

from __future__ import annotations

from typing import Callable, Protocol

from theatre.domain.types import LngLat, ScreenPoint

MapListener = Callable[[], None]

RENDER_EVENT = "render"


class MapHost(Protocol):
    @property
    def bearing(self) -> float: ...

    @property
    def pitch(self) -> float: ...

    @property
    def is_globe(self) -> bool: ...

    def project(self, point: LngLat) -> ScreenPoint: ...

    def get_center(self) -> LngLat: ...

    def on(self, event: str, listener: MapListener) -> None: ...

    def off(self, event: str, listener: MapListener) -> None: ...
