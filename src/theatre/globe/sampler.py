"""Globe silhouette radius sampled from the host map's projection."""

from __future__ import annotations

import logging
import math

from theatre.domain.types import LngLat
from theatre.globe.host import RENDER_EVENT, MapHost
from theatre.rules.settings import SamplerConfig
from theatre.sim.signals import ScalarChannel, Subscription

logger = logging.getLogger(__name__)


def accept_radius(distances: list[float], config: SamplerConfig) -> float:
    """Max distance at or below the ceiling, or 0 when it does not clear the floor."""
    valid = [d for d in distances if d <= config.max_radius_px]
    best = max(valid, default=0.0)
    return best if best > config.min_radius_px else 0.0


def sample_radius(host: MapHost, config: SamplerConfig) -> float:
    """Pixel radius of the globe from five projection calls; 0 when degenerate or on failure."""
    try:
        center = host.get_center()
        origin = host.project(center)
        lat_n = min(config.lat_clamp, center.lat + config.delta_deg)
        lat_s = max(-config.lat_clamp, center.lat - config.delta_deg)
        probes = (
            LngLat(lon=center.lon + config.delta_deg, lat=center.lat),
            LngLat(lon=center.lon - config.delta_deg, lat=center.lat),
            LngLat(lon=center.lon, lat=lat_n),
            LngLat(lon=center.lon, lat=lat_s),
        )
        distances = []
        for probe in probes:
            point = host.project(probe)
            distances.append(math.hypot(point.x - origin.x, point.y - origin.y))
    except Exception:
        logger.debug("Globe radius sample failed; publishing no mask", exc_info=True)
        return 0.0
    return accept_radius(distances, config)


class GlobeRadiusTracker:
    """Re-samples the globe radius on every host ``render`` event and publishes it."""

    def __init__(self, host: MapHost, channel: ScalarChannel, config: SamplerConfig) -> None:
        self._host = host
        self._channel = channel
        self._config = config
        self._subscription: Subscription | None = None

    @property
    def running(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def start(self) -> Subscription:
        if self._subscription is not None and self._subscription.active:
            return self._subscription
        self._host.on(RENDER_EVENT, self.update)
        self._subscription = Subscription(self._detach)
        self.update()
        return self._subscription

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()

    def update(self) -> None:
        try:
            globe = self._host.is_globe
        except Exception:
            logger.debug("Host map unavailable while checking projection", exc_info=True)
            globe = False
        radius = sample_radius(self._host, self._config) if globe else 0.0
        self._channel.publish(radius)

    def _detach(self) -> None:
        try:
            self._host.off(RENDER_EVENT, self.update)
        except Exception:
            logger.debug("Host map already gone while detaching tracker", exc_info=True)
