"""Animated, parallax-scrolling starfield kept outside the globe silhouette."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from random import Random
from typing import Any, Callable

from theatre.globe.host import MapHost
from theatre.rules.settings import StarfieldConfig, StarLayer
from theatre.sim.signals import ScalarChannel, Subscription
from theatre.starfield.canvas import Canvas
from theatre.starfield.scheduler import FrameScheduler

logger = logging.getLogger(__name__)

TWO_PI = 2 * math.pi


@dataclass(frozen=True)
class Star:
    x: float
    y: float
    size: float
    base_opacity: float
    twinkle_speed: float
    twinkle_phase: float
    color: str
    layer: int


def wrap(value: float, size: float) -> float:
    """Map ``value`` into ``[0, size)`` for any sign or magnitude."""
    if size <= 0:
        return 0.0
    result = value % size
    # Tiny negative inputs round up to exactly ``size``.
    if result >= size:
        result -= size
    return result


def twinkle(time: float, speed: float, phase: float) -> float:
    return 0.5 + 0.5 * math.sin(time * speed + phase)


def star_alpha(star: Star, time: float) -> float:
    return star.base_opacity * (0.6 + 0.4 * twinkle(time, star.twinkle_speed, star.twinkle_phase))


def generate_stars(
    layers: tuple[StarLayer, ...],
    width: float,
    height: float,
    pixel_ratio: float,
    rng: Random,
    *,
    colors: tuple[str, ...],
    twinkle_speed_range: tuple[float, float],
) -> list[Star]:
    stars: list[Star] = []
    for index, layer in enumerate(layers):
        low, high = layer.size_range
        for _ in range(layer.count):
            stars.append(
                Star(
                    x=wrap(rng.random() * width, width),
                    y=wrap(rng.random() * height, height),
                    size=rng.uniform(low, high) * pixel_ratio,
                    base_opacity=layer.opacity * rng.uniform(0.5, 1.0),
                    twinkle_speed=rng.uniform(*twinkle_speed_range),
                    twinkle_phase=rng.random() * TWO_PI,
                    color=rng.choice(colors),
                    layer=index,
                )
            )
    return stars


class StarfieldEngine:
    """Owns the star particles and the self-rescheduling animation loop.

    The globe radius is read from ``radius`` (published by the globe tracker)
    each frame; stars inside that circle around the canvas centre are not drawn.
    """

    def __init__(
        self,
        config: StarfieldConfig,
        canvas: Canvas,
        scheduler: FrameScheduler,
        *,
        radius: ScalarChannel | None = None,
        view: MapHost | None = None,
        rng: Random | None = None,
        reduced_motion: bool | Callable[[], bool] = False,
    ) -> None:
        self.config = config
        self._canvas = canvas
        self._scheduler = scheduler
        self._radius = radius if radius is not None else ScalarChannel()
        self._view = view
        self._rng = rng or Random()
        self._reduced_motion = reduced_motion
        self.stars: list[Star] = []
        self.width = 0
        self.height = 0
        self.pixel_ratio = 1.0
        self.time = 0.0
        self.frames = 0
        self._running = False
        self._pending: Any = None
        self._last_timestamp: float | None = None
        self._handle: Subscription | None = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def has_pending_frame(self) -> bool:
        return self._pending is not None

    def layer_counts(self) -> list[int]:
        counts = [0] * len(self.config.layers)
        for star in self.stars:
            counts[star.layer] += 1
        return counts

    def resize(self, width: float, height: float, pixel_ratio: float = 1.0) -> None:
        """Regenerate every star for the new container size; old stars are dropped."""
        self.pixel_ratio = max(0.0, min(pixel_ratio, self.config.max_pixel_ratio))
        self.width = int(width * self.pixel_ratio)
        self.height = int(height * self.pixel_ratio)
        self.stars = generate_stars(
            self.config.layers,
            self.width,
            self.height,
            self.pixel_ratio,
            self._rng,
            colors=self.config.colors,
            twinkle_speed_range=self.config.twinkle_speed_range,
        )
        logger.debug("Starfield regenerated: %d stars at %dx%d", len(self.stars), self.width, self.height)
        if self._running:
            self._cancel_pending()
            self._last_timestamp = None
            self._schedule()

    def start(self) -> Subscription | None:
        """Start the loop. Returns None, without starting, under a reduced-motion preference."""
        if self._handle is not None and self._handle.active:
            return self._handle
        reduced = self._reduced_motion() if callable(self._reduced_motion) else self._reduced_motion
        if reduced:
            logger.info("Reduced motion preferred; starfield animation disabled")
            return None
        self._running = True
        self._last_timestamp = None
        self._schedule()
        self._handle = Subscription(self.stop)
        return self._handle

    def stop(self) -> None:
        self._running = False
        self._cancel_pending()
        if self._handle is not None:
            handle, self._handle = self._handle, None
            handle.cancel()

    def render_frame(self, dt: float) -> None:
        self.time += dt
        self.frames += 1
        width, height = self.width, self.height
        self._canvas.clear(width, height)

        mask = self._radius.value * self.pixel_ratio
        cx, cy = width / 2, height / 2
        offsets = self._parallax_offsets()

        for star in self.stars:
            dx, dy = offsets[star.layer]
            x = wrap(star.x + dx, width)
            y = wrap(star.y + dy, height)
            if mask > 0 and math.hypot(x - cx, y - cy) < mask:
                continue
            self._canvas.fill_circle(x, y, star.size, star.color, star_alpha(star, self.time))

    def _parallax_offsets(self) -> list[tuple[float, float]]:
        layers = self.config.layers
        view = self._view
        if view is None or not view.is_globe:
            return [(0.0, 0.0)] * len(layers)
        scale = self.config.parallax_px_per_degree * self.pixel_ratio
        bearing, pitch = view.bearing, view.pitch
        return [(-bearing * scale * layer.speed, pitch * scale * layer.speed) for layer in layers]

    def _schedule(self) -> None:
        self._pending = self._scheduler.request(self._on_frame)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            pending, self._pending = self._pending, None
            self._scheduler.cancel(pending)

    def _on_frame(self, timestamp: float) -> None:
        self._pending = None
        if not self._running:
            return
        if self._last_timestamp is None:
            dt = 0.0
        else:
            dt = min(max(0.0, timestamp - self._last_timestamp), self.config.frame_dt_cap_s)
        self._last_timestamp = timestamp
        try:
            self.render_frame(dt)
        except Exception:
            logger.exception("Starfield frame failed; stopping animation")
            self.stop()
            return
        self._schedule()
