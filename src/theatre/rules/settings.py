"""Overlay, sampler and starfield tuning loaded from JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DEFAULT_SETTINGS_PATH = DATA_DIR / "settings.json"


class SettingsError(ValueError):
    """Error loading or validating overlay settings."""


@dataclass(frozen=True)
class ZoomThresholds:
    detail: float
    labels: float


@dataclass(frozen=True)
class SamplerConfig:
    delta_deg: float
    lat_clamp: float
    min_radius_px: float
    max_radius_px: float


@dataclass(frozen=True)
class StarLayer:
    """Template for one parallax depth of the starfield."""

    count: int
    speed: float
    size_range: tuple[float, float]
    opacity: float


@dataclass(frozen=True)
class StarfieldConfig:
    max_pixel_ratio: float
    parallax_px_per_degree: float
    frame_interval_s: float
    frame_dt_cap_s: float
    twinkle_speed_range: tuple[float, float]
    colors: tuple[str, ...]
    layers: tuple[StarLayer, ...]

    @property
    def total_stars(self) -> int:
        return sum(layer.count for layer in self.layers)


@dataclass(frozen=True)
class OverlaySettings:
    zoom: ZoomThresholds
    sampler: SamplerConfig
    starfield: StarfieldConfig
    label_epsilon_km: float

    @staticmethod
    def load(path: Path) -> "OverlaySettings":
        data = _load_json(path)
        try:
            return _parse_settings(data)
        except SettingsError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise SettingsError(f"Invalid settings in {path}: {exc!r}") from exc

    @staticmethod
    def default() -> "OverlaySettings":
        return OverlaySettings.load(DEFAULT_SETTINGS_PATH)


def _load_json(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError as exc:
        raise SettingsError(f"Settings file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Invalid JSON in {path}: {exc}") from exc


def _pair(value: Any) -> tuple[float, float]:
    low, high = (float(v) for v in value)
    if low > high:
        raise SettingsError(f"Range lower bound exceeds upper bound: {value}")
    return low, high


def _parse_settings(data: dict[str, Any]) -> OverlaySettings:
    zoom_raw = data["zoom"]
    zoom = ZoomThresholds(detail=float(zoom_raw["detail"]), labels=float(zoom_raw["labels"]))
    if zoom.labels <= zoom.detail:
        raise SettingsError("zoom.labels must be greater than zoom.detail")

    sampler_raw = data["sampler"]
    sampler = SamplerConfig(
        delta_deg=float(sampler_raw["delta_deg"]),
        lat_clamp=float(sampler_raw["lat_clamp"]),
        min_radius_px=float(sampler_raw["min_radius_px"]),
        max_radius_px=float(sampler_raw["max_radius_px"]),
    )
    if sampler.min_radius_px >= sampler.max_radius_px:
        raise SettingsError("sampler.min_radius_px must be below sampler.max_radius_px")

    star_raw = data["starfield"]
    layers = tuple(
        StarLayer(
            count=int(layer["count"]),
            speed=float(layer["speed"]),
            size_range=_pair(layer["size_range"]),
            opacity=float(layer["opacity"]),
        )
        for layer in star_raw["layers"]
    )
    if len(layers) != 4:
        raise SettingsError(f"starfield.layers must define 4 layers, got {len(layers)}")
    if any(layer.count < 0 for layer in layers):
        raise SettingsError("starfield layer counts must be non-negative")
    colors = tuple(str(c) for c in star_raw["colors"])
    if not colors:
        raise SettingsError("starfield.colors must not be empty")

    starfield = StarfieldConfig(
        max_pixel_ratio=float(star_raw["max_pixel_ratio"]),
        parallax_px_per_degree=float(star_raw["parallax_px_per_degree"]),
        frame_interval_s=float(star_raw["frame_interval_s"]),
        frame_dt_cap_s=float(star_raw["frame_dt_cap_s"]),
        twinkle_speed_range=_pair(star_raw["twinkle_speed_range"]),
        colors=colors,
        layers=layers,
    )

    return OverlaySettings(
        zoom=zoom,
        sampler=sampler,
        starfield=starfield,
        label_epsilon_km=float(data["label_epsilon_km"]),
    )
