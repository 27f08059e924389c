from __future__ import annotations

import json
from pathlib import Path

import pytest

from theatre.rules.settings import DEFAULT_SETTINGS_PATH, OverlaySettings, SettingsError


def _write(tmp_path: Path, mutate) -> Path:
    data = json.loads(DEFAULT_SETTINGS_PATH.read_text(encoding="utf-8"))
    mutate(data)
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_default_settings_load() -> None:
    settings = OverlaySettings.default()
    assert (settings.zoom.detail, settings.zoom.labels) == (4.0, 5.0)
    sampler = settings.sampler
    assert (sampler.delta_deg, sampler.lat_clamp) == (85.0, 89.0)
    assert (sampler.min_radius_px, sampler.max_radius_px) == (50.0, 5000.0)
    starfield = settings.starfield
    assert len(starfield.layers) == 4
    assert starfield.total_stars == sum(layer.count for layer in starfield.layers)
    assert starfield.max_pixel_ratio == 2.0
    assert settings.label_epsilon_km > 0


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(SettingsError, match="not found"):
        OverlaySettings.load(tmp_path / "absent.json")


def test_invalid_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SettingsError, match="Invalid JSON"):
        OverlaySettings.load(path)


def test_label_threshold_must_exceed_detail_threshold(tmp_path: Path) -> None:
    path = _write(tmp_path, lambda d: d["zoom"].update(labels=3))
    with pytest.raises(SettingsError, match="zoom.labels"):
        OverlaySettings.load(path)


def test_starfield_needs_four_layers(tmp_path: Path) -> None:
    path = _write(tmp_path, lambda d: d["starfield"]["layers"].pop())
    with pytest.raises(SettingsError, match="4 layers"):
        OverlaySettings.load(path)


def test_missing_key_is_reported_as_settings_error(tmp_path: Path) -> None:
    path = _write(tmp_path, lambda d: d.pop("sampler"))
    with pytest.raises(SettingsError, match="Invalid settings"):
        OverlaySettings.load(path)


def test_inverted_size_range_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path, lambda d: d["starfield"]["layers"][0].update(size_range=[2.0, 1.0]))
    with pytest.raises(SettingsError, match="Range"):
        OverlaySettings.load(path)
