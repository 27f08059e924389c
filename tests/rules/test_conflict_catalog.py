from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from theatre.domain.types import Control, SegmentStatus, Side
from theatre.rules.conflicts import CONFLICTS_DIR, ConflictCatalog, ConflictDataError


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    target = tmp_path / "conflicts"
    target.mkdir()
    shutil.copy(CONFLICTS_DIR / "sudan.json", target / "sudan.json")
    return target


def _rewrite(path: Path, mutate) -> None:
    data = json.loads(path.read_text(encoding="utf-8"))
    mutate(data)
    path.write_text(json.dumps(data), encoding="utf-8")


def test_bundled_conflicts_are_listed() -> None:
    catalog = ConflictCatalog()
    assert catalog.ids() == ["sudan", "ukraine"]
    assert [s.id for s in catalog.summaries()] == ["sudan", "ukraine"]


def test_ukraine_bundle_contents() -> None:
    bundle = ConflictCatalog().load("ukraine")
    assert bundle.summary.side_a.short_name == "UA"
    assert bundle.summary.side_b.short_name == "RU"
    assert [seg.id for seg in bundle.frontlines] == ["north", "luhansk", "donetsk", "zaporizhzhia", "kherson"]
    assert bundle.frontlines[2].status == SegmentStatus.ACTIVE
    assert bundle.battle("battle-bakhmut").result == "RU captured"
    assert bundle.unit("ua-kharkiv").side == Side.A
    assert bundle.unit("missing") is None
    assert bundle.occupied is not None
    assert any(line.closed for line in bundle.fortifications)
    assert {n.type for n in bundle.naval} >= {"patrol", "wreck"}


def test_sudan_bundle_has_no_coats_of_arms() -> None:
    bundle = ConflictCatalog().load("sudan")
    assert bundle.coats_of_arms == ()
    khartoum = next(c for c in bundle.capitals if c.id == "khartoum")
    assert khartoum.country == Control.CONTESTED


def test_unknown_conflict(catalog_dir: Path) -> None:
    with pytest.raises(ConflictDataError, match="Unknown conflict"):
        ConflictCatalog(catalog_dir).load("ukraine")


def test_file_id_must_match_declared_id(catalog_dir: Path) -> None:
    shutil.copy(catalog_dir / "sudan.json", catalog_dir / "other.json")
    with pytest.raises(ConflictDataError, match="declares id"):
        ConflictCatalog(catalog_dir).load("other")


def test_invalid_json(catalog_dir: Path) -> None:
    (catalog_dir / "sudan.json").write_text("[", encoding="utf-8")
    with pytest.raises(ConflictDataError, match="Invalid JSON"):
        ConflictCatalog(catalog_dir).load("sudan")


def test_single_point_segment_rejected(catalog_dir: Path) -> None:
    _rewrite(catalog_dir / "sudan.json", lambda d: d["frontlines"][0].update(points=[[32.5, 15.6]]))
    with pytest.raises(ConflictDataError, match="at least 2 points"):
        ConflictCatalog(catalog_dir).load("sudan")


def test_bad_enum_value_wrapped(catalog_dir: Path) -> None:
    _rewrite(catalog_dir / "sudan.json", lambda d: d["frontlines"][0].update(status="frozen"))
    with pytest.raises(ConflictDataError, match="Invalid conflict data"):
        ConflictCatalog(catalog_dir).load("sudan")


def test_bad_date_wrapped(catalog_dir: Path) -> None:
    _rewrite(catalog_dir / "sudan.json", lambda d: d["frontlines"][0].update(asOf="last week"))
    with pytest.raises(ConflictDataError):
        ConflictCatalog(catalog_dir).load("sudan")
