"""Recency buckets for time-stamped frontline geometry."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Callable

Clock = Callable[[], datetime]

SECONDS_PER_DAY = 86400


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecencyBucket(str, Enum):
    VERY_RECENT = "very_recent"
    RECENT = "recent"
    WITHIN_MONTH = "within_month"
    ONE_TO_TWO_MONTHS = "one_to_two_months"
    STALE = "stale"


@dataclass(frozen=True)
class BucketSpec:
    bucket: RecencyBucket
    max_days: int | None  # None: open-ended
    color: str
    label: str


# First match wins; boundaries belong to the more recent bucket.
BUCKETS: tuple[BucketSpec, ...] = (
    BucketSpec(RecencyBucket.VERY_RECENT, 7, "#ff3333", "< 1 week"),
    BucketSpec(RecencyBucket.RECENT, 14, "#ff6633", "1–2 weeks"),
    BucketSpec(RecencyBucket.WITHIN_MONTH, 30, "#ff9933", "< 1 month"),
    BucketSpec(RecencyBucket.ONE_TO_TWO_MONTHS, 60, "#ffcc33", "1–2 months"),
    BucketSpec(RecencyBucket.STALE, None, "#999999", "> 2 months"),
)

_SPEC_BY_BUCKET = {spec.bucket: spec for spec in BUCKETS}

RECENCY_LEGEND: tuple[tuple[str, str], ...] = tuple((spec.color, spec.label) for spec in BUCKETS)


def elapsed_days(as_of: date, *, now: datetime) -> int:
    """Whole days between UTC midnight of ``as_of`` and ``now`` (floored)."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    start = datetime.combine(as_of, time.min, tzinfo=timezone.utc)
    return int((now - start).total_seconds() // SECONDS_PER_DAY)


def bucket_for_days(days: int) -> RecencyBucket:
    for spec in BUCKETS:
        if spec.max_days is None or days <= spec.max_days:
            return spec.bucket
    return RecencyBucket.STALE


def classify(as_of: date, *, now: datetime) -> RecencyBucket:
    return bucket_for_days(elapsed_days(as_of, now=now))


def bucket_color(bucket: RecencyBucket) -> str:
    return _SPEC_BY_BUCKET[bucket].color


def bucket_label(bucket: RecencyBucket) -> str:
    return _SPEC_BY_BUCKET[bucket].label


def recency_color(as_of: date, *, now: datetime) -> str:
    return bucket_color(classify(as_of, now=now))
