from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Iterable

from photos_heatmap.config import APPLE_EPOCH_OFFSET, FALLBACK_CENTER
from photos_heatmap.models import CenterPoint, LocationRecord


def is_missing(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def coerce_float(value: object) -> float | None:
    if is_missing(value) or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def apple_timestamp_to_datetime(value: object) -> datetime | None:
    seconds = coerce_float(value)
    if seconds is None or not math.isfinite(seconds):
        return None
    millis = round((seconds + APPLE_EPOCH_OFFSET) * 1000)
    try:
        return datetime.fromtimestamp(millis / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def center_point(records: Iterable[LocationRecord]) -> CenterPoint:
    points = []
    for record in records:
        if not math.isfinite(record.latitude) or not math.isfinite(record.longitude):
            continue
        points.append((record.latitude, record.longitude))

    if not points:
        return CenterPoint(*FALLBACK_CENTER)

    lat = sum(lat for lat, _ in points) / len(points)
    lng = sum(lng for _, lng in points) / len(points)
    return CenterPoint(lat, lng)


def format_date(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return f"{value.month}/{value.day}/{value.year}"


def date_range(records: Iterable[LocationRecord]) -> str:
    dates = sorted(
        _as_utc(record.timestamp) for record in records if record.timestamp is not None
    )
    if not dates:
        return "Unknown"

    earliest = format_date(dates[0])
    latest = format_date(dates[-1])
    return earliest if earliest == latest else f"{earliest} - {latest}"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
