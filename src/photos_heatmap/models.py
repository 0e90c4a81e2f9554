from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class LocationRecord:
    latitude: float
    longitude: float
    timestamp: datetime | None = None
    filename: str | None = None


@dataclass(frozen=True)
class CenterPoint:
    lat: float
    lng: float


def is_valid_location(latitude: float, longitude: float) -> bool:
    if not math.isfinite(latitude) or not math.isfinite(longitude):
        return False
    # Photos writes 0 and -180 when a location was never set.
    if latitude == 0 or longitude == 0:
        return False
    if latitude == -180.0 or longitude == -180.0:
        return False
    return -90 <= latitude <= 90 and -180 <= longitude <= 180
