from __future__ import annotations
from dataclasses import dataclass
from math import asin, cos, pi, radians, sin, sqrt
from typing import Sequence

"""
Geospatial helpers.

Coordinates are always carried as named longitude/latitude fields so call sites
cannot silently swap the GeoJSON `[lon, lat]` order.
"""

EARTH_RADIUS_KM = 6371.0088

# Kilometers -> target unit. Angular units are handled separately.
_KM_FACTORS: dict[str, float] = {
    "kilometers": 1.0,
    "meters": 1000.0,
    "miles": 1.0 / 1.609344,
    "nauticalmiles": 1.0 / 1.852,
}


@dataclass(frozen=True)
class CoordinatePoint:
    """A longitude/latitude pair in decimal degrees."""

    lon: float
    lat: float

    @classmethod
    def from_position(cls, position: Sequence[float]) -> "CoordinatePoint":
        """Build from a GeoJSON position `[lon, lat, (alt)]`; altitude is dropped."""
        if len(position) < 2:
            raise ValueError(f"Position needs at least 2 values, got {len(position)}")
        return cls(lon=float(position[0]), lat=float(position[1]))

    def as_position(self) -> tuple[float, float]:
        return (self.lon, self.lat)


def convert_km(distance_km: float, units: str = "kilometers") -> float:
    """Convert a distance in kilometers to `units`."""
    if units in _KM_FACTORS:
        return distance_km * _KM_FACTORS[units]
    if units == "radians":
        return distance_km / EARTH_RADIUS_KM
    if units == "degrees":
        return (distance_km / EARTH_RADIUS_KM) * 180.0 / pi
    raise ValueError(f"Unknown distance units: {units!r}")


def haversine_km(a: CoordinatePoint, b: CoordinatePoint) -> float:
    """Compute great-circle distance in kilometers between two points."""
    lat1 = radians(a.lat)
    lon1 = radians(a.lon)
    lat2 = radians(b.lat)
    lon2 = radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * asin(min(1.0, sqrt(h)))


def to_coordinate_point(value: CoordinatePoint | Sequence[float]) -> CoordinatePoint:
    """Accept a `CoordinatePoint` or a `(lon, lat)` pair."""
    if isinstance(value, CoordinatePoint):
        return value
    return CoordinatePoint.from_position(value)
