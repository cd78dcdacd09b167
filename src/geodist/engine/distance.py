"""
Point-to-feature distance engine.

This module answers "how far is this point from that geometry":
- `distance_to_geometry()` dispatches on the geometry variant and returns kilometers.
- `distance_to_feature()` adds the containment short-circuit for area geometries and
  converts every failure into `None`, so UI-facing callers never see an exception.

Compound geometries (MultiPoint, MultiLineString, Polygon boundaries with holes,
MultiPolygon) are reduced with a single minimum fold. A part that fails to measure
is logged and left out of the minimum instead of failing the whole geometry.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Iterable, Mapping, Sequence, Union

from geodist.core.errors import GeometryDistanceError
from geodist.core.geo import CoordinatePoint, to_coordinate_point
from geodist.core.primitives import (
    point_in_polygon,
    point_to_line_distance,
    point_to_point_distance,
    polygon_to_boundary_line,
)
from geodist.domain.models import (
    DistanceResult,
    Feature,
    Geometry,
    LineStringGeometry,
    MultiLineStringGeometry,
    MultiPointGeometry,
    MultiPolygonGeometry,
    PointGeometry,
    PolygonGeometry,
    parse_geometry,
)

logger = logging.getLogger(__name__)

PointLike = Union[CoordinatePoint, Sequence[float]]
FeatureLike = Union[Feature, Mapping[str, Any]]


def feature_geometry(feature: FeatureLike) -> Any:
    """Return the raw geometry of a `Feature` model or a GeoJSON feature mapping."""
    if isinstance(feature, Feature):
        return feature.geometry
    return feature.get("geometry")


def min_over_parts(
    parts: Iterable[tuple[int, Callable[[], float]]], *, label: str
) -> float:
    """Minimum of per-part measurements; failing parts are logged and skipped.

    Returns `inf` when there are no parts or every part failed. Ties keep the first
    part (strict `<`).
    """
    best = math.inf
    for index, measure in parts:
        try:
            value = measure()
        except GeometryDistanceError as e:
            logger.warning("Skipping %s part %d: %s", label, index, str(e))
            continue
        if value < best:
            best = value
    return best


def _line_parts(lines: list[list[list[float]]]) -> list[tuple[int, list[list[float]]]]:
    # Lines with fewer than 2 positions cannot be measured.
    return [(i, line) for i, line in enumerate(lines) if isinstance(line, list) and len(line) > 1]


def _distance_to_point(point: CoordinatePoint, geometry: PointGeometry) -> float:
    return point_to_point_distance(point, geometry.point, units="kilometers")


def _distance_to_multipoint(point: CoordinatePoint, geometry: MultiPointGeometry) -> float:
    best = math.inf
    for candidate in geometry.points:
        dist = point_to_point_distance(point, candidate, units="kilometers")
        if dist < best:
            best = dist
    return best


def _distance_to_linestring(point: CoordinatePoint, geometry: LineStringGeometry) -> float:
    return point_to_line_distance(point, geometry, units="kilometers")


def _distance_to_multilinestring(
    point: CoordinatePoint, geometry: MultiLineStringGeometry
) -> float:
    return min_over_parts(
        (
            (i, lambda line=line: point_to_line_distance(point, line, units="kilometers"))
            for i, line in _line_parts(geometry.coordinates)
        ),
        label="line",
    )


def _distance_to_polygon(point: CoordinatePoint, geometry: PolygonGeometry) -> float:
    boundary = polygon_to_boundary_line(geometry)
    if isinstance(boundary, LineStringGeometry):
        return _distance_to_linestring(point, boundary)
    # Exterior ring plus holes: each ring is measured independently.
    return _distance_to_multilinestring(point, boundary)


def _distance_to_multipolygon(
    point: CoordinatePoint, geometry: MultiPolygonGeometry
) -> float:
    return min_over_parts(
        (
            (i, lambda polygon=polygon: _distance_to_polygon(point, polygon))
            for i, polygon in enumerate(geometry.polygons())
        ),
        label="polygon",
    )


_DISTANCE_STRATEGIES: dict[type, Callable[[CoordinatePoint, Any], float]] = {
    PointGeometry: _distance_to_point,
    MultiPointGeometry: _distance_to_multipoint,
    LineStringGeometry: _distance_to_linestring,
    MultiLineStringGeometry: _distance_to_multilinestring,
    PolygonGeometry: _distance_to_polygon,
    MultiPolygonGeometry: _distance_to_multipolygon,
}


def distance_to_geometry(point: PointLike, geometry: Geometry | Mapping[str, Any]) -> float:
    """Minimum great-circle distance (km) from `point` to `geometry`.

    Area geometries are measured to their boundary; containment is not considered
    here (see `distance_to_feature`). An empty MultiPoint/MultiLineString yields `inf`.

    Raises:
        UnsupportedGeometryError: geometry type outside the six supported variants.
        MalformedGeometryError: coordinates do not validate for the declared type.
        InvalidPolygonBoundaryError: boundary extraction gave an unexpected shape.
        PrimitiveError: a primitive failed on a single-part geometry.
    """
    pt = to_coordinate_point(point)
    geom = parse_geometry(geometry)
    strategy = _DISTANCE_STRATEGIES[type(geom)]
    return strategy(pt, geom)


def _is_contained(point: CoordinatePoint, geometry: Geometry, *, ignore_boundary: bool) -> bool:
    if not isinstance(geometry, (PolygonGeometry, MultiPolygonGeometry)):
        return False
    try:
        return point_in_polygon(point, geometry, ignore_boundary=ignore_boundary)
    except Exception as e:
        # Fail open: a broken containment test falls through to boundary distance.
        logger.warning("Error checking point containment: %s", str(e))
        return False


def distance_to_feature(
    point: PointLike, feature: FeatureLike, *, ignore_boundary: bool = False
) -> DistanceResult | None:
    """Distance (km) from `point` to a feature, with containment for area geometries.

    Returns `None` when the feature has no geometry or the distance cannot be
    computed; this function never raises.
    """
    try:
        raw = feature_geometry(feature)
        if raw is None:
            return None
        pt = to_coordinate_point(point)
        geom = parse_geometry(raw)

        if _is_contained(pt, geom, ignore_boundary=ignore_boundary):
            return DistanceResult(distance=0.0, is_containing=True)

        distance = distance_to_geometry(pt, geom)
    except Exception as e:
        logger.warning("Error calculating distance for feature: %s", str(e))
        return None

    return DistanceResult(distance=distance, is_containing=False)
