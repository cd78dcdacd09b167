"""
Nearest point on a feature.

Point and MultiPoint geometries answer with one of their own vertices. Line and
area geometries go through the nearest-point-on-line primitive; polygons are
first reduced to their boundary rings.

`nearest_point_on_feature()` is advisory (used to draw a "closest point" marker)
so it degrades to `None` instead of raising.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from geodist.core.errors import GeometryDistanceError
from geodist.core.geo import CoordinatePoint, to_coordinate_point
from geodist.core.primitives import (
    nearest_point_on_line,
    point_to_point_distance,
    polygon_to_boundary_line,
)
from geodist.domain.models import (
    Geometry,
    LineStringGeometry,
    MultiLineStringGeometry,
    MultiPointGeometry,
    MultiPolygonGeometry,
    NearestPoint,
    PointGeometry,
    PolygonGeometry,
    parse_geometry,
)
from geodist.engine.distance import FeatureLike, PointLike, feature_geometry

logger = logging.getLogger(__name__)


def _nearest_on_point(point: CoordinatePoint, geometry: PointGeometry) -> NearestPoint:
    target = geometry.point
    return NearestPoint(point=target, distance=point_to_point_distance(point, target))


def _nearest_on_multipoint(point: CoordinatePoint, geometry: MultiPointGeometry) -> NearestPoint | None:
    best: NearestPoint | None = None
    for i, candidate in enumerate(geometry.points):
        dist = point_to_point_distance(point, candidate)
        if best is None or dist < best.distance:
            best = NearestPoint(point=candidate, distance=dist, part_index=i)
    return best


def _nearest_on_lines(point: CoordinatePoint, geometry: MultiLineStringGeometry) -> NearestPoint | None:
    best: NearestPoint | None = None
    for i, line in enumerate(geometry.coordinates):
        try:
            candidate = nearest_point_on_line(line, point)
        except GeometryDistanceError as e:
            logger.warning("Error processing line segment %d: %s", i, str(e))
            continue
        if best is None or candidate.distance < best.distance:
            best = candidate.model_copy(update={"part_index": i})
    return best


def _nearest_on_boundary(
    point: CoordinatePoint, geometry: PolygonGeometry | MultiPolygonGeometry
) -> NearestPoint | None:
    boundary = polygon_to_boundary_line(geometry)
    if isinstance(boundary, LineStringGeometry):
        return nearest_point_on_line(boundary, point)
    return _nearest_on_lines(point, boundary)


def nearest_point_on_geometry(
    point: PointLike, geometry: Geometry | Mapping[str, Any]
) -> NearestPoint | None:
    """Closest point on `geometry` to `point`, or `None` for an empty multi-geometry.

    Raises the same errors as `distance_to_geometry`.
    """
    pt = to_coordinate_point(point)
    geom = parse_geometry(geometry)

    if isinstance(geom, PointGeometry):
        return _nearest_on_point(pt, geom)
    if isinstance(geom, MultiPointGeometry):
        return _nearest_on_multipoint(pt, geom)
    if isinstance(geom, LineStringGeometry):
        return nearest_point_on_line(geom, pt)
    if isinstance(geom, MultiLineStringGeometry):
        return _nearest_on_lines(pt, geom)
    return _nearest_on_boundary(pt, geom)


def nearest_point_on_feature(point: PointLike, feature: FeatureLike) -> NearestPoint | None:
    """Closest point on a feature's geometry; `None` when it cannot be determined."""
    try:
        raw = feature_geometry(feature)
        if raw is None:
            return None
        return nearest_point_on_geometry(point, raw)
    except Exception as e:
        logger.warning("Error getting nearest point on feature: %s", str(e))
        return None
