"""
Geometry primitives consumed by the distance engine.

Containment and boundary extraction are delegated to Shapely (planar lon/lat
topology is exact for those predicates). Distances are great-circle on a
spherical Earth: segments are treated as great-circle arcs and the query point
is projected onto each arc with 3D unit-vector math.

Every failure from the underlying libraries is re-raised as `PrimitiveError` so
the engine only has to reason about its own error taxonomy.
"""

from __future__ import annotations

from math import atan2, cos, degrees, radians, sin, sqrt
from typing import Sequence, Union

from pydantic import ValidationError
from shapely.errors import ShapelyError
from shapely.geometry import LineString, MultiLineString, Point, mapping, shape

from geodist.core.errors import InvalidPolygonBoundaryError, PrimitiveError
from geodist.core.geo import CoordinatePoint, convert_km, haversine_km
from geodist.domain.models import (
    LineStringGeometry,
    MultiLineStringGeometry,
    MultiPolygonGeometry,
    NearestPoint,
    PolygonGeometry,
)

Vec3 = tuple[float, float, float]
AreaGeometry = Union[PolygonGeometry, MultiPolygonGeometry]
BoundaryGeometry = Union[LineStringGeometry, MultiLineStringGeometry]

# Below this (in unit-sphere length) a cross product is treated as zero.
_EPS = 1e-12


def _to_vec(p: CoordinatePoint) -> Vec3:
    lon = radians(p.lon)
    lat = radians(p.lat)
    return (cos(lat) * cos(lon), cos(lat) * sin(lon), sin(lat))


def _to_point(v: Vec3) -> CoordinatePoint:
    x, y, z = v
    return CoordinatePoint(lon=degrees(atan2(y, x)), lat=degrees(atan2(z, sqrt(x * x + y * y))))


def _cross(a: Vec3, b: Vec3) -> Vec3:
    return (a[1] * b[2] - a[2] * b[1], a[2] * b[0] - a[0] * b[2], a[0] * b[1] - a[1] * b[0])


def _dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _norm(a: Vec3) -> float:
    return sqrt(_dot(a, a))


def _angle(a: Vec3, b: Vec3) -> float:
    return atan2(_norm(_cross(a, b)), _dot(a, b))


def _nearest_on_segment(a: CoordinatePoint, b: CoordinatePoint, p: CoordinatePoint) -> CoordinatePoint:
    """Closest point to `p` on the great-circle arc from `a` to `b`."""
    va, vb, vp = _to_vec(a), _to_vec(b), _to_vec(p)
    n = _cross(va, vb)
    n_len = _norm(n)
    if n_len < _EPS:
        # Zero-length (or antipodal) segment: the arc collapses to its start vertex.
        return a
    n = (n[0] / n_len, n[1] / n_len, n[2] / n_len)

    # Project p onto the great-circle plane.
    k = _dot(vp, n)
    proj = (vp[0] - k * n[0], vp[1] - k * n[1], vp[2] - k * n[2])
    proj_len = _norm(proj)
    if proj_len >= _EPS:
        c = (proj[0] / proj_len, proj[1] / proj_len, proj[2] / proj_len)
        # c lies within the arc when it is on the a->b side of both endpoints.
        if _dot(_cross(va, c), n) >= 0 and _dot(_cross(c, vb), n) >= 0:
            return _to_point(c)

    if _angle(vp, va) <= _angle(vp, vb):
        return a
    return b


def _line_points(line: LineStringGeometry | Sequence[Sequence[float]]) -> list[CoordinatePoint]:
    coords = line.coordinates if isinstance(line, LineStringGeometry) else line
    try:
        points = [CoordinatePoint.from_position(c) for c in coords]
    except (TypeError, ValueError) as e:
        raise PrimitiveError(f"Invalid line coordinates: {e}") from e
    if len(points) < 2:
        raise PrimitiveError(f"A line needs at least 2 positions, got {len(points)}")
    return points


def point_to_point_distance(
    a: CoordinatePoint, b: CoordinatePoint, *, units: str = "kilometers"
) -> float:
    """Great-circle distance between two points."""
    return convert_km(haversine_km(a, b), units)


def nearest_point_on_line(
    line: LineStringGeometry | Sequence[Sequence[float]], point: CoordinatePoint
) -> NearestPoint:
    """Closest point on a line to `point`.

    The result carries `distance` (km from `point`), `location` (km along the line
    from its first vertex) and `index` (segment index). The first segment wins ties.
    """
    vertices = _line_points(line)

    candidates: list[NearestPoint] = []
    travelled = 0.0
    for i in range(len(vertices) - 1):
        start, end = vertices[i], vertices[i + 1]
        candidate = _nearest_on_segment(start, end, point)
        candidates.append(
            NearestPoint(
                point=candidate,
                distance=haversine_km(point, candidate),
                location=travelled + haversine_km(start, candidate),
                index=i,
            )
        )
        travelled += haversine_km(start, end)

    # `min` keeps the first of equal distances.
    return min(candidates, key=lambda c: c.distance)


def point_to_line_distance(
    point: CoordinatePoint,
    line: LineStringGeometry | Sequence[Sequence[float]],
    *,
    units: str = "kilometers",
) -> float:
    """Distance from `point` to the nearest point on any segment of `line`."""
    return convert_km(nearest_point_on_line(line, point).distance, units)


def point_in_polygon(
    point: CoordinatePoint, polygon: AreaGeometry, *, ignore_boundary: bool = False
) -> bool:
    """Whether `point` lies inside a Polygon/MultiPolygon (holes excluded).

    Points on the boundary count as inside unless `ignore_boundary` is set.
    """
    try:
        geom = shape(polygon.model_dump())
        pt = Point(point.lon, point.lat)  # GeoJSON order lon,lat
        if ignore_boundary:
            return bool(geom.contains(pt))
        return bool(geom.covers(pt))
    except (ShapelyError, ValueError, TypeError, IndexError) as e:
        raise PrimitiveError(f"Point-in-polygon test failed: {e}") from e


def polygon_to_boundary_line(polygon: AreaGeometry) -> BoundaryGeometry:
    """Boundary (exterior + hole rings) of a Polygon/MultiPolygon as line geometry."""
    try:
        boundary = shape(polygon.model_dump()).boundary
    except (ShapelyError, ValueError, TypeError, IndexError) as e:
        raise PrimitiveError(f"Boundary extraction failed: {e}") from e

    payload = mapping(boundary)
    try:
        if isinstance(boundary, LineString):
            return LineStringGeometry.model_validate(payload)
        if isinstance(boundary, MultiLineString):
            return MultiLineStringGeometry.model_validate(payload)
    except ValidationError as e:
        raise InvalidPolygonBoundaryError(f"Invalid polygon boundary coordinates: {e}") from e
    raise InvalidPolygonBoundaryError(
        f"Invalid polygon boundary geometry: {boundary.geom_type}"
    )
