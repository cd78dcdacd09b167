import pytest
from shapely.geometry import LineString, Point

from geodist.core import primitives as primitives_module
from geodist.core.errors import InvalidPolygonBoundaryError, PrimitiveError
from geodist.core.geo import CoordinatePoint, convert_km, haversine_km
from geodist.core.primitives import (
    nearest_point_on_line,
    point_in_polygon,
    point_to_line_distance,
    point_to_point_distance,
    polygon_to_boundary_line,
)
from geodist.domain.models import (
    LineStringGeometry,
    MultiLineStringGeometry,
    MultiPolygonGeometry,
    PolygonGeometry,
)

SQUARE = [[1, 1], [1, 2], [2, 2], [2, 1], [1, 1]]
HOLE = [[1.4, 1.4], [1.6, 1.4], [1.6, 1.6], [1.4, 1.6], [1.4, 1.4]]


def test_haversine_known_value_and_symmetry():
    a = CoordinatePoint(lon=0, lat=0)
    b = CoordinatePoint(lon=1, lat=1)
    assert haversine_km(a, b) == pytest.approx(157.2495, rel=1e-4)
    assert haversine_km(a, b) == haversine_km(b, a)
    assert haversine_km(a, a) == 0


def test_one_degree_of_latitude_in_kilometers():
    d = point_to_point_distance(CoordinatePoint(lon=5, lat=0), CoordinatePoint(lon=5, lat=1))
    assert d == pytest.approx(111.195, rel=1e-4)


def test_convert_km_units():
    assert convert_km(1.5, "meters") == pytest.approx(1500)
    assert convert_km(1.609344, "miles") == pytest.approx(1.0)
    assert convert_km(1.852, "nauticalmiles") == pytest.approx(1.0)
    assert convert_km(111.195, "degrees") == pytest.approx(1.0, rel=1e-4)
    with pytest.raises(ValueError, match="Unknown distance units"):
        convert_km(1.0, "furlongs")


def test_coordinate_point_from_position_drops_altitude():
    p = CoordinatePoint.from_position([121.5, 25.0, 30.0])
    assert p == CoordinatePoint(lon=121.5, lat=25.0)
    assert p.as_position() == (121.5, 25.0)
    with pytest.raises(ValueError):
        CoordinatePoint.from_position([1.0])


def test_nearest_point_on_line_projects_onto_segment_interior():
    line = LineStringGeometry(coordinates=[[0, 0], [10, 0]])
    nearest = nearest_point_on_line(line, CoordinatePoint(lon=5, lat=1))

    assert nearest.point.lon == pytest.approx(5.0)
    assert nearest.point.lat == pytest.approx(0.0, abs=1e-9)
    assert nearest.distance == pytest.approx(111.195, rel=1e-4)
    assert nearest.location == pytest.approx(5 * 111.195, rel=1e-4)
    assert nearest.index == 0


def test_nearest_point_on_line_clamps_to_end_vertex():
    # The query point lies past the last vertex, on the same great circle.
    nearest = nearest_point_on_line([[0, 0], [1, 0], [2, 0]], CoordinatePoint(lon=3, lat=0))
    assert nearest.point == CoordinatePoint(lon=2, lat=0)
    assert nearest.index == 1
    assert nearest.distance == pytest.approx(111.195, rel=1e-4)


def test_nearest_point_on_line_handles_zero_length_segment():
    # Segment 0 collapses to (1,1); segment 1 also clamps to (1,1), and the tie keeps index 0.
    nearest = nearest_point_on_line([[1, 1], [1, 1], [1, 2]], CoordinatePoint(lon=0, lat=0.5))
    assert nearest.point == CoordinatePoint(lon=1, lat=1)
    assert nearest.index == 0


def test_nearest_point_on_line_rejects_single_position():
    with pytest.raises(PrimitiveError, match="at least 2 positions"):
        nearest_point_on_line([[0, 0]], CoordinatePoint(lon=0, lat=0))


def test_point_to_line_distance_respects_units():
    line = LineStringGeometry(coordinates=[[0, 0], [10, 0]])
    p = CoordinatePoint(lon=5, lat=1)
    km = point_to_line_distance(p, line)
    assert point_to_line_distance(p, line, units="meters") == pytest.approx(km * 1000)


def test_point_in_polygon_inside_outside_and_boundary():
    # By default the edge counts as inside (covers); ignore_boundary switches to contains.
    poly = PolygonGeometry(coordinates=[SQUARE])
    assert point_in_polygon(CoordinatePoint(lon=1.5, lat=1.5), poly) is True
    assert point_in_polygon(CoordinatePoint(lon=0, lat=0), poly) is False

    on_edge = CoordinatePoint(lon=1, lat=1.5)
    assert point_in_polygon(on_edge, poly) is True
    assert point_in_polygon(on_edge, poly, ignore_boundary=True) is False


def test_point_in_polygon_excludes_holes_and_handles_multipolygons():
    holed = PolygonGeometry(coordinates=[SQUARE, HOLE])
    assert point_in_polygon(CoordinatePoint(lon=1.5, lat=1.5), holed) is False
    assert point_in_polygon(CoordinatePoint(lon=1.2, lat=1.2), holed) is True

    multi = MultiPolygonGeometry(
        coordinates=[[SQUARE], [[[5, 5], [5, 6], [6, 6], [6, 5], [5, 5]]]]
    )
    assert point_in_polygon(CoordinatePoint(lon=5.5, lat=5.5), multi) is True
    assert point_in_polygon(CoordinatePoint(lon=3.5, lat=3.5), multi) is False


def test_point_in_polygon_wraps_library_errors():
    # Shapely closes short rings itself, but a two-position ring still cannot form
    # a linear ring (it needs at least 4 coordinates), so the build fails.
    broken = PolygonGeometry(coordinates=[[[0, 0], [1, 0]]])

    # The Shapely ValueError must surface as the engine's own PrimitiveError.
    with pytest.raises(PrimitiveError, match="Point-in-polygon"):
        point_in_polygon(CoordinatePoint(lon=0, lat=0), broken)


def test_boundary_extraction_wraps_library_errors():
    # Same broken ring as above, through the boundary primitive this time.
    broken = PolygonGeometry(coordinates=[[[0, 0], [1, 0]]])
    with pytest.raises(PrimitiveError, match="Boundary extraction failed"):
        polygon_to_boundary_line(broken)


class _FakeShape:
    """Stand-in for a Shapely geometry whose `.boundary` is fixed."""

    def __init__(self, boundary):
        self.boundary = boundary


def test_non_line_boundary_is_an_invalid_polygon_boundary(monkeypatch):
    # Force boundary extraction to produce a Point, which is neither line type.
    monkeypatch.setattr(primitives_module, "shape", lambda payload: _FakeShape(Point(0, 0)))

    with pytest.raises(InvalidPolygonBoundaryError, match="Invalid polygon boundary geometry"):
        polygon_to_boundary_line(PolygonGeometry(coordinates=[SQUARE]))


def test_empty_line_boundary_is_an_invalid_polygon_boundary(monkeypatch):
    # An empty LineString passes the type check but fails the 2-position minimum.
    monkeypatch.setattr(primitives_module, "shape", lambda payload: _FakeShape(LineString()))

    with pytest.raises(InvalidPolygonBoundaryError, match="Invalid polygon boundary coordinates"):
        polygon_to_boundary_line(PolygonGeometry(coordinates=[SQUARE]))


def test_polygon_boundary_without_holes_is_a_linestring():
    boundary = polygon_to_boundary_line(PolygonGeometry(coordinates=[SQUARE]))
    assert isinstance(boundary, LineStringGeometry)
    assert [list(map(float, c)) for c in boundary.coordinates] == [list(map(float, c)) for c in SQUARE]


def test_polygon_boundary_with_hole_is_a_multilinestring():
    boundary = polygon_to_boundary_line(PolygonGeometry(coordinates=[SQUARE, HOLE]))
    assert isinstance(boundary, MultiLineStringGeometry)
    assert len(boundary.coordinates) == 2
