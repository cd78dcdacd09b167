"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- GeoJSON inputs (`Geometry` variants, `Feature`)
- engine outputs (`DistanceResult`, `NearestPoint`)

Keeping these models in one place helps:
- validation (reject malformed coordinates before any math runs),
- typed dispatch on the geometry variant,
- consistent JSON output across the CLI and library callers.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from geodist.core.errors import MalformedGeometryError, UnsupportedGeometryError
from geodist.core.geo import CoordinatePoint

# GeoJSON position: [lon, lat] with an optional altitude.
Position = Annotated[list[float], Field(min_length=2, max_length=3)]


class PointGeometry(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: Position

    @property
    def point(self) -> CoordinatePoint:
        return CoordinatePoint.from_position(self.coordinates)


class MultiPointGeometry(BaseModel):
    type: Literal["MultiPoint"] = "MultiPoint"
    coordinates: list[Position]

    @property
    def points(self) -> list[CoordinatePoint]:
        return [CoordinatePoint.from_position(p) for p in self.coordinates]


class LineStringGeometry(BaseModel):
    type: Literal["LineString"] = "LineString"
    coordinates: Annotated[list[Position], Field(min_length=2)]


class MultiLineStringGeometry(BaseModel):
    """Sub-lines are not length-checked; degenerate ones are skipped by the engine."""

    type: Literal["MultiLineString"] = "MultiLineString"
    coordinates: list[list[Position]]


class PolygonGeometry(BaseModel):
    """Rings are expected closed (first == last); this is not verified."""

    type: Literal["Polygon"] = "Polygon"
    coordinates: list[list[Position]]


class MultiPolygonGeometry(BaseModel):
    type: Literal["MultiPolygon"] = "MultiPolygon"
    coordinates: list[list[list[Position]]]

    def polygons(self) -> list[PolygonGeometry]:
        return [PolygonGeometry(coordinates=rings) for rings in self.coordinates]


Geometry = Annotated[
    Union[
        PointGeometry,
        MultiPointGeometry,
        LineStringGeometry,
        MultiLineStringGeometry,
        PolygonGeometry,
        MultiPolygonGeometry,
    ],
    Field(discriminator="type"),
]

GEOMETRY_TYPES = (
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
)

_GEOMETRY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Geometry)
_GEOMETRY_MODELS = (
    PointGeometry,
    MultiPointGeometry,
    LineStringGeometry,
    MultiLineStringGeometry,
    PolygonGeometry,
    MultiPolygonGeometry,
)


def parse_geometry(data: Any) -> Geometry:
    """Validate a raw GeoJSON geometry mapping into one of the six geometry models.

    Raises:
        UnsupportedGeometryError: the `type` tag is missing or not a supported variant.
        MalformedGeometryError: the tag is supported but the coordinates do not validate.
    """
    if isinstance(data, _GEOMETRY_MODELS):
        return data
    if not isinstance(data, Mapping):
        raise UnsupportedGeometryError(type(data).__name__)
    geom_type = data.get("type")
    if geom_type not in GEOMETRY_TYPES:
        raise UnsupportedGeometryError(geom_type)
    try:
        return _GEOMETRY_ADAPTER.validate_python(dict(data))
    except ValidationError as e:
        raise MalformedGeometryError(f"Invalid {geom_type} coordinates: {e}") from e


class Feature(BaseModel):
    """A GeoJSON feature. Properties are opaque to the engine.

    Geometries that are not one of the supported variants stay as raw mappings so
    they can be loaded and reported on, rather than rejected up front.
    """

    type: Literal["Feature"] = "Feature"
    id: str | int | None = None
    geometry: Geometry | dict[str, Any] | None = Field(default=None, union_mode="left_to_right")
    properties: dict[str, Any] | None = Field(default_factory=dict)


class DistanceResult(BaseModel):
    """Distance (km) from a query point to a feature, plus containment."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    distance: float = Field(..., ge=0)
    is_containing: bool = Field(False, alias="isContaining")

    @model_validator(mode="after")
    def _validate_containment(self) -> "DistanceResult":
        if self.is_containing and self.distance != 0:
            raise ValueError("distance must be 0 when the point is contained")
        return self

    @property
    def measurable(self) -> bool:
        # An empty multi-geometry (or one whose parts all failed) yields inf.
        return self.distance != float("inf")


class NearestPoint(BaseModel):
    """The closest point on a geometry to a query point."""

    model_config = ConfigDict(frozen=True)

    point: CoordinatePoint
    distance: float = Field(..., ge=0)
    location: float | None = None
    index: int | None = None
    part_index: int | None = None

    def to_geojson(self) -> dict[str, Any]:
        properties: dict[str, Any] = {"dist": self.distance}
        if self.location is not None:
            properties["location"] = self.location
        if self.index is not None:
            properties["index"] = self.index
        if self.part_index is not None:
            properties["multiFeatureIndex"] = self.part_index
        return {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": list(self.point.as_position())},
            "properties": properties,
        }
