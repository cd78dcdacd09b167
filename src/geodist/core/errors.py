"""
Engine error taxonomy.

Every error raised by geometry dispatch or by a primitive derives from
`GeometryDistanceError` so callers can absorb per-part failures with a single
`except` clause. A missing geometry is not an error: the feature-level
operations return `None` for it.
"""

from __future__ import annotations


class GeometryDistanceError(ValueError):
    """Base class for failures while measuring a point against a geometry."""


class UnsupportedGeometryError(GeometryDistanceError):
    """The geometry `type` tag is not one of the six supported variants."""

    def __init__(self, geometry_type: object):
        self.geometry_type = geometry_type
        super().__init__(f"Unsupported geometry type: {geometry_type}")


class MalformedGeometryError(GeometryDistanceError):
    """A supported geometry type whose coordinates do not validate."""


class InvalidPolygonBoundaryError(GeometryDistanceError):
    """Boundary extraction produced neither a LineString nor a MultiLineString."""


class PrimitiveError(GeometryDistanceError):
    """A low-level geometry primitive failed (bad coordinates, numeric degeneracy)."""
