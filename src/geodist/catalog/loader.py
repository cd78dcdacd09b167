"""
GeoJSON feature loader.

Inputs are local GeoJSON files holding a FeatureCollection, a single Feature, or
a bare geometry object. Everything is normalized to a list of `Feature` models so
the CLI can run the engine per feature.

Geometries are not validated here beyond their container shape: unsupported or
malformed geometries load fine and are reported by the engine as unavailable.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from geodist.core.env import resolve_project_path
from geodist.domain.models import Feature


_FEATURES_ADAPTER = TypeAdapter(list[Feature])


def features_from_geojson(payload: Any) -> list[Feature]:
    """Normalize a decoded GeoJSON object into a list of features."""
    if not isinstance(payload, dict):
        raise ValueError("GeoJSON root must be an object")

    kind = payload.get("type")
    if kind == "FeatureCollection":
        raw_features = payload.get("features")
        if not isinstance(raw_features, list):
            raise ValueError("FeatureCollection.features must be a list")
        return _FEATURES_ADAPTER.validate_python(raw_features)
    if kind == "Feature":
        return [Feature.model_validate(payload)]
    # Anything else is treated as a bare geometry (including unsupported types).
    return [Feature(geometry=payload)]


def load_features(path: str | Path) -> list[Feature]:
    """Load a GeoJSON file and return its features."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    return features_from_geojson(payload)
