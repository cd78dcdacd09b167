"""
geodist CLI entrypoint.

This CLI is intended for quick local checks without a UI.
It delegates all measuring to `geodist.engine.distance` and `geodist.engine.nearest`.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from geodist.catalog.loader import load_features
from geodist.config.settings import Settings, get_settings
from geodist.core.geo import CoordinatePoint, convert_km
from geodist.core.logging import configure_logging
from geodist.domain.models import Feature
from geodist.engine.distance import distance_to_feature
from geodist.engine.nearest import nearest_point_on_feature


def _feature_label(feature: Feature, index: int) -> str:
    if feature.id is not None:
        return str(feature.id)
    name = (feature.properties or {}).get("name")
    if isinstance(name, str) and name.strip():
        return name.strip()
    return f"#{index}"


def _format_distance(distance_km: float, settings: Settings) -> str:
    units = settings.output.units
    value = convert_km(distance_km, units)
    return f"{value:.{settings.output.precision}f} {units}"


def _query_point(args: argparse.Namespace) -> CoordinatePoint:
    return CoordinatePoint(lon=float(args.lon), lat=float(args.lat))


def _cmd_distance(args: argparse.Namespace) -> int:
    """Handle the `distance` subcommand."""
    settings = get_settings()
    point = _query_point(args)
    features = load_features(args.path)
    ignore_boundary = bool(args.ignore_boundary or settings.engine.ignore_boundary)

    rows: list[dict[str, Any]] = []
    for i, feature in enumerate(features):
        result = distance_to_feature(point, feature, ignore_boundary=ignore_boundary)
        label = _feature_label(feature, i)
        rows.append(
            {
                "feature": label,
                "result": result.model_dump(mode="json", by_alias=True) if result is not None else None,
            }
        )
        if args.json:
            continue
        if result is None:
            print(f"{label}: distance unavailable")
        elif result.is_containing:
            print(f"{label}: contains point")
        elif not result.measurable:
            print(f"{label}: no measurable distance")
        else:
            print(f"{label}: {_format_distance(result.distance, settings)}")

    if args.json:
        print(json.dumps(rows, ensure_ascii=False, indent=2))
    return 0


def _cmd_nearest(args: argparse.Namespace) -> int:
    """Handle the `nearest` subcommand."""
    settings = get_settings()
    point = _query_point(args)
    features = load_features(args.path)

    rows: list[dict[str, Any]] = []
    for i, feature in enumerate(features):
        nearest = nearest_point_on_feature(point, feature)
        label = _feature_label(feature, i)
        rows.append({"feature": label, "nearest": nearest.to_geojson() if nearest is not None else None})
        if args.json:
            continue
        if nearest is None:
            print(f"{label}: nearest point unavailable")
            continue
        print(
            f"{label}: lon={nearest.point.lon:.6f} lat={nearest.point.lat:.6f} "
            f"({_format_distance(nearest.distance, settings)} away)"
        )

    if args.json:
        print(json.dumps(rows, ensure_ascii=False, indent=2))
    return 0


def _add_query_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--lon", required=True, type=float, help="Query point longitude")
    parser.add_argument("--lat", required=True, type=float, help="Query point latitude")
    parser.add_argument("path", help="GeoJSON file (geometry, Feature or FeatureCollection)")
    parser.add_argument("--json", action="store_true", help="Output machine-readable JSON")


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the geodist CLI."""
    parser = argparse.ArgumentParser(prog="geodist")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Override app.log_level for this run.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    dist = sub.add_parser("distance", help="Distance from a point to every feature in a GeoJSON file.")
    _add_query_args(dist)
    dist.add_argument(
        "--ignore-boundary",
        action="store_true",
        help="Points exactly on a polygon edge are not treated as contained.",
    )
    dist.set_defaults(func=_cmd_distance)

    near = sub.add_parser("nearest", help="Nearest point on every feature in a GeoJSON file.")
    _add_query_args(near)
    near.set_defaults(func=_cmd_nearest)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m geodist.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
