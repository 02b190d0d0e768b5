"""
GeoJSON parsing.

Turns GeoJSON FeatureCollections into Feature objects for a store.
Only Point, LineString and Polygon geometries are supported.
"""

import json
import math
from pathlib import Path
from typing import Any, Optional, Union

from .errors import GeoJSONParseError
from .types import Feature, LineStringGeometry, Point, PointGeometry, PolygonGeometry


def parse_position(position: Any) -> Point:
    """
    Parse a GeoJSON position ([x, y] or [x, y, z]) into a Point.

    Raises:
        GeoJSONParseError: If the position has fewer than two numbers or
            a coordinate is NaN or infinite
    """
    if not isinstance(position, (list, tuple)) or len(position) < 2:
        raise GeoJSONParseError(f"Invalid position: {position!r}")
    try:
        x, y = float(position[0]), float(position[1])
    except (TypeError, ValueError):
        raise GeoJSONParseError(f"Invalid position: {position!r}") from None
    if not (math.isfinite(x) and math.isfinite(y)):
        raise GeoJSONParseError(f"Non-finite position: {position!r}")
    return Point(x, y)


def parse_geometry(geometry: Optional[dict]):
    """
    Parse a GeoJSON geometry object.

    Args:
        geometry: GeoJSON geometry dict, or None

    Returns:
        PointGeometry, LineStringGeometry, PolygonGeometry, or None

    Raises:
        GeoJSONParseError: For unsupported or malformed geometries
    """
    if geometry is None:
        return None
    if not isinstance(geometry, dict):
        raise GeoJSONParseError(f"Geometry must be an object, got {type(geometry).__name__}")

    geometry_type = geometry.get("type")
    coordinates = geometry.get("coordinates")

    if geometry_type == "Point":
        return PointGeometry(parse_position(coordinates))
    if geometry_type == "LineString":
        return LineStringGeometry(tuple(parse_position(p) for p in coordinates or []))
    if geometry_type == "Polygon":
        return PolygonGeometry(
            tuple(tuple(parse_position(p) for p in ring) for ring in coordinates or [])
        )

    raise GeoJSONParseError(f"Unsupported geometry type: {geometry_type!r}")


def features_from_geojson(data: dict) -> list[Feature]:
    """
    Build features from a GeoJSON FeatureCollection (or a single Feature).

    Feature ids come from the GeoJSON "id" member; features without one
    get their position in the collection.

    Raises:
        GeoJSONParseError: If the document is not a Feature or FeatureCollection
    """
    if not isinstance(data, dict):
        raise GeoJSONParseError("GeoJSON document must be an object")

    doc_type = data.get("type")
    if doc_type == "FeatureCollection":
        raw_features = data.get("features") or []
    elif doc_type == "Feature":
        raw_features = [data]
    else:
        raise GeoJSONParseError(f"Expected Feature or FeatureCollection, got {doc_type!r}")

    features = []
    for i, raw in enumerate(raw_features):
        if not isinstance(raw, dict) or raw.get("type") != "Feature":
            raise GeoJSONParseError(f"Entry {i} is not a GeoJSON Feature")
        feature_id = raw.get("id", i)
        features.append(
            Feature(
                feature_id=feature_id,
                geometry=parse_geometry(raw.get("geometry")),
                properties=dict(raw.get("properties") or {}),
            )
        )
    return features


def load_features_from_geojson(path: Union[str, Path]) -> list[Feature]:
    """Read a GeoJSON file and return its features."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise GeoJSONParseError(f"{path}: invalid JSON: {e}") from e
    return features_from_geojson(data)
