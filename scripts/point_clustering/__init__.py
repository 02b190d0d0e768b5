"""
Point Clustering Module

Groups point features that lie within a pixel distance of each other at
the current map resolution, so a renderer can draw one marker per group.
"""

from .types import (
    Point,
    Extent,
    Feature,
    PointGeometry,
    LineStringGeometry,
    PolygonGeometry,
    ClusterAggregate,
    ClusterPartition,
    EngineState,
)
from .errors import ClusterError, UnsupportedGeometryType, InvalidParameter, GeoJSONParseError
from .extent import empty_extent, extend_with_point, buffer, center, rectangle_polygon
from .geometry import default_geometry_accessor, centroid_accessor, make_filtered_accessor
from .shuffle import OrderShuffler, ShuffleMode
from .config import ClusterConfig, load_config
from .spatial_index import SpatialIndex
from .store import FeatureStore
from .engine import ClusterEngine
from .parsing import load_features_from_geojson, features_from_geojson
from .output import partition_to_geojson, write_partition_geojson

__all__ = [
    "Point",
    "Extent",
    "Feature",
    "PointGeometry",
    "LineStringGeometry",
    "PolygonGeometry",
    "ClusterAggregate",
    "ClusterPartition",
    "EngineState",
    "ClusterError",
    "UnsupportedGeometryType",
    "InvalidParameter",
    "GeoJSONParseError",
    "empty_extent",
    "extend_with_point",
    "buffer",
    "center",
    "rectangle_polygon",
    "default_geometry_accessor",
    "centroid_accessor",
    "make_filtered_accessor",
    "OrderShuffler",
    "ShuffleMode",
    "ClusterConfig",
    "load_config",
    "SpatialIndex",
    "FeatureStore",
    "ClusterEngine",
    "load_features_from_geojson",
    "features_from_geojson",
    "partition_to_geojson",
    "write_partition_geojson",
]
