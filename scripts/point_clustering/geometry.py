"""
Geometry accessors.

An accessor maps a feature to the point used for clustering, or to None
when the feature should be left out. The engine receives one accessor at
construction and calls it for every seed and every cluster member.
"""

from typing import Callable, Optional

from .errors import UnsupportedGeometryType
from .types import Feature, GeometryType, Point


GeometryAccessor = Callable[[Feature], Optional[Point]]


def default_geometry_accessor(feature: Feature) -> Point:
    """
    Return the coordinate of a point feature.

    Raises:
        UnsupportedGeometryType: If the feature's geometry is not a point
    """
    geometry = feature.geometry
    geometry_type = getattr(geometry, "geometry_type", None)
    if geometry_type != GeometryType.POINT:
        raise UnsupportedGeometryType(
            feature.feature_id,
            geometry_type.value if geometry_type is not None else None,
        )
    return geometry.coordinate


def centroid_accessor(feature: Feature) -> Optional[Point]:
    """
    Return the mean of a geometry's vertices.

    Works for points, line strings and polygons (exterior ring only).
    Features without geometry or without vertices are not clusterable.
    """
    geometry = feature.geometry
    if geometry is None:
        return None
    vertices = geometry.vertices()
    if not vertices:
        return None
    n = len(vertices)
    return Point(
        sum(p.x for p in vertices) / n,
        sum(p.y for p in vertices) / n,
    )


def make_filtered_accessor(
    predicate: Callable[[Feature], bool],
    base: GeometryAccessor = default_geometry_accessor,
) -> GeometryAccessor:
    """
    Wrap an accessor so that features failing a predicate are skipped.

    Args:
        predicate: Returns True for features that take part in clustering
        base: Accessor applied to the features that pass

    Returns:
        Accessor returning None for rejected features
    """
    def accessor(feature: Feature) -> Optional[Point]:
        if not predicate(feature):
            return None
        return base(feature)

    return accessor
