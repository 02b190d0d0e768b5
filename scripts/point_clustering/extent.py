"""
Extent arithmetic.

Pure functions over Extent values. Nothing here holds state, so the
functions are safe to share between independent clustering passes.
"""

import math
from typing import Tuple

from .types import Extent, Point


def empty_extent() -> Extent:
    """Return the inverted sentinel extent used to seed accumulation."""
    return Extent(math.inf, math.inf, -math.inf, -math.inf)


def extent_from_point(point: Point) -> Extent:
    """Return the zero-area extent covering a single point."""
    return Extent(point.x, point.y, point.x, point.y)


def extend_with_point(extent: Extent, point: Point) -> Extent:
    """
    Grow an extent so it covers a point.

    Args:
        extent: Extent to grow (may be empty)
        point: Point to include

    Returns:
        New extent covering both
    """
    return Extent(
        min(extent.min_x, point.x),
        min(extent.min_y, point.y),
        max(extent.max_x, point.x),
        max(extent.max_y, point.y),
    )


def buffer(extent: Extent, distance: float) -> Extent:
    """Expand all four sides of an extent by distance."""
    return Extent(
        extent.min_x - distance,
        extent.min_y - distance,
        extent.max_x + distance,
        extent.max_y + distance,
    )


def center(extent: Extent) -> Point:
    """Return the midpoint of an extent."""
    return Point(
        (extent.min_x + extent.max_x) / 2,
        (extent.min_y + extent.max_y) / 2,
    )


def rectangle_polygon(extent: Extent) -> Tuple[Point, ...]:
    """
    Return the closed ring outlining an extent.

    The ring has five vertices: the four corners starting at the
    bottom-left and going up the left edge, then the bottom-left corner
    again.
    """
    bottom_left = Point(extent.min_x, extent.min_y)
    return (
        bottom_left,
        Point(extent.min_x, extent.max_y),
        Point(extent.max_x, extent.max_y),
        Point(extent.max_x, extent.min_y),
        bottom_left,
    )
