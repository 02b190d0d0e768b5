"""
Immutable data types for point clustering.

All value types are frozen dataclasses to enforce immutability.
A published partition is never mutated; a new pass builds a new one.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Hashable, Optional, Tuple
import math


@dataclass(frozen=True)
class Point:
    """2D coordinate in map units."""
    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        """Compute Euclidean distance to another point."""
        dx = self.x - other.x
        dy = self.y - other.y
        return math.sqrt(dx * dx + dy * dy)

    def interpolate(self, other: "Point", weight: float) -> "Point":
        """
        Blend this point with another.

        Returns self * weight + other * (1 - weight).
        """
        return Point(
            self.x * weight + other.x * (1 - weight),
            self.y * weight + other.y * (1 - weight),
        )

    def as_tuple(self) -> Tuple[float, float]:
        """Return coordinates as a tuple."""
        return (self.x, self.y)


@dataclass(frozen=True)
class Extent:
    """
    Axis-aligned bounding box.

    An extent with min > max on either axis is empty; it is used as an
    accumulator seed and intersects nothing.
    """
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def is_empty(self) -> bool:
        return self.max_x < self.min_x or self.max_y < self.min_y

    @property
    def width(self) -> float:
        return 0.0 if self.is_empty else self.max_x - self.min_x

    @property
    def height(self) -> float:
        return 0.0 if self.is_empty else self.max_y - self.min_y

    def contains_point(self, point: Point) -> bool:
        """Check if a point lies inside or on the boundary."""
        return (
            self.min_x <= point.x <= self.max_x
            and self.min_y <= point.y <= self.max_y
        )

    def intersects(self, other: "Extent") -> bool:
        """Check if two extents overlap (touching edges count)."""
        return (
            self.min_x <= other.max_x
            and self.max_x >= other.min_x
            and self.min_y <= other.max_y
            and self.max_y >= other.min_y
        )

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


class GeometryType(Enum):
    """Native geometry kinds a feature may carry."""
    POINT = "Point"
    LINE_STRING = "LineString"
    POLYGON = "Polygon"


@dataclass(frozen=True)
class PointGeometry:
    """Single-coordinate geometry."""
    coordinate: Point

    @property
    def geometry_type(self) -> GeometryType:
        return GeometryType.POINT

    def vertices(self) -> Tuple[Point, ...]:
        return (self.coordinate,)


@dataclass(frozen=True)
class LineStringGeometry:
    """Open sequence of coordinates."""
    coordinates: Tuple[Point, ...]

    @property
    def geometry_type(self) -> GeometryType:
        return GeometryType.LINE_STRING

    def vertices(self) -> Tuple[Point, ...]:
        return self.coordinates


@dataclass(frozen=True)
class PolygonGeometry:
    """
    Polygon given by its rings.

    The first ring is the exterior; rings are closed (last vertex
    repeats the first).
    """
    rings: Tuple[Tuple[Point, ...], ...]

    @property
    def geometry_type(self) -> GeometryType:
        return GeometryType.POLYGON

    @property
    def exterior(self) -> Tuple[Point, ...]:
        return self.rings[0] if self.rings else ()

    def vertices(self) -> Tuple[Point, ...]:
        """Exterior ring vertices without the closing duplicate."""
        ring = self.exterior
        if len(ring) > 1 and ring[0] == ring[-1]:
            return ring[:-1]
        return ring


@dataclass(frozen=True)
class Feature:
    """
    Entity held by a feature store.

    The feature_id is the stable identity; clusters refer to features
    only through it. Properties are free-form and never read by the
    clustering engine.
    """
    feature_id: Hashable
    geometry: Any
    properties: dict = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class ClusterAggregate:
    """
    One group of features produced by a clustering pass.

    member_ids keeps the order in which the store returned the members.
    position is derived from centroid and search_center by the current
    factor and is replaced by repositioning.
    """
    member_ids: Tuple[Hashable, ...]
    centroid: Point
    search_center: Point
    search_rect: Tuple[Point, ...]
    order: float = 0.0
    position: Optional[Point] = None

    @property
    def size(self) -> int:
        """Number of member features."""
        return len(self.member_ids)


@dataclass(frozen=True)
class PartitionStats:
    """Statistics about one partition."""
    total_features: int
    total_aggregates: int
    singleton_count: int
    max_aggregate_size: int
    avg_aggregate_size: float


@dataclass(frozen=True)
class ClusterPartition:
    """
    Complete, ordered result of one clustering pass.

    Aggregates are kept in creation order; the order values follow it.
    """
    aggregates: Tuple[ClusterAggregate, ...] = ()

    def __len__(self) -> int:
        return len(self.aggregates)

    def __iter__(self):
        return iter(self.aggregates)

    def __getitem__(self, index: int) -> ClusterAggregate:
        return self.aggregates[index]

    @property
    def is_empty(self) -> bool:
        return not self.aggregates

    def member_ids(self) -> list[Hashable]:
        """All clustered feature ids, in aggregate then member order."""
        return [fid for agg in self.aggregates for fid in agg.member_ids]

    def find_aggregate(self, feature_id: Hashable) -> Optional[ClusterAggregate]:
        """
        Find the aggregate containing a feature.

        Args:
            feature_id: Identity of the feature

        Returns:
            The owning aggregate, or None if the feature was not clustered
        """
        for agg in self.aggregates:
            if feature_id in agg.member_ids:
                return agg
        return None

    @property
    def stats(self) -> PartitionStats:
        sizes = [agg.size for agg in self.aggregates]
        return PartitionStats(
            total_features=sum(sizes),
            total_aggregates=len(sizes),
            singleton_count=sum(1 for s in sizes if s == 1),
            max_aggregate_size=max(sizes) if sizes else 0,
            avg_aggregate_size=sum(sizes) / len(sizes) if sizes else 0.0,
        )


EMPTY_PARTITION = ClusterPartition()


class EngineState(Enum):
    """Lifecycle state of a ClusterEngine."""
    UNINITIALIZED = auto()
    REBUILDING = auto()
    READY = auto()
