"""
Spatial indexing for feature range queries.

Uses a grid-based spatial hash: each feature is registered in every cell
its bounding box touches, and a range query visits the cells under the
query extent.
"""

from typing import Hashable, Iterator, Optional, Tuple
from collections import defaultdict
import itertools
import math

from .types import Extent, Feature
from .extent import empty_extent, extend_with_point


DEFAULT_CELL_SIZE = 256.0


def geometry_extent(feature: Feature) -> Optional[Extent]:
    """Bounding box of a feature's geometry, or None if it has no vertices."""
    geometry = feature.geometry
    if geometry is None:
        return None
    extent = empty_extent()
    for vertex in geometry.vertices():
        extent = extend_with_point(extent, vertex)
    return None if extent.is_empty else extent


def feature_extent(feature: Feature) -> Optional[Extent]:
    """
    Bounding box of a feature about to be indexed.

    Raises:
        ValueError: If any vertex has a NaN or infinite coordinate
    """
    if feature.geometry is not None:
        for vertex in feature.geometry.vertices():
            if not (math.isfinite(vertex.x) and math.isfinite(vertex.y)):
                raise ValueError(
                    f"Feature {feature.feature_id!r} has non-finite coordinate "
                    f"{vertex.as_tuple()}"
                )
    return geometry_extent(feature)


class SpatialIndex:
    """
    Grid-based spatial hash over feature bounding boxes.

    Query results come back in insertion order, so callers that iterate
    them get the same sequence every time for the same index contents.
    """

    def __init__(self, cell_size: float = DEFAULT_CELL_SIZE):
        """
        Initialize spatial index with given cell size.

        Args:
            cell_size: Edge length of a grid cell in map units
        """
        if cell_size <= 0:
            raise ValueError(f"cell_size must be > 0, got {cell_size}")
        self.cell_size = cell_size

        # Maps (cell_x, cell_y) -> set of feature ids
        self._grid: dict[Tuple[int, int], set[Hashable]] = defaultdict(set)

        # Maps feature_id -> (insertion sequence, extent)
        self._entries: dict[Hashable, Tuple[int, Extent]] = {}
        self._sequence = itertools.count()

    def _cell_range(self, extent: Extent) -> Tuple[int, int, int, int]:
        """Compute the inclusive grid cell bounds covered by an extent."""
        return (
            int(math.floor(extent.min_x / self.cell_size)),
            int(math.floor(extent.min_y / self.cell_size)),
            int(math.floor(extent.max_x / self.cell_size)),
            int(math.floor(extent.max_y / self.cell_size)),
        )

    def _cells(self, extent: Extent) -> Iterator[Tuple[int, int]]:
        min_cx, min_cy, max_cx, max_cy = self._cell_range(extent)
        for cx in range(min_cx, max_cx + 1):
            for cy in range(min_cy, max_cy + 1):
                yield (cx, cy)

    def _cell_count(self, extent: Extent) -> float:
        if not all(math.isfinite(v) for v in extent.as_tuple()):
            return math.inf
        min_cx, min_cy, max_cx, max_cy = self._cell_range(extent)
        return float(max_cx - min_cx + 1) * float(max_cy - min_cy + 1)

    def insert(self, feature_id: Hashable, extent: Extent) -> None:
        """
        Add a feature's bounding box to the index.

        Re-inserting an id replaces its previous extent.

        Args:
            feature_id: Identity of the feature
            extent: Bounding box of its geometry
        """
        if not all(math.isfinite(v) for v in extent.as_tuple()):
            raise ValueError(f"Cannot index non-finite extent {extent.as_tuple()}")
        if feature_id in self._entries:
            self.remove(feature_id)
        self._entries[feature_id] = (next(self._sequence), extent)
        for cell in self._cells(extent):
            self._grid[cell].add(feature_id)

    def remove(self, feature_id: Hashable) -> bool:
        """
        Remove a feature from the index.

        Returns:
            True if the feature was indexed
        """
        entry = self._entries.pop(feature_id, None)
        if entry is None:
            return False
        _, extent = entry
        for cell in self._cells(extent):
            bucket = self._grid.get(cell)
            if bucket is not None:
                bucket.discard(feature_id)
                if not bucket:
                    del self._grid[cell]
        return True

    def clear(self) -> None:
        self._grid.clear()
        self._entries.clear()

    def query(self, extent: Extent) -> list[Hashable]:
        """
        Find all features whose bounding box intersects an extent.

        Args:
            extent: The query extent

        Returns:
            Feature ids in insertion order
        """
        if extent.is_empty:
            return []

        # Wide queries would visit more cells than there are entries
        if self._cell_count(extent) > len(self._entries):
            candidates = self._entries.keys()
        else:
            candidates = set()
            for cell in self._cells(extent):
                candidates.update(self._grid.get(cell, ()))

        hits = [
            (self._entries[fid][0], fid)
            for fid in candidates
            if self._entries[fid][1].intersects(extent)
        ]
        hits.sort(key=lambda x: x[0])
        return [fid for _, fid in hits]

    def __contains__(self, feature_id: Hashable) -> bool:
        return feature_id in self._entries

    @property
    def feature_count(self) -> int:
        """Number of features in the index."""
        return len(self._entries)
