"""
In-memory feature store.

Owns the raw features and answers enumeration and range queries for the
clustering engine. Every mutating call fires the change notification
before returning, so a bound engine has re-clustered by the time the
caller continues.
"""

import logging
from typing import Callable, Hashable, Iterable, Optional

from .events import Observable
from .extent import empty_extent, extend_with_point
from .spatial_index import DEFAULT_CELL_SIZE, SpatialIndex, feature_extent
from .types import Extent, Feature


logger = logging.getLogger(__name__)

# loader(extent, resolution, projection) -> features to add
FeatureLoader = Callable[[Extent, float, object], Iterable[Feature]]


def _covers(outer: Extent, inner: Extent) -> bool:
    return (
        outer.min_x <= inner.min_x
        and outer.min_y <= inner.min_y
        and outer.max_x >= inner.max_x
        and outer.max_y >= inner.max_y
    )


class FeatureStore(Observable):
    """
    Feature collection with a spatial index.

    Features keep the order in which they were added. Adding a feature
    whose id is already present is ignored.
    """

    def __init__(
        self,
        features: Optional[Iterable[Feature]] = None,
        loader: Optional[FeatureLoader] = None,
        cell_size: float = DEFAULT_CELL_SIZE,
    ):
        """
        Args:
            features: Initial features
            loader: Called by load_features() for extents not loaded yet
            cell_size: Grid cell size of the spatial index, in map units
        """
        super().__init__()
        self._features: dict[Hashable, Feature] = {}
        self._index = SpatialIndex(cell_size)
        self._loader = loader
        self._loaded_extents: list[Extent] = []
        if features is not None:
            self._add_all(features)

    def _record(self, feature: Feature, extent: Optional[Extent]) -> None:
        self._features[feature.feature_id] = feature
        if extent is not None:
            self._index.insert(feature.feature_id, extent)

    def _pending(self, features: Iterable[Feature]) -> list[tuple[Feature, Optional[Extent]]]:
        """
        Check a batch before any of it is stored.

        Features whose id is already present, or repeated in the batch,
        are skipped.

        Raises:
            ValueError: If a feature has a NaN or infinite coordinate
        """
        pending = []
        seen: set[Hashable] = set()
        for feature in features:
            if feature.feature_id in self._features or feature.feature_id in seen:
                continue
            seen.add(feature.feature_id)
            pending.append((feature, feature_extent(feature)))
        return pending

    def _add_all(self, features: Iterable[Feature]) -> int:
        pending = self._pending(features)
        for feature, extent in pending:
            self._record(feature, extent)
        return len(pending)

    def add_feature(self, feature: Feature) -> bool:
        """
        Add a single feature.

        Returns:
            True if the feature was added, False if its id was present

        Raises:
            ValueError: If the feature has a NaN or infinite coordinate
        """
        added = self._add_all([feature]) > 0
        if added:
            self.changed(self)
        return added

    def add_features(self, features: Iterable[Feature]) -> int:
        """
        Add several features with a single change notification.

        The batch is checked first; if any feature is rejected, none are
        added.

        Returns:
            Number of features actually added

        Raises:
            ValueError: If a feature has a NaN or infinite coordinate
        """
        added = self._add_all(features)
        if added:
            self.changed(self)
        return added

    def remove_feature(self, feature_id: Hashable) -> bool:
        """
        Remove a feature by id.

        Returns:
            True if the feature was present
        """
        if self._features.pop(feature_id, None) is None:
            return False
        self._index.remove(feature_id)
        self.changed(self)
        return True

    def clear(self) -> None:
        """Remove every feature and forget which extents were loaded."""
        had_features = bool(self._features)
        self._features.clear()
        self._index.clear()
        self._loaded_extents.clear()
        if had_features:
            self.changed(self)

    def get_features(self) -> list[Feature]:
        """Return all features in insertion order, as a new list."""
        return list(self._features.values())

    def get_feature_by_id(self, feature_id: Hashable) -> Optional[Feature]:
        return self._features.get(feature_id)

    def get_features_in_extent(self, extent: Extent) -> list[Feature]:
        """
        Find features whose geometry bounding box intersects an extent.

        Features without geometry are never returned.
        """
        return [self._features[fid] for fid in self._index.query(extent)]

    def get_extent(self) -> Extent:
        """Bounding box of all indexed geometries (empty if none)."""
        extent = empty_extent()
        for feature in self._features.values():
            if feature.geometry is None:
                continue
            for vertex in feature.geometry.vertices():
                extent = extend_with_point(extent, vertex)
        return extent

    def load_features(self, extent: Extent, resolution: float, projection: object = None) -> None:
        """
        Make sure features for an extent are resident.

        Without a loader this does nothing. With one, the loader runs for
        extents not covered by an earlier load and its features are added.
        """
        if self._loader is None:
            return
        if any(_covers(loaded, extent) for loaded in self._loaded_extents):
            return
        logger.debug("Loading features for extent %s at resolution %s", extent.as_tuple(), resolution)
        features = list(self._loader(extent, resolution, projection))
        pending = self._pending(features)
        self._loaded_extents.append(extent)
        for feature, feature_bbox in pending:
            self._record(feature, feature_bbox)
        if pending:
            self.changed(self)

    @property
    def loaded_extents(self) -> tuple[Extent, ...]:
        return tuple(self._loaded_extents)

    def __len__(self) -> int:
        return len(self._features)

    def __contains__(self, feature_id: Hashable) -> bool:
        return feature_id in self._features
