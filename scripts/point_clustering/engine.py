"""
Greedy distance-based point clustering over a feature store.

Every pass walks the store's features in order. The first feature not yet
grouped seeds a cluster: its point is buffered by the search distance and
every not-yet-grouped feature inside that rectangle joins the cluster.
Grouping is order-sensitive; once a feature is taken it is never
reassigned, even if a later seed would be closer.
"""

import logging
from dataclasses import replace
from typing import Hashable, Optional

from .config import ClusterConfig, validate_distance, validate_factor
from .errors import InvalidParameter
from .events import Observable
from .extent import buffer, center, extent_from_point, rectangle_polygon
from .geometry import GeometryAccessor, default_geometry_accessor
from .shuffle import OrderShuffler
from .store import FeatureStore
from .types import (
    EMPTY_PARTITION,
    ClusterAggregate,
    ClusterPartition,
    EngineState,
    Extent,
    Feature,
    Point,
)


logger = logging.getLogger(__name__)


def assign_order(aggregates: list[ClusterAggregate]) -> list[ClusterAggregate]:
    """
    Spread order values evenly over [0, 1] by creation sequence.

    A single aggregate gets order 0.
    """
    if len(aggregates) == 1:
        return [replace(aggregates[0], order=0.0)]
    last = len(aggregates) - 1
    return [replace(agg, order=i / last) for i, agg in enumerate(aggregates)]


def apply_factor(aggregates, factor: float) -> list[ClusterAggregate]:
    """Place each aggregate at centroid * factor + search_center * (1 - factor)."""
    return [
        replace(agg, position=agg.centroid.interpolate(agg.search_center, factor))
        for agg in aggregates
    ]


class ClusterEngine(Observable):
    """
    Keeps a cluster partition in step with a feature store.

    The partition is rebuilt from scratch when the store changes, when
    the resolution changes, or when distance or randomize change. A
    factor-only change just moves the existing aggregates. Listeners
    registered with on_change() receive the new partition after each
    rebuild or reposition.

    Everything runs synchronously on the caller's thread. Errors raised
    during a rebuild propagate to the caller and leave the previously
    published partition in place.
    """

    def __init__(
        self,
        config: Optional[ClusterConfig] = None,
        geometry_accessor: Optional[GeometryAccessor] = None,
        source: Optional[FeatureStore] = None,
    ):
        """
        Args:
            config: Initial parameters (defaults to ClusterConfig())
            geometry_accessor: Maps a feature to its clustering point or
                None; defaults to default_geometry_accessor
            source: Feature store to bind immediately
        """
        super().__init__()
        config = config or ClusterConfig()
        self._distance_px = config.distance_px
        self._factor = config.factor
        self._randomize = config.randomize
        self._shuffler = OrderShuffler(config.seed, config.shuffle_mode)
        self._geometry_accessor = geometry_accessor or default_geometry_accessor

        self._source: Optional[FeatureStore] = None
        self._source_key: Optional[int] = None
        self._resolution: Optional[float] = None
        self._partition: ClusterPartition = EMPTY_PARTITION
        self._state = EngineState.UNINITIALIZED

        if source is not None:
            self.bind_source(source)

    # Parameters

    def get_distance_px(self) -> float:
        return self._distance_px

    def get_factor(self) -> float:
        return self._factor

    def get_randomize(self) -> bool:
        return self._randomize

    def get_resolution(self) -> Optional[float]:
        return self._resolution

    def get_source(self) -> Optional[FeatureStore]:
        return self._source

    @property
    def state(self) -> EngineState:
        return self._state

    def configure(
        self,
        distance_px: Optional[float] = None,
        factor: Optional[float] = None,
        randomize: Optional[bool] = None,
    ) -> None:
        """
        Update parameters; None leaves a parameter unchanged.

        A new distance or randomize setting triggers a full rebuild. A new
        factor alone only repositions the current aggregates. Values are
        validated before anything changes; if the rebuild fails, the old
        parameters are restored.

        Raises:
            InvalidParameter: If distance_px is negative or not finite
        """
        new_distance = self._distance_px if distance_px is None else validate_distance(distance_px)
        new_factor = self._factor if factor is None else validate_factor(factor)
        new_randomize = self._randomize if randomize is None else bool(randomize)

        needs_rebuild = (
            new_distance != self._distance_px or new_randomize != self._randomize
        )
        needs_reposition = new_factor != self._factor

        previous = (self._distance_px, self._factor, self._randomize)
        self._distance_px, self._factor, self._randomize = new_distance, new_factor, new_randomize

        if needs_rebuild:
            try:
                self.refresh()
            except Exception:
                self._distance_px, self._factor, self._randomize = previous
                raise
        elif needs_reposition:
            self.reposition()

    def set_distance_px(self, distance_px: float) -> None:
        """Set the search distance in pixels."""
        self.configure(distance_px=distance_px)

    def set_factor(self, factor: float) -> None:
        """Set the placement factor; values outside [0, 1] are clamped."""
        self.configure(factor=factor)

    def set_randomize(self, randomize: bool) -> None:
        """Turn shuffling of the processing order on or off."""
        self.configure(randomize=randomize)

    # Source and viewport

    def bind_source(self, source: Optional[FeatureStore]) -> None:
        """
        Attach a feature store, or detach with None.

        The engine stops listening to the previous store, starts listening
        to the new one and rebuilds immediately.
        """
        if self._source is not None and self._source_key is not None:
            self._source.un_change(self._source_key)
        self._source = source
        self._source_key = None
        if source is not None:
            self._source_key = source.on_change(self._on_source_change)
        self.refresh()

    def _on_source_change(self, _store) -> None:
        self.refresh()

    def notify_viewport(self, extent: Extent, resolution: float, projection: object = None) -> None:
        """
        Prepare for drawing an extent at a resolution.

        The load request is always forwarded to the store. A resolution
        different from the last one triggers a rebuild, since the search
        distance in map units depends on it.

        Raises:
            InvalidParameter: If resolution is not a positive number
        """
        resolution = float(resolution)
        if not resolution > 0:
            raise InvalidParameter(f"resolution must be > 0, got {resolution}")

        if self._source is not None:
            self._source.load_features(extent, resolution, projection)

        if resolution == self._resolution:
            return

        previous = self._resolution
        self._resolution = resolution
        try:
            self.refresh()
        except Exception:
            self._resolution = previous
            raise

    # Partition

    def current_partition(self) -> ClusterPartition:
        """Return the latest published partition."""
        return self._partition

    def clear(self) -> None:
        """Drop the current partition and publish an empty one."""
        self._publish(EMPTY_PARTITION)

    def refresh(self) -> None:
        """
        Recompute the whole partition.

        Without a bound store or a known resolution there is nothing to
        cluster; the partition becomes (or stays) empty.
        """
        if self._source is None or self._resolution is None:
            logger.debug(
                "Skipping rebuild: source bound=%s, resolution=%s",
                self._source is not None,
                self._resolution,
            )
            self._state = EngineState.UNINITIALIZED
            if not self._partition.is_empty:
                self._publish(EMPTY_PARTITION, EngineState.UNINITIALIZED)
            return

        previous_state = self._state
        self._state = EngineState.REBUILDING
        try:
            aggregates = self._cluster()
        except Exception:
            self._state = previous_state
            raise

        aggregates = assign_order(aggregates)
        aggregates = apply_factor(aggregates, self._factor)
        self._publish(ClusterPartition(tuple(aggregates)))

    def reposition(self) -> None:
        """Move every aggregate to match the current factor without regrouping."""
        aggregates = apply_factor(self._partition.aggregates, self._factor)
        self._publish(ClusterPartition(tuple(aggregates)), self._state)

    def _publish(self, partition: ClusterPartition, state: EngineState = EngineState.READY) -> None:
        self._partition = partition
        self._state = state
        self.changed(partition)

    def _cluster(self) -> list[ClusterAggregate]:
        """Run one greedy pass over the bound store."""
        source = self._source
        map_distance = self._distance_px * self._resolution
        features = source.get_features()
        logger.debug(
            "Clustering %d features, distance %s px = %s map units",
            len(features),
            self._distance_px,
            map_distance,
        )

        if self._randomize:
            self._shuffler.shuffle(features)

        clustered: set[Hashable] = set()
        aggregates: list[ClusterAggregate] = []

        for feature in features:
            if feature.feature_id in clustered:
                continue
            point = self._geometry_accessor(feature)
            if point is None:
                continue

            search_extent = buffer(extent_from_point(point), map_distance)
            neighbors = [
                neighbor
                for neighbor in source.get_features_in_extent(search_extent)
                if neighbor.feature_id not in clustered
            ]
            # A custom accessor may put the seed outside its own geometry
            if all(n.feature_id != feature.feature_id for n in neighbors):
                neighbors.insert(0, feature)
            clustered.update(n.feature_id for n in neighbors)

            aggregates.append(self._create_aggregate(neighbors, search_extent))

        logger.debug("Built %d clusters from %d features", len(aggregates), len(features))
        return aggregates

    def _create_aggregate(self, features: list[Feature], search_extent: Extent) -> ClusterAggregate:
        """
        Build an aggregate from the features found for one seed.

        Members the accessor now rejects are left out of both the member
        list and the centroid.
        """
        member_ids = []
        sum_x = sum_y = 0.0
        for feature in features:
            point = self._geometry_accessor(feature)
            if point is None:
                continue
            member_ids.append(feature.feature_id)
            sum_x += point.x
            sum_y += point.y

        n = len(member_ids)
        return ClusterAggregate(
            member_ids=tuple(member_ids),
            centroid=Point(sum_x / n, sum_y / n),
            search_center=center(search_extent),
            search_rect=rectangle_polygon(search_extent),
        )
