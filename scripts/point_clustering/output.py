"""
GeoJSON output for cluster partitions.

Each aggregate becomes one Point feature at its placed position, with
the cluster metadata carried in its properties.
"""

import json
from pathlib import Path
from typing import Optional

from .types import ClusterAggregate, ClusterPartition


def aggregate_to_geojson(aggregate: ClusterAggregate, cluster_id: int) -> dict:
    """
    Convert one aggregate to a GeoJSON Feature.

    Args:
        aggregate: The aggregate to convert
        cluster_id: Identifier for the output feature

    Returns:
        GeoJSON Feature dict
    """
    position = aggregate.position or aggregate.centroid
    return {
        "type": "Feature",
        "id": cluster_id,
        "geometry": {"type": "Point", "coordinates": list(position.as_tuple())},
        "properties": {
            "members": list(aggregate.member_ids),
            "size": aggregate.size,
            "order": aggregate.order,
            "centroid": list(aggregate.centroid.as_tuple()),
            "search_center": list(aggregate.search_center.as_tuple()),
            "search_rect": [list(p.as_tuple()) for p in aggregate.search_rect],
        },
    }


def partition_to_geojson(partition: ClusterPartition) -> dict:
    """Convert a partition to a GeoJSON FeatureCollection."""
    return {
        "type": "FeatureCollection",
        "features": [
            aggregate_to_geojson(agg, i) for i, agg in enumerate(partition.aggregates)
        ],
    }


def write_partition_geojson(
    output_path: Path,
    partition: ClusterPartition,
    indent: Optional[int] = 2,
) -> None:
    """
    Write a partition to a GeoJSON file.

    Args:
        output_path: Path to write the file
        partition: Partition to write
        indent: JSON indentation, None for compact output
    """
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(partition_to_geojson(partition), f, indent=indent)
        f.write("\n")


def print_partition_stats(
    partition: ClusterPartition,
    input_count: Optional[int] = None,
    label: str = "",
) -> None:
    """
    Print statistics about a partition.

    Args:
        partition: Partition to report on
        input_count: Number of features in the store, if known
        label: Optional label for the output
    """
    stats = partition.stats
    prefix = f"{label}: " if label else ""

    if input_count is not None:
        print(f"{prefix}Input features: {input_count}")
        print(f"{prefix}Dropped features: {input_count - stats.total_features}")
    print(f"{prefix}Clustered features: {stats.total_features}")
    print(f"{prefix}Clusters: {stats.total_aggregates}")
    print(f"{prefix}Singletons: {stats.singleton_count}")
    print(f"{prefix}Max cluster size: {stats.max_aggregate_size}")
    print(f"{prefix}Avg cluster size: {stats.avg_aggregate_size:.2f}")

    if stats.total_features > 0:
        reduction = (1 - stats.total_aggregates / stats.total_features) * 100
        print(f"{prefix}Marker count reduction: {reduction:.1f}%")
