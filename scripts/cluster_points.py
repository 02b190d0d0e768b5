#!/usr/bin/env python3
"""
Point Clustering Tool

Clusters the point features of a GeoJSON file at a given map resolution
and writes one marker feature per cluster.

Usage:
    python cluster_points.py <input.geojson> [output.geojson] [--distance=20] [--resolution=1]
"""

import argparse
import logging
import sys
from pathlib import Path

from point_clustering import (
    ClusterConfig,
    ClusterEngine,
    ClusterError,
    FeatureStore,
    centroid_accessor,
    load_config,
    load_features_from_geojson,
    write_partition_geojson,
)
from point_clustering.output import print_partition_stats


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Cluster GeoJSON point features by pixel distance"
    )
    parser.add_argument("input", help="Input GeoJSON file")
    parser.add_argument(
        "output",
        nargs="?",
        help="Output GeoJSON file (default: input-clustered.geojson)",
    )
    parser.add_argument("--config", help="JSON file with clustering parameters")
    parser.add_argument(
        "--distance",
        type=float,
        help="Cluster distance in pixels (default: 20)",
    )
    parser.add_argument(
        "--resolution",
        type=float,
        default=1.0,
        help="Map units per pixel (default: 1)",
    )
    parser.add_argument(
        "--factor",
        type=float,
        help="Marker placement, 1 at centroid, 0 at search center (default: 1)",
    )
    parser.add_argument(
        "--randomize",
        action="store_true",
        default=None,
        help="Shuffle feature order before clustering",
    )
    parser.add_argument("--seed", type=int, help="Seed for --randomize")
    parser.add_argument(
        "--any-geometry",
        action="store_true",
        help="Cluster non-point features at the mean of their vertices",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main() -> int:
    """Main entry point."""
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    if args.output:
        output_path = Path(args.output)
    else:
        output_path = input_path.with_name(input_path.stem + "-clustered.geojson")

    try:
        config = load_config(args.config) if args.config else ClusterConfig()
        config = config.with_overrides(
            distance_px=args.distance,
            factor=args.factor,
            randomize=args.randomize,
            seed=args.seed,
        )
        features = load_features_from_geojson(input_path)
    except (OSError, ClusterError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Input: {input_path}")
    print(f"Output: {output_path}")
    print(f"Distance: {config.distance_px} px at resolution {args.resolution}")
    print(f"Loaded {len(features)} features")

    if not features:
        print("No features found to cluster")
        return 1

    store = FeatureStore(features)
    engine = ClusterEngine(
        config,
        geometry_accessor=centroid_accessor if args.any_geometry else None,
        source=store,
    )

    print("\nClustering features...")
    try:
        engine.notify_viewport(store.get_extent(), args.resolution)
    except ClusterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    partition = engine.current_partition()
    print("\nClustering results:")
    print_partition_stats(partition, input_count=len(store))

    print(f"\nWriting output to {output_path}...")
    write_partition_geojson(output_path, partition)

    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
