"""
Exceptions raised by the clustering engine and its helpers.
"""

from typing import Hashable, Optional


class ClusterError(Exception):
    """Base class for clustering errors."""


class UnsupportedGeometryType(ClusterError, TypeError):
    """
    The default geometry accessor met a feature that is not a point.

    This is a programming error: either supply an accessor that handles
    the geometry, or keep the store point-only.
    """

    def __init__(self, feature_id: Hashable, geometry_type: Optional[str]):
        self.feature_id = feature_id
        self.geometry_type = geometry_type
        super().__init__(
            f"Default geometry accessor only handles Point geometries, "
            f"feature {feature_id!r} has {geometry_type or 'no geometry'}"
        )


class InvalidParameter(ClusterError, ValueError):
    """A clustering parameter is out of its allowed range."""


class GeoJSONParseError(ClusterError, ValueError):
    """Input GeoJSON could not be turned into features."""
