"""
Clustering parameters.

ClusterConfig bundles the parameters an engine starts with. Engines copy
the values into their own state, so one config can seed many engines.
"""

import json
import math
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Union

from .errors import InvalidParameter
from .shuffle import ShuffleMode


DEFAULT_DISTANCE_PX = 20.0
DEFAULT_FACTOR = 1.0


def clamp(value: float, lo: float, hi: float) -> float:
    """Limit value to the closed range [lo, hi]."""
    return min(max(value, lo), hi)


def _as_float(name: str, value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a number, got {value!r}") from None


def validate_distance(distance_px: float) -> float:
    """
    Check a pixel distance.

    Raises:
        InvalidParameter: If the distance is not a number, negative, NaN
            or infinite
    """
    distance_px = _as_float("distance_px", distance_px)
    if not math.isfinite(distance_px) or distance_px < 0:
        raise InvalidParameter(
            f"distance_px must be a finite value >= 0, got {distance_px}"
        )
    return distance_px


def validate_factor(factor: float) -> float:
    """Clamp a placement factor to [0, 1]; NaN and non-numbers are rejected."""
    factor = _as_float("factor", factor)
    if math.isnan(factor):
        raise InvalidParameter("factor must be a number, got NaN")
    return clamp(factor, 0.0, 1.0)


@dataclass(frozen=True)
class ClusterConfig:
    """
    Parameters for a clustering engine.

    Attributes:
        distance_px: Search distance in pixels
        factor: Marker placement weight, 1 at the centroid, 0 at the
            search rectangle center
        randomize: Shuffle the feature order before every pass
        seed: Seed for the shuffle generator (None for nondeterministic)
        shuffle_mode: Permutation strategy used when randomize is on
    """
    distance_px: float = DEFAULT_DISTANCE_PX
    factor: float = DEFAULT_FACTOR
    randomize: bool = False
    seed: Optional[int] = None
    shuffle_mode: ShuffleMode = ShuffleMode.UNIFORM

    def __post_init__(self):
        object.__setattr__(self, "distance_px", validate_distance(self.distance_px))
        object.__setattr__(self, "factor", validate_factor(self.factor))
        if not isinstance(self.shuffle_mode, ShuffleMode):
            try:
                mode = ShuffleMode(self.shuffle_mode)
            except ValueError:
                raise InvalidParameter(
                    f"Unknown shuffle_mode {self.shuffle_mode!r}"
                ) from None
            object.__setattr__(self, "shuffle_mode", mode)

    @classmethod
    def from_dict(cls, data: dict) -> "ClusterConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict:
        return {
            "distance_px": self.distance_px,
            "factor": self.factor,
            "randomize": self.randomize,
            "seed": self.seed,
            "shuffle_mode": self.shuffle_mode.value,
        }

    def with_overrides(self, **overrides) -> "ClusterConfig":
        """Return a copy with the given fields replaced; None values are skipped."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_config(path: Union[str, Path]) -> ClusterConfig:
    """
    Read a ClusterConfig from a JSON file.

    Raises:
        InvalidParameter: If the file is not valid JSON, does not hold a
            JSON object, or a value is out of range
    """
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidParameter(f"Config file {path}: invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidParameter(f"Config file {path} must contain a JSON object")
    return ClusterConfig.from_dict(data)
