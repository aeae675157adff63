"""Geometry primitives for radial seal layouts."""

from .coords import (
    DIRECTION_COUNT,
    DIRECTION_STEP_DEG,
    CoordinateSystem,
    Point,
    angle_for_direction,
    direction_for_cartesian,
    direction_from_angle,
    direction_from_label,
    direction_label,
    norm360,
    to_cartesian,
)

__all__ = [
    "DIRECTION_COUNT",
    "DIRECTION_STEP_DEG",
    "CoordinateSystem",
    "Point",
    "angle_for_direction",
    "direction_for_cartesian",
    "direction_from_angle",
    "direction_from_label",
    "direction_label",
    "norm360",
    "to_cartesian",
]
