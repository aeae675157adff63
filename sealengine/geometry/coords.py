"""Clock-face coordinate system for the 24 seal directions.

Angles follow the seal convention: ``0`` points to 12 o'clock and values
increase clockwise in screen space (y grows downwards).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

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

DIRECTION_COUNT = 24
DIRECTION_STEP_DEG = 360.0 / DIRECTION_COUNT


@dataclass(frozen=True)
class Point:
    """A concrete position in canvas pixels."""

    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


def norm360(angle: float) -> float:
    """Normalize angle to [0, 360)."""

    y = math.fmod(angle, 360.0)
    return y + 360.0 if y < 0 else y


def angle_for_direction(index: int) -> float:
    """Return the clockwise angle from 12 o'clock for ``index``."""

    if not 0 <= int(index) < DIRECTION_COUNT or int(index) != index:
        raise ValueError(f"direction index must be an integer in 0..{DIRECTION_COUNT - 1}, got {index!r}")
    return int(index) * DIRECTION_STEP_DEG


def to_cartesian(center: Point, radius: float, angle_deg: float) -> Point:
    # -90 moves the zero reference from east to north.
    theta = math.radians(angle_deg - 90.0)
    return Point(center.x + math.cos(theta) * radius, center.y + math.sin(theta) * radius)


def direction_from_angle(angle_deg: float) -> int:
    """Return the nearest direction index for an arbitrary angle."""

    steps = norm360(angle_deg) / DIRECTION_STEP_DEG
    return int(math.floor(steps + 0.5)) % DIRECTION_COUNT


def direction_for_cartesian(center: Point, point: Point) -> int:
    """Recover the nearest direction index for ``point`` around ``center``.

    A point sitting exactly on the center has no bearing and maps to 0.
    """

    dx = point.x - center.x
    dy = point.y - center.y
    if dx == 0.0 and dy == 0.0:
        return 0
    angle = math.degrees(math.atan2(dy, dx)) + 90.0
    return direction_from_angle(angle)


def direction_label(index: int) -> str:
    """Clock label for ``index``: ``12:00``, ``12:30``, ``1:00`` ... ``11:30``."""

    angle_for_direction(index)
    hour = index // 2 or 12
    minutes = "30" if index % 2 else "00"
    return f"{hour}:{minutes}"


def direction_from_label(label: str) -> Optional[int]:
    """Parse a clock label (zero padded or not) into a direction index."""

    if not isinstance(label, str):
        return None
    head, sep, tail = label.strip().partition(":")
    if not sep or not head.isdigit() or tail not in ("00", "30"):
        return None
    hour = int(head)
    if not 1 <= hour <= 12:
        return None
    return (hour % 12) * 2 + (1 if tail == "30" else 0)


@dataclass(frozen=True)
class CoordinateSystem:
    """Direction and radius conversions bound to a concrete center."""

    center: Point

    @staticmethod
    def angle_for_direction(index: int) -> float:
        return angle_for_direction(index)

    def to_cartesian(self, radius: float, angle_deg: float) -> Point:
        return to_cartesian(self.center, radius, angle_deg)

    def anchor(self, index: int, radius: float) -> Point:
        """Position of direction ``index`` on the ring of ``radius``."""

        return to_cartesian(self.center, radius, angle_for_direction(index))

    def direction_for_cartesian(self, point: Point) -> int:
        return direction_for_cartesian(self.center, point)
