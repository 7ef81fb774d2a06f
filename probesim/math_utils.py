"""Planar geometry helpers for probe navigation.

Positions are 2D map coordinates. Headings are degrees in [0, 360),
measured counter-clockwise from the +x axis (``atan2`` convention).
"""

from __future__ import annotations

import math


class Vector2:
    """A 2D vector used for probe and system positions."""

    __slots__ = ("x", "y")

    def __init__(self, x: float = 0.0, y: float = 0.0) -> None:
        self.x: float = float(x)
        self.y: float = float(y)

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vector2":
        return Vector2(self.x * scalar, self.y * scalar)

    def distance_to(self, other: "Vector2") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def heading_to(self, other: "Vector2") -> float:
        """Heading in degrees [0, 360) pointing from this vector to ``other``."""
        return normalize_heading(math.degrees(math.atan2(other.y - self.y, other.x - self.x)))

    def lerp(self, other: "Vector2", t: float) -> "Vector2":
        """Linear interpolation; ``t=0`` is self, ``t=1`` is other."""
        return Vector2(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)

    def copy(self) -> "Vector2":
        """Return a copy of this vector."""
        return Vector2(self.x, self.y)

    def to_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)

    @classmethod
    def from_heading(cls, heading: float, length: float = 1.0) -> "Vector2":
        """Vector of ``length`` pointing along ``heading`` degrees."""
        rad = math.radians(heading)
        return cls(math.cos(rad) * length, math.sin(rad) * length)

    def __eq__(self, other: object) -> bool:
        if other.__class__ is not Vector2:
            return False
        return abs(self.x - other.x) < 1e-9 and abs(self.y - other.y) < 1e-9

    def __hash__(self) -> int:
        return hash((round(self.x, 9), round(self.y, 9)))

    def __repr__(self) -> str:
        return f"Vector2({self.x}, {self.y})"


def normalize_heading(heading: float) -> float:
    """Wrap a heading in degrees into [0, 360)."""
    wrapped = heading % 360.0
    # -1e-17 % 360 == 360.0 in floating point
    return 0.0 if wrapped >= 360.0 else wrapped


def angular_difference(a: float, b: float) -> float:
    """Minimal absolute difference between two headings, in [0, 180]."""
    diff = abs(normalize_heading(a) - normalize_heading(b))
    if diff > 180.0:
        diff = 360.0 - diff
    return diff
