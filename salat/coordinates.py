"""Geographic coordinates and angle helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass

__all__ = ["Coordinates", "InvalidCoordinates", "unwind_angle", "quadrant_shift", "normalize"]


class InvalidCoordinates(ValueError):
    """Raised when a latitude or longitude lies outside its valid range."""


def normalize(value: float, scale: float) -> float:
    """Reduce *value* into ``[0, scale)`` (or ``(scale, 0]`` for a negative scale)."""

    return value - scale * math.floor(value / scale)


def unwind_angle(degrees: float) -> float:
    return normalize(degrees, 360.0)


def quadrant_shift(degrees: float) -> float:
    """Return the equivalent angle closest to zero, within ``[-180, 180]``."""

    if -180.0 <= degrees <= 180.0:
        return degrees
    return degrees - 360.0 * round(degrees / 360.0)


@dataclass(frozen=True)
class Coordinates:
    """Latitude and longitude of an observer, in degrees (east-positive longitude)."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        for name, value, limit in (
            ("latitude", self.latitude, 90.0),
            ("longitude", self.longitude, 180.0),
        ):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidCoordinates(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or not -limit <= value <= limit:
                raise InvalidCoordinates(
                    f"{name} must be within ±{limit:g} degrees, got {value!r}"
                )
        object.__setattr__(self, "latitude", float(self.latitude))
        object.__setattr__(self, "longitude", float(self.longitude))

    @classmethod
    def new(cls, latitude: float, longitude: float) -> "Coordinates":
        return cls(latitude, longitude)

    @property
    def latitude_radians(self) -> float:
        return math.radians(self.latitude)

    def with_latitude(self, latitude: float) -> "Coordinates":
        """Return the point at *latitude* on the same meridian."""

        return Coordinates(latitude, self.longitude)
