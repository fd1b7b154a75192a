"""Direction of the Kaaba from an observer."""

from __future__ import annotations

import math

from .coordinates import Coordinates, unwind_angle

__all__ = ["MAKKAH", "qiblah"]

MAKKAH = Coordinates(21.4225241, 39.8261818)


def qiblah(coordinates: Coordinates) -> float:
    """Initial great-circle bearing to the Kaaba, in degrees clockwise from true north."""

    phi = coordinates.latitude_radians
    delta_lambda = math.radians(MAKKAH.longitude - coordinates.longitude)
    term1 = math.sin(delta_lambda)
    term2 = math.cos(phi) * math.tan(MAKKAH.latitude_radians)
    term3 = math.sin(phi) * math.cos(delta_lambda)
    return unwind_angle(math.degrees(math.atan2(term1, term2 - term3)))
