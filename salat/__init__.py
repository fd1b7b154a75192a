"""Prayer-time computation from solar position and regional conventions."""

from .astro import SolarTime
from .config import (
    Adjustments,
    HighLatitudeRule,
    InvalidParameters,
    Madhab,
    Method,
    Parameters,
    PolarCircleResolution,
    Prayer,
    Resolution,
    Twilight,
)
from .coordinates import Coordinates, InvalidCoordinates
from .prayer_times import CivilDate, PrayerTimes
from .qiblah import qiblah

__version__ = "1.0.0"

__all__ = [
    "Adjustments",
    "CivilDate",
    "Coordinates",
    "HighLatitudeRule",
    "InvalidCoordinates",
    "InvalidParameters",
    "Madhab",
    "Method",
    "Parameters",
    "PolarCircleResolution",
    "Prayer",
    "PrayerTimes",
    "Resolution",
    "SolarTime",
    "Twilight",
    "qiblah",
]
