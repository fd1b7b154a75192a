"""Fajr and Isha bounds for high latitudes.

Above roughly 48 degrees the astronomical twilight lasts so long in summer
that Fajr and Isha close in on each other, or never happen at all. The rules
here bound both by a portion of the night (sunset to the next sunrise):
an absent time is replaced by its bound at any latitude, and a present time
that overshoots its bound is pulled back to it at high latitudes only.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from .astro import season_adjusted_evening_twilight, season_adjusted_morning_twilight
from .config import Method, Parameters, Resolution
from .coordinates import Coordinates

__all__ = [
    "HIGH_LATITUDE_THRESHOLD",
    "MOONSIGHTING_COMMITTEE_HIGH_LATITUDE",
    "is_high_latitude",
    "safe_fajr",
    "safe_isha",
    "resolve_fajr",
    "resolve_isha",
]

LOGGER = logging.getLogger(__name__)

HIGH_LATITUDE_THRESHOLD = 48.0
MOONSIGHTING_COMMITTEE_HIGH_LATITUDE = 55.0


def is_high_latitude(coordinates: Coordinates, method: Optional[Method] = None) -> bool:
    """Whether *coordinates* lie far enough from the equator for clamping to apply."""

    if method is Method.moonsighting_committee:
        return abs(coordinates.latitude) >= MOONSIGHTING_COMMITTEE_HIGH_LATITUDE
    return abs(coordinates.latitude) >= HIGH_LATITUDE_THRESHOLD


def safe_fajr(
    sunrise: datetime,
    night: timedelta,
    coordinates: Coordinates,
    parameters: Parameters,
    day: date,
) -> datetime:
    """Earliest Fajr allowed by the configured rule."""

    if parameters.method is Method.moonsighting_committee:
        return season_adjusted_morning_twilight(
            coordinates.latitude, day.timetuple().tm_yday, day.year, sunrise
        )
    portion, _ = parameters.night_portions()
    return sunrise - night * portion


def safe_isha(
    sunset: datetime,
    night: timedelta,
    coordinates: Coordinates,
    parameters: Parameters,
    day: date,
) -> datetime:
    """Latest Isha allowed by the configured rule."""

    if parameters.method is Method.moonsighting_committee:
        return season_adjusted_evening_twilight(
            coordinates.latitude,
            day.timetuple().tm_yday,
            day.year,
            sunset,
            shafaq=parameters.twilight.value,
        )
    _, portion = parameters.night_portions()
    return sunset + night * portion


def _log(prayer: str, reason: str, parameters: Parameters, coordinates: Coordinates, value: datetime) -> None:
    LOGGER.debug(
        json.dumps(
            {
                "event": "high_latitude_resolved",
                "prayer": prayer,
                "reason": reason,
                "rule": parameters.high_latitude_rule.value,
                "method": parameters.method.value,
                "lat": coordinates.latitude,
                "time": value.isoformat(),
            }
        )
    )


def resolve_fajr(
    fajr: Optional[datetime],
    sunrise: datetime,
    night: timedelta,
    coordinates: Coordinates,
    parameters: Parameters,
    day: date,
) -> Tuple[datetime, Resolution]:
    """Fill or clamp an angle-based Fajr; returns the time and how it was obtained."""

    resolution = Resolution.normal
    if parameters.method is Method.moonsighting_committee and is_high_latitude(
        coordinates, parameters.method
    ):
        fajr = sunrise - night / 7
        resolution = Resolution.high_latitude_rule
        _log("fajr", "seventh_of_the_night", parameters, coordinates, fajr)

    bound = safe_fajr(sunrise, night, coordinates, parameters, day)
    if fajr is None:
        _log("fajr", "absent", parameters, coordinates, bound)
        return bound, Resolution.high_latitude_rule
    if is_high_latitude(coordinates) and fajr < bound:
        _log("fajr", "clamped", parameters, coordinates, bound)
        return bound, Resolution.high_latitude_rule
    return fajr, resolution


def resolve_isha(
    isha: Optional[datetime],
    sunset: datetime,
    night: timedelta,
    coordinates: Coordinates,
    parameters: Parameters,
    day: date,
) -> Tuple[datetime, Resolution]:
    """Fill or clamp an angle-based Isha; interval-based Isha never reaches here."""

    resolution = Resolution.normal
    if parameters.method is Method.moonsighting_committee and is_high_latitude(
        coordinates, parameters.method
    ):
        isha = sunset + night / 7
        resolution = Resolution.high_latitude_rule
        _log("isha", "seventh_of_the_night", parameters, coordinates, isha)

    bound = safe_isha(sunset, night, coordinates, parameters, day)
    if isha is None:
        _log("isha", "absent", parameters, coordinates, bound)
        return bound, Resolution.high_latitude_rule
    if is_high_latitude(coordinates) and isha > bound:
        _log("isha", "clamped", parameters, coordinates, bound)
        return bound, Resolution.high_latitude_rule
    return isha, resolution
