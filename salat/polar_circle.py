"""Borrowing sunrise and sunset when the sun does not rise or set.

Inside the polar circles there are dates with no sunrise or no sunset at all,
so there is no night for the high-latitude rules to divide. The strategies
here find a nearby (date, place) where the day is regular; the schedule
computed there is then carried over to the requested date.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

import numpy as np

from .astro import SolarTime
from .config import PolarCircleResolution
from .coordinates import Coordinates

__all__ = [
    "LATITUDE_STEP",
    "MAX_DAY_OFFSET",
    "UMM_AL_QURA_LATITUDE",
    "BorrowedDay",
    "is_regular_day",
    "nearest_day",
    "nearest_place",
    "umm_al_qura",
    "resolve",
]

LOGGER = logging.getLogger(__name__)

# Half a year: past this the seasons repeat and the search cannot improve.
MAX_DAY_OFFSET = 183
LATITUDE_STEP = 0.5
UMM_AL_QURA_LATITUDE = 21.4225


@dataclass(frozen=True)
class BorrowedDay:
    """A regular day found near the requested one."""

    day: date
    coordinates: Coordinates
    solar_time: SolarTime
    tomorrow: SolarTime


def is_regular_day(solar_time: SolarTime, tomorrow: SolarTime) -> bool:
    """Sunrise and sunset happen, and the following night ends with a sunrise."""

    return solar_time.has_sunrise_and_sunset and tomorrow.sunrise is not None


def _regular_day(day: date, coordinates: Coordinates) -> Optional[BorrowedDay]:
    solar_time = SolarTime.compute(day, coordinates)
    if not solar_time.has_sunrise_and_sunset:
        return None
    tomorrow = SolarTime.compute(day + timedelta(days=1), coordinates)
    if not is_regular_day(solar_time, tomorrow):
        return None
    return BorrowedDay(day=day, coordinates=coordinates, solar_time=solar_time, tomorrow=tomorrow)


def nearest_day(
    day: date, coordinates: Coordinates, max_offset: int = MAX_DAY_OFFSET
) -> Optional[BorrowedDay]:
    """Closest regular date at the same place, trying +1, -1, +2, -2, ... days.

    Returns ``None`` when nothing is found within *max_offset* days.
    """

    for offset in range(1, max_offset + 1):
        for direction in (1, -1):
            found = _regular_day(day + timedelta(days=direction * offset), coordinates)
            if found is not None:
                return found
    return None


def _latitudes_toward_equator(latitude: float, step: float) -> Iterable[float]:
    count = int(math.floor(abs(latitude) / step))
    offsets = step * np.arange(1, count + 1)
    return (float(value) for value in math.copysign(1.0, latitude) * (abs(latitude) - offsets))


def nearest_place(
    day: date,
    coordinates: Coordinates,
    step: float = LATITUDE_STEP,
    max_steps: Optional[int] = None,
) -> Optional[BorrowedDay]:
    """Closest regular place on the same meridian, stepping *step* degrees toward the equator.

    The search stops at the equator, or after *max_steps* candidates.
    """

    if step <= 0:
        raise ValueError("step must be positive")
    for index, latitude in enumerate(_latitudes_toward_equator(coordinates.latitude, step)):
        if max_steps is not None and index >= max_steps:
            break
        found = _regular_day(day, coordinates.with_latitude(latitude))
        if found is not None:
            return found
    return None


def umm_al_qura(day: date, coordinates: Coordinates) -> Optional[BorrowedDay]:
    """The day at Makkah's latitude, kept on the local meridian."""

    return _regular_day(day, coordinates.with_latitude(UMM_AL_QURA_LATITUDE))


def resolve(
    day: date, coordinates: Coordinates, resolution: PolarCircleResolution
) -> Optional[BorrowedDay]:
    """Find a regular day for *resolution*; ``None`` means the times stay undefined."""

    if resolution is PolarCircleResolution.nearest_day:
        found = nearest_day(day, coordinates)
    elif resolution is PolarCircleResolution.nearest_place:
        found = nearest_place(day, coordinates)
    elif resolution is PolarCircleResolution.umm_al_qura:
        found = umm_al_qura(day, coordinates)
    else:
        found = None

    if found is None:
        LOGGER.debug(
            json.dumps(
                {
                    "event": "polar_circle_unresolved",
                    "resolution": resolution.value,
                    "date": day.isoformat(),
                    "lat": coordinates.latitude,
                    "lon": coordinates.longitude,
                }
            )
        )
        return None

    LOGGER.debug(
        json.dumps(
            {
                "event": "polar_circle_resolved",
                "resolution": resolution.value,
                "date": day.isoformat(),
                "borrowed_date": found.day.isoformat(),
                "borrowed_lat": found.coordinates.latitude,
            }
        )
    )
    return found
