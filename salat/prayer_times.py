"""Daily prayer schedule: the single entry point of the engine."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Optional, Union

from . import high_latitude, polar_circle
from .astro import SolarTime
from .config import Parameters, Prayer, Resolution
from .coordinates import Coordinates

__all__ = ["CivilDate", "PrayerTimes"]

LOGGER = logging.getLogger(__name__)

_CHRONOLOGICAL = (
    Prayer.fajr,
    Prayer.sunrise,
    Prayer.dhuhr,
    Prayer.asr,
    Prayer.maghrib,
    Prayer.isha,
    Prayer.middle_of_the_night,
    Prayer.qiyam,
    Prayer.fajr_tomorrow,
)


@dataclass(frozen=True)
class CivilDate:
    """A calendar date as seen by the caller, with the caller's UTC offset.

    The offset does not take part in the computation; it is only used to
    express the resulting UTC instants in local time.
    """

    day: date
    utc_offset: timedelta = timedelta(0)

    def __post_init__(self) -> None:
        if isinstance(self.day, datetime) or not isinstance(self.day, date):
            raise TypeError(f"day must be a datetime.date, got {self.day!r}")
        if not timedelta(hours=-24) < self.utc_offset < timedelta(hours=24):
            raise ValueError("utc_offset must be strictly within ±24 hours")

    @classmethod
    def coerce(cls, value: Union["CivilDate", date, datetime]) -> "CivilDate":
        if isinstance(value, CivilDate):
            return value
        if isinstance(value, datetime):
            offset = value.utcoffset() if value.tzinfo is not None else None
            return cls(value.date(), offset or timedelta(0))
        if isinstance(value, date):
            return cls(value)
        raise TypeError(f"Expected a date or CivilDate, got {value!r}")

    @property
    def tzinfo(self) -> timezone:
        return timezone(self.utc_offset)

    def localize(self, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return value.astimezone(self.tzinfo)


def _nearest_minute(value: datetime) -> datetime:
    floored = value.replace(second=0, microsecond=0)
    if value - floored >= timedelta(seconds=30):
        return floored + timedelta(minutes=1)
    return floored


@dataclass(frozen=True)
class _Schedule:
    """The six daily times before rounding and adjustments."""

    times: Dict[Prayer, Optional[datetime]]
    resolutions: Dict[Prayer, Resolution]

    def shifted(self, delta: timedelta, resolution: Resolution) -> "_Schedule":
        return _Schedule(
            times={p: (t + delta if t is not None else None) for p, t in self.times.items()},
            resolutions={p: resolution for p in self.times},
        )

    def finalized(self, parameters: Parameters) -> "_Schedule":
        times: Dict[Prayer, Optional[datetime]] = {}
        for prayer, value in self.times.items():
            if value is None:
                times[prayer] = None
                continue
            times[prayer] = _nearest_minute(value) + timedelta(
                minutes=parameters.time_adjustment(prayer)
            )
        return _Schedule(times=times, resolutions=dict(self.resolutions))


def _regular_schedule(
    day: date,
    solar_time: SolarTime,
    tomorrow: SolarTime,
    coordinates: Coordinates,
    parameters: Parameters,
) -> _Schedule:
    """Schedule for a day with a sunrise, a sunset and a following sunrise."""

    sunrise = solar_time.to_datetime(solar_time.sunrise)
    sunset = solar_time.to_datetime(solar_time.sunset)
    night = tomorrow.to_datetime(tomorrow.sunrise) - sunset
    resolutions = {prayer: Resolution.normal for prayer in Prayer.daily()}

    fajr = solar_time.to_datetime(
        solar_time.time_for_solar_angle(-parameters.fajr_angle, after_transit=False)
    )
    fajr, resolutions[Prayer.fajr] = high_latitude.resolve_fajr(
        fajr, sunrise, night, coordinates, parameters, day
    )

    if parameters.isha_interval > 0:
        isha = sunset + timedelta(minutes=parameters.isha_interval)
    else:
        isha = solar_time.to_datetime(
            solar_time.time_for_solar_angle(-parameters.isha_angle, after_transit=True)
        )
        isha, resolutions[Prayer.isha] = high_latitude.resolve_isha(
            isha, sunset, night, coordinates, parameters, day
        )

    asr = solar_time.to_datetime(solar_time.afternoon(parameters.madhab.shadow_length_ratio))
    if asr is None:
        resolutions[Prayer.asr] = Resolution.unresolved

    return _Schedule(
        times={
            Prayer.fajr: fajr,
            Prayer.sunrise: sunrise,
            Prayer.dhuhr: solar_time.to_datetime(solar_time.transit),
            Prayer.asr: asr,
            Prayer.maghrib: sunset,
            Prayer.isha: isha,
        },
        resolutions=resolutions,
    )


def _polar_schedule(
    day: date, solar_time: SolarTime, coordinates: Coordinates, parameters: Parameters
) -> _Schedule:
    """Schedule for a day without sunrise or sunset; Dhuhr always stays local."""

    dhuhr = solar_time.to_datetime(solar_time.transit)
    borrowed = polar_circle.resolve(day, coordinates, parameters.polar_circle_resolution)

    if borrowed is None:
        asr = solar_time.to_datetime(solar_time.afternoon(parameters.madhab.shadow_length_ratio))
        times: Dict[Prayer, Optional[datetime]] = {prayer: None for prayer in Prayer.daily()}
        resolutions = {prayer: Resolution.unresolved for prayer in Prayer.daily()}
        # Crossings that do happen are still reported; only the night is missing.
        for prayer, value in (
            (Prayer.sunrise, solar_time.to_datetime(solar_time.sunrise)),
            (Prayer.dhuhr, dhuhr),
            (Prayer.asr, asr),
            (Prayer.maghrib, solar_time.to_datetime(solar_time.sunset)),
        ):
            if value is not None:
                times[prayer] = value
                resolutions[prayer] = Resolution.normal
        return _Schedule(times=times, resolutions=resolutions)

    schedule = _regular_schedule(
        borrowed.day,
        borrowed.solar_time,
        borrowed.tomorrow,
        borrowed.coordinates,
        parameters,
    ).shifted(day - borrowed.day, Resolution.polar_circle)
    schedule.times[Prayer.dhuhr] = dhuhr
    schedule.resolutions[Prayer.dhuhr] = Resolution.normal
    return schedule


def _daily_schedule(day: date, coordinates: Coordinates, parameters: Parameters) -> _Schedule:
    solar_time = SolarTime.compute(day, coordinates)
    tomorrow = SolarTime.compute(day + timedelta(days=1), coordinates)
    if polar_circle.is_regular_day(solar_time, tomorrow):
        schedule = _regular_schedule(day, solar_time, tomorrow, coordinates, parameters)
    else:
        schedule = _polar_schedule(day, solar_time, coordinates, parameters)
    return schedule.finalized(parameters)


def _night_marker(start: Optional[datetime], end: Optional[datetime], fraction: float) -> Optional[datetime]:
    if start is None or end is None:
        return None
    return _nearest_minute(start + (end - start) * fraction)


@dataclass(frozen=True)
class PrayerTimes:
    """Prayer times of one date at one place.

    Every time is an aware UTC datetime rounded to the minute, or ``None``
    when it cannot be determined (sun never rises or sets and the polar
    circle resolution is ``unresolved``). ``resolutions`` records how each
    time was obtained.
    """

    date: CivilDate
    coordinates: Coordinates
    parameters: Parameters
    fajr: Optional[datetime]
    sunrise: Optional[datetime]
    dhuhr: Optional[datetime]
    asr: Optional[datetime]
    maghrib: Optional[datetime]
    isha: Optional[datetime]
    middle_of_the_night: Optional[datetime]
    qiyam: Optional[datetime]
    fajr_tomorrow: Optional[datetime]
    resolutions: Dict[Prayer, Resolution] = field(default_factory=dict, compare=False)

    @classmethod
    def compute(
        cls,
        date: Union[CivilDate, datetime, date],
        coordinates: Coordinates,
        parameters: Optional[Parameters] = None,
    ) -> "PrayerTimes":
        """Compute the schedule for *date* at *coordinates*.

        *date* is a calendar date (or a :class:`CivilDate` carrying the
        caller's UTC offset). *parameters* defaults to
        ``Parameters()`` with no twilight angles, which is rarely what you
        want; prefer :meth:`Parameters.with_method`.
        """

        civil = CivilDate.coerce(date)
        if not isinstance(coordinates, Coordinates):
            raise TypeError(f"coordinates must be Coordinates, got {coordinates!r}")
        parameters = parameters if parameters is not None else Parameters()

        today = _daily_schedule(civil.day, coordinates, parameters)
        tomorrow = _daily_schedule(civil.day + timedelta(days=1), coordinates, parameters)

        times = dict(today.times)
        resolutions = dict(today.resolutions)
        times[Prayer.fajr_tomorrow] = tomorrow.times[Prayer.fajr]
        resolutions[Prayer.fajr_tomorrow] = tomorrow.resolutions[Prayer.fajr]
        for prayer, fraction in ((Prayer.middle_of_the_night, 1.0 / 2.0), (Prayer.qiyam, 2.0 / 3.0)):
            times[prayer] = _night_marker(times[Prayer.maghrib], times[Prayer.fajr_tomorrow], fraction)
            resolutions[prayer] = Resolution.normal if times[prayer] is not None else Resolution.unresolved

        LOGGER.debug(
            json.dumps(
                {
                    "event": "prayer_times_computed",
                    "date": civil.day.isoformat(),
                    "lat": coordinates.latitude,
                    "lon": coordinates.longitude,
                    "method": parameters.method.value,
                    "resolutions": {p.value: r.value for p, r in resolutions.items()},
                }
            )
        )

        return cls(
            date=civil,
            coordinates=coordinates,
            parameters=parameters,
            resolutions=resolutions,
            **{prayer.value: times[prayer] for prayer in _CHRONOLOGICAL},
        )

    def time_for(self, prayer: Prayer) -> Optional[datetime]:
        return getattr(self, Prayer(prayer).value)

    def resolution(self, prayer: Prayer) -> Resolution:
        return self.resolutions.get(Prayer(prayer), Resolution.unresolved)

    def local(self, prayer: Prayer) -> Optional[datetime]:
        """The time of *prayer* at the caller's UTC offset."""

        return self.date.localize(self.time_for(prayer))

    def is_complete(self) -> bool:
        """All six daily times are defined."""

        return all(self.time_for(prayer) is not None for prayer in Prayer.daily())

    def current_prayer(self, at: datetime) -> Optional[Prayer]:
        """The last prayer that started at or before *at*, or ``None`` before Fajr."""

        if at.tzinfo is None:
            raise ValueError("at must be timezone-aware")
        current: Optional[Prayer] = None
        for prayer in _CHRONOLOGICAL:
            value = self.time_for(prayer)
            if value is not None and value <= at:
                current = prayer
        return current

    def next_prayer(self, at: datetime) -> Optional[Prayer]:
        """The first prayer starting after *at*, or ``None`` after tomorrow's Fajr."""

        if at.tzinfo is None:
            raise ValueError("at must be timezone-aware")
        for prayer in _CHRONOLOGICAL:
            value = self.time_for(prayer)
            if value is not None and value > at:
                return prayer
        return None
