"""Solar position and sun-angle crossing times.

The series below are the low-precision expressions from Meeus, *Astronomical
Algorithms* (chapters 12, 15, 22 and 25). They are accurate to well under a
minute of time for prayer scheduling purposes, which is all that is needed
here; nothing in this module depends on ephemeris files.

All crossing times are returned as fractional hours after 00:00 UTC of the
requested date. A crossing that does not occur on that date (the sun never
reaches the requested altitude) is reported as ``None``.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime, timedelta
from typing import Dict, Optional, Tuple

import erfa

from .coordinates import Coordinates, normalize, quadrant_shift, unwind_angle

__all__ = [
    "SOLAR_ALTITUDE_HORIZON",
    "SolarCoordinates",
    "SolarTime",
    "julian_day",
    "julian_century",
    "hours_to_datetime",
    "season_adjusted_morning_twilight",
    "season_adjusted_evening_twilight",
]

# Geometric altitude of the sun's centre at apparent sunrise/sunset:
# 34' of refraction plus 16' of solar semidiameter.
SOLAR_ALTITUDE_HORIZON = -50.0 / 60.0

# Sidereal rotation in degrees per day used by the transit corrections.
_SIDEREAL_RATE = 360.985647

# Seasonal twilight coefficients (minutes) for the Moonsighting Committee
# method: base value followed by the per-55-degree slopes for the four
# seasonal anchor points.
_SHAFAQ: Dict[str, Tuple[float, float, float, float, float]] = {
    "general": (75.0, 25.60, 2.050, -9.210, 6.140),
    "red": (62.0, 17.40, -7.160, 5.120, 19.44),
    "white": (75.0, 25.60, 7.160, 36.84, 81.84),
}
_MORNING_TWILIGHT = (75.0, 28.65, 19.44, 32.74, 48.10)


def julian_day(year: int, month: int, day: int, hours: float = 0.0) -> float:
    """Return the Julian day for a Gregorian calendar date at *hours* UTC."""

    djm0, djm = erfa.cal2jd(year, month, day)
    return float(djm0) + float(djm) + hours / 24.0


def julian_century(jd: float) -> float:
    """Julian centuries elapsed since J2000.0."""

    return (jd - erfa.DJ00) / erfa.DJC


def hours_to_datetime(day: date, hours: float) -> datetime:
    """Convert fractional hours after midnight UTC of *day* into an aware datetime."""

    midnight = datetime(day.year, day.month, day.day, tzinfo=UTC)
    return midnight + timedelta(seconds=hours * 3600.0)


# -- Meeus series -------------------------------------------------------------


def mean_solar_longitude(T: float) -> float:
    return unwind_angle(280.4664567 + 36000.76983 * T + 0.0003032 * T**2)


def mean_lunar_longitude(T: float) -> float:
    return unwind_angle(218.3165 + 481267.8813 * T)


def ascending_lunar_node_longitude(T: float) -> float:
    return unwind_angle(125.04452 - 1934.136261 * T + 0.0020708 * T**2 + T**3 / 450000.0)


def mean_solar_anomaly(T: float) -> float:
    return unwind_angle(357.52911 + 35999.05029 * T - 0.0001537 * T**2)


def solar_equation_of_the_center(T: float, M: float) -> float:
    m = math.radians(M)
    return (
        math.sin(m) * (1.914602 - 0.004817 * T - 0.000014 * T**2)
        + math.sin(2 * m) * (0.019993 - 0.000101 * T)
        + math.sin(3 * m) * 0.000289
    )


def apparent_solar_longitude(T: float, L0: float) -> float:
    """True longitude corrected for nutation and aberration (Meeus 25.8)."""

    longitude = L0 + solar_equation_of_the_center(T, mean_solar_anomaly(T))
    omega = 125.04 - 1934.136 * T
    return unwind_angle(longitude - 0.00569 - 0.00478 * math.sin(math.radians(omega)))


def mean_obliquity_of_the_ecliptic(T: float) -> float:
    return 23.439291 - 0.013004167 * T - 0.0000001639 * T**2 + 0.0000005036 * T**3


def apparent_obliquity_of_the_ecliptic(T: float, epsilon0: float) -> float:
    omega = 125.04 - 1934.136 * T
    return epsilon0 + 0.00256 * math.cos(math.radians(omega))


def mean_sidereal_time(T: float) -> float:
    """Mean sidereal time at Greenwich at 0h UT, in degrees (Meeus 12.4)."""

    jd = T * erfa.DJC + erfa.DJ00
    theta = (
        280.46061837
        + 360.98564736629 * (jd - erfa.DJ00)
        + 0.000387933 * T**2
        - T**3 / 38710000.0
    )
    return unwind_angle(theta)


def nutation_in_longitude(L0: float, Lp: float, omega: float) -> float:
    return (
        (-17.2 / 3600.0) * math.sin(math.radians(omega))
        - (1.32 / 3600.0) * math.sin(2 * math.radians(L0))
        - (0.23 / 3600.0) * math.sin(2 * math.radians(Lp))
        + (0.21 / 3600.0) * math.sin(2 * math.radians(omega))
    )


def nutation_in_obliquity(L0: float, Lp: float, omega: float) -> float:
    return (
        (9.2 / 3600.0) * math.cos(math.radians(omega))
        + (0.57 / 3600.0) * math.cos(2 * math.radians(L0))
        + (0.10 / 3600.0) * math.cos(2 * math.radians(Lp))
        - (0.09 / 3600.0) * math.cos(2 * math.radians(omega))
    )


def altitude_of_celestial_body(latitude: float, declination: float, hour_angle: float) -> float:
    phi = math.radians(latitude)
    delta = math.radians(declination)
    value = math.sin(phi) * math.sin(delta) + math.cos(phi) * math.cos(delta) * math.cos(
        math.radians(hour_angle)
    )
    return math.degrees(math.asin(max(-1.0, min(1.0, value))))


def interpolate(y2: float, y1: float, y3: float, n: float) -> float:
    """Three-point interpolation (Meeus 3.3); *y1*/*y3* are the previous/next values."""

    a = y2 - y1
    b = y3 - y2
    c = b - a
    return y2 + (n / 2.0) * (a + b + n * c)


def interpolate_angles(y2: float, y1: float, y3: float, n: float) -> float:
    """Like :func:`interpolate` but robust to the 360 degree wrap."""

    a = unwind_angle(y2 - y1)
    b = unwind_angle(y3 - y2)
    c = b - a
    return y2 + (n / 2.0) * (a + b + n * c)


@dataclass(frozen=True)
class SolarCoordinates:
    """Apparent solar coordinates at 0h UT of a Julian day."""

    declination: float
    right_ascension: float
    apparent_sidereal_time: float

    @classmethod
    def at(cls, jd: float) -> "SolarCoordinates":
        T = julian_century(jd)
        L0 = mean_solar_longitude(T)
        Lp = mean_lunar_longitude(T)
        omega = ascending_lunar_node_longitude(T)
        lam = math.radians(apparent_solar_longitude(T, L0))
        theta0 = mean_sidereal_time(T)
        delta_psi = nutation_in_longitude(L0, Lp, omega)
        delta_epsilon = nutation_in_obliquity(L0, Lp, omega)
        epsilon0 = mean_obliquity_of_the_ecliptic(T)
        epsilon_app = math.radians(apparent_obliquity_of_the_ecliptic(T, epsilon0))

        declination = math.degrees(math.asin(math.sin(epsilon_app) * math.sin(lam)))
        right_ascension = unwind_angle(
            math.degrees(math.atan2(math.cos(epsilon_app) * math.sin(lam), math.cos(lam)))
        )
        apparent_sidereal_time = theta0 + delta_psi * math.cos(
            math.radians(epsilon0 + delta_epsilon)
        )
        return cls(
            declination=declination,
            right_ascension=right_ascension,
            apparent_sidereal_time=apparent_sidereal_time,
        )


def approximate_transit(longitude: float, sidereal_time: float, right_ascension: float) -> float:
    """Fraction of the day at which the sun transits (Meeus 15.2)."""

    lw = -longitude
    return normalize((right_ascension + lw - sidereal_time) / 360.0, 1.0)


def corrected_transit(
    m0: float,
    longitude: float,
    sidereal_time: float,
    right_ascension: float,
    previous_right_ascension: float,
    next_right_ascension: float,
) -> float:
    """Transit time in hours after 0h UT, refined with interpolated coordinates."""

    lw = -longitude
    theta = unwind_angle(sidereal_time + _SIDEREAL_RATE * m0)
    alpha = unwind_angle(
        interpolate_angles(right_ascension, previous_right_ascension, next_right_ascension, m0)
    )
    hour_angle = quadrant_shift(theta - lw - alpha)
    return (m0 - hour_angle / 360.0) * 24.0


def corrected_hour_angle(
    m0: float,
    altitude: float,
    coordinates: Coordinates,
    after_transit: bool,
    sidereal_time: float,
    right_ascension: float,
    previous_right_ascension: float,
    next_right_ascension: float,
    declination: float,
    previous_declination: float,
    next_declination: float,
) -> Optional[float]:
    """Time in hours at which the sun reaches *altitude*, before or after transit.

    Returns ``None`` when ``cos(H0)`` falls outside ``[-1, 1]``: the sun never
    reaches *altitude* on that day (continuous day or night for that altitude).
    """

    lw = -coordinates.longitude
    phi = coordinates.latitude_radians
    delta = math.radians(declination)
    numerator = math.sin(math.radians(altitude)) - math.sin(phi) * math.sin(delta)
    denominator = math.cos(phi) * math.cos(delta)
    if denominator == 0.0:
        return None
    ratio = numerator / denominator
    if not -1.0 <= ratio <= 1.0:
        return None

    h0 = math.degrees(math.acos(ratio))
    m = m0 + h0 / 360.0 if after_transit else m0 - h0 / 360.0
    theta = unwind_angle(sidereal_time + _SIDEREAL_RATE * m)
    alpha = unwind_angle(
        interpolate_angles(right_ascension, previous_right_ascension, next_right_ascension, m)
    )
    interpolated_declination = interpolate(declination, previous_declination, next_declination, m)
    hour_angle = theta - lw - alpha
    h = altitude_of_celestial_body(coordinates.latitude, interpolated_declination, hour_angle)
    term = (
        360.0
        * math.cos(math.radians(interpolated_declination))
        * math.cos(phi)
        * math.sin(math.radians(hour_angle))
    )
    if term == 0.0:
        return m * 24.0
    return (m + (h - altitude) / term) * 24.0


@dataclass(frozen=True)
class SolarTime:
    """Transit, sunrise and sunset of one UTC date at one location.

    Use :meth:`compute` to build an instance; times are hours after 0h UTC.
    """

    day: date
    coordinates: Coordinates
    solar: SolarCoordinates
    previous: SolarCoordinates
    next: SolarCoordinates
    approximate_transit: float
    transit: float
    sunrise: Optional[float]
    sunset: Optional[float]

    @classmethod
    def compute(cls, day: date, coordinates: Coordinates) -> "SolarTime":
        jd = julian_day(day.year, day.month, day.day)
        solar = SolarCoordinates.at(jd)
        previous = SolarCoordinates.at(jd - 1.0)
        following = SolarCoordinates.at(jd + 1.0)
        m0 = approximate_transit(
            coordinates.longitude, solar.apparent_sidereal_time, solar.right_ascension
        )
        transit = corrected_transit(
            m0,
            coordinates.longitude,
            solar.apparent_sidereal_time,
            solar.right_ascension,
            previous.right_ascension,
            following.right_ascension,
        )
        partial = cls(
            day=day,
            coordinates=coordinates,
            solar=solar,
            previous=previous,
            next=following,
            approximate_transit=m0,
            transit=transit,
            sunrise=None,
            sunset=None,
        )
        return replace(
            partial,
            sunrise=partial.time_for_solar_angle(SOLAR_ALTITUDE_HORIZON, after_transit=False),
            sunset=partial.time_for_solar_angle(SOLAR_ALTITUDE_HORIZON, after_transit=True),
        )

    @property
    def has_sunrise_and_sunset(self) -> bool:
        return self.sunrise is not None and self.sunset is not None

    def time_for_solar_angle(self, angle: float, after_transit: bool) -> Optional[float]:
        """Hours at which the sun's altitude equals *angle* (negative below the horizon)."""

        return corrected_hour_angle(
            self.approximate_transit,
            angle,
            self.coordinates,
            after_transit,
            self.solar.apparent_sidereal_time,
            self.solar.right_ascension,
            self.previous.right_ascension,
            self.next.right_ascension,
            self.solar.declination,
            self.previous.declination,
            self.next.declination,
        )

    def afternoon(self, shadow_length: float) -> Optional[float]:
        """Hours at which an object's shadow is *shadow_length* times its height
        plus its noon shadow."""

        tangent = abs(self.coordinates.latitude - self.solar.declination)
        inverse = shadow_length + math.tan(math.radians(tangent))
        angle = math.degrees(math.atan(1.0 / inverse))
        return self.time_for_solar_angle(angle, after_transit=True)

    def to_datetime(self, hours: Optional[float]) -> Optional[datetime]:
        if hours is None:
            return None
        return hours_to_datetime(self.day, hours)


# -- Moonsighting Committee seasonal twilight --------------------------------


def days_since_solstice(day_of_year: int, year: int, latitude: float) -> int:
    days_in_year = 366 if calendar.isleap(year) else 365
    if latitude >= 0:
        days = day_of_year + 10
        if days >= days_in_year:
            days -= days_in_year
    else:
        days = day_of_year - (173 if calendar.isleap(year) else 172)
        if days < 0:
            days += days_in_year
    return days


def _seasonal_minutes(coefficients: Tuple[float, float, float, float, float], latitude: float, dyy: int) -> float:
    base, slope_a, slope_b, slope_c, slope_d = coefficients
    lat = abs(latitude)
    a = base + slope_a / 55.0 * lat
    b = base + slope_b / 55.0 * lat
    c = base + slope_c / 55.0 * lat
    d = base + slope_d / 55.0 * lat
    if dyy < 91:
        return a + (b - a) / 91.0 * dyy
    if dyy < 137:
        return b + (c - b) / 46.0 * (dyy - 91)
    if dyy < 183:
        return c + (d - c) / 46.0 * (dyy - 137)
    if dyy < 229:
        return d + (c - d) / 46.0 * (dyy - 183)
    if dyy < 275:
        return c + (b - c) / 46.0 * (dyy - 229)
    return b + (a - b) / 91.0 * (dyy - 275)


def season_adjusted_morning_twilight(
    latitude: float, day_of_year: int, year: int, sunrise: datetime
) -> datetime:
    """Earliest acceptable Fajr under the Moonsighting Committee seasonal model."""

    minutes = _seasonal_minutes(
        _MORNING_TWILIGHT, latitude, days_since_solstice(day_of_year, year, latitude)
    )
    return sunrise - timedelta(seconds=round(minutes * 60.0))


def season_adjusted_evening_twilight(
    latitude: float,
    day_of_year: int,
    year: int,
    sunset: datetime,
    shafaq: str = "general",
) -> datetime:
    """Latest acceptable Isha under the Moonsighting Committee seasonal model.

    *shafaq* selects the twilight table: ``general``, ``red`` (ahmer) or
    ``white`` (abyad).
    """

    try:
        coefficients = _SHAFAQ[shafaq]
    except KeyError as exc:
        raise ValueError(f"Unsupported shafaq selector: {shafaq}") from exc
    minutes = _seasonal_minutes(
        coefficients, latitude, days_since_solstice(day_of_year, year, latitude)
    )
    return sunset + timedelta(seconds=round(minutes * 60.0))
