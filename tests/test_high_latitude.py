from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from salat import Coordinates, HighLatitudeRule, Method, Parameters, Resolution
from salat.high_latitude import is_high_latitude, resolve_fajr, resolve_isha, safe_fajr, safe_isha

DAY = date(2022, 6, 21)
SUNRISE = datetime(2022, 6, 21, 3, 0, tzinfo=UTC)
SUNSET = datetime(2022, 6, 21, 21, 0, tzinfo=UTC)
NIGHT = timedelta(hours=6)


def _params(rule: HighLatitudeRule) -> Parameters:
    return Parameters.with_method(Method.muslim_world_league, high_latitude_rule=rule)


@pytest.mark.parametrize(
    "latitude, method, expected",
    [
        (48.0, None, True),
        (47.9, None, False),
        (-50.0, None, True),
        (50.0, Method.moonsighting_committee, False),
        (-55.0, Method.moonsighting_committee, True),
    ],
)
def test_is_high_latitude(latitude, method, expected):
    assert is_high_latitude(Coordinates(latitude, 0.0), method) is expected


def test_safe_bounds_follow_rule():
    coords = Coordinates(60.0, 10.0)
    middle = _params(HighLatitudeRule.middle_of_the_night)
    assert safe_fajr(SUNRISE, NIGHT, coords, middle, DAY) == SUNRISE - timedelta(hours=3)
    assert safe_isha(SUNSET, NIGHT, coords, middle, DAY) == SUNSET + timedelta(hours=3)

    angle = _params(HighLatitudeRule.twilight_angle)
    assert safe_fajr(SUNRISE, NIGHT, coords, angle, DAY) == SUNRISE - NIGHT * (18.0 / 60.0)
    assert safe_isha(SUNSET, NIGHT, coords, angle, DAY) == SUNSET + NIGHT * (17.0 / 60.0)


def test_absent_times_filled_at_any_latitude():
    coords = Coordinates(30.0, 10.0)
    params = _params(HighLatitudeRule.middle_of_the_night)
    fajr, fajr_resolution = resolve_fajr(None, SUNRISE, NIGHT, coords, params, DAY)
    isha, isha_resolution = resolve_isha(None, SUNSET, NIGHT, coords, params, DAY)
    assert fajr == SUNRISE - timedelta(hours=3)
    assert isha == SUNSET + timedelta(hours=3)
    assert fajr_resolution is Resolution.high_latitude_rule
    assert isha_resolution is Resolution.high_latitude_rule


def test_overshooting_times_clamped_at_high_latitude():
    params = _params(HighLatitudeRule.seventh_of_the_night)
    early_fajr = SUNRISE - timedelta(hours=4)
    late_isha = SUNSET + timedelta(hours=4)

    high = Coordinates(60.0, 10.0)
    fajr, resolution = resolve_fajr(early_fajr, SUNRISE, NIGHT, high, params, DAY)
    assert fajr == SUNRISE - NIGHT / 7
    assert resolution is Resolution.high_latitude_rule
    isha, resolution = resolve_isha(late_isha, SUNSET, NIGHT, high, params, DAY)
    assert isha == SUNSET + NIGHT / 7
    assert resolution is Resolution.high_latitude_rule


def test_overshooting_times_kept_below_threshold():
    params = _params(HighLatitudeRule.seventh_of_the_night)
    early_fajr = SUNRISE - timedelta(hours=4)
    low = Coordinates(40.0, 10.0)
    fajr, resolution = resolve_fajr(early_fajr, SUNRISE, NIGHT, low, params, DAY)
    assert fajr == early_fajr
    assert resolution is Resolution.normal


def test_times_within_bound_untouched():
    params = _params(HighLatitudeRule.middle_of_the_night)
    coords = Coordinates(60.0, 10.0)
    fajr = SUNRISE - timedelta(hours=1)
    assert resolve_fajr(fajr, SUNRISE, NIGHT, coords, params, DAY) == (fajr, Resolution.normal)


def test_moonsighting_committee_uses_seventh_above_55():
    params = Method.moonsighting_committee.parameters()
    coords = Coordinates(56.0, 0.0)
    night = timedelta(hours=7)
    fajr, fajr_resolution = resolve_fajr(
        SUNRISE - timedelta(hours=2), SUNRISE, night, coords, params, DAY
    )
    isha, isha_resolution = resolve_isha(
        SUNSET + timedelta(hours=2), SUNSET, night, coords, params, DAY
    )
    assert fajr == SUNRISE - timedelta(hours=1)
    assert isha == SUNSET + timedelta(hours=1)
    assert fajr_resolution is Resolution.high_latitude_rule
    assert isha_resolution is Resolution.high_latitude_rule


def test_moonsighting_committee_seasonal_bound_below_55():
    params = Method.moonsighting_committee.parameters()
    coords = Coordinates(0.0, 0.0)
    day = date(2022, 3, 1)
    sunset = datetime(2022, 3, 1, 18, 0, tzinfo=UTC)
    isha, resolution = resolve_isha(None, sunset, timedelta(hours=12), coords, params, day)
    assert isha == sunset + timedelta(minutes=62)
    assert resolution is Resolution.high_latitude_rule
