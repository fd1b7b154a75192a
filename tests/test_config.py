from __future__ import annotations

import math

import pytest

from salat import (
    Adjustments,
    Coordinates,
    HighLatitudeRule,
    InvalidCoordinates,
    InvalidParameters,
    Madhab,
    Method,
    Parameters,
    PolarCircleResolution,
    Prayer,
)


def test_muslim_world_league_preset():
    params = Method.muslim_world_league.parameters()
    assert params.method is Method.muslim_world_league
    assert params.fajr_angle == 18.0
    assert params.isha_angle == 17.0
    assert params.isha_interval == 0
    assert params.method_adjustments == Adjustments(dhuhr=1)


@pytest.mark.parametrize(
    "method, fajr, isha, interval",
    [
        (Method.egyptian, 19.5, 17.5, 0),
        (Method.karachi, 18.0, 18.0, 0),
        (Method.umm_al_qura, 18.5, 0.0, 90),
        (Method.dubai, 18.2, 18.2, 0),
        (Method.qatar, 18.0, 0.0, 90),
        (Method.kuwait, 18.0, 17.5, 0),
        (Method.moonsighting_committee, 18.0, 18.0, 0),
        (Method.singapore, 20.0, 18.0, 0),
        (Method.north_america, 15.0, 15.0, 0),
        (Method.other, 0.0, 0.0, 0),
    ],
)
def test_method_presets(method, fajr, isha, interval):
    params = method.parameters()
    assert (params.fajr_angle, params.isha_angle, params.isha_interval) == (fajr, isha, interval)


def test_moonsighting_committee_preset_rule():
    params = Method.moonsighting_committee.parameters()
    assert params.high_latitude_rule is HighLatitudeRule.seventh_of_the_night
    assert params.method_adjustments == Adjustments(dhuhr=5, maghrib=3)


def test_with_method_applies_overrides():
    params = Parameters.with_method(
        Method.north_america,
        Madhab.hanafi,
        fajr_angle=17.5,
        polar_circle_resolution="nearest_day",
    )
    assert params.madhab is Madhab.hanafi
    assert params.fajr_angle == 17.5
    assert params.isha_angle == 15.0
    assert params.polar_circle_resolution is PolarCircleResolution.nearest_day


def test_replace_rejects_unknown_names():
    with pytest.raises(InvalidParameters):
        Method.karachi.parameters().replace(asr_angle=12)


@pytest.mark.parametrize(
    "changes",
    [
        {"fajr_angle": 90.0},
        {"fajr_angle": -1.0},
        {"isha_angle": math.nan},
        {"isha_angle": "18"},
        {"isha_interval": -5},
        {"isha_interval": 1.5},
        {"isha_interval": True},
        {"madhab": "maliki"},
        {"high_latitude_rule": "quarter_of_the_night"},
        {"adjustments": {"witr": 3}},
        {"adjustments": 5},
    ],
)
def test_invalid_parameters(changes):
    with pytest.raises(InvalidParameters):
        Parameters(**changes)


def test_invalid_parameters_are_value_errors():
    with pytest.raises(ValueError):
        Parameters(fajr_angle=120.0)


def test_parameters_coerce_strings():
    params = Parameters(method="egyptian", madhab="hanafi", twilight="white", adjustments={"asr": 2})
    assert params.method is Method.egyptian
    assert params.madhab is Madhab.hanafi
    assert params.adjustments == Adjustments(asr=2)


def test_night_portions():
    params = Method.muslim_world_league.parameters()
    assert params.night_portions() == pytest.approx((18.0 / 60.0, 17.0 / 60.0))
    assert params.replace(high_latitude_rule=HighLatitudeRule.middle_of_the_night).night_portions() == (
        0.5,
        0.5,
    )
    assert params.replace(
        high_latitude_rule=HighLatitudeRule.seventh_of_the_night
    ).night_portions() == pytest.approx((1.0 / 7.0, 1.0 / 7.0))


def test_time_adjustment_sums_user_and_method():
    params = Parameters.with_method(Method.dubai, adjustments=Adjustments(maghrib=2, isha=-4))
    assert params.time_adjustment(Prayer.maghrib) == 5
    assert params.time_adjustment(Prayer.sunrise) == -3
    assert params.time_adjustment(Prayer.isha) == -4
    assert params.time_adjustment(Prayer.fajr) == 0
    assert params.time_adjustment(Prayer.middle_of_the_night) == 0


def test_adjustments_validation():
    with pytest.raises(InvalidParameters):
        Adjustments(fajr=1.5)
    with pytest.raises(InvalidParameters):
        Adjustments.from_mapping({"tahajjud": 1})
    assert Adjustments(fajr=2) + Adjustments(fajr=-1, isha=3) == Adjustments(fajr=1, isha=3)


def test_madhab_shadow_ratio():
    assert Madhab.shafi.shadow_length_ratio == 1
    assert Madhab.hanafi.shadow_length_ratio == 2


def test_recommended_rule():
    assert HighLatitudeRule.recommended(Coordinates(60.0, 10.0)) is HighLatitudeRule.twilight_angle
    assert HighLatitudeRule.recommended(Coordinates(0.0, 0.0)) is HighLatitudeRule.twilight_angle


@pytest.mark.parametrize(
    "latitude, longitude",
    [(91.0, 0.0), (-90.5, 0.0), (0.0, 180.5), (math.nan, 0.0), (0.0, math.inf), (True, 0.0), ("1", 0.0)],
)
def test_invalid_coordinates(latitude, longitude):
    with pytest.raises(InvalidCoordinates):
        Coordinates(latitude, longitude)


def test_coordinates_bounds_are_inclusive():
    assert Coordinates.new(90, -180).latitude == 90.0
    assert Coordinates(-90.0, 180.0).with_latitude(10.0) == Coordinates(10.0, 180.0)
