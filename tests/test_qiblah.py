from __future__ import annotations

import pytest

from salat import Coordinates, qiblah


@pytest.mark.parametrize(
    "latitude, longitude, expected",
    [
        (40.7128, -74.0059, 58.4817),
        (38.9072, -77.0369, 56.5601),
        (37.7749, -122.4194, 18.8438),
        (-33.8688, 151.2093, 277.4996),
        (36.8065, 10.1815, 112.65),
    ],
)
def test_known_bearings(latitude, longitude, expected):
    assert qiblah(Coordinates(latitude, longitude)) == pytest.approx(expected, abs=0.1)


def test_bearing_range():
    for latitude in (-60.0, 0.0, 60.0):
        for longitude in (-170.0, -40.0, 0.0, 39.0, 120.0):
            bearing = qiblah(Coordinates(latitude, longitude))
            assert 0.0 <= bearing < 360.0
