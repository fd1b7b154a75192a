"""Calculation conventions: methods, madhab, fallback rules and parameters."""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple

from .coordinates import Coordinates

__all__ = [
    "Adjustments",
    "HighLatitudeRule",
    "InvalidParameters",
    "Madhab",
    "Method",
    "Parameters",
    "PolarCircleResolution",
    "Prayer",
    "Resolution",
    "Twilight",
]


class InvalidParameters(ValueError):
    """Raised when a calculation parameter is out of range or of the wrong kind."""


class Prayer(str, Enum):
    """The six daily times plus the derived night markers."""

    fajr = "fajr"
    sunrise = "sunrise"
    dhuhr = "dhuhr"
    asr = "asr"
    maghrib = "maghrib"
    isha = "isha"
    middle_of_the_night = "middle_of_the_night"
    qiyam = "qiyam"
    fajr_tomorrow = "fajr_tomorrow"

    @classmethod
    def daily(cls) -> Tuple["Prayer", ...]:
        return (cls.fajr, cls.sunrise, cls.dhuhr, cls.asr, cls.maghrib, cls.isha)


class Madhab(str, Enum):
    """Jurisprudential school; only changes the Asr shadow ratio."""

    shafi = "shafi"
    hanafi = "hanafi"

    @property
    def shadow_length_ratio(self) -> int:
        return 2 if self is Madhab.hanafi else 1


class Twilight(str, Enum):
    """Which shafaq bounds Isha in the seasonal (Moonsighting Committee) model.

    Abu Hanifa read the texts as the white twilight; the other schools, and
    his students Abu Yusuf and Muhammad, as the red one.
    """

    red = "red"
    white = "white"


class HighLatitudeRule(str, Enum):
    """How much of the night Fajr and Isha may claim at high latitudes."""

    middle_of_the_night = "middle_of_the_night"
    seventh_of_the_night = "seventh_of_the_night"
    twilight_angle = "twilight_angle"

    @classmethod
    def recommended(cls, coordinates: Coordinates) -> "HighLatitudeRule":
        """Rule to use when the caller has no preference; currently the same everywhere."""

        return cls.twilight_angle


class PolarCircleResolution(str, Enum):
    """What to do when the sun does not rise or set on the requested date."""

    unresolved = "unresolved"
    nearest_place = "nearest_place"
    nearest_day = "nearest_day"
    umm_al_qura = "umm_al_qura"


@dataclass(frozen=True)
class Adjustments:
    """Signed minute offsets per prayer, applied after every other rule."""

    fajr: int = 0
    sunrise: int = 0
    dhuhr: int = 0
    asr: int = 0
    maghrib: int = 0
    isha: int = 0

    def __post_init__(self) -> None:
        for item in dataclasses.fields(self):
            value = getattr(self, item.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidParameters(
                    f"adjustment for {item.name} must be an integer number of minutes, got {value!r}"
                )

    def __add__(self, other: "Adjustments") -> "Adjustments":
        if not isinstance(other, Adjustments):
            return NotImplemented
        return Adjustments(
            **{
                item.name: getattr(self, item.name) + getattr(other, item.name)
                for item in dataclasses.fields(self)
            }
        )

    def for_prayer(self, prayer: Prayer) -> int:
        """Minutes for *prayer*; the derived night markers are never adjusted."""

        return getattr(self, Prayer(prayer).value, 0)

    @classmethod
    def from_mapping(cls, values: Dict[str, int]) -> "Adjustments":
        unknown = set(values) - {p.value for p in Prayer.daily()}
        if unknown:
            raise InvalidParameters(f"Unknown prayer(s) in adjustments: {sorted(unknown)}")
        return cls(**values)


class Method(str, Enum):
    """Calculation authorities with preset twilight angles."""

    muslim_world_league = "muslim_world_league"
    egyptian = "egyptian"
    karachi = "karachi"
    umm_al_qura = "umm_al_qura"
    dubai = "dubai"
    qatar = "qatar"
    kuwait = "kuwait"
    moonsighting_committee = "moonsighting_committee"
    singapore = "singapore"
    north_america = "north_america"
    other = "other"

    def parameters(self) -> "Parameters":
        """Preset :class:`Parameters` for this authority."""

        preset = dict(_METHOD_PRESETS[self])
        return Parameters(method=self, **preset)


@dataclass(frozen=True)
class Parameters:
    """Resolved configuration for one prayer-time computation.

    Build one with :meth:`with_method` (preset plus overrides) and derive
    variants with :meth:`replace`; instances are immutable.
    """

    method: Method = Method.other
    fajr_angle: float = 0.0
    isha_angle: float = 0.0
    isha_interval: int = 0
    madhab: Madhab = Madhab.shafi
    twilight: Twilight = Twilight.red
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.twilight_angle
    polar_circle_resolution: PolarCircleResolution = PolarCircleResolution.unresolved
    adjustments: Adjustments = field(default_factory=Adjustments)
    method_adjustments: Adjustments = field(default_factory=Adjustments)

    def __post_init__(self) -> None:
        for name, kind in (
            ("method", Method),
            ("madhab", Madhab),
            ("twilight", Twilight),
            ("high_latitude_rule", HighLatitudeRule),
            ("polar_circle_resolution", PolarCircleResolution),
        ):
            value = getattr(self, name)
            try:
                object.__setattr__(self, name, kind(value))
            except ValueError as exc:
                raise InvalidParameters(f"Unsupported {name}: {value!r}") from exc

        for name in ("fajr_angle", "isha_angle"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidParameters(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or not 0.0 <= value < 90.0:
                raise InvalidParameters(f"{name} must be within [0, 90) degrees, got {value!r}")
            object.__setattr__(self, name, float(value))

        interval = self.isha_interval
        if isinstance(interval, bool) or not isinstance(interval, int) or interval < 0:
            raise InvalidParameters(
                f"isha_interval must be a non-negative integer number of minutes, got {interval!r}"
            )

        for name in ("adjustments", "method_adjustments"):
            value = getattr(self, name)
            if isinstance(value, dict):
                object.__setattr__(self, name, Adjustments.from_mapping(value))
            elif not isinstance(value, Adjustments):
                raise InvalidParameters(f"{name} must be Adjustments, got {value!r}")

    @classmethod
    def with_method(
        cls,
        method: Method,
        madhab: Madhab = Madhab.shafi,
        **overrides: object,
    ) -> "Parameters":
        """Preset parameters for *method*, with *madhab* and explicit *overrides* applied."""

        return Method(method).parameters().replace(madhab=madhab, **overrides)

    def replace(self, **changes: object) -> "Parameters":
        """Return a validated copy with *changes* applied."""

        unknown = set(changes) - {item.name for item in dataclasses.fields(self)}
        if unknown:
            raise InvalidParameters(f"Unknown parameter(s): {sorted(unknown)}")
        return dataclasses.replace(self, **changes)

    def night_portions(self) -> Tuple[float, float]:
        """Fractions of the night bounding Fajr and Isha, respectively."""

        if self.high_latitude_rule is HighLatitudeRule.middle_of_the_night:
            return 1.0 / 2.0, 1.0 / 2.0
        if self.high_latitude_rule is HighLatitudeRule.seventh_of_the_night:
            return 1.0 / 7.0, 1.0 / 7.0
        return self.fajr_angle / 60.0, self.isha_angle / 60.0

    def time_adjustment(self, prayer: Prayer) -> int:
        """Total minute offset (user plus method) for *prayer*."""

        return (self.adjustments + self.method_adjustments).for_prayer(prayer)


_METHOD_PRESETS: Dict[Method, Dict[str, object]] = {
    Method.muslim_world_league: {
        "fajr_angle": 18.0,
        "isha_angle": 17.0,
        "method_adjustments": Adjustments(dhuhr=1),
    },
    Method.egyptian: {
        "fajr_angle": 19.5,
        "isha_angle": 17.5,
        "method_adjustments": Adjustments(dhuhr=1),
    },
    Method.karachi: {
        "fajr_angle": 18.0,
        "isha_angle": 18.0,
        "method_adjustments": Adjustments(dhuhr=1),
    },
    Method.umm_al_qura: {"fajr_angle": 18.5, "isha_angle": 0.0, "isha_interval": 90},
    Method.dubai: {
        "fajr_angle": 18.2,
        "isha_angle": 18.2,
        "method_adjustments": Adjustments(sunrise=-3, dhuhr=3, asr=3, maghrib=3),
    },
    Method.qatar: {"fajr_angle": 18.0, "isha_angle": 0.0, "isha_interval": 90},
    Method.kuwait: {"fajr_angle": 18.0, "isha_angle": 17.5},
    Method.moonsighting_committee: {
        "fajr_angle": 18.0,
        "isha_angle": 18.0,
        "high_latitude_rule": HighLatitudeRule.seventh_of_the_night,
        "method_adjustments": Adjustments(dhuhr=5, maghrib=3),
    },
    Method.singapore: {
        "fajr_angle": 20.0,
        "isha_angle": 18.0,
        "method_adjustments": Adjustments(dhuhr=1),
    },
    Method.north_america: {
        "fajr_angle": 15.0,
        "isha_angle": 15.0,
        "method_adjustments": Adjustments(dhuhr=1),
    },
    Method.other: {"fajr_angle": 0.0, "isha_angle": 0.0},
}


class Resolution(str, Enum):
    """How a reported time was obtained."""

    normal = "normal"
    high_latitude_rule = "high_latitude_rule"
    polar_circle = "polar_circle"
    unresolved = "unresolved"
