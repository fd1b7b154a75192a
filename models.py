"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from salat import (
    Adjustments,
    Coordinates,
    HighLatitudeRule,
    Madhab,
    Method,
    Parameters,
    PolarCircleResolution,
    Prayer,
    Resolution,
    Twilight,
)


class PrayerTimesQueryParams(BaseModel):
    """Validated query parameters for the ``/prayer-times`` endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")
    date_utc: date = Field(..., alias="date", description="Calendar date (YYYY-MM-DD)")
    method: Optional[Method] = Field(
        None, description="Calculation authority; defaults to the server's configured method"
    )
    madhab: Madhab = Field(Madhab.shafi, description="School used for Asr")
    twilight: Twilight = Field(Twilight.red, description="Shafaq for seasonal Isha")
    high_latitude_rule: Optional[HighLatitudeRule] = Field(
        None, description="High-latitude rule; the recommended rule when omitted"
    )
    polar_circle_resolution: PolarCircleResolution = Field(
        PolarCircleResolution.unresolved,
        description="Strategy for dates without sunrise or sunset",
    )
    fajr_angle: Optional[float] = Field(None, ge=0.0, lt=90.0, description="Fajr depression angle")
    isha_angle: Optional[float] = Field(None, ge=0.0, lt=90.0, description="Isha depression angle")
    isha_interval: Optional[int] = Field(
        None, ge=0, le=1440, description="Minutes after Maghrib; 0 selects the Isha angle"
    )
    adjust_fajr: int = Field(0, ge=-1440, le=1440, description="Fajr offset in minutes")
    adjust_sunrise: int = Field(0, ge=-1440, le=1440, description="Sunrise offset in minutes")
    adjust_dhuhr: int = Field(0, ge=-1440, le=1440, description="Dhuhr offset in minutes")
    adjust_asr: int = Field(0, ge=-1440, le=1440, description="Asr offset in minutes")
    adjust_maghrib: int = Field(0, ge=-1440, le=1440, description="Maghrib offset in minutes")
    adjust_isha: int = Field(0, ge=-1440, le=1440, description="Isha offset in minutes")
    offset_hours: Optional[float] = Field(
        None,
        description="Optional fixed offset in hours applied to derive local times",
    )

    @field_validator("offset_hours")
    @classmethod
    def validate_offset_hours(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return value
        if not -24.0 < value < 24.0:
            raise ValueError("offset_hours must be within ±24 hours")
        return value

    def to_parameters(self, coordinates: Coordinates, default_method: Method) -> Parameters:
        """Resolve the query into core :class:`~salat.Parameters`."""

        overrides = {
            name: getattr(self, name)
            for name in ("fajr_angle", "isha_angle", "isha_interval")
            if getattr(self, name) is not None
        }
        return Parameters.with_method(
            self.method or default_method,
            self.madhab,
            twilight=self.twilight,
            high_latitude_rule=self.high_latitude_rule or HighLatitudeRule.recommended(coordinates),
            polar_circle_resolution=self.polar_circle_resolution,
            adjustments=Adjustments(
                fajr=self.adjust_fajr,
                sunrise=self.adjust_sunrise,
                dhuhr=self.adjust_dhuhr,
                asr=self.adjust_asr,
                maghrib=self.adjust_maghrib,
                isha=self.adjust_isha,
            ),
            **overrides,
        )


class CoordinatesQueryParams(BaseModel):
    """Validated query parameters for the ``/qiblah`` endpoint."""

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")


class PrayerTimeEntry(BaseModel):
    """One prayer of the schedule."""

    prayer: Prayer
    utc: Optional[str] = Field(None, description="Time in UTC (ISO-8601), null when undefined")
    local: Optional[str] = Field(
        None, description="Time at the requested offset when offset_hours is provided"
    )
    resolution: Resolution = Field(..., description="How the time was obtained")


class PrayerTimesResponse(BaseModel):
    """Successful prayer schedule response payload."""

    ok: bool = True
    date_utc: date = Field(..., description="Requested calendar date")
    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees")
    method: Method
    madhab: Madhab
    twilight: Twilight
    high_latitude_rule: HighLatitudeRule
    polar_circle_resolution: PolarCircleResolution
    fajr_angle: float
    isha_angle: float
    isha_interval: int
    offset_hours: Optional[float] = Field(None, description="User-specified offset in hours")
    complete: bool = Field(..., description="Whether all six daily times are defined")
    times: List[PrayerTimeEntry]


class QiblahResponse(BaseModel):
    """Qibla bearing response."""

    ok: bool = True
    latitude: float
    longitude: float
    bearing_degrees: float = Field(..., description="Degrees clockwise from true north")


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    version: str
    default_method: Method
    methods: List[Method]


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
