"""FastAPI application exposing prayer times and the Qibla bearing."""

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta, timezone
from typing import Annotated, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from models import (
    CoordinatesQueryParams,
    ErrorResponse,
    HealthResponse,
    PrayerTimeEntry,
    PrayerTimesQueryParams,
    PrayerTimesResponse,
    QiblahResponse,
)
from salat import CivilDate, Coordinates, Method, Prayer, PrayerTimes, __version__, qiblah

logging.basicConfig(
    level=os.environ.get("SALAT_LOG_LEVEL", "INFO").upper(), format="%(message)s"
)
LOGGER = logging.getLogger("prayer-api")

APP_DESCRIPTION = (
    "Islamic prayer times from solar position, regional calculation methods "
    "and high-latitude fallbacks"
)


def _cors_origins() -> List[str]:
    raw = os.environ.get("SALAT_CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def default_method() -> Method:
    """Calculation method used when a request does not name one."""

    raw = os.environ.get("SALAT_DEFAULT_METHOD", Method.muslim_world_league.value)
    try:
        return Method(raw.strip().lower())
    except ValueError as exc:
        raise ValueError(f"SALAT_DEFAULT_METHOD is not a known method: {raw!r}") from exc


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        method = default_method()
    except ValueError as exc:
        LOGGER.error(json.dumps({"event": "config_invalid", "error": str(exc)}))
        raise
    LOGGER.info(
        json.dumps(
            {
                "event": "startup",
                "version": __version__,
                "default_method": method.value,
                "cors_origins": _cors_origins(),
            }
        )
    )
    yield


app = FastAPI(
    title="Salat API",
    description=APP_DESCRIPTION,
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _format_utc(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _format_local(dt: Optional[datetime], offset_hours: Optional[float]) -> Optional[str]:
    if dt is None or offset_hours is None:
        return None
    offset = timezone(timedelta(hours=offset_hours))
    return dt.astimezone(offset).isoformat()


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(
        ok=True,
        version=__version__,
        default_method=default_method(),
        methods=list(Method),
    )


@app.get(
    "/prayer-times",
    response_model=PrayerTimesResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def prayer_times_endpoint(
    params: Annotated[PrayerTimesQueryParams, Query()],
) -> PrayerTimesResponse:
    start_time = time.perf_counter()
    try:
        coordinates = Coordinates(params.lat, params.lon)
        parameters = params.to_parameters(coordinates, default_method())
        civil = CivilDate(params.date_utc, timedelta(hours=params.offset_hours or 0.0))
        prayers = PrayerTimes.compute(civil, coordinates, parameters)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    duration_ms = (time.perf_counter() - start_time) * 1000.0

    times = [
        PrayerTimeEntry(
            prayer=prayer,
            utc=_format_utc(prayers.time_for(prayer)),
            local=_format_local(prayers.time_for(prayer), params.offset_hours),
            resolution=prayers.resolution(prayer),
        )
        for prayer in Prayer
    ]
    response = PrayerTimesResponse(
        date_utc=params.date_utc,
        latitude=params.lat,
        longitude=params.lon,
        method=parameters.method,
        madhab=parameters.madhab,
        twilight=parameters.twilight,
        high_latitude_rule=parameters.high_latitude_rule,
        polar_circle_resolution=parameters.polar_circle_resolution,
        fajr_angle=parameters.fajr_angle,
        isha_angle=parameters.isha_angle,
        isha_interval=parameters.isha_interval,
        offset_hours=params.offset_hours,
        complete=prayers.is_complete(),
        times=times,
    )

    LOGGER.info(
        json.dumps(
            {
                "event": "prayer_times",
                "lat": params.lat,
                "lon": params.lon,
                "date": params.date_utc.isoformat(),
                "method": parameters.method.value,
                "complete": response.complete,
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response


@app.get(
    "/qiblah",
    response_model=QiblahResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def qiblah_endpoint(params: Annotated[CoordinatesQueryParams, Query()]) -> QiblahResponse:
    start_time = time.perf_counter()
    try:
        bearing = qiblah(Coordinates(params.lat, params.lon))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(
        json.dumps(
            {
                "event": "qiblah",
                "lat": params.lat,
                "lon": params.lon,
                "bearing": round(bearing, 6),
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return QiblahResponse(latitude=params.lat, longitude=params.lon, bearing_degrees=bearing)
