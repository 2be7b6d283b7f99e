"""
Purpose: Domain models for users and rides.
What it does:
- Defines the immutable records the scoring pipeline consumes:
  - UserRecord (id, current location, historical acceptance rate)
  - RideRecord (id, origin, optional destination, distance, scheduled time, day)
- Defines the dataset column names (the spreadsheet headers the rows come from).
- Converts raw string rows into records, raising DataValidationError naming the
  record id and field when a required numeric value is missing or malformed.

Rule: No distance lookups, no scoring. Models only.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from .errors import DataValidationError

LatLon = Tuple[float, float]

# --- Dataset column names ---
USER_ID = "User ID"
USER_LATITUDE = "Current Latitude"
USER_LONGITUDE = "Current Longitude"
USER_ACCEPTANCE_RATE = "Historical Ride Acceptance Rate"

RIDE_ID = "Ride ID"
ORIGIN_LATITUDE = "Origin Latitude"
ORIGIN_LONGITUDE = "Origin Longitude"
DESTINATION_LATITUDE = "Destination Latitude"
DESTINATION_LONGITUDE = "Destination Longitude"
RIDE_DISTANCE = "Distance (miles)"
SCHEDULED_TIME = "Scheduled Time (24hr)"
TIME_OF_DAY = "Time of Day (24hr)"  # historical rows carry this instead of a schedule
DAY_OF_WEEK = "Day of Week"


def parse_float(row: Mapping[str, str], column: str, record_id: Optional[str]) -> float:
    """
    Read a required finite float from a row.
    Missing, blank, non-numeric, NaN and infinite values are all rejected.
    """
    raw = row.get(column)
    if raw is None or str(raw).strip() == "":
        raise DataValidationError(record_id, column, "is missing")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise DataValidationError(record_id, column, f"is not numeric ({raw!r})") from None
    if not math.isfinite(value):
        raise DataValidationError(record_id, column, f"is not finite ({raw!r})")
    return value


def _optional_text(row: Mapping[str, str], column: str) -> Optional[str]:
    value = row.get(column)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass(frozen=True)
class UserRecord:
    """
    A user (driver) at a point in time.
    acceptance_rate is taken as given; out-of-range values are not corrected here.
    """
    id: str
    location: LatLon
    acceptance_rate: float

    @classmethod
    def from_row(cls, row: Mapping[str, str]) -> UserRecord:
        user_id = _optional_text(row, USER_ID)
        if user_id is None:
            raise DataValidationError(None, USER_ID, "is missing")
        lat = parse_float(row, USER_LATITUDE, user_id)
        lon = parse_float(row, USER_LONGITUDE, user_id)
        rate = parse_float(row, USER_ACCEPTANCE_RATE, user_id)
        return cls(id=user_id, location=(lat, lon), acceptance_rate=rate)


@dataclass(frozen=True)
class RideRecord:
    """
    A single transport request.
    `details` keeps the source row so callers can show the ride as it was stored.
    """
    id: str
    origin: LatLon
    distance_miles: float
    scheduled_time: Optional[str] = None
    day_of_week: Optional[str] = None
    destination: Optional[LatLon] = None
    details: Mapping[str, str] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_row(cls, row: Mapping[str, str]) -> RideRecord:
        ride_id = _optional_text(row, RIDE_ID)
        if ride_id is None:
            raise DataValidationError(None, RIDE_ID, "is missing")

        origin = (
            parse_float(row, ORIGIN_LATITUDE, ride_id),
            parse_float(row, ORIGIN_LONGITUDE, ride_id),
        )

        distance = parse_float(row, RIDE_DISTANCE, ride_id)
        if distance < 0:
            raise DataValidationError(ride_id, RIDE_DISTANCE, f"is negative ({distance})")

        # destination is optional, but half a coordinate is a data error
        destination = None
        if _optional_text(row, DESTINATION_LATITUDE) or _optional_text(row, DESTINATION_LONGITUDE):
            destination = (
                parse_float(row, DESTINATION_LATITUDE, ride_id),
                parse_float(row, DESTINATION_LONGITUDE, ride_id),
            )

        return cls(
            id=ride_id,
            origin=origin,
            distance_miles=distance,
            scheduled_time=_optional_text(row, SCHEDULED_TIME) or _optional_text(row, TIME_OF_DAY),
            day_of_week=_optional_text(row, DAY_OF_WEEK),
            destination=destination,
            details=dict(row),
        )
