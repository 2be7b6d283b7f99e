"""
Purpose: Load the three tabular datasets the engine works from.
What it does:
- parse_csv(text): header row + positional split on ',' into string-keyed rows.
- RideDatasets: the historical rides, users and available rides loaded together,
  with id lookups. Treated as read-only; reloading builds a new RideDatasets.

Input format constraint: plain comma-delimited text with no quoting. A field that
contains a comma splits into two fields. This matches the spreadsheet export the
datasets come from and is intentionally not hardened here.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .errors import NotFoundError
from .models import RIDE_ID, USER_ID

logger = logging.getLogger(__name__)

Row = Dict[str, str]

HISTORICAL_FILE = "historical_rides.csv"
USERS_FILE = "users.csv"
AVAILABLE_RIDES_FILE = "available_rides.csv"


def parse_csv(text: str) -> List[Row]:
    """
    Parse delimited text into rows keyed by the header.

    - first non-blank line is the header; names and values are trimmed
    - short rows simply lack the trailing keys (callers validate required fields)
    - values beyond the header width are ignored
    - blank lines are skipped
    """
    if not text or not text.strip():
        return []

    lines = [line for line in text.strip().splitlines() if line.strip()]
    headers = [header.strip() for header in lines[0].split(",")]

    rows: List[Row] = []
    for line in lines[1:]:
        values = line.split(",")
        row: Row = {}
        for index, header in enumerate(headers):
            if index >= len(values):
                break
            row[header] = values[index].strip()
        rows.append(row)
    return rows


def _index_by(rows: Sequence[Row], column: str, label: str) -> Dict[str, Row]:
    """First row wins for a repeated id."""
    index: Dict[str, Row] = {}
    for row in rows:
        key = row.get(column)
        if not key:
            continue
        if key in index:
            logger.warning(f"Duplicate {label} id {key}; keeping the first row")
            continue
        index[key] = row
    return index


@dataclass(frozen=True)
class RideDatasets:
    """
    Snapshot of the loaded datasets.
    """
    historical: List[Row] = field(default_factory=list)
    users: List[Row] = field(default_factory=list)
    available: List[Row] = field(default_factory=list)

    _users_by_id: Dict[str, Row] = field(init=False, repr=False, compare=False)
    _rides_by_id: Dict[str, Row] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # frozen dataclass: the lookups are built once and never touched again
        object.__setattr__(self, "_users_by_id", _index_by(self.users, USER_ID, "user"))
        object.__setattr__(self, "_rides_by_id", _index_by(self.available, RIDE_ID, "ride"))

    def find_user(self, user_id: str) -> Optional[Row]:
        return self._users_by_id.get(user_id)

    def find_ride(self, ride_id: str) -> Optional[Row]:
        return self._rides_by_id.get(ride_id)

    def get_user(self, user_id: str) -> Row:
        row = self.find_user(user_id)
        if row is None:
            raise NotFoundError("User", user_id)
        return row

    def get_ride(self, ride_id: str) -> Row:
        row = self.find_ride(ride_id)
        if row is None:
            raise NotFoundError("Ride", ride_id)
        return row


def load_datasets(historical_text: str, users_text: str, rides_text: str) -> RideDatasets:
    datasets = RideDatasets(
        historical=parse_csv(historical_text),
        users=parse_csv(users_text),
        available=parse_csv(rides_text),
    )
    logger.info(
        f"Loaded {len(datasets.historical)} historical rides, "
        f"{len(datasets.users)} users, {len(datasets.available)} available rides"
    )
    return datasets


def load_datasets_from_dir(directory: str) -> RideDatasets:
    """
    Read historical_rides.csv, users.csv and available_rides.csv from a directory.
    """
    texts = []
    for filename in (HISTORICAL_FILE, USERS_FILE, AVAILABLE_RIDES_FILE):
        with open(os.path.join(directory, filename), "r", encoding="utf-8") as file:
            texts.append(file.read())
    return load_datasets(*texts)
