"""
Purpose: Error kinds shared by the scoring pipeline.
What it does:
- DataValidationError: a record is missing a required field or holds a value that
  cannot be used (non-numeric coordinate, NaN feature, ...). Never retried.
- NotFoundError: an unknown user or ride id was referenced. Never retried.

Transient distance provider failures live in routing (ProviderUnavailable) and are
recovered there; they never reach callers of the scoring pipeline.
"""

from __future__ import annotations

from typing import Optional


class RideAcceptanceError(Exception):
    """Base class for errors surfaced by the ride acceptance engine."""
    pass


class DataValidationError(RideAcceptanceError):
    """
    A record cannot be scored because one of its fields is missing or malformed.
    Carries the offending record id and field name so the caller can fix the data.
    """

    def __init__(self, record_id: Optional[str], field: str, message: str = "missing or not numeric"):
        self.record_id = record_id
        self.field = field
        self.message = message
        super().__init__(f"record {record_id or '<unknown>'}: field '{field}' {message}")


class NotFoundError(RideAcceptanceError):
    """An id referenced by a ranking or explanation request is not loaded."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found")
