"""Timestamp normalization shared by every entity model.

All timestamps are kept as timezone-aware UTC datetimes. The record service
speaks a narrower format: second precision, a space instead of the "T"
separator, no offset.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator


WIRE_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_wire_datetime(value: Optional[datetime]) -> str:
    """Format a timestamp for the record service (`YYYY-MM-DD HH:MM:SS`, UTC).

    A missing value is replaced by the current time.
    """
    if value is None:
        value = utc_now()
    return ensure_utc(value).strftime(WIRE_DATETIME_FORMAT)


Timestamp = Annotated[datetime, AfterValidator(ensure_utc)]
