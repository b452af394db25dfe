"""Timestamp helpers shared by the stored models."""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import PlainSerializer


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_timestamp(value: datetime) -> str:
    """ISO 8601 in UTC with microseconds always present, so stored values sort as text.
    
    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec='microseconds')


Timestamp = Annotated[datetime, PlainSerializer(to_timestamp, return_type=str, when_used='json')]
