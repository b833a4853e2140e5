# store_traffic/utils/clock.py
"""Timestamp helpers. The database stores naive UTC; the wire carries aware UTC."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Current instant as naive UTC, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive timestamp; convert an aware one."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_naive_utc(value: datetime) -> datetime:
    return as_utc(value).replace(tzinfo=None)


def in_zone(value: datetime, tz_name: str) -> datetime:
    """Aware timestamp in the named IANA zone."""
    return as_utc(value).astimezone(ZoneInfo(tz_name))
