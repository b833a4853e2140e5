# store_traffic/services/traffic_queries.py
"""
Read side of the traffic table: hourly rollup over a trailing window and the
most recent events. Hour buckets are calendar hours in REPORT_TIMEZONE and are
sparse (hours without events are omitted).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo
from sqlalchemy.orm import Session
from store_traffic.config import settings
from store_traffic.models.traffic_event import TrafficEvent
from store_traffic.utils.clock import as_utc, to_naive_utc, utc_now


@dataclass
class HourlyBucket:
    hour_start: datetime     # aware, in the reporting timezone
    customers_in: int = 0
    customers_out: int = 0

    @property
    def net_change(self) -> int:
        return self.customers_in - self.customers_out

    @property
    def hour_label(self) -> str:
        return format_hour_label(self.hour_start)


def format_hour_label(hour_start: datetime) -> str:
    """12-hour clock label, e.g. '03 PM'."""
    return hour_start.strftime("%I %p")


def hourly_traffic(db: Session, now: Optional[datetime] = None,
                   window_hours: int = None, tz_name: str = None) -> list[HourlyBucket]:
    now = as_utc(now) if now else as_utc(utc_now())
    window_hours = window_hours or settings.HOURLY_WINDOW_HOURS
    tz = ZoneInfo(tz_name or settings.REPORT_TIMEZONE)
    since = to_naive_utc(now - timedelta(hours=window_hours))

    rows = (
        db.query(TrafficEvent.time_stamp, TrafficEvent.customers_in, TrafficEvent.customers_out)
        .filter(TrafficEvent.time_stamp >= since)
        .order_by(TrafficEvent.time_stamp.asc())
        .all()
    )

    # Keyed by UTC instant: the repeated wall-clock hour at a DST fall-back is two buckets
    buckets: dict[datetime, HourlyBucket] = {}
    for time_stamp, customers_in, customers_out in rows:
        hour_start = as_utc(time_stamp).astimezone(tz).replace(minute=0, second=0, microsecond=0)
        key = hour_start.astimezone(timezone.utc)
        bucket = buckets.setdefault(key, HourlyBucket(hour_start=hour_start))
        bucket.customers_in += customers_in
        bucket.customers_out += customers_out

    return [buckets[key] for key in sorted(buckets)]


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return settings.RECENT_DEFAULT_LIMIT
    return max(1, min(limit, settings.RECENT_MAX_LIMIT))


def recent_traffic(db: Session, limit: Optional[int] = None) -> list[TrafficEvent]:
    """Most recent events, newest first."""
    return (
        db.query(TrafficEvent)
        .order_by(TrafficEvent.time_stamp.desc(), TrafficEvent.id.desc())
        .limit(clamp_limit(limit))
        .all()
    )
