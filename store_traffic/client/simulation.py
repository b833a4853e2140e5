# store_traffic/client/simulation.py
"""
Offline simulation data for the dashboard, used only when the server sends
nothing within the grace period. Live entries follow the same weighted-zero
draws as the server's generator.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Optional
from store_traffic.config import settings
from store_traffic.schemas.traffic import HourlyTrafficOut, TrafficEventOut
from store_traffic.services.occupancy_service import OccupancyStore
from store_traffic.services.traffic_generator import (
    MAX_CUSTOMERS_PER_EVENT, ZERO_WEIGHT, weighted_draw,
)
from store_traffic.services.traffic_queries import format_hour_label
from store_traffic.utils.clock import as_utc, in_zone, utc_now


class OfflineSimulator:
    def __init__(self, store_id: int, max_in: int = MAX_CUSTOMERS_PER_EVENT,
                 zero_weight: float = ZERO_WEIGHT, rng: Optional[random.Random] = None):
        self.store_id = store_id
        self.max_in = max_in
        self.zero_weight = zero_weight
        self.rng = rng or random.Random()
        self.occupancy = OccupancyStore()

    def live_entry(self, now: Optional[datetime] = None) -> Optional[TrafficEventOut]:
        """One synthetic event, or None when both draws are zero."""
        customers_in = weighted_draw(self.max_in, self.zero_weight, self.rng)
        max_out = min(self.occupancy.generation_bound(self.store_id), self.max_in)
        customers_out = weighted_draw(max_out, self.zero_weight, self.rng)
        if customers_in == 0 and customers_out == 0:
            return None

        self.occupancy.apply(self.store_id, customers_in, customers_out)
        return TrafficEventOut(
            store_id=self.store_id,
            customers_in=customers_in,
            customers_out=customers_out,
            time_stamp=now or as_utc(utc_now()),
        )

    def historical(self, now: Optional[datetime] = None, hours: int = 24,
                   tz_name: str = None) -> list[HourlyTrafficOut]:
        """One bucket per hour for the trailing window, oldest first, in the reporting zone."""
        tz_name = tz_name or settings.REPORT_TIMEZONE
        local_now = in_zone(now or utc_now(), tz_name)
        current_hour = local_now.replace(minute=0, second=0, microsecond=0).astimezone(timezone.utc)
        buckets = []
        for offset in range(hours - 1, -1, -1):
            # Step in UTC so DST transitions neither skip nor repeat an hour
            hour_start = in_zone(current_hour - timedelta(hours=offset), tz_name)
            customers_in = self.rng.randint(5, 24)
            customers_out = self.rng.randint(4, 21)
            buckets.append(HourlyTrafficOut(
                hour_label=format_hour_label(hour_start),
                hour_start=hour_start,
                customers_in=customers_in,
                customers_out=customers_out,
                net_change=customers_in - customers_out,
            ))
        return buckets
