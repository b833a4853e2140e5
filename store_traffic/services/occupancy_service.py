# store_traffic/services/occupancy_service.py
"""
In-memory store occupancy.
The tracked count is Σ customers_in − Σ customers_out since the last rebuild.
It is owned by the traffic generator, which is its only writer.
"""

from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from store_traffic.models.traffic_event import TrafficEvent
from store_traffic.utils.logger import get_logger

logger = get_logger(__name__)


class OccupancyStore:
    """Current customer count per store_id."""

    def __init__(self, initial: Optional[dict[int, int]] = None):
        self._counts: dict[int, int] = dict(initial or {})

    def get(self, store_id: int) -> int:
        return self._counts.get(store_id, 0)

    def generation_bound(self, store_id: int) -> int:
        """Occupancy floored at 0, the upper bound for customers leaving."""
        return max(0, self.get(store_id))

    def apply(self, store_id: int, customers_in: int, customers_out: int) -> int:
        self._counts[store_id] = self.get(store_id) + customers_in - customers_out
        return self._counts[store_id]

    def replace(self, counts: dict[int, int]):
        self._counts = dict(counts)

    def snapshot(self) -> dict[int, int]:
        return dict(self._counts)


def derive_occupancy(db: Session, store_ids: list[int]) -> dict[int, int]:
    """Recompute occupancy per store from every persisted event, floored at 0."""
    rows = (
        db.query(
            TrafficEvent.store_id,
            func.coalesce(func.sum(TrafficEvent.customers_in), 0),
            func.coalesce(func.sum(TrafficEvent.customers_out), 0),
        )
        .filter(TrafficEvent.store_id.in_(store_ids))
        .group_by(TrafficEvent.store_id)
        .all()
    )
    counts = {store_id: 0 for store_id in store_ids}
    for store_id, total_in, total_out in rows:
        counts[store_id] = max(0, int(total_in) - int(total_out))
    logger.info(f"Occupancy derived from history: {counts}")
    return counts
