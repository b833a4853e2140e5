# store_traffic/services/traffic_generator.py
"""
Synthetic customer traffic source.

Every tick, for each configured store:
  - customers_in  = weighted_draw(max_in)
  - customers_out = weighted_draw(min(occupancy, max_in)), 0 when the store is empty
  - both zero → nothing is emitted for that store
  - otherwise occupancy is updated and the event goes to the persistence sink
    first, then the broadcaster. A persistence failure never stops the broadcast.

A second loop probes storage while the sink is degraded and rebuilds occupancy
from history when the database comes back.
"""

import asyncio
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from store_traffic.config import settings
from store_traffic.services.occupancy_service import OccupancyStore, derive_occupancy
from store_traffic.utils.clock import utc_now
from store_traffic.utils.logger import get_logger

logger = get_logger(__name__)

ZERO_WEIGHT = 0.6
MAX_CUSTOMERS_PER_EVENT = 3


@dataclass(frozen=True)
class GeneratedEvent:
    store_id: int
    customers_in: int
    customers_out: int
    time_stamp: datetime    # naive UTC


def weighted_draw(max_value: int, zero_weight: float = ZERO_WEIGHT, rng=random) -> int:
    """0 with probability zero_weight, otherwise uniform in [1, max_value]."""
    if max_value <= 0:
        return 0
    if rng.random() < zero_weight:
        return 0
    return rng.randint(1, max_value)


class TrafficGenerator:
    def __init__(self, store_ids: list[int], persistence, broadcaster,
                 occupancy: Optional[OccupancyStore] = None,
                 max_in: int = MAX_CUSTOMERS_PER_EVENT, zero_weight: float = ZERO_WEIGHT,
                 rng: Optional[random.Random] = None):
        self.store_ids = list(store_ids)
        self.persistence = persistence
        self.broadcaster = broadcaster
        self.occupancy = occupancy or OccupancyStore({store_id: 0 for store_id in self.store_ids})
        self.max_in = max_in
        self.zero_weight = zero_weight
        self.rng = rng or random.Random()
        self._tasks: list[asyncio.Task] = []

    @property
    def is_running(self) -> bool:
        return bool(self._tasks)

    def generate_for_store(self, store_id: int) -> Optional[GeneratedEvent]:
        """Draw one event for a store and apply it to occupancy. None if idle."""
        customers_in = weighted_draw(self.max_in, self.zero_weight, self.rng)
        max_out = min(self.occupancy.generation_bound(store_id), self.max_in)
        customers_out = weighted_draw(max_out, self.zero_weight, self.rng) if max_out > 0 else 0

        if customers_in == 0 and customers_out == 0:
            return None

        event = GeneratedEvent(
            store_id=store_id,
            customers_in=customers_in,
            customers_out=customers_out,
            time_stamp=utc_now(),
        )
        self.occupancy.apply(store_id, customers_in, customers_out)
        return event

    async def tick(self) -> list[GeneratedEvent]:
        events = []
        for store_id in self.store_ids:
            event = self.generate_for_store(store_id)
            if event is None:
                continue
            try:
                await self.persistence.emit(event)
            except Exception as e:
                logger.error(f"Persisting event for store {store_id} failed: {e}", exc_info=True)
            await self.broadcaster.emit(event)
            events.append(event)
        return events

    async def restore_occupancy(self):
        """Rebuild occupancy from persisted history. Keeps current counts on failure."""
        db = self.persistence.session_factory()
        try:
            self.occupancy.replace(derive_occupancy(db, self.store_ids))
        except SQLAlchemyError as e:
            logger.error(f"Could not derive occupancy from history: {e}")
            self.persistence.mark_degraded(str(e))
        finally:
            db.close()

    def start(self, interval: float = None, storage_check_interval: float = None):
        """Start the tick and storage-check loops. No-op if already running."""
        if self.is_running:
            return
        interval = interval or settings.GENERATOR_INTERVAL_SECONDS
        storage_check_interval = storage_check_interval or settings.STORAGE_CHECK_INTERVAL_SECONDS
        self._tasks = [
            asyncio.create_task(self._run(interval), name="traffic-generator"),
            asyncio.create_task(self._watch_storage(storage_check_interval), name="storage-watch"),
        ]
        logger.info(f"Traffic generator started with {interval}s interval for stores {self.store_ids}")

    async def stop(self):
        if not self.is_running:
            return
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Traffic generator stopped")

    async def _run(self, interval: float):
        while True:
            await asyncio.sleep(interval)
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Traffic generator tick failed: {e}", exc_info=True)

    async def _watch_storage(self, interval: float):
        while True:
            await asyncio.sleep(interval)
            if await self.persistence.check_storage():
                await self.restore_occupancy()
