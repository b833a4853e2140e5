# store_traffic/services/event_sink.py
"""
Best-effort persistence of generated traffic events.

The sink is either CONNECTED (events are written) or DEGRADED (events are
skipped, never buffered). A failed write flips it to DEGRADED without raising;
check_storage() flips it back once the database answers again.
"""

from enum import Enum
from sqlalchemy.exc import SQLAlchemyError
from store_traffic.database import create_tables, ping
from store_traffic.models.traffic_event import TrafficEvent
from store_traffic.utils.logger import get_logger

logger = get_logger(__name__)


class StorageMode(str, Enum):
    CONNECTED = "connected"
    DEGRADED = "degraded"


class DatabaseEventSink:
    def __init__(self, session_factory):
        self.session_factory = session_factory
        self.mode = StorageMode.CONNECTED

    @property
    def is_connected(self) -> bool:
        return self.mode is StorageMode.CONNECTED

    def mark_degraded(self, reason: str):
        if self.mode is StorageMode.CONNECTED:
            logger.warning(f"Storage unavailable, events will be broadcast but not saved: {reason}")
        self.mode = StorageMode.DEGRADED

    async def emit(self, event) -> bool:
        """Append one event. Returns False when it was not persisted."""
        if not self.is_connected:
            logger.debug(f"Degraded mode, event for store {event.store_id} not persisted")
            return False

        db = self.session_factory()
        try:
            db.add(TrafficEvent(
                store_id=event.store_id,
                customers_in=event.customers_in,
                customers_out=event.customers_out,
                time_stamp=event.time_stamp,
            ))
            db.commit()
            return True
        except SQLAlchemyError as e:
            logger.error(f"Error saving traffic event for store {event.store_id}: {e}")
            self.mark_degraded(str(e))
            return False
        finally:
            db.close()

    async def check_storage(self) -> bool:
        """
        Probe the database. Returns True only on a DEGRADED → CONNECTED
        transition, so the caller can re-derive state from history.
        """
        db = self.session_factory()
        try:
            ping(db)
            if not self.is_connected:
                # Tables may never have been created if storage was down at startup
                create_tables(bind=db.get_bind())
        except SQLAlchemyError as e:
            self.mark_degraded(str(e))
            return False
        finally:
            db.close()

        if self.is_connected:
            return False
        self.mode = StorageMode.CONNECTED
        logger.info("Storage connection re-established, resuming event persistence")
        return True
