# store_traffic/models/traffic_event.py
"""
Customer traffic table.
One immutable row per generated traffic event: how many customers entered and
left a store at an instant. Rows are written once by the event sink and read by
the hourly and recent queries.
"""

from sqlalchemy import Column, Integer, DateTime
from store_traffic.database import Base
from store_traffic.utils.clock import utc_now


class TrafficEvent(Base):
    __tablename__ = "customer_traffic"

    id = Column(Integer, primary_key=True, autoincrement=True)
    store_id = Column(Integer, nullable=False, index=True)
    customers_in = Column(Integer, nullable=False, default=0)
    customers_out = Column(Integer, nullable=False, default=0)
    time_stamp = Column(DateTime, nullable=False, index=True, default=utc_now)  # naive UTC

    def __repr__(self):
        return (f"<TrafficEvent {self.id} store={self.store_id} "
                f"in={self.customers_in} out={self.customers_out}>")
