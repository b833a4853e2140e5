# store_traffic/client/state.py
"""
Dashboard view state: the bounded live table, the hourly table, the running
customer total and the connection indicator. Pure bookkeeping, no I/O.
"""

from enum import Enum
from store_traffic.schemas.traffic import HourlyTrafficOut, TrafficEventOut


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    LIVE = "live"
    DISCONNECTED = "disconnected"
    OFFLINE_SIMULATION = "offline-simulation"


STATUS_LABELS = {
    ConnectionState.CONNECTING: "Connecting to server...",
    ConnectionState.LIVE: "Connected to server",
    ConnectionState.DISCONNECTED: "Disconnected from server",
    ConnectionState.OFFLINE_SIMULATION: "OFFLINE SIMULATION (synthetic data)",
}


class DashboardState:
    def __init__(self, live_size: int = 10):
        self.live_size = live_size
        self.live: list[TrafficEventOut] = []
        self.hourly: list[HourlyTrafficOut] = []
        self.total_customers = 0
        self.connection = ConnectionState.CONNECTING

    @property
    def has_data(self) -> bool:
        return bool(self.live or self.hourly)

    @property
    def is_offline(self) -> bool:
        return self.connection is ConnectionState.OFFLINE_SIMULATION

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.connection]

    def load_initial(self, recent: list[TrafficEventOut], hourly: list[HourlyTrafficOut]):
        """Seed both tables; the running total starts from the hourly net changes."""
        self.live = list(recent[:self.live_size])
        self.replace_hourly(hourly)
        self.total_customers = sum(bucket.net_change for bucket in self.hourly)

    def apply_live_event(self, event: TrafficEventOut):
        self.live = [event] + self.live[:self.live_size - 1]
        self.total_customers += event.customers_in - event.customers_out

    def replace_hourly(self, buckets: list[HourlyTrafficOut]):
        self.hourly = list(buckets)

    def set_connection(self, connection: ConnectionState):
        self.connection = connection
