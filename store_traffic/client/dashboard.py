# store_traffic/client/dashboard.py
"""
Dashboard orchestrator.

  - loads recent events + hourly rollup once at startup
  - subscribes to the live feed; each event is prepended to the live table
  - re-queries the hourly rollup every HOURLY_REFRESH_SECONDS while connected
  - if nothing has arrived after OFFLINE_GRACE_SECONDS, switches to the offline
    simulation, which stops again as soon as a real event arrives
"""

import asyncio
from typing import Callable, Optional
from store_traffic.client.api import TrafficApiClient
from store_traffic.client.feed import FeedClient, FeedStatus
from store_traffic.client.render import render_dashboard
from store_traffic.client.simulation import OfflineSimulator
from store_traffic.client.state import ConnectionState, DashboardState
from store_traffic.config import settings
from store_traffic.schemas.traffic import TrafficEventOut
from store_traffic.utils.logger import get_logger

logger = get_logger(__name__)


class Dashboard:
    def __init__(self, api: TrafficApiClient, feed: FeedClient,
                 state: Optional[DashboardState] = None,
                 simulator: Optional[OfflineSimulator] = None,
                 grace_seconds: float = None, offline_interval: float = None,
                 hourly_refresh: float = None, output: Callable[[str], None] = print):
        self.api = api
        self.feed = feed
        self.state = state or DashboardState(live_size=settings.LIVE_TABLE_SIZE)
        self.simulator = simulator or OfflineSimulator(store_id=settings.STORE_IDS[0])
        self.grace_seconds = grace_seconds if grace_seconds is not None else settings.OFFLINE_GRACE_SECONDS
        self.offline_interval = offline_interval or settings.OFFLINE_INTERVAL_SECONDS
        self.hourly_refresh = hourly_refresh or settings.HOURLY_REFRESH_SECONDS
        self.output = output
        self._token: Optional[str] = None
        self._tasks: list[asyncio.Task] = []
        self._offline_task: Optional[asyncio.Task] = None

    def render(self):
        self.output(render_dashboard(self.state))

    async def load_initial_data(self):
        recent = await self.api.fetch_recent(self.state.live_size)
        hourly = await self.api.fetch_hourly()
        if recent or hourly:
            self.state.load_initial(recent, hourly)
            logger.info(f"Initial data loaded: {len(recent)} recent events, {len(hourly)} hourly buckets")

    async def on_live_event(self, event: TrafficEventOut):
        if self.state.is_offline:
            # Synthetic rows must not mix with real ones
            await self.stop_offline_simulation()
            self.state.load_initial([], await self.api.fetch_hourly())
            self.state.set_connection(ConnectionState.LIVE)
        self.state.apply_live_event(event)
        self.render()

    def on_feed_status(self, status: FeedStatus):
        # Offline simulation stays on screen until real data replaces it
        if self.state.is_offline:
            return
        if status is FeedStatus.CONNECTED:
            self.state.set_connection(ConnectionState.LIVE)
        elif status is FeedStatus.DISCONNECTED:
            self.state.set_connection(ConnectionState.DISCONNECTED)
        else:
            self.state.set_connection(ConnectionState.CONNECTING)
        self.render()

    async def refresh_hourly(self):
        self.state.replace_hourly(await self.api.fetch_hourly())
        self.render()

    def start_offline_simulation(self):
        if self._offline_task:
            return
        logger.warning(f"No live data within {self.grace_seconds}s, switching to offline simulation")
        self.state.set_connection(ConnectionState.OFFLINE_SIMULATION)
        self.state.load_initial([], self.simulator.historical())
        self._offline_task = asyncio.create_task(self._simulate(), name="offline-simulation")
        self.render()

    async def stop_offline_simulation(self):
        if not self._offline_task:
            return
        self._offline_task.cancel()
        await asyncio.gather(self._offline_task, return_exceptions=True)
        self._offline_task = None
        logger.info("Live data received, offline simulation stopped")

    async def start(self):
        await self.load_initial_data()
        self.render()
        self._token = self.feed.subscribe(self.on_live_event, on_status=self.on_feed_status)
        self._tasks = [
            asyncio.create_task(self._fallback_after_grace(), name="offline-fallback"),
            asyncio.create_task(self._poll_hourly(), name="hourly-poll"),
        ]

    async def stop(self):
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        await self.stop_offline_simulation()
        await self.feed.unsubscribe(self._token)
        self._token = None

    async def run(self, duration: float = None):
        """Run until cancelled, or for `duration` seconds."""
        await self.start()
        try:
            if duration is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(duration)
        finally:
            await self.stop()

    async def _fallback_after_grace(self):
        await asyncio.sleep(self.grace_seconds)
        if not self.state.has_data:
            self.start_offline_simulation()

    async def _poll_hourly(self):
        while True:
            await asyncio.sleep(self.hourly_refresh)
            if self.feed.status is FeedStatus.CONNECTED and not self.state.is_offline:
                await self.refresh_hourly()

    async def _simulate(self):
        while True:
            await asyncio.sleep(self.offline_interval)
            entry = self.simulator.live_entry()
            if entry is not None:
                self.state.apply_live_event(entry)
                self.render()
