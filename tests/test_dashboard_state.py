"""Unit tests for dashboard reconciliation and the offline simulator."""

import random
from datetime import datetime, timedelta, timezone
from store_traffic.client.render import render_dashboard
from store_traffic.client.simulation import OfflineSimulator
from store_traffic.client.state import ConnectionState, DashboardState
from store_traffic.schemas.traffic import HourlyTrafficOut, TrafficEventOut

BASE = datetime(2026, 10, 19, 12, tzinfo=timezone.utc)


def make_event(i, customers_in=1, customers_out=0):
    return TrafficEventOut(store_id=10, customers_in=customers_in, customers_out=customers_out,
                           time_stamp=BASE + timedelta(seconds=i))


def make_bucket(hour, customers_in, customers_out):
    return HourlyTrafficOut(hour_label=f"{hour:02d} AM", hour_start=BASE.replace(hour=hour),
                            customers_in=customers_in, customers_out=customers_out,
                            net_change=customers_in - customers_out)


class TestDashboardState:
    def test_live_table_never_exceeds_bound(self):
        state = DashboardState(live_size=10)
        for i in range(25):
            state.apply_live_event(make_event(i))
            assert len(state.live) <= 10

        assert len(state.live) == 10
        assert state.live[0].time_stamp == BASE + timedelta(seconds=24)
        assert state.live[-1].time_stamp == BASE + timedelta(seconds=15)

    def test_running_total_tracks_net_change(self):
        state = DashboardState()
        state.apply_live_event(make_event(0, customers_in=3))
        state.apply_live_event(make_event(1, customers_in=0, customers_out=2))
        assert state.total_customers == 1

    def test_initial_load_seeds_total_from_hourly(self):
        state = DashboardState()
        recent = [make_event(i) for i in range(12)]
        state.load_initial(recent, [make_bucket(9, 10, 4), make_bucket(10, 3, 5)])

        assert len(state.live) == 10
        assert state.total_customers == 4
        assert state.has_data

    def test_hourly_refresh_replaces_everything(self):
        state = DashboardState()
        state.replace_hourly([make_bucket(9, 1, 0), make_bucket(10, 2, 0)])
        state.replace_hourly([make_bucket(11, 5, 5)])
        assert [b.hour_start.hour for b in state.hourly] == [11]

    def test_status_labels(self):
        state = DashboardState()
        assert state.connection is ConnectionState.CONNECTING
        state.set_connection(ConnectionState.OFFLINE_SIMULATION)
        assert state.is_offline
        assert "OFFLINE SIMULATION" in state.status_label

    def test_empty_state_has_no_data(self):
        assert not DashboardState().has_data


class TestOfflineSimulator:
    def test_live_entries_respect_bounds(self):
        sim = OfflineSimulator(store_id=10, rng=random.Random(7))
        for _ in range(500):
            before = sim.occupancy.generation_bound(10)
            entry = sim.live_entry(now=BASE)
            if entry is None:
                continue
            assert 0 <= entry.customers_in <= 3
            assert 0 <= entry.customers_out <= min(before, 3)
            assert entry.customers_in + entry.customers_out > 0
            assert entry.store_id == 10

    def test_historical_covers_trailing_day(self):
        sim = OfflineSimulator(store_id=10, rng=random.Random(7))
        buckets = sim.historical(now=BASE.replace(minute=42))

        assert len(buckets) == 24
        assert buckets[-1].hour_start == BASE
        assert buckets[0].hour_start == BASE - timedelta(hours=23)
        for bucket in buckets:
            assert 5 <= bucket.customers_in <= 24
            assert 4 <= bucket.customers_out <= 21
            assert bucket.net_change == bucket.customers_in - bucket.customers_out

    def test_historical_hours_in_reporting_timezone(self):
        sim = OfflineSimulator(store_id=10, rng=random.Random(7))
        # 12:42 UTC is 08:42 in New York
        buckets = sim.historical(now=BASE.replace(minute=42), tz_name="America/New_York")

        assert buckets[-1].hour_start.hour == 8
        assert buckets[-1].hour_label == "08 AM"
        assert buckets[-1].hour_start == BASE
        assert buckets[0].hour_label == "09 AM"

    def test_historical_steps_through_dst_change(self):
        sim = OfflineSimulator(store_id=10, rng=random.Random(7))
        buckets = sim.historical(now=datetime(2026, 11, 1, 7, 15, tzinfo=timezone.utc),
                                 tz_name="America/New_York", hours=3)

        assert [b.hour_label for b in buckets] == ["01 AM", "01 AM", "02 AM"]
        assert [b.hour_start.utcoffset() for b in buckets] == [
            timedelta(hours=-4), timedelta(hours=-5), timedelta(hours=-5)]


class TestRender:
    def test_live_times_in_reporting_timezone(self):
        state = DashboardState()
        state.apply_live_event(TrafficEventOut(
            store_id=10, customers_in=2, customers_out=0,
            time_stamp=datetime(2026, 10, 19, 14, 30, 5, tzinfo=timezone.utc)))

        assert "10:30:05 AM" in render_dashboard(state, tz_name="America/New_York")
        assert "02:30:05 PM" in render_dashboard(state, tz_name="UTC")

    def test_empty_tables(self):
        text = render_dashboard(DashboardState(), tz_name="UTC")
        assert "(no events yet)" in text
        assert "(no hourly data)" in text
