# store_traffic/client/render.py
"""Plain-text rendering of the dashboard tables."""

from store_traffic.client.state import DashboardState
from store_traffic.config import settings
from store_traffic.utils.clock import in_zone


def render_dashboard(state: DashboardState, store_label: str = "", tz_name: str = None) -> str:
    tz_name = tz_name or settings.REPORT_TIMEZONE
    lines = [
        "=" * 60,
        f" Store Traffic Dashboard {store_label}".rstrip(),
        f" Status: {state.status_label}",
        f" Total customers in store: {state.total_customers}",
        "=" * 60,
        "",
        " Live traffic",
        f" {'Store':>6} {'In':>4} {'Out':>4}  Time",
    ]
    if not state.live:
        lines.append("   (no events yet)")
    for event in state.live:
        lines.append(
            f" {event.store_id:>6} {event.customers_in:>4} {event.customers_out:>4}  "
            f"{in_zone(event.time_stamp, tz_name).strftime('%I:%M:%S %p')}"
        )

    lines += ["", " Last 24 hours", f" {'Hour':>6} {'In':>4} {'Out':>4} {'Net':>5}"]
    if not state.hourly:
        lines.append("   (no hourly data)")
    for bucket in state.hourly:
        lines.append(
            f" {bucket.hour_label:>6} {bucket.customers_in:>4} {bucket.customers_out:>4} "
            f"{bucket.net_change:>+5}"
        )
    return "\n".join(lines)
