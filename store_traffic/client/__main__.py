"""
Terminal dashboard.
Usage: python -m store_traffic.client [--api-url URL] [--feed-url URL] [--grace SECONDS]
"""

import argparse
import asyncio
from store_traffic.client.api import TrafficApiClient
from store_traffic.client.dashboard import Dashboard
from store_traffic.client.feed import FeedClient
from store_traffic.config import settings


async def main(args):
    api = TrafficApiClient(args.api_url)
    if not await api.check_status():
        print(f"⚠️  API not reachable at {api.base_url}, waiting for live feed...")
    dashboard = Dashboard(api, FeedClient(args.feed_url), grace_seconds=args.grace)
    try:
        await dashboard.run(duration=args.duration)
    finally:
        await api.aclose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Live store traffic dashboard")
    parser.add_argument("--api-url", default=settings.API_URL)
    parser.add_argument("--feed-url", default=settings.FEED_URL)
    parser.add_argument("--grace", type=float, default=settings.OFFLINE_GRACE_SECONDS,
                        help="Seconds without data before switching to offline simulation")
    parser.add_argument("--duration", type=float, default=None,
                        help="Stop after this many seconds (runs forever by default)")
    try:
        asyncio.run(main(parser.parse_args()))
    except KeyboardInterrupt:
        print("\n🛑 Dashboard stopped")
