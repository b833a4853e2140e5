# scripts/test/watch_feed.py
"""
Prints every message from the live traffic feed until interrupted.
Usage: python scripts/test/watch_feed.py [--url ws://localhost:8080/api/v1/ws/traffic]
"""

import sys
import os
import argparse
import asyncio
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from store_traffic.client.feed import FeedClient
from store_traffic.config import settings


async def watch(url: str):
    async def show(event):
        print(f"📥 store={event.store_id} in={event.customers_in} "
              f"out={event.customers_out} at {event.time_stamp.isoformat()}")

    feed = FeedClient(url)
    token = feed.subscribe(show, on_status=lambda status: print(f"🔌 feed {status.value}"))
    try:
        await asyncio.Event().wait()
    finally:
        await feed.unsubscribe(token)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Watch the live traffic feed")
    parser.add_argument("--url", default=settings.FEED_URL)
    args = parser.parse_args()
    try:
        asyncio.run(watch(args.url))
    except KeyboardInterrupt:
        print("\n🛑 Stopped")
