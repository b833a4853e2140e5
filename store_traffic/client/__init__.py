# Store Traffic — dashboard client

from store_traffic.client.api import TrafficApiClient  # noqa
from store_traffic.client.dashboard import Dashboard  # noqa
from store_traffic.client.feed import FeedClient, FeedStatus, FeedSubscriptionError  # noqa
from store_traffic.client.state import ConnectionState, DashboardState  # noqa
