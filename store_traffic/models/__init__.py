# Store Traffic — Database Models
# Import all models here for SQLAlchemy discovery

from store_traffic.models.traffic_event import TrafficEvent  # noqa
