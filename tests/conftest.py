"""Shared fixtures: an isolated in-memory SQLite database per test."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before store_traffic.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", os.path.join(os.path.dirname(__file__), "..", "logs"))

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from store_traffic.database import Base, create_tables
from store_traffic.models.traffic_event import TrafficEvent


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def add_event(db):
    def _add(time_stamp: datetime, customers_in: int = 1, customers_out: int = 0, store_id: int = 10):
        event = TrafficEvent(store_id=store_id, customers_in=customers_in,
                             customers_out=customers_out, time_stamp=time_stamp)
        db.add(event)
        db.commit()
        return event
    return _add
