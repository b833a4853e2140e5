# store_traffic/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy; PostgreSQL in production, SQLite for local runs and tests.
All models are auto-imported here so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from store_traffic.config import settings


def _engine_options(url: str) -> dict:
    options = {
        "pool_pre_ping": True,   # Auto-reconnect if DB connection drops
        "echo": False,           # Set True to log all SQL queries (debug only)
    }
    if url.startswith("sqlite"):
        # Sessions are used from the event loop thread and request worker threads
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(pool_size=10, max_overflow=20)
    return options


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ping(db) -> None:
    """Round-trip to the database. Raises SQLAlchemyError when unreachable."""
    db.execute(text("SELECT 1"))


def create_tables(bind=None):
    """
    Creates all DB tables. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from store_traffic.models.traffic_event import TrafficEvent  # noqa

    Base.metadata.create_all(bind=bind or engine)
