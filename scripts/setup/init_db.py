"""
Initialize database — creates the customer traffic table.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from store_traffic.database import create_tables, engine
from store_traffic.config import settings


def main():
    print("🗄️  Store Traffic DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {engine.url.render_as_string(hide_password=True)}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except SQLAlchemyError as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  docker run -d -p 5432:5432 -e POSTGRES_USER=store_traffic \\")
        print("    -e POSTGRES_PASSWORD=store_traffic -e POSTGRES_DB=store_traffic postgres:16")
        print("  # or point DATABASE_URL at sqlite:///./store_traffic.db")
        sys.exit(1)

    # Create all tables
    print("\n📋 Creating tables...")
    create_tables()
    print("✅ All tables created")

    tables = inspect(engine).get_table_names()
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn store_traffic.main:app --host {settings.BACKEND_HOST} --port {settings.BACKEND_PORT}")


if __name__ == "__main__":
    main()
