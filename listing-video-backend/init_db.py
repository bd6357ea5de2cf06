#!/usr/bin/env python3
"""
Creates the listing video tables (jobs, properties, scripts, videos, settings).
Run once before starting the API or a worker; existing tables are left alone.
"""

import sys
from database import engine, Base
import models  # noqa: F401  registers every table on Base.metadata

def init_database():
    """Initialize the database by creating all tables."""
    try:
        print("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        print("✅ Database tables created successfully!")
    except Exception as e:
        print(f"❌ Error creating database tables: {e}")
        sys.exit(1)

if __name__ == "__main__":
    init_database()
