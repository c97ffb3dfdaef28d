#!/usr/bin/env python3
"""
Database initialization script for new installations.
This script will:
1. Check the database connection
2. Create the records and identities tables if they don't exist
"""

import sys
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.db import DATABASE_URL, engine, init_db, table_exists

TABLES = ("records", "identities")


def main():
    """Main initialization function."""
    print("🔄 Database Initialization")
    print("=" * 50)
    print(f"Database URL: {DATABASE_URL}")

    try:
        init_db()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection successful")
    except SQLAlchemyError as e:
        print(f"❌ Database error: {e}")
        sys.exit(1)

    missing = [name for name in TABLES if not table_exists(name)]
    if missing:
        print(f"❌ Missing tables: {', '.join(missing)}")
        sys.exit(1)

    for name in TABLES:
        print(f"✅ {name} table ready")
    print("\n✅ Database initialization completed successfully!")


if __name__ == "__main__":
    main()
