"""
Database configuration and engine setup for VendorGate
"""

import logging
import os
from sqlalchemy import create_engine, inspect
from sqlmodel import SQLModel

logger = logging.getLogger(__name__)

# Database URL configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/app.db")

# Create engine
if DATABASE_URL.startswith("sqlite"):
    # SQLite specific configuration
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=False  # Set to True for SQL debugging
    )
else:
    # PostgreSQL/other databases
    engine = create_engine(DATABASE_URL, echo=False)


def table_exists(table_name: str, bind=None) -> bool:
    """Check if a table exists in the database."""
    return table_name in inspect(bind or engine).get_table_names()


def init_db(bind=None) -> None:
    """
    Initialize the database by creating all tables.
    This should be called once at application startup.
    """
    bind = bind or engine
    # Ensure the data directory exists for SQLite
    url = str(bind.url)
    if url.startswith("sqlite:///") and url != "sqlite:///:memory:":
        data_dir = os.path.dirname(url.replace("sqlite:///", ""))
        if data_dir:
            os.makedirs(data_dir, exist_ok=True)

    # Import models so their tables are registered on the metadata
    from app import models  # noqa: F401

    SQLModel.metadata.create_all(bind)
    logger.info("Database initialized: %s", url)
