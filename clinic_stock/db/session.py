"""Database session management for Clinic Stock.

This module provides SQLAlchemy engine and session factory configured
from clinic_stock.core.config settings.
"""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clinic_stock.core.config import get_settings
from clinic_stock.db.models import Base

# Create engine from settings
_settings = get_settings()
_connect_args = {"check_same_thread": False} if _settings.database_url.startswith("sqlite") else {}
engine = create_engine(
    _settings.database_url,
    pool_pre_ping=True,  # Verify connections before using
    connect_args=_connect_args,
    echo=False,  # Set to True for SQL debug logging
)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)


def init_db() -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(engine)
