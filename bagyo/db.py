"""Database configuration and helpers for Bagyo Watch."""

from __future__ import annotations

import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

DATABASE_URL = os.getenv("BAGYO_DB_URL", "sqlite:///./bagyo.db")

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

logger = logging.getLogger("bagyo.db")


def init_db() -> None:
    """Create database tables if they do not exist."""

    import bagyo.db_models  # noqa: F401 - models are imported for side effects

    Base.metadata.create_all(bind=engine)
    logger.debug("Database tables ensured at %s", DATABASE_URL)
