"""
Database setup using SQLAlchemy.

PostgreSQL in deployment; SQLite is accepted for local development and
tests.
"""

import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from config import settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Build engine
# ---------------------------------------------------------------------------

if settings.is_sqlite:
    logger.info("Using SQLite backend (local development)")
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=settings.DEBUG,
    )
else:
    logger.info("Using PostgreSQL backend")
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,       # Auto-reconnect stale connections
        pool_size=3,
        max_overflow=5,
        pool_timeout=10,
        pool_recycle=120,
        echo=settings.DEBUG,
    )


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables if they don't exist."""
    from models import Consultation, TriageDraft
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created / verified.")
