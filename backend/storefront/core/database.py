"""
PostgreSQL database access

This module centralizes every way of reaching the database:
- SQLAlchemy declarative Base (table declarations and schema creation)
- psycopg2 direct connections (raw SQL used by the repositories)

Author: Taksha Engineering
Updated: 2025-10-17
"""
import time
import logging
from functools import lru_cache

import psycopg2
from psycopg2.extras import RealDictCursor
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base

from .config import settings

logger = logging.getLogger(__name__)

# Seconds before a connection attempt is abandoned
CONNECTION_TIMEOUT = 10


def _database_url() -> str:
    database_url = settings.DATABASE_URL
    if not database_url:
        raise Exception("DATABASE_URL not configured")
    return database_url


# ============================================================================
# SQLAlchemy Configuration (schema declarations)
# ============================================================================

# Base for table models
Base = declarative_base()


@lru_cache(maxsize=1)
def get_engine():
    """
    Lazily build the SQLAlchemy engine.

    The engine is only needed to create the schema, so it is not built at
    import time (tests and tooling can import models without a database).
    """
    return create_engine(
        _database_url(),
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def init_db() -> None:
    """Create every table declared under storefront.models that does not exist yet"""
    # Importing the package registers all tables on Base.metadata
    import storefront.models  # noqa: F401

    logger.info("Creating database tables (if missing)")
    Base.metadata.create_all(bind=get_engine())


# ============================================================================
# psycopg2 Connections (raw SQL used by the repositories)
# ============================================================================

def get_db_connection_dict():
    """
    Open a connection whose cursors return rows as dictionaries

    Repositories own the connection for the duration of one method:

        conn = get_db_connection_dict()
        cursor = conn.cursor()
        try:
            cursor.execute("SELECT id, name FROM products WHERE id = %s", (product_id,))
            row = cursor.fetchone()  # {'id': 11, 'name': 'Brass Diya'}
        finally:
            cursor.close()
            conn.close()
    """
    return psycopg2.connect(
        _database_url(),
        cursor_factory=RealDictCursor,
        connect_timeout=CONNECTION_TIMEOUT,
    )


def connect_with_backoff(attempts: int = 3, base_delay: float = 1.0):
    """
    Connect to PostgreSQL, retrying OperationalError with exponential backoff

    Managed Postgres hosts drop idle SSL sessions; a fresh attempt after a
    short wait usually succeeds.

    Raises:
        psycopg2.OperationalError: Every attempt failed
    """
    database_url = _database_url()

    for attempt in range(1, attempts + 1):
        try:
            return psycopg2.connect(database_url, connect_timeout=CONNECTION_TIMEOUT)
        except psycopg2.OperationalError as e:
            logger.warning(f"Database connection attempt {attempt}/{attempts} failed: {e}")
            if attempt == attempts:
                raise
            delay = base_delay * (2 ** (attempt - 1))
            logger.info(f"Retrying database connection in {delay:.1f}s")
            time.sleep(delay)


def check_database() -> dict:
    """
    Connectivity probe used by the health endpoints

    Returns:
        Dict with status (connected/disconnected), latency_ms and error
    """
    started = time.time()

    try:
        conn = connect_with_backoff(attempts=2, base_delay=0.5)
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.fetchone()
            cursor.close()
        finally:
            conn.close()
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return {
            "status": "disconnected",
            "latency_ms": None,
            "error": str(e),
        }

    return {
        "status": "connected",
        "latency_ms": round((time.time() - started) * 1000, 2),
        "error": None,
    }
