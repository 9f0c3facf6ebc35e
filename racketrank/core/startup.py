"""
Application startup and shutdown logic for the RacketRank API.
"""
import logging
from sqlalchemy import text

from racketrank.core import database
from racketrank.core.database import Base

# Register models on the metadata before create_all
from racketrank.models import cache, profile  # noqa: F401

logger = logging.getLogger(__name__)


def initialize_database() -> None:
    """Initialize database tables and warm up connection pool."""
    if not database.is_configured():
        # Keep serving; every rankings request answers with a configuration error
        logger.error("DATABASE_URL is not set - rankings endpoints will return 500")
        return

    try:
        # Create profile and cache tables
        Base.metadata.create_all(bind=database.engine)
        logger.info("Database tables created/verified")

        # Warm up the connection pool
        with database.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection pool initialized")

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


def shutdown_database() -> None:
    """Clean up database connections."""
    if database.engine is None:
        return
    try:
        database.engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during database shutdown: {e}")
        # Don't re-raise during shutdown
