"""
Dependency injection for API endpoints.
"""
import logging
from typing import Generator, Optional

from fastapi import Request

from racketrank.core import database
from racketrank.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def get_db() -> Generator:
    """
    Database dependency that ensures proper session cleanup.
    """
    if not database.is_configured():
        logger.error("Profile store requested but DATABASE_URL is not set")
        raise ConfigurationError("DATABASE_URL is not set")

    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_client_ip(request: Request) -> Optional[str]:
    """Originating client address, honouring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
