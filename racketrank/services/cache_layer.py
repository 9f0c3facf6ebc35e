"""
Expiring key/value caches.

An entry is fresh while expires_at > now. Expired entries are reported as
absent but never deleted here; the next upsert overwrites them.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything is written in UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def age_seconds(updated_at: datetime, now: datetime) -> int:
    return max(0, round((now - as_utc(updated_at)).total_seconds()))


class CacheLayer:
    """
    Database-backed cache: one row per key with updated_at/expires_at columns.

    Args:
        db: Session used for reads and writes
        model: Mapped class holding the cached rows
        key_column: Name of the primary key attribute on the model
        ttl: Default lifetime for upserted entries
        clock: Returns the current UTC time
    """

    def __init__(
        self,
        db: Session,
        model,
        key_column: str,
        ttl: timedelta,
        clock: Callable[[], datetime] = utcnow
    ):
        self.db = db
        self.model = model
        self.key_column = key_column
        self.ttl = ttl
        self.clock = clock

    @property
    def _key(self):
        return getattr(self.model, self.key_column)

    def get_fresh(self, key: str):
        """Return the row for key if it has not expired, else None."""
        try:
            return self.db.query(self.model).filter(
                self._key == key,
                self.model.expires_at > self.clock()
            ).first()
        except Exception as e:
            logger.error(f"Error reading {self.model.__tablename__} cache: {e}")
            self.db.rollback()
            return None

    def upsert(self, key: str, ttl: Optional[timedelta] = None, **values: Any) -> bool:
        """
        Insert or overwrite the row for key, resetting updated_at and expires_at.

        A value named "x" is written through the model's set_x() when it has one.
        Returns False when the write failed; cache writes never fail a request.
        """
        now = self.clock()
        try:
            entry = self.db.query(self.model).filter(self._key == key).first()
            if entry is None:
                entry = self.model(**{self.key_column: key})
                self.db.add(entry)

            for name, value in values.items():
                setter = getattr(entry, f"set_{name}", None)
                if callable(setter):
                    setter(value)
                else:
                    setattr(entry, name, value)

            entry.updated_at = now
            entry.expires_at = now + (ttl or self.ttl)
            self.db.commit()
            return True

        except Exception as e:
            # Typically a concurrent insert of the same key; the other write wins
            logger.error(f"Error storing to {self.model.__tablename__} cache: {e}")
            self.db.rollback()
            return False

    def stats(self) -> Dict[str, int]:
        """Total rows versus rows that are still fresh."""
        key = self._key
        return {
            "total_entries": self.db.query(func.count(key)).scalar() or 0,
            "fresh_entries": self.db.query(func.count(key)).filter(
                self.model.expires_at > self.clock()
            ).scalar() or 0,
        }


class MemoryCacheLayer:
    """In-process cache with the same get_fresh/upsert contract."""

    def __init__(
        self,
        ttl: timedelta,
        clock: Callable[[], datetime] = utcnow,
        max_entries: int = 50
    ):
        self.ttl = ttl
        self.clock = clock
        self.max_entries = max_entries
        self._entries: Dict[str, Tuple[Any, datetime, datetime]] = {}

    def get_fresh(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, _, expires_at = entry
        if expires_at <= self.clock():
            return None
        return value

    def updated_at(self, key: str) -> Optional[datetime]:
        entry = self._entries.get(key)
        return entry[1] if entry else None

    def upsert(self, key: str, value: Any, ttl: Optional[timedelta] = None) -> None:
        now = self.clock()
        self._entries[key] = (value, now, now + (ttl or self.ttl))

        # Keep the map bounded: drop whatever expires first
        if len(self._entries) > self.max_entries:
            oldest_key = min(self._entries, key=lambda k: self._entries[k][2])
            del self._entries[oldest_key]

    def clear(self) -> None:
        self._entries.clear()
