"""Local snapshot cache backed by SQLAlchemy."""

from datetime import datetime, timezone

from sqlalchemy import text

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.local_cache import LocalCachePort


CREATE_LOCAL_CACHE_SQL = """
CREATE TABLE IF NOT EXISTS local_cache (
    cache_key TEXT PRIMARY KEY,
    cache_value BLOB NOT NULL,
    updated_at TEXT NOT NULL
)
"""

SELECT_VALUE_SQL = text(
    "SELECT cache_value FROM local_cache WHERE cache_key = :cache_key"
)

DELETE_VALUE_SQL = text("DELETE FROM local_cache WHERE cache_key = :cache_key")

INSERT_VALUE_SQL = text(
    """
    INSERT INTO local_cache (cache_key, cache_value, updated_at)
    VALUES (:cache_key, :cache_value, :updated_at)
    """
)


class SqlAlchemyLocalCache(LocalCachePort):
    """Key-value byte-string cache stored in a single table."""

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        """Initialize the cache adapter.

        Args:
            db_port: Port providing access to the cache engine.
        """
        self._db_port = db_port
        self._prepared = False

    def prepare(self) -> None:
        """Ensure the cache table exists."""
        engine = self._db_port.get_cache_engine()
        with engine.begin() as conn:
            conn.exec_driver_sql(CREATE_LOCAL_CACHE_SQL)
        self._prepared = True

    def get(self, key: str) -> bytes | None:
        """Return the stored value for a key.

        Args:
            key: Cache key.

        Returns:
            bytes | None: Stored bytes, or None when missing.
        """
        self._ensure_prepared()
        engine = self._db_port.get_cache_engine()
        with engine.connect() as conn:
            row = conn.execute(SELECT_VALUE_SQL, {"cache_key": key}).first()
        if row is None:
            return None
        return bytes(row.cache_value)

    def set(self, key: str, value: bytes) -> None:
        """Store or replace the value for a key.

        Args:
            key: Cache key.
            value: Bytes to store.
        """
        self._ensure_prepared()
        engine = self._db_port.get_cache_engine()
        with engine.begin() as conn:
            conn.execute(DELETE_VALUE_SQL, {"cache_key": key})
            conn.execute(
                INSERT_VALUE_SQL,
                {
                    "cache_key": key,
                    "cache_value": bytes(value),
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                },
            )

    def delete(self, key: str) -> None:
        """Remove the value for a key if present."""
        self._ensure_prepared()
        engine = self._db_port.get_cache_engine()
        with engine.begin() as conn:
            conn.execute(DELETE_VALUE_SQL, {"cache_key": key})

    def dispose(self) -> None:
        """Close the pooled connections of the cache database."""
        self._db_port.dispose()
        self._prepared = False

    def _ensure_prepared(self) -> None:
        if not self._prepared:
            self.prepare()


__all__ = [
    "SqlAlchemyLocalCache",
    "CREATE_LOCAL_CACHE_SQL",
    "SELECT_VALUE_SQL",
    "DELETE_VALUE_SQL",
    "INSERT_VALUE_SQL",
]
