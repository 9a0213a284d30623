"""Database infrastructure for the finance tracker.

This module exposes concrete helpers to create and reuse the SQLAlchemy
engine behind the local snapshot cache. It belongs to the infrastructure
layer because it deals with an external system (the cache database).
"""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url

from src.application.ports.database import DatabaseEnginePort


def _create_engine(db_url: str) -> Engine:
    """Create a configured SQLAlchemy engine.

    SQLite file databases get their parent directory created first.

    Args:
        db_url: Fully qualified database URL.

    Returns:
        Engine: A SQLAlchemy engine with health checks enabled.
    """
    url = make_url(db_url)
    if url.get_backend_name() == "sqlite" and url.database not in (
        None,
        "",
        ":memory:",
    ):
        database_path = Path(url.database).expanduser()
        database_path.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(db_url, pool_pre_ping=True, future=True)


class SqlAlchemyDatabaseEngineAdapter(DatabaseEnginePort):
    """DatabaseEnginePort implementation backed by a lazily created engine.

    The adapter hides configuration details behind the port so the cache
    adapter depends only on the protocol.
    """

    def __init__(self, db_url: str) -> None:
        """Initialize the adapter.

        Args:
            db_url: SQLAlchemy URL of the cache database.
        """
        self._db_url = db_url
        self._engine: Engine | None = None

    def get_cache_engine(self) -> Engine:
        """Get the engine for the local cache database.

        Returns:
            Engine: SQLAlchemy engine, created on first use.
        """
        if self._engine is None:
            self._engine = _create_engine(self._db_url)
        return self._engine

    def dispose(self) -> None:
        """Close pooled connections."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None


__all__ = ["SqlAlchemyDatabaseEngineAdapter"]
