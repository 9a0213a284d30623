"""Database ports for the finance tracker.

This module defines the application-layer protocol for accessing the
database engine behind the local cache. Infrastructure implementations are
expected to provide concrete adapters that satisfy this port.
"""

from typing import Protocol

from sqlalchemy.engine import Engine


class DatabaseEnginePort(Protocol):
    """Port exposing the local cache database engine."""

    def get_cache_engine(self) -> Engine:
        """Get the engine for the local cache database.

        Returns:
            Engine: SQLAlchemy engine connected to the cache storage.
        """

    def dispose(self) -> None:
        """Close pooled connections of the engine."""


__all__ = ["DatabaseEnginePort"]
