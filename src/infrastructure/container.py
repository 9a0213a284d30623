"""Composition root for wiring infrastructure adapters."""

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.identity import IdentityPort
from src.application.ports.local_cache import LocalCachePort
from src.application.ports.persistence import PersistencePort
from src.application.use_cases.session_store import SessionStore
from src.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from src.infrastructure.local_cache import SqlAlchemyLocalCache
from src.infrastructure.logging.logger import get_app_logger, get_audit_logger
from src.infrastructure.memory_backend import (
    InMemoryDocumentStore,
    InMemoryIdentityClient,
)
from src.infrastructure.settings import FinanceSettings


def build_database_adapter(
    settings: FinanceSettings | None = None,
) -> DatabaseEnginePort:
    """Return the database adapter for the local cache."""
    resolved = settings or FinanceSettings.from_env()
    if not resolved.cache_url:
        raise RuntimeError("Local cache requires a FINANCE_CACHE_URL value.")
    return SqlAlchemyDatabaseEngineAdapter(resolved.cache_url)


def build_local_cache(
    db_port: DatabaseEnginePort | None = None,
    settings: FinanceSettings | None = None,
) -> LocalCachePort:
    """Return the SQLAlchemy-backed local snapshot cache."""
    resolved_db = db_port or build_database_adapter(settings)
    return SqlAlchemyLocalCache(resolved_db)


def build_session_store(
    identity: IdentityPort | None = None,
    persistence: PersistencePort | None = None,
    cache: LocalCachePort | None = None,
    settings: FinanceSettings | None = None,
) -> SessionStore:
    """Return a session store wired to its collaborators.

    Identity and persistence default to the in-memory adapters; hosted
    backends are injected by the caller.
    """
    resolved = settings or FinanceSettings.from_env()
    logger = get_app_logger()
    return SessionStore(
        identity=identity or InMemoryIdentityClient(logger=logger),
        persistence=persistence or InMemoryDocumentStore(logger=logger),
        cache=cache or build_local_cache(settings=resolved),
        initial_balance_offset=resolved.initial_balance_offset,
        cache_namespace=resolved.cache_namespace,
        logger=logger,
        audit_logger=get_audit_logger(),
    )


__all__ = [
    "build_database_adapter",
    "build_local_cache",
    "build_session_store",
]
