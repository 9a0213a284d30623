"""Application ports package."""

from .database import DatabaseEnginePort
from .identity import AuthChangeCallback, AuthIdentity, IdentityPort
from .local_cache import LocalCachePort, cache_key
from .persistence import (
    CATEGORIES_COLLECTION,
    TRANSACTIONS_COLLECTION,
    USER_ID_FIELD,
    Document,
    PersistencePort,
    Subscription,
)

__all__ = [
    "AuthChangeCallback",
    "AuthIdentity",
    "IdentityPort",
    "DatabaseEnginePort",
    "LocalCachePort",
    "cache_key",
    "CATEGORIES_COLLECTION",
    "TRANSACTIONS_COLLECTION",
    "USER_ID_FIELD",
    "Document",
    "PersistencePort",
    "Subscription",
]
