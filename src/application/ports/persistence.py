"""Port for the external document store.

Collections are scoped per user through an equality filter on
``USER_ID_FIELD``. Subscriptions deliver the full matching set on every
change, in no particular order.
"""

from collections.abc import Callable
from typing import Any, Protocol

TRANSACTIONS_COLLECTION = "transactions"
CATEGORIES_COLLECTION = "categories"
USER_ID_FIELD = "userId"

Document = dict[str, Any]
SnapshotCallback = Callable[[list[Document]], None]
ErrorCallback = Callable[[Exception], None]


class Subscription(Protocol):
    """Handle to a live subscription."""

    def cancel(self) -> None:
        """Stop delivering updates; calling it twice is harmless."""


class PersistencePort(Protocol):
    """Port exposing document writes and change subscriptions."""

    async def connect(self) -> None:
        """Open the client handle."""

    async def dispose(self) -> None:
        """Release the client handle."""

    async def create(self, collection: str, document: Document) -> str:
        """Store a document and return its identifier."""

    async def delete(self, collection: str, document_id: str) -> None:
        """Remove a document by identifier."""

    def subscribe(
        self,
        collection: str,
        field: str,
        value: Any,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Subscription:
        """Deliver every document where ``field == value`` on each change.

        Each delivered document carries its identifier under ``"id"``.
        """


__all__ = [
    "TRANSACTIONS_COLLECTION",
    "CATEGORIES_COLLECTION",
    "USER_ID_FIELD",
    "Document",
    "SnapshotCallback",
    "ErrorCallback",
    "Subscription",
    "PersistencePort",
]
