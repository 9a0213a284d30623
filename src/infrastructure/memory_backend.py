"""In-process identity and document store collaborators.

Both adapters keep everything in memory and report failures with the same
error codes a hosted backend uses (``auth/wrong-password``,
``permission-denied``...), so the error translation path is exercised.
"""

from copy import deepcopy
from dataclasses import dataclass, replace
from typing import Any
from uuid import uuid4

from src.application.ports.identity import (
    AuthChangeCallback,
    AuthIdentity,
    IdentityPort,
)
from src.application.ports.persistence import (
    Document,
    ErrorCallback,
    PersistencePort,
    SnapshotCallback,
)
from src.infrastructure.logging.logger import get_app_logger


MIN_BACKEND_PASSWORD_LENGTH = 6
NOT_CONNECTED_ERROR = "network-request-failed: client not connected"


class MemoryBackendError(RuntimeError):
    """Failure raised by the in-memory collaborators.

    The message is the backend error code.
    """


class _CallbackSubscription:
    """Subscription removing a callback entry from a registry list."""

    def __init__(self, registry: list, entry) -> None:
        self._registry = registry
        self._entry = entry

    def cancel(self) -> None:
        if self._entry in self._registry:
            self._registry.remove(self._entry)


@dataclass(frozen=True)
class _Account:
    uid: str
    email: str
    password: str
    display_name: str | None = None
    photo_url: str | None = None

    def identity(self) -> AuthIdentity:
        return AuthIdentity(
            uid=self.uid,
            email=self.email,
            display_name=self.display_name,
            photo_url=self.photo_url,
        )


class InMemoryIdentityClient(IdentityPort):
    """Identity collaborator keeping accounts in a dictionary."""

    def __init__(self, logger=None) -> None:
        """Initialize the client.

        Args:
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._accounts: dict[str, _Account] = {}
        self._current_email: str | None = None
        self._listeners: list[AuthChangeCallback] = []
        self._connected = False
        self._logger = logger or get_app_logger()

    @property
    def current_identity(self) -> AuthIdentity | None:
        if self._current_email is None:
            return None
        return self._accounts[self._current_email].identity()

    async def connect(self) -> None:
        self._connected = True

    async def dispose(self) -> None:
        self._connected = False
        self._listeners.clear()

    async def sign_in(self, email: str, password: str) -> AuthIdentity:
        """Authenticate against the stored accounts.

        Raises:
            MemoryBackendError: ``auth/invalid-email``, ``auth/user-not-found``
                or ``auth/wrong-password``.
        """
        self._ensure_connected()
        key = self._normalize_email(email)
        account = self._accounts.get(key)
        if account is None:
            raise MemoryBackendError("auth/user-not-found")
        if account.password != password:
            raise MemoryBackendError("auth/wrong-password")
        self._current_email = key
        self._emit()
        return account.identity()

    async def sign_up(self, email: str, password: str) -> AuthIdentity:
        """Create an account and sign it in.

        Raises:
            MemoryBackendError: ``auth/invalid-email``,
                ``auth/email-already-in-use`` or ``auth/weak-password``.
        """
        self._ensure_connected()
        key = self._normalize_email(email)
        if key in self._accounts:
            raise MemoryBackendError("auth/email-already-in-use")
        too_short = (
            not isinstance(password, str)
            or len(password) < MIN_BACKEND_PASSWORD_LENGTH
        )
        if too_short:
            raise MemoryBackendError("auth/weak-password")
        account = _Account(uid=uuid4().hex, email=key, password=password)
        self._accounts[key] = account
        self._current_email = key
        self._logger.info(f"In-memory account created: uid={account.uid}")
        self._emit()
        return account.identity()

    async def sign_out(self) -> None:
        self._ensure_connected()
        if self._current_email is None:
            return
        self._current_email = None
        self._emit()

    async def update_profile(
        self,
        display_name: str | None = None,
        photo_url: str | None = None,
    ) -> None:
        """Update the signed-in account.

        Raises:
            MemoryBackendError: ``permission-denied`` when nobody is signed in.
        """
        self._ensure_connected()
        if self._current_email is None:
            raise MemoryBackendError("permission-denied")
        account = self._accounts[self._current_email]
        self._accounts[self._current_email] = replace(
            account,
            display_name=(
                display_name
                if display_name is not None
                else account.display_name
            ),
            photo_url=photo_url if photo_url is not None else account.photo_url,
        )

    def on_auth_change(
        self,
        callback: AuthChangeCallback,
    ) -> _CallbackSubscription:
        self._listeners.append(callback)
        callback(self.current_identity)
        return _CallbackSubscription(self._listeners, callback)

    def _emit(self) -> None:
        identity = self.current_identity
        for listener in list(self._listeners):
            listener(identity)

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise MemoryBackendError(NOT_CONNECTED_ERROR)

    @staticmethod
    def _normalize_email(email: str) -> str:
        if not isinstance(email, str) or "@" not in email.strip():
            raise MemoryBackendError("auth/invalid-email")
        return email.strip().lower()


@dataclass(frozen=True, eq=False)
class _Watch:
    collection: str
    field: str
    value: Any
    on_snapshot: SnapshotCallback
    on_error: ErrorCallback | None


class InMemoryDocumentStore(PersistencePort):
    """Document store keeping collections in dictionaries.

    Every write re-delivers the full filtered set to matching watches.
    """

    def __init__(self, logger=None) -> None:
        """Initialize the store.

        Args:
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._collections: dict[str, dict[str, Document]] = {}
        self._watches: list[_Watch] = []
        self._connected = False
        self._logger = logger or get_app_logger()

    async def connect(self) -> None:
        self._connected = True

    async def dispose(self) -> None:
        self._connected = False
        self._watches.clear()

    async def create(self, collection: str, document: Document) -> str:
        """Store a copy of the document under a new identifier."""
        self._ensure_connected()
        document_id = uuid4().hex
        stored = deepcopy(document)
        stored.pop("id", None)
        self._collections.setdefault(collection, {})[document_id] = stored
        self._publish(collection)
        return document_id

    async def delete(self, collection: str, document_id: str) -> None:
        """Remove a document; deleting a missing document is a no-op."""
        self._ensure_connected()
        removed = self._collections.get(collection, {}).pop(document_id, None)
        if removed is not None:
            self._publish(collection)

    def subscribe(
        self,
        collection: str,
        field: str,
        value: Any,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> _CallbackSubscription:
        watch = _Watch(collection, field, value, on_snapshot, on_error)
        self._watches.append(watch)
        self._deliver(watch)
        return _CallbackSubscription(self._watches, watch)

    def documents(self, collection: str) -> list[Document]:
        """Return copies of every document in a collection."""
        return [
            {"id": document_id, **deepcopy(document)}
            for document_id, document in self._collections.get(
                collection, {}
            ).items()
        ]

    def _publish(self, collection: str) -> None:
        for watch in list(self._watches):
            if watch.collection == collection:
                self._deliver(watch)

    def _deliver(self, watch: _Watch) -> None:
        matching = [
            document
            for document in self.documents(watch.collection)
            if document.get(watch.field) == watch.value
        ]
        try:
            watch.on_snapshot(matching)
        except Exception as exc:
            if watch.on_error is None:
                raise
            self._logger.error(
                f"Snapshot listener failed for {watch.collection}: {exc}"
            )
            watch.on_error(exc)

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise MemoryBackendError(NOT_CONNECTED_ERROR)


__all__ = [
    "MemoryBackendError",
    "InMemoryIdentityClient",
    "InMemoryDocumentStore",
]
