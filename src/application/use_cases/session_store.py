"""Session and transaction store.

The store owns the in-memory collections of an authenticated session. Every
mutation is sanitized and validated before it reaches the persistence
collaborator, local collections change only after the collaborator accepted
the write, and every change of the transaction collection recomputes the
derived aggregates.

Collections delivered by the persistence collaborator replace the local ones
wholesale ("replace and recompute"). The local cache only seeds the
transaction list until the first delivery arrives.
Cache writes are coalesced and stored from a worker thread, so the event
loop never waits on the cache database.
"""

import asyncio
import json
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

from src.application.ports.identity import AuthIdentity, IdentityPort
from src.application.ports.local_cache import LocalCachePort, cache_key
from src.application.ports.persistence import (
    CATEGORIES_COLLECTION,
    TRANSACTIONS_COLLECTION,
    USER_ID_FIELD,
    Document,
    PersistencePort,
    Subscription,
)
from src.domain.constants import DEFAULT_USER_NAME, EXPENSE
from src.domain.errors import (
    BackendError,
    UnauthenticatedError,
    ValidationError,
)
from src.domain.models import (
    Category,
    FinancialSnapshot,
    Notification,
    Transaction,
    UserProfile,
    ValidationResult,
)
from src.domain.policies import to_user_message
from src.domain.services import (
    build_financial_snapshot,
    coerce_datetime,
    sanitize_input,
    validate_category,
    validate_password,
    validate_transaction,
    validate_user_name,
)
from src.infrastructure.logging.logger import get_app_logger, get_audit_logger
from src.utils.decimal_utils import coerce_decimal, format_amount


SESSION_LOGGED_OUT = "logged_out"
SESSION_AUTHENTICATING = "authenticating"
SESSION_AUTHENTICATED = "authenticated"

DEFAULT_CACHE_NAMESPACE = "financas_transactions"

EMPTY_PROFILE = UserProfile(name="", email="", avatar=None)


class SessionStore:
    """Reactive state for one user session.

    States move ``logged_out -> authenticating -> authenticated`` on login
    or registration and back to ``logged_out`` on failure, logout, or when
    the identity collaborator reports that nobody is signed in.
    """

    def __init__(
        self,
        identity: IdentityPort,
        persistence: PersistencePort,
        cache: LocalCachePort | None = None,
        *,
        initial_balance_offset: Decimal = Decimal("0"),
        cache_namespace: str = DEFAULT_CACHE_NAMESPACE,
        logger=None,
        audit_logger=None,
    ) -> None:
        """Initialize the store.

        Args:
            identity: Identity collaborator client.
            persistence: Document store client.
            cache: Optional best-effort local snapshot cache.
            initial_balance_offset: Funds held outside the recorded history.
            cache_namespace: Namespace prefix of local cache keys.
            logger: Optional logger compatible with logging.Logger-like API.
            audit_logger: Optional logger for session lifecycle events.
        """
        self._identity = identity
        self._persistence = persistence
        self._cache = cache
        self._cache_namespace = cache_namespace
        self._logger = logger or get_app_logger()
        self._offset = coerce_decimal(initial_balance_offset)
        if not self._offset.is_finite():
            self._logger.warning(
                f"Invalid initial balance offset {initial_balance_offset!r}; using 0"
            )
            self._offset = Decimal("0")
        self._audit_logger = audit_logger or get_audit_logger()

        self._state = SESSION_LOGGED_OUT
        self._uid: str | None = None
        self._user = EMPTY_PROFILE
        self._transactions: tuple[Transaction, ...] = ()
        self._categories: tuple[Category, ...] = ()
        self._notifications: tuple[Notification, ...] = ()
        self._snapshot = build_financial_snapshot((), self._offset)
        self._auth_subscription: Subscription | None = None
        self._data_subscriptions: list[Subscription] = []
        self._received_transactions = False
        # Bumped whenever a session starts or ends; late results compare it.
        self._generation = 0
        self._listeners: list[Callable[[], None]] = []
        self._pending_cache_entry: tuple[str, bytes] | None = None
        self._cache_writer: asyncio.Task | None = None

    @property
    def state(self) -> str:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state == SESSION_AUTHENTICATED

    @property
    def user(self) -> UserProfile:
        return self._user

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._transactions

    @property
    def categories(self) -> tuple[Category, ...]:
        return self._categories

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return self._notifications

    @property
    def unread_notification_count(self) -> int:
        return sum(1 for notification in self._notifications if not notification.read)

    @property
    def snapshot(self) -> FinancialSnapshot:
        return self._snapshot

    @property
    def initial_balance_offset(self) -> Decimal:
        return self._offset

    @property
    def income(self) -> Decimal:
        return self._snapshot.summary.income

    @property
    def expense(self) -> Decimal:
        return self._snapshot.summary.expense

    @property
    def balance(self) -> Decimal:
        return self._snapshot.summary.balance

    def add_listener(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback run after every state change.

        Args:
            callback: Zero-argument callable.

        Returns:
            Callable[[], None]: Function removing the listener.
        """
        self._listeners.append(callback)

        def _remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _remove

    async def connect(self) -> None:
        """Connect the collaborators and follow identity changes."""
        await self._identity.connect()
        await self._persistence.connect()
        self._auth_subscription = self._identity.on_auth_change(
            self._handle_auth_change
        )
        self._logger.info("Session store connected")

    async def dispose(self) -> None:
        """Drop local state, stop subscriptions and release collaborators."""
        if self._auth_subscription is not None:
            self._auth_subscription.cancel()
            self._auth_subscription = None
        self._clear_session()
        await self.flush_cache()
        if self._cache is not None:
            self._cache.dispose()
        await self._persistence.dispose()
        await self._identity.dispose()
        self._logger.info("Session store disposed")

    async def flush_cache(self) -> None:
        """Wait until pending local cache writes are stored."""
        while self._cache_writer is not None and not self._cache_writer.done():
            await self._cache_writer

    async def login(self, email: str, password: str) -> UserProfile:
        """Authenticate an existing user.

        Args:
            email: Account email.
            password: Account password.

        Returns:
            UserProfile: Profile of the authenticated user.

        Raises:
            BackendError: If the identity collaborator rejects the attempt.
        """
        self._begin_authentication()
        try:
            identity = await self._identity.sign_in(email, password)
        except Exception as exc:
            raise self._authentication_failed("sign in", exc) from exc
        self._activate(identity)
        self._audit_logger.info(f"User signed in: uid={identity.uid}")
        return self._user

    async def register(self, name: str, email: str, password: str) -> UserProfile:
        """Create an account and authenticate it.

        Args:
            name: Display name.
            email: Account email.
            password: Account password.

        Returns:
            UserProfile: Profile of the new user.

        Raises:
            ValidationError: If the name or password breaks a rule.
            BackendError: If the identity collaborator rejects the sign up.
        """
        clean_name = sanitize_input(name)
        self._ensure_valid(validate_user_name(clean_name))
        self._ensure_valid(validate_password(password))

        self._begin_authentication()
        try:
            identity = await self._identity.sign_up(email, password)
        except Exception as exc:
            raise self._authentication_failed("sign up", exc) from exc
        self._activate(identity)
        self._audit_logger.info(f"User registered: uid={identity.uid}")

        generation = self._generation
        try:
            await self._identity.update_profile(display_name=clean_name)
        except Exception as exc:
            # The account exists; the session stays open with the default name.
            self._logger.warning(
                f"Could not set display name for uid={identity.uid}: {exc}"
            )
            return self._user
        if generation == self._generation:
            self._user = replace(self._user, name=clean_name)
            self._notify_listeners()
        return self._user

    async def logout(self) -> None:
        """Clear local state, then sign out from the identity collaborator.

        Local collections are cleared before the external call, so they stay
        empty even when signing out fails.

        Raises:
            BackendError: If the identity collaborator fails to sign out.
        """
        uid = self._uid
        self._clear_session()
        try:
            await self._identity.sign_out()
        except Exception as exc:
            self._logger.error(f"Sign out failed for uid={uid}: {exc}")
            raise BackendError(to_user_message(exc)) from exc
        self._audit_logger.info(f"User signed out: uid={uid}")

    async def add_transaction(
        self,
        description: str,
        amount,
        transaction_type: str,
        category: str,
        transaction_date,
    ) -> Transaction:
        """Validate, persist and record a new transaction.

        Args:
            description: Free-text description.
            amount: Positive amount (int, float or Decimal).
            transaction_type: ``"income"`` or ``"expense"``.
            category: Category name.
            transaction_date: ``date`` or ``datetime`` of the movement.

        Returns:
            Transaction: The stored transaction.

        Raises:
            UnauthenticatedError: If no session is active.
            ValidationError: If the payload breaks a rule.
            BackendError: If the persistence collaborator rejects the write.
        """
        uid = self._require_authenticated()
        clean_description = sanitize_input(description)
        clean_category = sanitize_input(category)
        self._ensure_valid(
            validate_transaction(
                amount,
                clean_description,
                transaction_type,
                clean_category,
                transaction_date,
            )
        )
        value = coerce_decimal(amount)
        moment = coerce_datetime(transaction_date)
        document = {
            USER_ID_FIELD: uid,
            "description": clean_description,
            "amount": value,
            "type": transaction_type,
            "category": clean_category,
            "date": moment,
        }

        generation = self._generation
        try:
            document_id = await self._persistence.create(
                TRANSACTIONS_COLLECTION,
                document,
            )
        except Exception as exc:
            raise self._backend_failed("add transaction", exc) from exc

        transaction = Transaction(
            id=str(document_id),
            description=clean_description,
            amount=value,
            type=transaction_type,
            category=clean_category,
            date=moment,
        )
        if generation != self._generation:
            self._logger.info(
                f"Ignoring late result for transaction id={transaction.id}"
            )
            return transaction
        if all(existing.id != transaction.id for existing in self._transactions):
            self._replace_transactions([*self._transactions, transaction])
        self._notifications = (
            self._transaction_notification(transaction),
            *self._notifications,
        )
        self._notify_listeners()
        self._logger.info(
            f"Transaction added: id={transaction.id}, type={transaction.type}, "
            f"amount={transaction.amount}"
        )
        return transaction

    async def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction by identifier.

        Raises:
            UnauthenticatedError: If no session is active.
            ValidationError: If the identifier is blank.
            BackendError: If the persistence collaborator rejects the delete.
        """
        self._require_authenticated()
        self._ensure_identifier(transaction_id, "Transaction")
        generation = self._generation
        try:
            await self._persistence.delete(TRANSACTIONS_COLLECTION, transaction_id)
        except Exception as exc:
            raise self._backend_failed("delete transaction", exc) from exc
        if generation != self._generation:
            return
        remaining = [
            transaction
            for transaction in self._transactions
            if transaction.id != transaction_id
        ]
        if len(remaining) != len(self._transactions):
            self._replace_transactions(remaining)
            self._notify_listeners()
        self._logger.info(f"Transaction deleted: id={transaction_id}")

    async def add_category(
        self,
        name: str,
        category_type: str,
        color: str | None = None,
        icon: str | None = None,
    ) -> Category:
        """Validate, persist and record a new category.

        Raises:
            UnauthenticatedError: If no session is active.
            ValidationError: If the payload breaks a rule.
            BackendError: If the persistence collaborator rejects the write.
        """
        uid = self._require_authenticated()
        clean_name = sanitize_input(name)
        self._ensure_valid(validate_category(clean_name, category_type))
        document: Document = {
            USER_ID_FIELD: uid,
            "name": clean_name,
            "type": category_type,
        }
        if color is not None:
            document["color"] = sanitize_input(color)
        if icon is not None:
            document["icon"] = sanitize_input(icon)

        generation = self._generation
        try:
            document_id = await self._persistence.create(
                CATEGORIES_COLLECTION,
                document,
            )
        except Exception as exc:
            raise self._backend_failed("add category", exc) from exc

        category = Category(
            id=str(document_id),
            name=clean_name,
            type=category_type,
            color=document.get("color"),
            icon=document.get("icon"),
        )
        if generation != self._generation:
            return category
        if all(existing.id != category.id for existing in self._categories):
            self._categories = (*self._categories, category)
            self._notify_listeners()
        self._logger.info(f"Category added: id={category.id}, name={category.name}")
        return category

    async def delete_category(self, category_id: str) -> None:
        """Delete a category by identifier.

        Raises:
            UnauthenticatedError: If no session is active.
            ValidationError: If the identifier is blank.
            BackendError: If the persistence collaborator rejects the delete.
        """
        self._require_authenticated()
        self._ensure_identifier(category_id, "Category")
        generation = self._generation
        try:
            await self._persistence.delete(CATEGORIES_COLLECTION, category_id)
        except Exception as exc:
            raise self._backend_failed("delete category", exc) from exc
        if generation != self._generation:
            return
        remaining = tuple(
            category for category in self._categories if category.id != category_id
        )
        if len(remaining) != len(self._categories):
            self._categories = remaining
            self._notify_listeners()
        self._logger.info(f"Category deleted: id={category_id}")

    async def update_user(
        self,
        name: str | None = None,
        avatar: str | None = None,
    ) -> UserProfile:
        """Update the display name and/or avatar.

        Args:
            name: New display name, or None to keep the current one.
            avatar: New image reference, or None to keep the current one.

        Returns:
            UserProfile: The updated local profile.

        Raises:
            UnauthenticatedError: If no session is active.
            ValidationError: If the name breaks a rule.
            BackendError: If the identity collaborator rejects the update.
        """
        self._require_authenticated()
        clean_name = None
        if name is not None:
            clean_name = sanitize_input(name)
            self._ensure_valid(validate_user_name(clean_name))
        if clean_name is None and avatar is None:
            return self._user

        generation = self._generation
        try:
            await self._identity.update_profile(
                display_name=clean_name,
                photo_url=avatar,
            )
        except Exception as exc:
            raise self._backend_failed("update profile", exc) from exc
        if generation != self._generation:
            return self._user
        self._user = replace(
            self._user,
            name=clean_name if clean_name is not None else self._user.name,
            avatar=avatar if avatar is not None else self._user.avatar,
        )
        self._notify_listeners()
        return self._user

    def mark_notifications_read(self) -> None:
        """Flag every local notification as read."""
        if not self.unread_notification_count:
            return
        self._notifications = tuple(
            replace(notification, read=True) for notification in self._notifications
        )
        self._notify_listeners()

    def _handle_auth_change(self, identity: AuthIdentity | None) -> None:
        if identity is None:
            if self._state == SESSION_AUTHENTICATED:
                self._audit_logger.info(
                    f"Session ended by identity provider: uid={self._uid}"
                )
                self._clear_session()
            return
        self._activate(identity)

    def _begin_authentication(self) -> None:
        if self._state == SESSION_AUTHENTICATED:
            self._clear_session()
        self._state = SESSION_AUTHENTICATING
        self._notify_listeners()

    def _authentication_failed(self, action: str, exc: Exception) -> BackendError:
        self._clear_session()
        self._audit_logger.warning(f"Failed to {action}: {exc}")
        return BackendError(to_user_message(exc))

    def _backend_failed(self, action: str, exc: Exception) -> BackendError:
        self._logger.error(f"Failed to {action} for uid={self._uid}: {exc}")
        return BackendError(to_user_message(exc))

    def _activate(self, identity: AuthIdentity) -> None:
        if self._state == SESSION_AUTHENTICATED:
            if identity.uid == self._uid:
                return
            self._clear_session()
        self._generation += 1
        self._state = SESSION_AUTHENTICATED
        self._uid = identity.uid
        self._user = UserProfile(
            name=identity.display_name or DEFAULT_USER_NAME,
            email=identity.email or "",
            avatar=identity.photo_url or None,
        )
        self._hydrate_from_cache()
        generation = self._generation
        self._data_subscriptions = [
            self._persistence.subscribe(
                TRANSACTIONS_COLLECTION,
                USER_ID_FIELD,
                identity.uid,
                self._guard(generation, self._apply_transaction_documents),
                self._subscription_error_handler(TRANSACTIONS_COLLECTION),
            ),
            self._persistence.subscribe(
                CATEGORIES_COLLECTION,
                USER_ID_FIELD,
                identity.uid,
                self._guard(generation, self._apply_category_documents),
                self._subscription_error_handler(CATEGORIES_COLLECTION),
            ),
        ]
        self._logger.info(f"Session activated for uid={identity.uid}")
        self._notify_listeners()

    def _clear_session(self) -> None:
        self._generation += 1
        for subscription in self._data_subscriptions:
            subscription.cancel()
        self._data_subscriptions = []
        self._state = SESSION_LOGGED_OUT
        self._uid = None
        self._user = EMPTY_PROFILE
        self._transactions = ()
        self._categories = ()
        self._notifications = ()
        self._received_transactions = False
        self._snapshot = build_financial_snapshot((), self._offset)
        self._notify_listeners()

    def _guard(
        self,
        generation: int,
        handler: Callable[[list[Document]], None],
    ) -> Callable[[list[Document]], None]:
        def _deliver(documents: list[Document]) -> None:
            if generation != self._generation:
                return
            handler(documents)

        return _deliver

    def _subscription_error_handler(self, collection: str) -> Callable[[Exception], None]:
        def _on_error(exc: Exception) -> None:
            self._logger.error(f"Error receiving {collection} updates: {exc}")

        return _on_error

    def _apply_transaction_documents(self, documents: list[Document]) -> None:
        transactions = self._documents_to_transactions(documents)
        self._received_transactions = True
        self._replace_transactions(transactions)
        self._notify_listeners()

    def _apply_category_documents(self, documents: list[Document]) -> None:
        self._categories = tuple(
            Category(
                id=str(document.get("id", "")),
                name=str(document.get("name", "")),
                type=str(document.get("type", "")),
                color=document.get("color"),
                icon=document.get("icon"),
            )
            for document in documents
        )
        self._notify_listeners()

    def _replace_transactions(
        self,
        transactions: Iterable[Transaction],
        persist: bool = True,
    ) -> None:
        ordered = sorted(
            transactions,
            key=lambda transaction: transaction.date,
            reverse=True,
        )
        self._transactions = tuple(ordered)
        self._snapshot = build_financial_snapshot(
            self._transactions,
            self._offset,
            self._logger,
        )
        if persist:
            self._write_cache()

    def _documents_to_transactions(
        self,
        documents: Iterable[Any],
    ) -> list[Transaction]:
        transactions = []
        for document in documents:
            if not isinstance(document, dict):
                continue
            moment = coerce_datetime(document.get("date"))
            if moment is None:
                self._logger.warning(
                    f"Skipping transaction without a readable date: "
                    f"id={document.get('id')}"
                )
                continue
            transactions.append(
                Transaction(
                    id=str(document.get("id", "")),
                    description=str(document.get("description", "")),
                    amount=coerce_decimal(document.get("amount")),
                    type=str(document.get("type", "")),
                    category=str(document.get("category") or ""),
                    date=moment,
                )
            )
        return transactions

    def _hydrate_from_cache(self) -> None:
        if self._cache is None or self._uid is None:
            return
        key = cache_key(self._cache_namespace, self._uid)
        try:
            payload = self._cache.get(key)
        except Exception as exc:
            self._logger.warning(f"Local cache read failed for {key}: {exc}")
            return
        if not payload:
            return
        try:
            documents = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            self._logger.warning(f"Ignoring unreadable local cache entry {key}: {exc}")
            return
        if not isinstance(documents, list):
            self._logger.warning(f"Ignoring malformed local cache entry {key}")
            return
        if self._received_transactions:
            return
        transactions = self._documents_to_transactions(documents)
        self._replace_transactions(transactions, persist=False)
        self._logger.info(
            f"Hydrated {len(transactions)} transactions from local cache"
        )

    def _write_cache(self) -> None:
        if self._cache is None or self._uid is None:
            return
        key = cache_key(self._cache_namespace, self._uid)
        payload = json.dumps(
            [
                {
                    "id": transaction.id,
                    "description": transaction.description,
                    "amount": str(transaction.amount),
                    "type": transaction.type,
                    "category": transaction.category,
                    "date": transaction.date.isoformat(),
                }
                for transaction in self._transactions
            ]
        ).encode("utf-8")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._store_cache_entry(key, payload)
            return
        self._pending_cache_entry = (key, payload)
        # Only the latest payload matters; one writer drains it off the loop.
        if self._cache_writer is None or self._cache_writer.done():
            self._cache_writer = loop.create_task(self._drain_cache_writes())

    async def _drain_cache_writes(self) -> None:
        while self._pending_cache_entry is not None:
            key, payload = self._pending_cache_entry
            self._pending_cache_entry = None
            await asyncio.to_thread(self._store_cache_entry, key, payload)

    def _store_cache_entry(self, key: str, payload: bytes) -> None:
        try:
            self._cache.set(key, payload)
        except Exception as exc:
            self._logger.warning(f"Local cache write failed for {key}: {exc}")

    def _require_authenticated(self) -> str:
        if self._state != SESSION_AUTHENTICATED or self._uid is None:
            raise UnauthenticatedError()
        return self._uid

    @staticmethod
    def _ensure_valid(result: ValidationResult) -> None:
        if not result.is_valid:
            raise ValidationError(result.errors[0])

    @staticmethod
    def _ensure_identifier(value, label: str) -> None:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{label} id is required")

    @staticmethod
    def _transaction_notification(transaction: Transaction) -> Notification:
        is_expense = transaction.type == EXPENSE
        return Notification(
            id=uuid4().hex,
            title="Expense recorded" if is_expense else "Income received",
            message=(
                f"{transaction.description} of "
                f"{format_amount(transaction.amount)} was added."
            ),
            date=datetime.now(),
            read=False,
            type="alert" if is_expense else "success",
        )

    def _notify_listeners(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as exc:
                self._logger.error(f"State listener failed: {exc}")


__all__ = [
    "SessionStore",
    "SESSION_LOGGED_OUT",
    "SESSION_AUTHENTICATING",
    "SESSION_AUTHENTICATED",
    "DEFAULT_CACHE_NAMESPACE",
]
