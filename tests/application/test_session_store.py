"""Tests for the SessionStore use case."""

import json
import threading
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.application.use_cases.session_store import (
    SESSION_AUTHENTICATED,
    SESSION_LOGGED_OUT,
    SessionStore,
)
from src.domain.errors import BackendError, UnauthenticatedError, ValidationError
from src.infrastructure.memory_backend import (
    InMemoryDocumentStore,
    InMemoryIdentityClient,
)

EMAIL = "ana@example.com"
PASSWORD = "Str0ng!Pass"


@pytest.fixture
def identity() -> InMemoryIdentityClient:
    return InMemoryIdentityClient(logger=MagicMock())


@pytest.fixture
def persistence() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(logger=MagicMock())


@pytest.fixture
def store(identity, persistence) -> SessionStore:
    return SessionStore(
        identity,
        persistence,
        initial_balance_offset=Decimal("1000"),
        logger=MagicMock(),
        audit_logger=MagicMock(),
    )


async def _register(store: SessionStore, name: str = "Ana") -> None:
    await store.connect()
    await store.register(name, EMAIL, PASSWORD)


def _offline_persistence() -> MagicMock:
    """Persistence double whose subscriptions never deliver on their own."""
    persistence = MagicMock()
    persistence.connect = AsyncMock()
    persistence.dispose = AsyncMock()
    persistence.create = AsyncMock(return_value="doc-1")
    persistence.delete = AsyncMock()
    return persistence


@pytest.mark.asyncio
async def test_add_expense_updates_balance_and_breakdown(store, persistence) -> None:
    """An expense should flow into the balance, breakdown and documents."""
    await _register(store)

    transaction = await store.add_transaction(
        "Groceries",
        Decimal("150.00"),
        "expense",
        "Food",
        datetime.now(),
    )

    assert [tx.id for tx in store.transactions] == [transaction.id]
    assert store.balance == Decimal("850.00")
    assert store.expense == Decimal("150.00")
    assert store.income == Decimal("0")
    assert [
        (item.category, item.total) for item in store.snapshot.category_breakdown
    ] == [("Food", Decimal("150.00"))]
    documents = persistence.documents("transactions")
    assert len(documents) == 1
    assert documents[0]["userId"] == store._uid
    assert documents[0]["description"] == "Groceries"


@pytest.mark.asyncio
async def test_add_transaction_records_notification(store) -> None:
    """Each accepted transaction should prepend an unread notification."""
    await _register(store)

    await store.add_transaction(
        "Groceries", Decimal("150"), "expense", "Food", datetime.now()
    )
    await store.add_transaction(
        "Salary", Decimal("3200.5"), "income", "Work", datetime.now()
    )

    assert store.unread_notification_count == 2
    latest = store.notifications[0]
    assert latest.title == "Income received"
    assert latest.type == "success"
    assert latest.message == "Salary of 3,200.50 was added."
    assert store.notifications[1].type == "alert"

    store.mark_notifications_read()

    assert store.unread_notification_count == 0
    assert all(notification.read for notification in store.notifications)


@pytest.mark.asyncio
async def test_add_transaction_sanitizes_free_text(store, persistence) -> None:
    """Description and category should be sanitized before persistence."""
    await _register(store)

    transaction = await store.add_transaction(
        "  <b>Rent</b> ",
        Decimal("900"),
        "expense",
        "<i>Home</i>",
        datetime.now(),
    )

    assert transaction.description == "bRent/b"
    assert transaction.category == "iHome/i"
    assert persistence.documents("transactions")[0]["description"] == "bRent/b"


@pytest.mark.asyncio
async def test_add_transaction_requires_authentication(store, persistence) -> None:
    """Mutations without a session should be refused before any call."""
    await store.connect()

    with pytest.raises(UnauthenticatedError):
        await store.add_transaction(
            "Groceries", Decimal("10"), "expense", "Food", datetime.now()
        )

    assert persistence.documents("transactions") == []
    assert store.transactions == ()


@pytest.mark.asyncio
async def test_add_transaction_rejects_invalid_payload(store, persistence) -> None:
    """A validation failure should leave local and remote state unchanged."""
    await _register(store)
    persistence.create = AsyncMock()

    with pytest.raises(ValidationError) as exc_info:
        await store.add_transaction(
            "Groceries", Decimal("0"), "expense", "Food", datetime.now()
        )

    assert exc_info.value.user_message == "Minimum amount is 0.01"
    persistence.create.assert_not_awaited()
    assert store.transactions == ()
    assert store.notifications == ()


@pytest.mark.asyncio
async def test_add_transaction_translates_backend_failure(
    store,
    persistence,
    monkeypatch,
) -> None:
    """A rejected write should raise a translated error and change nothing."""
    await _register(store)
    await store.add_transaction(
        "Groceries", Decimal("150"), "expense", "Food", datetime.now()
    )
    cause = RuntimeError("PERMISSION-DENIED: rules rejected write")
    monkeypatch.setattr(persistence, "create", AsyncMock(side_effect=cause))

    with pytest.raises(BackendError) as exc_info:
        await store.add_transaction(
            "Rent", Decimal("900"), "expense", "Home", datetime.now()
        )

    assert exc_info.value.user_message == (
        "You do not have permission to perform this action."
    )
    assert exc_info.value.__cause__ is cause
    assert len(store.transactions) == 1
    assert store.balance == Decimal("850")
    assert store.unread_notification_count == 1


@pytest.mark.asyncio
async def test_transactions_are_sorted_newest_first(store) -> None:
    """Snapshot ordering should be by date descending."""
    await _register(store)
    now = datetime.now()

    await store.add_transaction("Old", 1, "expense", "A", now - timedelta(days=30))
    await store.add_transaction("New", 2, "expense", "A", now)
    await store.add_transaction("Mid", 3, "expense", "A", now - timedelta(days=5))

    assert [tx.description for tx in store.transactions] == ["New", "Mid", "Old"]


@pytest.mark.asyncio
async def test_snapshot_delivery_replaces_collection(store, persistence) -> None:
    """Writes by another client should arrive through the subscription."""
    await _register(store)
    uid = store._uid

    await persistence.create(
        "transactions",
        {
            "userId": uid,
            "description": "From another device",
            "amount": Decimal("40"),
            "type": "income",
            "category": "Gifts",
            "date": datetime(2024, 6, 1, 12),
        },
    )
    await persistence.create(
        "transactions",
        {
            "userId": "someone-else",
            "description": "Not mine",
            "amount": Decimal("999"),
            "type": "income",
            "category": "Gifts",
            "date": datetime(2024, 6, 1, 12),
        },
    )

    assert [tx.description for tx in store.transactions] == [
        "From another device"
    ]
    assert store.income == Decimal("40")
    assert store.balance == Decimal("1040")


@pytest.mark.asyncio
async def test_snapshot_skips_documents_without_readable_date(
    store,
    persistence,
) -> None:
    """Documents with an unreadable date should be left out."""
    await _register(store)

    await persistence.create(
        "transactions",
        {
            "userId": store._uid,
            "description": "Broken",
            "amount": Decimal("5"),
            "type": "expense",
            "category": "Misc",
            "date": "yesterday",
        },
    )

    assert store.transactions == ()
    store._logger.warning.assert_called()


@pytest.mark.asyncio
async def test_delete_transaction_recomputes_aggregates(store) -> None:
    """Deleting should remove the record and restore the balance."""
    await _register(store)
    transaction = await store.add_transaction(
        "Groceries", Decimal("150"), "expense", "Food", datetime.now()
    )

    await store.delete_transaction(transaction.id)

    assert store.transactions == ()
    assert store.balance == Decimal("1000")
    assert store.snapshot.category_breakdown[0].is_placeholder is True


@pytest.mark.asyncio
async def test_delete_transaction_requires_identifier(store) -> None:
    """A blank identifier should be rejected as a validation error."""
    await _register(store)

    with pytest.raises(ValidationError):
        await store.delete_transaction("  ")


@pytest.mark.asyncio
async def test_add_and_delete_category(store, persistence) -> None:
    """Categories should be validated, persisted and removable."""
    await _register(store)

    category = await store.add_category("Food", "expense", color="#ff0000")

    assert [item.name for item in store.categories] == ["Food"]
    assert store.categories[0].color == "#ff0000"
    assert persistence.documents("categories")[0]["userId"] == store._uid

    await store.delete_category(category.id)

    assert store.categories == ()


@pytest.mark.asyncio
async def test_add_category_rejects_invalid_type(store, persistence) -> None:
    """An unknown category type should be refused before persistence."""
    await _register(store)

    with pytest.raises(ValidationError, match="Invalid category type"):
        await store.add_category("Food", "transfer")

    assert persistence.documents("categories") == []


@pytest.mark.asyncio
async def test_register_sets_profile(store) -> None:
    """Registration should authenticate and apply the sanitized name."""
    await _register(store, name="  <Ana>  ")

    assert store.state == SESSION_AUTHENTICATED
    assert store.user.name == "Ana"
    assert store.user.email == EMAIL


@pytest.mark.asyncio
async def test_register_rejects_weak_password_before_sign_up(
    store,
    identity,
    monkeypatch,
) -> None:
    """Password rules should be enforced before contacting the provider."""
    await store.connect()
    sign_up = AsyncMock()
    monkeypatch.setattr(identity, "sign_up", sign_up)

    with pytest.raises(ValidationError):
        await store.register("Ana", EMAIL, "password")

    sign_up.assert_not_awaited()
    assert store.state == SESSION_LOGGED_OUT


@pytest.mark.asyncio
async def test_register_keeps_session_when_profile_update_fails(
    store,
    identity,
    monkeypatch,
) -> None:
    """A failed display name update should not undo the registration."""
    await store.connect()
    monkeypatch.setattr(
        identity,
        "update_profile",
        AsyncMock(side_effect=RuntimeError("boom")),
    )

    profile = await store.register("Ana", EMAIL, PASSWORD)

    assert store.is_authenticated is True
    assert profile.name == "User"
    store._logger.warning.assert_called()


@pytest.mark.asyncio
async def test_register_duplicate_email_is_translated(store) -> None:
    """An existing account should give a friendly message."""
    await _register(store)
    await store.logout()

    with pytest.raises(BackendError) as exc_info:
        await store.register("Ana", EMAIL, PASSWORD)

    assert exc_info.value.user_message == "This email is already registered."
    assert store.state == SESSION_LOGGED_OUT


@pytest.mark.asyncio
async def test_login_failure_returns_to_logged_out(store) -> None:
    """Wrong credentials should not leak details and should end logged out."""
    await _register(store)
    await store.logout()

    with pytest.raises(BackendError) as exc_info:
        await store.login(EMAIL, "Wrong!Pass1")

    assert exc_info.value.user_message == "Incorrect email or password."
    assert store.state == SESSION_LOGGED_OUT


@pytest.mark.asyncio
async def test_login_reloads_persisted_transactions(store) -> None:
    """Signing back in should deliver the user's stored transactions."""
    await _register(store)
    await store.add_transaction(
        "Groceries", Decimal("150"), "expense", "Food", datetime.now()
    )
    await store.logout()

    assert store.transactions == ()

    profile = await store.login(EMAIL, PASSWORD)

    assert profile.email == EMAIL
    assert [tx.description for tx in store.transactions] == ["Groceries"]
    assert store.balance == Decimal("850")


@pytest.mark.asyncio
async def test_logout_clears_state_even_when_sign_out_fails(
    store,
    identity,
    monkeypatch,
) -> None:
    """Local collections should be empty even if the provider call fails."""
    await _register(store)
    await store.add_transaction(
        "Groceries", Decimal("150"), "expense", "Food", datetime.now()
    )
    await store.add_category("Food", "expense")
    monkeypatch.setattr(
        identity,
        "sign_out",
        AsyncMock(side_effect=RuntimeError("network unreachable")),
    )

    with pytest.raises(BackendError) as exc_info:
        await store.logout()

    assert exc_info.value.user_message == (
        "Connection error. Check your internet connection."
    )
    assert store.state == SESSION_LOGGED_OUT
    assert store.transactions == ()
    assert store.categories == ()
    assert store.notifications == ()
    assert store.user.name == ""
    assert store.balance == Decimal("1000")


@pytest.mark.asyncio
async def test_provider_sign_out_ends_session(store, identity) -> None:
    """A sign out reported by the provider should clear the session."""
    await _register(store)

    await identity.sign_out()

    assert store.state == SESSION_LOGGED_OUT
    assert store.transactions == ()


@pytest.mark.asyncio
async def test_late_write_result_is_ignored_after_session_ends(
    store,
    identity,
    monkeypatch,
) -> None:
    """A write finishing after logout should not repopulate local state."""
    await _register(store)

    async def _create_then_sign_out(collection, document):
        await identity.sign_out()
        return "late-id"

    monkeypatch.setattr(store._persistence, "create", _create_then_sign_out)

    transaction = await store.add_transaction(
        "Groceries", Decimal("150"), "expense", "Food", datetime.now()
    )

    assert transaction.id == "late-id"
    assert store.state == SESSION_LOGGED_OUT
    assert store.transactions == ()
    assert store.notifications == ()


@pytest.mark.asyncio
async def test_update_user_changes_name_and_avatar(store, identity) -> None:
    """Profile updates should reach the provider and the local profile."""
    await _register(store)

    profile = await store.update_user(name="Ana Maria", avatar="avatars/7.png")

    assert profile.name == "Ana Maria"
    assert profile.avatar == "avatars/7.png"
    assert identity.current_identity.display_name == "Ana Maria"
    assert identity.current_identity.photo_url == "avatars/7.png"


@pytest.mark.asyncio
async def test_update_user_validates_name(store) -> None:
    """A one-letter name should be refused."""
    await _register(store)

    with pytest.raises(ValidationError, match="Name is too short"):
        await store.update_user(name="A")

    assert store.user.name == "Ana"


@pytest.mark.asyncio
async def test_listeners_are_notified_and_removable(store) -> None:
    """Listeners should run on change until they are removed."""
    listener = MagicMock()
    remove = store.add_listener(listener)

    await _register(store)

    assert listener.call_count > 0
    remove()
    listener.reset_mock()
    await store.add_transaction(
        "Groceries", Decimal("150"), "expense", "Food", datetime.now()
    )
    listener.assert_not_called()


@pytest.mark.asyncio
async def test_cache_hydrates_until_first_snapshot(identity) -> None:
    """Cached transactions should show before the first delivery only."""
    persistence = _offline_persistence()
    cache = MagicMock()
    cache.get.return_value = json.dumps(
        [
            {
                "id": "cached-1",
                "description": "Cached rent",
                "amount": "900.00",
                "type": "expense",
                "category": "Home",
                "date": "2024-05-01T12:00:00",
            }
        ]
    ).encode("utf-8")
    store = SessionStore(
        identity,
        persistence,
        cache,
        logger=MagicMock(),
        audit_logger=MagicMock(),
    )

    await _register(store)

    uid = store._uid
    cache.get.assert_called_with(f"financas_transactions_{uid}")
    assert [tx.id for tx in store.transactions] == ["cached-1"]
    assert store.expense == Decimal("900.00")

    on_snapshot = persistence.subscribe.call_args_list[0].args[3]
    on_snapshot([])
    await store.flush_cache()

    assert store.transactions == ()
    assert store.expense == Decimal("0")
    payload = cache.set.call_args.args[1]
    assert cache.set.call_args.args[0] == f"financas_transactions_{uid}"
    assert json.loads(payload.decode("utf-8")) == []


@pytest.mark.asyncio
async def test_cache_failures_are_logged_not_raised(identity, persistence) -> None:
    """An unavailable cache should never block the session."""
    cache = MagicMock()
    cache.get.side_effect = OSError("disk unavailable")
    cache.set.side_effect = OSError("disk unavailable")
    logger = MagicMock()
    store = SessionStore(
        identity,
        persistence,
        cache,
        logger=logger,
        audit_logger=MagicMock(),
    )

    await _register(store)
    await store.add_transaction(
        "Groceries", Decimal("150"), "expense", "Food", datetime.now()
    )
    await store.flush_cache()

    assert len(store.transactions) == 1
    assert logger.warning.call_count >= 2


@pytest.mark.asyncio
async def test_cache_write_stores_amounts_as_text(identity, persistence) -> None:
    """The cached payload should keep exact amounts and ISO dates."""
    cache = MagicMock()
    cache.get.return_value = None
    store = SessionStore(
        identity,
        persistence,
        cache,
        logger=MagicMock(),
        audit_logger=MagicMock(),
    )
    await _register(store)

    await store.add_transaction(
        "Groceries", Decimal("150.10"), "expense", "Food", datetime(2024, 3, 2, 9)
    )
    await store.flush_cache()

    cached = json.loads(cache.set.call_args.args[1].decode("utf-8"))
    assert cached[0]["amount"] == "150.10"
    assert cached[0]["date"] == "2024-03-02T09:00:00"


@pytest.mark.asyncio
async def test_dispose_cancels_subscriptions(store, persistence) -> None:
    """Disposing should clear state and stop deliveries."""
    await _register(store)

    await store.dispose()

    assert store.state == SESSION_LOGGED_OUT
    assert persistence._watches == []


def test_non_finite_offset_falls_back_to_zero(identity, persistence) -> None:
    """A NaN offset should never reach the balance."""
    logger = MagicMock()

    store = SessionStore(
        identity,
        persistence,
        initial_balance_offset=float("nan"),
        logger=logger,
        audit_logger=MagicMock(),
    )

    assert store.initial_balance_offset == Decimal("0")
    assert store.balance == Decimal("0")
    logger.warning.assert_called_once()


@pytest.mark.asyncio
async def test_cache_writes_run_off_the_event_loop_thread(
    identity,
    persistence,
) -> None:
    """The cache should be written from a worker thread, latest payload last."""
    write_threads = []
    cache = MagicMock()
    cache.get.return_value = None
    cache.set.side_effect = lambda key, value: write_threads.append(
        threading.get_ident()
    )
    store = SessionStore(
        identity,
        persistence,
        cache,
        logger=MagicMock(),
        audit_logger=MagicMock(),
    )
    await _register(store)

    await store.add_transaction(
        "Groceries", Decimal("150"), "expense", "Food", datetime.now()
    )
    await store.add_transaction(
        "Rent", Decimal("900"), "expense", "Home", datetime.now()
    )
    await store.flush_cache()

    assert write_threads
    assert threading.get_ident() not in write_threads
    cached = json.loads(cache.set.call_args.args[1].decode("utf-8"))
    assert sorted(item["description"] for item in cached) == ["Groceries", "Rent"]


@pytest.mark.asyncio
async def test_dispose_flushes_and_releases_cache(identity, persistence) -> None:
    """Disposing should store pending writes, then release the cache."""
    cache = MagicMock()
    cache.get.return_value = None
    store = SessionStore(
        identity,
        persistence,
        cache,
        logger=MagicMock(),
        audit_logger=MagicMock(),
    )
    await _register(store)
    await store.add_transaction(
        "Groceries", Decimal("150"), "expense", "Food", datetime.now()
    )

    await store.dispose()

    cache.set.assert_called()
    cache.dispose.assert_called_once()


@pytest.mark.asyncio
async def test_failing_listener_does_not_fail_the_write(store) -> None:
    """A listener error should be logged, not raised to the caller."""
    await _register(store)
    store.add_listener(MagicMock(side_effect=RuntimeError("render failed")))

    transaction = await store.add_transaction(
        "Groceries", Decimal("150"), "expense", "Food", datetime.now()
    )

    assert [tx.id for tx in store.transactions] == [transaction.id]
    assert store.balance == Decimal("850")
    store._logger.error.assert_called()
