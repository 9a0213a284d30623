"""Tests for the in-memory identity and document store adapters."""

from unittest.mock import MagicMock

import pytest

from src.infrastructure.memory_backend import (
    InMemoryDocumentStore,
    InMemoryIdentityClient,
    MemoryBackendError,
)


@pytest.mark.asyncio
async def test_identity_sign_up_sign_in_and_out() -> None:
    """Accounts should authenticate and report changes to listeners."""
    client = InMemoryIdentityClient(logger=MagicMock())
    await client.connect()
    seen = []
    client.on_auth_change(seen.append)

    created = await client.sign_up("Ana@Example.com ", "secret1")
    await client.sign_out()
    signed_in = await client.sign_in("ana@example.com", "secret1")

    assert created.uid == signed_in.uid
    assert created.email == "ana@example.com"
    assert [item.uid if item else None for item in seen] == [
        None,
        created.uid,
        None,
        created.uid,
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("email", "password", "code"),
    [
        ("nobody@example.com", "secret1", "auth/user-not-found"),
        ("ana@example.com", "wrong-one", "auth/wrong-password"),
        ("not-an-email", "secret1", "auth/invalid-email"),
    ],
)
async def test_identity_sign_in_failures(email, password, code) -> None:
    """Sign in failures should carry backend error codes."""
    client = InMemoryIdentityClient(logger=MagicMock())
    await client.connect()
    await client.sign_up("ana@example.com", "secret1")

    with pytest.raises(MemoryBackendError, match=code):
        await client.sign_in(email, password)


@pytest.mark.asyncio
async def test_identity_sign_up_failures() -> None:
    """Duplicate emails and short passwords should be refused."""
    client = InMemoryIdentityClient(logger=MagicMock())
    await client.connect()
    await client.sign_up("ana@example.com", "secret1")

    with pytest.raises(MemoryBackendError, match="auth/email-already-in-use"):
        await client.sign_up("ana@example.com", "secret1")
    with pytest.raises(MemoryBackendError, match="auth/weak-password"):
        await client.sign_up("bob@example.com", "123")


@pytest.mark.asyncio
async def test_identity_requires_connection_and_session() -> None:
    """Calls before connect or without a session should fail."""
    client = InMemoryIdentityClient(logger=MagicMock())

    with pytest.raises(MemoryBackendError, match="network-request-failed"):
        await client.sign_in("ana@example.com", "secret1")

    await client.connect()
    with pytest.raises(MemoryBackendError, match="permission-denied"):
        await client.update_profile(display_name="Ana")


@pytest.mark.asyncio
async def test_document_store_filters_and_publishes() -> None:
    """Watches should receive only matching documents after each write."""
    store = InMemoryDocumentStore(logger=MagicMock())
    await store.connect()
    deliveries = []
    subscription = store.subscribe(
        "transactions", "userId", "u1", deliveries.append
    )

    first_id = await store.create("transactions", {"userId": "u1", "amount": 1})
    await store.create("transactions", {"userId": "u2", "amount": 2})
    await store.delete("transactions", first_id)
    await store.delete("transactions", "missing")
    subscription.cancel()
    await store.create("transactions", {"userId": "u1", "amount": 3})

    assert deliveries[0] == []
    assert deliveries[1] == [{"id": first_id, "userId": "u1", "amount": 1}]
    assert deliveries[2] == deliveries[1]
    assert deliveries[3] == []
    assert len(deliveries) == 4


@pytest.mark.asyncio
async def test_document_store_routes_listener_errors() -> None:
    """A failing listener should be reported through its error callback."""
    store = InMemoryDocumentStore(logger=MagicMock())
    await store.connect()
    on_error = MagicMock()
    failure = ValueError("bad snapshot")

    store.subscribe(
        "categories",
        "userId",
        "u1",
        MagicMock(side_effect=failure),
        on_error,
    )

    on_error.assert_called_once_with(failure)
