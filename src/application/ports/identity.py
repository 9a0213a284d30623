"""Port for the external identity collaborator."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from src.application.ports.persistence import Subscription


@dataclass(frozen=True)
class AuthIdentity:
    """Identity record delivered by the identity collaborator."""

    uid: str
    email: str
    display_name: str | None = None
    photo_url: str | None = None


AuthChangeCallback = Callable[[AuthIdentity | None], None]


class IdentityPort(Protocol):
    """Port exposing authentication and profile operations.

    Failures are raised as opaque exceptions; callers translate them before
    they reach a user.
    """

    async def connect(self) -> None:
        """Open the client handle."""

    async def dispose(self) -> None:
        """Release the client handle."""

    async def sign_in(self, email: str, password: str) -> AuthIdentity:
        """Authenticate an existing user."""

    async def sign_up(self, email: str, password: str) -> AuthIdentity:
        """Create a user and authenticate it."""

    async def sign_out(self) -> None:
        """End the authenticated session."""

    async def update_profile(
        self,
        display_name: str | None = None,
        photo_url: str | None = None,
    ) -> None:
        """Update the authenticated user's profile fields."""

    def on_auth_change(self, callback: AuthChangeCallback) -> Subscription:
        """Deliver the current identity (or None) now and on every change."""


__all__ = ["AuthIdentity", "AuthChangeCallback", "IdentityPort"]
