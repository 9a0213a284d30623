"""Domain models for user-owned records."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class Transaction:
    """A single recorded money movement.

    Attributes:
        id: Identifier assigned by the persistence collaborator.
        description: Sanitized free-text description.
        amount: Positive amount; the direction comes from ``type``.
        type: ``"income"`` or ``"expense"``.
        category: Name of the category the transaction is filed under.
        date: Naive local datetime of the movement.
    """

    id: str
    description: str
    amount: Decimal
    type: str
    category: str
    date: datetime


@dataclass(frozen=True)
class Category:
    """User-defined label bucketing transactions."""

    id: str
    name: str
    type: str
    color: str | None = None
    icon: str | None = None


@dataclass(frozen=True)
class Notification:
    """Session-local notice produced by transaction creation."""

    id: str
    title: str
    message: str
    date: datetime
    read: bool
    type: str


@dataclass(frozen=True)
class UserProfile:
    """Local copy of the authenticated user's profile."""

    name: str
    email: str
    avatar: str | None = None


__all__ = ["Transaction", "Category", "Notification", "UserProfile"]
