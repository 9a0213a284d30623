"""Domain errors surfaced to callers of the session store."""


class FinanceError(Exception):
    """Base error carrying a message that is safe to show to a user."""

    def __init__(self, user_message: str) -> None:
        super().__init__(user_message)
        self.user_message = user_message


class ValidationError(FinanceError):
    """Input failed a validation rule; carries the first violated rule."""


class UnauthenticatedError(FinanceError):
    """A mutation was attempted without an authenticated session."""

    def __init__(self, user_message: str = "You need to sign in first.") -> None:
        super().__init__(user_message)


class BackendError(FinanceError):
    """An identity or persistence call failed.

    The message is already translated; the original exception is chained as
    ``__cause__`` for logs only.
    """


__all__ = [
    "FinanceError",
    "ValidationError",
    "UnauthenticatedError",
    "BackendError",
]
