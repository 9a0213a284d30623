"""Translation of backend failures into user-safe messages."""

from src.domain.errors import FinanceError

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."

# Checked in order; the first matching substring wins.
_MESSAGE_RULES = (
    (
        ("auth/user-not-found", "auth/wrong-password", "auth/invalid-credential"),
        "Incorrect email or password.",
    ),
    (("auth/email-already-in-use",), "This email is already registered."),
    (
        ("auth/weak-password",),
        "Password is too weak. Choose a stronger password.",
    ),
    (("auth/invalid-email",), "Invalid email address."),
    (("auth/too-many-requests",), "Too many attempts. Try again later."),
    (
        ("permission-denied",),
        "You do not have permission to perform this action.",
    ),
    (("network",), "Connection error. Check your internet connection."),
)


def to_user_message(error) -> str:
    """Map an error to one fixed, non-technical sentence.

    Errors raised by the core already carry a safe message and are passed
    through. Anything else is matched on known substrings of its lower-cased
    message and falls back to a generic sentence, so raw exception text never
    reaches the caller.

    Args:
        error: Exception (or any object) raised by a collaborator.

    Returns:
        str: Message safe to display to a user.
    """
    if isinstance(error, FinanceError):
        return error.user_message
    if not isinstance(error, BaseException):
        return GENERIC_ERROR_MESSAGE
    message = str(error).lower()
    for needles, user_message in _MESSAGE_RULES:
        if any(needle in message for needle in needles):
            return user_message
    return GENERIC_ERROR_MESSAGE


__all__ = ["to_user_message", "GENERIC_ERROR_MESSAGE"]
