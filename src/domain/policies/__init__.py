"""Domain policies package."""

from .error_messages import GENERIC_ERROR_MESSAGE, to_user_message

__all__ = ["to_user_message", "GENERIC_ERROR_MESSAGE"]
