"""Free-text sanitization applied before validation and storage."""

import re

from src.domain.constants import MAX_SANITIZED_LENGTH

_ANGLE_BRACKETS = re.compile(r"[<>]")
_JAVASCRIPT_SCHEME = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE | re.ASCII)


def sanitize_input(value) -> str:
    """Strip unsafe markup and bound the length of user text.

    The cleaning passes repeat until the text stops changing, so a removal
    that re-forms a pattern is caught and the result is a fixed point.

    Args:
        value: Raw user input.

    Returns:
        str: Cleaned text, or an empty string for non-string input.
    """
    if not isinstance(value, str):
        return ""
    cleaned = value
    while True:
        previous = cleaned
        cleaned = cleaned.strip()
        cleaned = _ANGLE_BRACKETS.sub("", cleaned)
        cleaned = _JAVASCRIPT_SCHEME.sub("", cleaned)
        cleaned = _EVENT_HANDLER.sub("", cleaned)
        cleaned = cleaned[:MAX_SANITIZED_LENGTH]
        if cleaned == previous:
            return cleaned


__all__ = ["sanitize_input"]
