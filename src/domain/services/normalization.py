"""Domain normalization helpers."""

from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation

from src.domain.constants import DEFAULT_CATEGORY_LABEL


def parse_amount(raw: str | None) -> Decimal | None:
    """Parse an amount typed with Brazilian separators.

    ``"1.234,56"`` becomes ``Decimal("1234.56")``: dots are thousands
    separators and the first comma is the decimal mark.

    Args:
        raw: Amount as typed by the user.

    Returns:
        Decimal | None: Parsed amount, or None when it is not a number.
    """
    if not isinstance(raw, str):
        return None
    normalized = raw.strip().replace(".", "").replace(",", ".", 1)
    if not normalized:
        return None
    try:
        value = Decimal(normalized)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def coerce_datetime(value) -> datetime | None:
    """Convert a persisted timestamp into a naive local datetime.

    Accepts datetimes, dates (mapped to noon), objects exposing
    ``to_datetime()``, ISO-8601 strings and epoch seconds.

    Args:
        value: Raw timestamp from a document or the local cache.

    Returns:
        datetime | None: Naive local datetime, or None when unreadable.
    """
    if value is None or isinstance(value, bool):
        return None
    if hasattr(value, "to_datetime") and callable(value.to_datetime):
        value = value.to_datetime()
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time(12))
    elif isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    elif isinstance(value, (int, float)):
        try:
            moment = datetime.fromtimestamp(value)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment


def normalize_category_name(name: str | None) -> str:
    """Return the stripped category name or the default label.

    Args:
        name: Raw category name from a transaction.

    Returns:
        str: Non-empty category label.
    """
    if not isinstance(name, str):
        return DEFAULT_CATEGORY_LABEL
    cleaned = name.strip()
    return cleaned if cleaned else DEFAULT_CATEGORY_LABEL


__all__ = ["parse_amount", "coerce_datetime", "normalize_category_name"]
