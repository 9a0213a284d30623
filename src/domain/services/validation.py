"""Domain validation rules gating every write.

Validators are pure: they never raise and always return a result listing
every violated rule in check order.
"""

import re
from datetime import date, datetime, time
from decimal import Decimal

from src.domain.constants import (
    COMMON_PASSWORDS,
    MAX_CATEGORY_NAME_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_FUTURE_YEARS,
    MAX_NAME_LENGTH,
    MAX_PAST_YEARS,
    MAX_TRANSACTION_AMOUNT,
    MIN_CATEGORY_NAME_LENGTH,
    MIN_DESCRIPTION_LENGTH,
    MIN_NAME_LENGTH,
    MIN_PASSWORD_LENGTH,
    MIN_TRANSACTION_AMOUNT,
    PASSWORD_SPECIAL_CHARACTERS,
    TRANSACTION_TYPES,
)
from src.domain.models.validation import PasswordValidation, ValidationResult
from src.utils.decimal_utils import coerce_decimal, format_amount

_UPPERCASE = re.compile(r"[A-Z]")
_LOWERCASE = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile(f"[{re.escape(PASSWORD_SPECIAL_CHARACTERS)}]")


def validate_transaction(
    amount,
    description,
    transaction_type,
    category,
    transaction_date,
) -> ValidationResult:
    """Check a transaction payload against the business rules.

    Args:
        amount: Numeric amount (int, float or Decimal).
        description: Free-text description, already sanitized.
        transaction_type: ``"income"`` or ``"expense"``.
        category: Category name.
        transaction_date: ``date`` or ``datetime`` of the movement.

    Returns:
        ValidationResult: Every violated rule, amount first.
    """
    errors: list[str] = []

    value = _finite_amount(amount)
    if value is None:
        errors.append("Amount must be a valid number")
    elif value < MIN_TRANSACTION_AMOUNT:
        errors.append(
            f"Minimum amount is {format_amount(MIN_TRANSACTION_AMOUNT)}"
        )
    elif value > MAX_TRANSACTION_AMOUNT:
        errors.append(
            f"Maximum amount is {format_amount(MAX_TRANSACTION_AMOUNT)}"
        )

    if not isinstance(description, str) or not description.strip():
        errors.append("Description is required")
    elif len(description) < MIN_DESCRIPTION_LENGTH:
        errors.append("Description is too short")
    elif len(description) > MAX_DESCRIPTION_LENGTH:
        errors.append(
            f"Description is too long (maximum {MAX_DESCRIPTION_LENGTH} characters)"
        )

    if transaction_type not in TRANSACTION_TYPES:
        errors.append("Invalid transaction type")

    if not isinstance(category, str) or not category.strip():
        errors.append("Category is required")

    moment = _as_datetime(transaction_date)
    if moment is None:
        errors.append("Invalid date")
    else:
        now = datetime.now(tz=moment.tzinfo)
        if moment > _shift_years(now, MAX_FUTURE_YEARS):
            errors.append("Date is too far in the future")
        elif moment < _shift_years(now, -MAX_PAST_YEARS):
            errors.append("Date is too far in the past")

    return ValidationResult(is_valid=not errors, errors=errors)


def validate_category(name, category_type) -> ValidationResult:
    """Check a category payload.

    Args:
        name: Category name, already sanitized.
        category_type: ``"income"`` or ``"expense"``.

    Returns:
        ValidationResult: Every violated rule.
    """
    errors: list[str] = []
    if not isinstance(name, str) or not name.strip():
        errors.append("Category name is required")
    elif len(name) < MIN_CATEGORY_NAME_LENGTH:
        errors.append("Category name is too short")
    elif len(name) > MAX_CATEGORY_NAME_LENGTH:
        errors.append(
            "Category name is too long "
            f"(maximum {MAX_CATEGORY_NAME_LENGTH} characters)"
        )
    if category_type not in TRANSACTION_TYPES:
        errors.append("Invalid category type")
    return ValidationResult(is_valid=not errors, errors=errors)


def validate_password(password) -> PasswordValidation:
    """Score a password and list the rules it breaks.

    Each satisfied rule (length, uppercase, lowercase, digit, special
    character) is worth 20 points, with 10 bonus points at 12 and at 16
    characters. A common password is capped at 20 points and rejected.

    Args:
        password: Candidate password.

    Returns:
        PasswordValidation: Violations, strength band and 0-100 score.
    """
    candidate = password if isinstance(password, str) else ""
    errors: list[str] = []
    score = 0

    if len(candidate) < MIN_PASSWORD_LENGTH:
        errors.append(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    else:
        score += 20

    if _UPPERCASE.search(candidate):
        score += 20
    else:
        errors.append("Password must contain at least one uppercase letter")

    if _LOWERCASE.search(candidate):
        score += 20
    else:
        errors.append("Password must contain at least one lowercase letter")

    if _DIGIT.search(candidate):
        score += 20
    else:
        errors.append("Password must contain at least one number")

    if _SPECIAL.search(candidate):
        score += 20
    else:
        errors.append(
            "Password must contain at least one special character (!@#$%^&*...)"
        )

    if len(candidate) >= 12:
        score += 10
    if len(candidate) >= 16:
        score += 10
    score = min(score, 100)

    if candidate.lower() in COMMON_PASSWORDS:
        errors.append("Password is too common. Choose a more secure one")
        score = min(score, 20)

    return PasswordValidation(
        is_valid=not errors,
        errors=errors,
        strength=_strength_band(score),
        score=score,
    )


def validate_user_name(name) -> ValidationResult:
    """Check a display name.

    Args:
        name: Display name, already sanitized.

    Returns:
        ValidationResult: The violated rule, if any.
    """
    if not isinstance(name, str) or not name.strip():
        return ValidationResult(is_valid=False, errors=["Name is required"])
    if len(name) < MIN_NAME_LENGTH:
        return ValidationResult(is_valid=False, errors=["Name is too short"])
    if len(name) > MAX_NAME_LENGTH:
        return ValidationResult(
            is_valid=False,
            errors=[f"Name is too long (maximum {MAX_NAME_LENGTH} characters)"],
        )
    return ValidationResult(is_valid=True)


def _finite_amount(amount) -> Decimal | None:
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        return None
    value = coerce_decimal(amount)
    if not value.is_finite():
        return None
    return value


def _as_datetime(value) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time(12))
    return None


def _shift_years(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return moment.replace(year=moment.year + years, day=28)


def _strength_band(score: int) -> str:
    if score >= 80:
        return "very-strong"
    if score >= 60:
        return "strong"
    if score >= 40:
        return "medium"
    return "weak"


__all__ = [
    "validate_transaction",
    "validate_category",
    "validate_password",
    "validate_user_name",
]
