"""Domain constants for transactions, validation and analytics."""

from decimal import Decimal

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

NOTIFICATION_TYPES = ("alert", "info", "success", "warning")

MIN_TRANSACTION_AMOUNT = Decimal("0.01")
MAX_TRANSACTION_AMOUNT = Decimal("1000000000")
MIN_DESCRIPTION_LENGTH = 1
MAX_DESCRIPTION_LENGTH = 500
MAX_FUTURE_YEARS = 10
MAX_PAST_YEARS = 100

MIN_CATEGORY_NAME_LENGTH = 1
MAX_CATEGORY_NAME_LENGTH = 50

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100

MAX_SANITIZED_LENGTH = 1000

MIN_PASSWORD_LENGTH = 8
PASSWORD_SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"
COMMON_PASSWORDS = frozenset(
    {
        "password",
        "123456",
        "12345678",
        "qwerty",
        "abc123",
        "monkey",
        "1234567",
        "letmein",
        "trustno1",
        "dragon",
        "baseball",
        "iloveyou",
        "master",
        "sunshine",
        "ashley",
        "bailey",
        "passw0rd",
        "shadow",
        "123123",
        "654321",
        "superman",
        "qazwsx",
        "michael",
        "football",
    }
)

MONTH_LABELS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

CASH_FLOW_FULL_YEAR = "year"
CASH_FLOW_ROLLING_6_MONTHS = "6months"
CASH_FLOW_MODES = (CASH_FLOW_FULL_YEAR, CASH_FLOW_ROLLING_6_MONTHS)
ROLLING_WINDOW_SIZE = 6

DEFAULT_CATEGORY_LABEL = "General"
NO_DATA_LABEL = "No data"
NO_DATA_PLACEHOLDER_TOTAL = Decimal("100")

DEFAULT_USER_NAME = "User"


__all__ = [
    "INCOME",
    "EXPENSE",
    "TRANSACTION_TYPES",
    "NOTIFICATION_TYPES",
    "MIN_TRANSACTION_AMOUNT",
    "MAX_TRANSACTION_AMOUNT",
    "MIN_DESCRIPTION_LENGTH",
    "MAX_DESCRIPTION_LENGTH",
    "MAX_FUTURE_YEARS",
    "MAX_PAST_YEARS",
    "MIN_CATEGORY_NAME_LENGTH",
    "MAX_CATEGORY_NAME_LENGTH",
    "MIN_NAME_LENGTH",
    "MAX_NAME_LENGTH",
    "MAX_SANITIZED_LENGTH",
    "MIN_PASSWORD_LENGTH",
    "PASSWORD_SPECIAL_CHARACTERS",
    "COMMON_PASSWORDS",
    "MONTH_LABELS",
    "CASH_FLOW_FULL_YEAR",
    "CASH_FLOW_ROLLING_6_MONTHS",
    "CASH_FLOW_MODES",
    "ROLLING_WINDOW_SIZE",
    "DEFAULT_CATEGORY_LABEL",
    "NO_DATA_LABEL",
    "NO_DATA_PLACEHOLDER_TOTAL",
    "DEFAULT_USER_NAME",
]
