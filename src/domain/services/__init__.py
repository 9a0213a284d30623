"""Domain services package."""

from .finance import (
    build_financial_snapshot,
    compute_category_breakdown,
    compute_cumulative_balance,
    compute_monthly_cash_flow,
    compute_totals,
    rolling_window_indices,
    select_cash_flow_window,
)
from .normalization import (
    coerce_datetime,
    normalize_category_name,
    parse_amount,
)
from .sanitization import sanitize_input
from .validation import (
    validate_category,
    validate_password,
    validate_transaction,
    validate_user_name,
)

__all__ = [
    "build_financial_snapshot",
    "compute_category_breakdown",
    "compute_cumulative_balance",
    "compute_monthly_cash_flow",
    "compute_totals",
    "rolling_window_indices",
    "select_cash_flow_window",
    "coerce_datetime",
    "normalize_category_name",
    "parse_amount",
    "sanitize_input",
    "validate_category",
    "validate_password",
    "validate_transaction",
    "validate_user_name",
]
