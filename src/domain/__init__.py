"""Domain package for business rules and core models."""

from .constants import EXPENSE, INCOME, TRANSACTION_TYPES
from .errors import (
    BackendError,
    FinanceError,
    UnauthenticatedError,
    ValidationError,
)
from .models import (
    BalancePoint,
    CashFlowView,
    Category,
    CategoryTotal,
    FinancialReport,
    FinancialSnapshot,
    FinancialSummary,
    MonthlyCashFlow,
    Notification,
    PasswordValidation,
    ReportRow,
    Transaction,
    UserProfile,
    ValidationResult,
)
from .policies import to_user_message
from .services import (
    build_financial_snapshot,
    compute_category_breakdown,
    compute_cumulative_balance,
    compute_monthly_cash_flow,
    compute_totals,
    parse_amount,
    rolling_window_indices,
    sanitize_input,
    select_cash_flow_window,
    validate_category,
    validate_password,
    validate_transaction,
    validate_user_name,
)

__all__ = [
    "INCOME",
    "EXPENSE",
    "TRANSACTION_TYPES",
    "FinanceError",
    "ValidationError",
    "UnauthenticatedError",
    "BackendError",
    "Transaction",
    "Category",
    "Notification",
    "UserProfile",
    "FinancialSummary",
    "MonthlyCashFlow",
    "CategoryTotal",
    "BalancePoint",
    "FinancialSnapshot",
    "CashFlowView",
    "ReportRow",
    "FinancialReport",
    "ValidationResult",
    "PasswordValidation",
    "to_user_message",
    "build_financial_snapshot",
    "compute_category_breakdown",
    "compute_cumulative_balance",
    "compute_monthly_cash_flow",
    "compute_totals",
    "parse_amount",
    "rolling_window_indices",
    "sanitize_input",
    "select_cash_flow_window",
    "validate_category",
    "validate_password",
    "validate_transaction",
    "validate_user_name",
]
