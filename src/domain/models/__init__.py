"""Domain models package."""

from .finance import (
    BalancePoint,
    CashFlowView,
    CategoryTotal,
    FinancialReport,
    FinancialSnapshot,
    FinancialSummary,
    MonthlyCashFlow,
    ReportRow,
)
from .records import Category, Notification, Transaction, UserProfile
from .validation import PasswordValidation, ValidationResult

__all__ = [
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
]
