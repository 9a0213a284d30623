"""Application use cases package."""

from .build_financial_report import BuildFinancialReportUseCase, FinancialReport
from .get_cash_flow import CashFlowView, GetCashFlowUseCase
from .session_store import (
    SESSION_AUTHENTICATED,
    SESSION_AUTHENTICATING,
    SESSION_LOGGED_OUT,
    SessionStore,
)

__all__ = [
    "BuildFinancialReportUseCase",
    "FinancialReport",
    "CashFlowView",
    "GetCashFlowUseCase",
    "SessionStore",
    "SESSION_AUTHENTICATED",
    "SESSION_AUTHENTICATING",
    "SESSION_LOGGED_OUT",
]
