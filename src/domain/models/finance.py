"""Domain models for financial aggregates."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class FinancialSummary:
    """Income, expense and balance figures.

    Attributes:
        income: Sum of income amounts.
        expense: Sum of expense amounts.
        balance: Income minus expense plus the initial balance offset.
    """

    income: Decimal
    expense: Decimal
    balance: Decimal

    @property
    def net(self) -> Decimal:
        """Return income minus expense, without the offset."""
        return self.income - self.expense


@dataclass(frozen=True)
class MonthlyCashFlow:
    """Income and expense accumulated for one calendar month."""

    month_index: int
    label: str
    income: Decimal
    expense: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class CategoryTotal:
    """Expense total for a category."""

    category: str
    total: Decimal
    is_placeholder: bool = False


@dataclass(frozen=True)
class BalancePoint:
    """Cumulative net flow at the end of a calendar month."""

    month_index: int
    label: str
    value: Decimal


@dataclass(frozen=True)
class FinancialSnapshot:
    """All aggregates derived from one transaction collection."""

    summary: FinancialSummary
    monthly_cash_flow: list[MonthlyCashFlow]
    category_breakdown: list[CategoryTotal]
    cumulative_balance: list[BalancePoint]


@dataclass(frozen=True)
class CashFlowView:
    """Cash-flow series for a presentation mode plus overall totals."""

    mode: str
    months: list[MonthlyCashFlow]
    total_income: Decimal
    total_expense: Decimal

    @property
    def difference(self) -> Decimal:
        """Return total_income minus total_expense."""
        return self.total_income - self.total_expense


@dataclass(frozen=True)
class ReportRow:
    """One transaction line of an exported report."""

    date: datetime
    description: str
    category: str
    type_label: str
    amount: Decimal


@dataclass(frozen=True)
class FinancialReport:
    """Data behind the financial report export."""

    period_label: str
    generated_at: datetime
    income: Decimal
    expense: Decimal
    net: Decimal
    rows: list[ReportRow] = field(default_factory=list)


__all__ = [
    "FinancialSummary",
    "MonthlyCashFlow",
    "CategoryTotal",
    "BalancePoint",
    "FinancialSnapshot",
    "CashFlowView",
    "ReportRow",
    "FinancialReport",
]
