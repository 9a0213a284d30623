"""Domain services for finance aggregates.

Every aggregate is recomputed from the full transaction collection. A record
with a non-finite amount counts as zero, a record with an unknown type is left
out of every total, and a record without a usable date is left out of the
monthly series. None of these conditions raise.
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from logging import Logger

from src.domain.constants import (
    CASH_FLOW_FULL_YEAR,
    CASH_FLOW_ROLLING_6_MONTHS,
    EXPENSE,
    INCOME,
    MONTH_LABELS,
    NO_DATA_LABEL,
    NO_DATA_PLACEHOLDER_TOTAL,
    ROLLING_WINDOW_SIZE,
)
from src.domain.models import (
    BalancePoint,
    CategoryTotal,
    FinancialSnapshot,
    FinancialSummary,
    MonthlyCashFlow,
    Transaction,
)
from src.domain.services.normalization import normalize_category_name
from src.utils.decimal_utils import coerce_decimal

ZERO = Decimal("0")


def compute_totals(
    transactions: Iterable[Transaction],
    initial_balance_offset: Decimal = ZERO,
    logger: Logger | None = None,
) -> FinancialSummary:
    """Compute income, expense and balance.

    Args:
        transactions: Transaction collection.
        initial_balance_offset: Funds held outside the recorded history.
            A non-finite offset counts as zero.
        logger: Optional logger used for degraded records.

    Returns:
        FinancialSummary: Totals with ``balance = income - expense + offset``.
    """
    income = ZERO
    expense = ZERO
    for transaction in transactions:
        if transaction.type == INCOME:
            income += _safe_amount(transaction, logger)
        elif transaction.type == EXPENSE:
            expense += _safe_amount(transaction, logger)
        else:
            _warn_unknown_type(transaction, logger)
    return FinancialSummary(
        income=income,
        expense=expense,
        balance=income - expense + _safe_offset(initial_balance_offset, logger),
    )


def compute_monthly_cash_flow(
    transactions: Iterable[Transaction],
    logger: Logger | None = None,
) -> list[MonthlyCashFlow]:
    """Accumulate income and expense per calendar month, ignoring the year.

    Args:
        transactions: Transaction collection.
        logger: Optional logger used for degraded records.

    Returns:
        list[MonthlyCashFlow]: Twelve buckets, January first.
    """
    incomes = [ZERO] * 12
    expenses = [ZERO] * 12
    for transaction in transactions:
        month_index = _month_index(transaction, logger)
        if month_index is None:
            continue
        if transaction.type == INCOME:
            incomes[month_index] += _safe_amount(transaction, logger)
        elif transaction.type == EXPENSE:
            expenses[month_index] += _safe_amount(transaction, logger)
        else:
            _warn_unknown_type(transaction, logger)
    return [
        MonthlyCashFlow(
            month_index=index,
            label=MONTH_LABELS[index],
            income=incomes[index],
            expense=expenses[index],
        )
        for index in range(12)
    ]


def rolling_window_indices(
    current_month_index: int,
    size: int = ROLLING_WINDOW_SIZE,
) -> list[int]:
    """Return the month indices of a window ending at the current month.

    The window wraps into the previous year's indices, so March gives
    ``[9, 10, 11, 0, 1, 2]``.

    Args:
        current_month_index: Month index of today (0 = January).
        size: Number of months in the window.

    Returns:
        list[int]: Month indices in chronological order.
    """
    return [
        (current_month_index - offset) % 12
        for offset in range(size - 1, -1, -1)
    ]


def select_cash_flow_window(
    months: list[MonthlyCashFlow],
    mode: str,
    current_month_index: int,
) -> list[MonthlyCashFlow]:
    """Pick the buckets shown for a presentation mode.

    Args:
        months: Twelve monthly buckets from ``compute_monthly_cash_flow``.
        mode: ``"year"`` or ``"6months"``.
        current_month_index: Month index of today (0 = January).

    Returns:
        list[MonthlyCashFlow]: Buckets in display order.

    Raises:
        ValueError: If the mode is unknown.
    """
    if mode == CASH_FLOW_FULL_YEAR:
        return list(months)
    if mode == CASH_FLOW_ROLLING_6_MONTHS:
        return [months[index] for index in rolling_window_indices(current_month_index)]
    raise ValueError(
        f"Unsupported cash flow mode: {mode}. "
        f"Expected {CASH_FLOW_FULL_YEAR} or {CASH_FLOW_ROLLING_6_MONTHS}."
    )


def compute_category_breakdown(
    transactions: Iterable[Transaction],
    logger: Logger | None = None,
) -> list[CategoryTotal]:
    """Sum expenses per category, largest first.

    Args:
        transactions: Transaction collection.
        logger: Optional logger used for degraded records.

    Returns:
        list[CategoryTotal]: Totals sorted descending, or a single
        placeholder entry when there is no expense.
    """
    totals: dict[str, Decimal] = {}
    for transaction in transactions:
        if transaction.type != EXPENSE:
            continue
        category = normalize_category_name(transaction.category)
        totals[category] = totals.get(category, ZERO) + _safe_amount(
            transaction, logger
        )
    if not totals:
        return [
            CategoryTotal(
                category=NO_DATA_LABEL,
                total=NO_DATA_PLACEHOLDER_TOTAL,
                is_placeholder=True,
            )
        ]
    breakdown = [
        CategoryTotal(category=category, total=total)
        for category, total in totals.items()
    ]
    breakdown.sort(key=lambda item: item.total, reverse=True)
    return breakdown


def compute_cumulative_balance(
    transactions: Iterable[Transaction],
    logger: Logger | None = None,
) -> list[BalancePoint]:
    """Accumulate monthly net flow month over month.

    Args:
        transactions: Transaction collection.
        logger: Optional logger used for degraded records.

    Returns:
        list[BalancePoint]: Twelve running totals, January first.
    """
    running = ZERO
    points: list[BalancePoint] = []
    for month in compute_monthly_cash_flow(transactions, logger):
        running += month.net
        points.append(
            BalancePoint(
                month_index=month.month_index,
                label=month.label,
                value=running,
            )
        )
    return points


def build_financial_snapshot(
    transactions: Iterable[Transaction],
    initial_balance_offset: Decimal = ZERO,
    logger: Logger | None = None,
) -> FinancialSnapshot:
    """Derive every aggregate from one transaction collection.

    Args:
        transactions: Transaction collection.
        initial_balance_offset: Funds held outside the recorded history.
        logger: Optional logger used for degraded records.

    Returns:
        FinancialSnapshot: Totals, monthly series, breakdown and trend.
    """
    records = list(transactions)
    return FinancialSnapshot(
        summary=compute_totals(records, initial_balance_offset, logger),
        monthly_cash_flow=compute_monthly_cash_flow(records, logger),
        category_breakdown=compute_category_breakdown(records, logger),
        cumulative_balance=compute_cumulative_balance(records, logger),
    )


def _safe_amount(transaction: Transaction, logger: Logger | None) -> Decimal:
    amount = coerce_decimal(transaction.amount)
    if amount.is_finite():
        return amount
    if logger is not None:
        logger.warning(
            f"Ignoring non-finite amount for transaction id={transaction.id}"
        )
    return ZERO


def _safe_offset(offset, logger: Logger | None) -> Decimal:
    value = coerce_decimal(offset)
    if value.is_finite():
        return value
    if logger is not None:
        logger.warning(f"Ignoring non-finite initial balance offset {offset!r}")
    return ZERO


def _month_index(transaction: Transaction, logger: Logger | None) -> int | None:
    if isinstance(transaction.date, date):
        return transaction.date.month - 1
    if logger is not None:
        logger.warning(
            f"Ignoring transaction without a date in monthly series: id={transaction.id}"
        )
    return None


def _warn_unknown_type(transaction: Transaction, logger: Logger | None) -> None:
    if logger is not None:
        logger.warning(
            f"Ignoring transaction with unknown type={transaction.type!r}: "
            f"id={transaction.id}"
        )


__all__ = [
    "compute_totals",
    "compute_monthly_cash_flow",
    "rolling_window_indices",
    "select_cash_flow_window",
    "compute_category_breakdown",
    "compute_cumulative_balance",
    "build_financial_snapshot",
]
