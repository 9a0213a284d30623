"""Use case assembling the data behind the financial report export."""

from datetime import datetime

from src.application.use_cases.session_store import SessionStore
from src.domain.constants import (
    CASH_FLOW_FULL_YEAR,
    CASH_FLOW_ROLLING_6_MONTHS,
    INCOME,
)
from src.domain.models import FinancialReport, ReportRow
from src.domain.services import normalize_category_name
from src.infrastructure.logging.logger import get_app_logger


PERIOD_LABELS = {
    CASH_FLOW_ROLLING_6_MONTHS: "Last 6 months",
    CASH_FLOW_FULL_YEAR: "Current year",
}
TYPE_LABELS = {INCOME: "Income"}
DEFAULT_TYPE_LABEL = "Expense"


class BuildFinancialReportUseCase:
    """Collect totals and transaction rows for a report document.

    Rendering the document is left to the presentation layer.
    """

    def __init__(self, store: SessionStore, logger=None) -> None:
        """Initialize the use case.

        Args:
            store: Session store holding the current transactions.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._store = store
        self._logger = logger or get_app_logger()

    def execute(
        self,
        mode: str = CASH_FLOW_ROLLING_6_MONTHS,
        generated_at: datetime | None = None,
    ) -> FinancialReport:
        """Return the report data.

        Args:
            mode: Period selected on the analytics screen.
            generated_at: Report timestamp; defaults to now.

        Returns:
            FinancialReport: Totals (net excludes the initial balance offset)
            and one row per transaction, newest first.

        Raises:
            ValueError: If the mode is unknown.
        """
        if mode not in PERIOD_LABELS:
            raise ValueError(
                f"Unsupported report period: {mode}. "
                f"Expected {CASH_FLOW_ROLLING_6_MONTHS} or {CASH_FLOW_FULL_YEAR}."
            )
        summary = self._store.snapshot.summary
        rows = [
            ReportRow(
                date=transaction.date,
                description=transaction.description,
                category=normalize_category_name(transaction.category),
                type_label=TYPE_LABELS.get(transaction.type, DEFAULT_TYPE_LABEL),
                amount=transaction.amount,
            )
            for transaction in self._store.transactions
        ]
        self._logger.info(f"Financial report built with {len(rows)} rows")
        return FinancialReport(
            period_label=PERIOD_LABELS[mode],
            generated_at=generated_at or datetime.now(),
            income=summary.income,
            expense=summary.expense,
            net=summary.net,
            rows=rows,
        )


__all__ = ["BuildFinancialReportUseCase", "FinancialReport"]
