"""Use case to build the cash-flow view shown by the analytics screen."""

from datetime import date

from src.application.use_cases.session_store import SessionStore
from src.domain.constants import CASH_FLOW_ROLLING_6_MONTHS
from src.domain.models import CashFlowView
from src.domain.services import select_cash_flow_window
from src.infrastructure.logging.logger import get_app_logger


class GetCashFlowUseCase:
    """Select monthly cash-flow buckets for a presentation mode."""

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
        today: date | None = None,
    ) -> CashFlowView:
        """Return the cash-flow series and overall totals.

        Args:
            mode: ``"6months"`` for the rolling window or ``"year"``.
            today: Reference day for the rolling window; defaults to today.

        Returns:
            CashFlowView: Windowed monthly buckets plus income/expense totals
            over every transaction.

        Raises:
            ValueError: If the mode is unknown.
        """
        reference = today or date.today()
        snapshot = self._store.snapshot
        months = select_cash_flow_window(
            snapshot.monthly_cash_flow,
            mode,
            reference.month - 1,
        )
        self._logger.info(
            f"Cash flow computed: mode={mode}, months={len(months)}, "
            f"in={snapshot.summary.income}, out={snapshot.summary.expense}"
        )
        return CashFlowView(
            mode=mode,
            months=months,
            total_income=snapshot.summary.income,
            total_expense=snapshot.summary.expense,
        )


__all__ = ["GetCashFlowUseCase", "CashFlowView"]
