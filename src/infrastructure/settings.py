"""Settings helpers for infrastructure adapters."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import os

from src.application.use_cases.session_store import DEFAULT_CACHE_NAMESPACE
from src.infrastructure.logging.logger import get_app_logger
from src.utils.utils import get_project_root


@dataclass(frozen=True)
class FinanceSettings:
    """Settings for the session store and its local cache.

    Attributes:
        initial_balance_offset: Funds held outside the recorded history.
        cache_url: SQLAlchemy URL of the local snapshot cache.
        cache_namespace: Prefix of local cache keys.
    """

    initial_balance_offset: Decimal = Decimal("0")
    cache_url: str | None = None
    cache_namespace: str = DEFAULT_CACHE_NAMESPACE

    @classmethod
    def from_env(cls) -> "FinanceSettings":
        """Build settings from environment variables.

        Returns:
            FinanceSettings: Settings sourced from environment variables.
        """
        logger = get_app_logger()
        offset = cls._parse_offset(
            os.getenv("FINANCE_INITIAL_BALANCE", ""),
            logger=logger,
        )
        cache_url = os.getenv("FINANCE_CACHE_URL", "").strip() or (
            cls._default_cache_url()
        )
        namespace = (
            os.getenv("FINANCE_CACHE_NAMESPACE", "").strip()
            or DEFAULT_CACHE_NAMESPACE
        )
        return cls(
            initial_balance_offset=offset,
            cache_url=cache_url,
            cache_namespace=namespace,
        )

    @staticmethod
    def _parse_offset(raw_value: str, logger) -> Decimal:
        """Parse the initial balance offset.

        Args:
            raw_value: Raw environment value.
            logger: Logger used for warnings.

        Returns:
            Decimal: Parsed offset, or zero when missing or invalid.
        """
        cleaned = raw_value.strip()
        if not cleaned:
            return Decimal("0")
        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            logger.warning(
                f"Invalid FINANCE_INITIAL_BALANCE value {cleaned!r}; using 0"
            )
            return Decimal("0")
        if not value.is_finite():
            logger.warning(
                f"Invalid FINANCE_INITIAL_BALANCE value {cleaned!r}; using 0"
            )
            return Decimal("0")
        return value

    @staticmethod
    def _default_cache_url() -> str:
        """Return the SQLite URL of the cache file under data/."""
        return f"sqlite:///{get_project_root() / 'data' / 'local_cache.db'}"


__all__ = ["FinanceSettings"]
