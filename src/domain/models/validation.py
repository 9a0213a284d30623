"""Domain models for validation outcomes."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validator.

    Attributes:
        is_valid: True when no rule was violated.
        errors: Violated rules in check order; the first is the primary one.
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)

    @property
    def first_error(self) -> str | None:
        """Return the primary violation, if any."""
        return self.errors[0] if self.errors else None


@dataclass(frozen=True)
class PasswordValidation(ValidationResult):
    """Password validation outcome with a strength classification."""

    strength: str = "weak"
    score: int = 0


__all__ = ["ValidationResult", "PasswordValidation"]
