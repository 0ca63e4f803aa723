"""Custom exception hierarchy for the journal engine."""

from __future__ import annotations


class TradebookError(Exception):
    """Base exception for all journal engine errors."""


# --- Configuration ---
class ConfigError(TradebookError):
    """Invalid or missing configuration."""


# --- Input validation ---
class ValidationError(TradebookError):
    """A user-supplied value failed validation.

    Carries the offending ``field`` and, for per-leg problems, the
    ``leg_id`` so callers can attach the message to the right input.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str = "",
        leg_id: str | None = None,
    ) -> None:
        self.message = message
        self.field = field
        self.leg_id = leg_id
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"field": self.field, "leg_id": self.leg_id, "message": self.message}


class InvalidStopLossError(ValidationError):
    """Stop-loss is on the wrong side of entry for the trade direction."""


class MissingPriceError(ValidationError):
    """A required price is missing or zero."""


class UnresolvedLegError(ValidationError):
    """A bracket leg has no closure selected."""


class ConflictingClosureError(ValidationError):
    """A leg carries both break-even and manual-close."""


class LegConstraintError(ValidationError):
    """A bracket leg operation violates an order constraint."""


class OutcomeValidationError(ValidationError):
    """Save-time validation failed for one or more legs."""

    def __init__(self, issues: list[ValidationError]) -> None:
        self.issues = list(issues)
        summary = "; ".join(i.message for i in self.issues)
        super().__init__(
            f"Outcome cannot be saved: {summary}", field="bracket_order_outcome"
        )


# --- Data integrity ---
class IntegrityError(TradebookError):
    """Filled legs do not correspond one-to-one with the order's legs."""

    def __init__(self, reason: str, bracket_ids: list[str] | None = None) -> None:
        self.reason = reason
        self.bracket_ids = list(bracket_ids or [])
        detail = f" ({', '.join(self.bracket_ids)})" if self.bracket_ids else ""
        super().__init__(f"Bracket integrity violation: {reason}{detail}")


# --- Lifecycle ---
class TradeStateError(TradebookError):
    """Operation not permitted in the trade's current lifecycle state."""


class NotFoundError(TradebookError):
    """A record was not found in the backing store."""
