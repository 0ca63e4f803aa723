"""Numeric guards shared by the sizing, outcome and analytics code.

Nothing in the engine may hand NaN or Infinity back to a caller.  Every
division goes through :func:`safe_div` and every user-supplied price is
checked with :func:`is_usable` before it takes part in arithmetic.
"""

from __future__ import annotations

import math

from .enums import Direction
from .errors import InvalidStopLossError


def is_usable(value: float | None) -> bool:
    """True when *value* is a finite, non-zero number."""
    if value is None:
        return False
    try:
        return math.isfinite(value) and value != 0
    except TypeError:
        return False


def finite_or_zero(value: float) -> float:
    """Map NaN / +-Infinity to 0.0."""
    return value if math.isfinite(value) else 0.0


def safe_div(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 for a zero or non-finite divisor or result."""
    if not math.isfinite(denominator) or denominator == 0:
        return 0.0
    return finite_or_zero(numerator / denominator)


def validate_stop_loss(direction: Direction, entry: float, stop: float) -> None:
    """Check the stop-loss sits on the losing side of entry.

    Long trades need ``stop < entry``; short trades need ``stop > entry``.
    Values that are not yet entered (zero / non-finite) are left to the
    missing-price checks and do not raise here.

    Raises:
        InvalidStopLossError: If the stop is on the wrong side of entry.
    """
    if not (is_usable(entry) and is_usable(stop)):
        return
    if direction == Direction.LONG and stop >= entry:
        raise InvalidStopLossError(
            "For long trades, stop-loss must be below entry price",
            field="primary_stop_loss",
        )
    if direction == Direction.SHORT and stop <= entry:
        raise InvalidStopLossError(
            "For short trades, stop-loss must be above entry price",
            field="primary_stop_loss",
        )


def stop_loss_is_valid(direction: Direction, entry: float, stop: float) -> bool:
    """Non-raising form of :func:`validate_stop_loss`."""
    try:
        validate_stop_loss(direction, entry, stop)
    except InvalidStopLossError:
        return False
    return True
