"""P/L and risk:reward for resolved bracket orders (pure functions).

Per leg::

    price_diff = sign × (closure_price − entry)      sign = +1 long, −1 short
    leg_pl     = price_diff × leg_size × value_per_unit

Aggregate::

    risk        = |entry − primary_stop| × position_size × value_per_unit
    rr          = total_pl / risk
    final_pl_pct = rr × 100

Risk is the *planned* risk from the primary stop and the aggregate size,
not the sum of each leg's own stop distance, so R:R always reads against
what was put on the line at entry.  When risk is zero the ratios are 0.0
and ``risk_defined`` is False so the caller can tell "undefined" from a
genuine scratch trade.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field

from tradebook.core.enums import ClosureType, Direction
from tradebook.core.errors import (
    IntegrityError,
    MissingPriceError,
    OutcomeValidationError,
    ValidationError,
)
from tradebook.core.guards import finite_or_zero, is_usable, safe_div
from tradebook.core.models import BracketOrder, BracketOrderOutcome, FilledBracketGroup

from .resolver import OutcomeResolver, closure_from_filled

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PLResult:
    """Realised P/L of one bracket order."""

    total_pl: float
    final_pl_pct: float
    rr: float
    risk: float
    risk_defined: bool
    leg_pls: dict[str, float] = field(default_factory=dict)


def leg_pl(
    direction: Direction,
    entry_price: float,
    closure_price: float,
    size: float,
    value_per_unit: float,
) -> float:
    """Dollar P/L of one leg."""
    price_diff = direction.sign * (closure_price - entry_price)
    return finite_or_zero(price_diff * size * value_per_unit)


def planned_risk(order: BracketOrder) -> float:
    """Dollar risk at entry from the primary stop and aggregate size."""
    stop_distance = abs(order.entry_price - order.primary_stop_loss)
    return finite_or_zero(stop_distance * order.position_size * order.value_per_unit)


def compute_trade_pl(
    direction: Direction,
    order: BracketOrder,
    filled: list[FilledBracketGroup],
) -> PLResult:
    """Aggregate P/L, percentage-of-risk and R:R for filled legs."""
    leg_pls = {
        f.bracket_id: leg_pl(
            direction, order.entry_price, f.closure_price, f.size, order.value_per_unit
        )
        for f in filled
    }
    total = finite_or_zero(sum(leg_pls.values()))
    risk = planned_risk(order)
    risk_defined = risk > 0
    if not risk_defined:
        logger.warning(
            "Planned risk is zero (entry=%s stop=%s size=%s); R:R reported as 0",
            order.entry_price, order.primary_stop_loss, order.position_size,
        )
    rr = safe_div(total, risk) if risk_defined else 0.0
    return PLResult(
        total_pl=total,
        final_pl_pct=rr * 100.0,
        rr=rr,
        risk=risk,
        risk_defined=risk_defined,
        leg_pls=leg_pls,
    )


def validate_filled_legs(order: BracketOrder, filled: list[FilledBracketGroup]) -> None:
    """Check filled legs correspond one-to-one with the order's legs.

    Raises:
        IntegrityError: Unknown, duplicated or missing bracket ids.
        ConflictingClosureError: A leg has both break-even and manual close.
        OutcomeValidationError: A leg's closure price is zero or missing.
    """
    order_ids = order.leg_ids()
    counts = Counter(f.bracket_id for f in filled)

    unknown = [bid for bid in counts if bid not in order_ids]
    if unknown:
        raise IntegrityError("filled leg references unknown bracket", unknown)
    duplicated = [bid for bid, n in counts.items() if n > 1]
    if duplicated:
        raise IntegrityError("bracket filled more than once", duplicated)
    missing = [bid for bid in order_ids if bid not in counts]
    if missing:
        raise IntegrityError("bracket has no filled outcome", missing)

    issues: list[ValidationError] = []
    for f in filled:
        closure_from_filled(order, f)
        if not is_usable(f.closure_price):
            issues.append(MissingPriceError(
                f"Bracket {order.leg_number(f.bracket_id)}: closure price is missing",
                field="closure_price", leg_id=f.bracket_id,
            ))
    if issues:
        raise OutcomeValidationError(issues)


def build_outcome(
    direction: Direction,
    order: BracketOrder,
    filled: list[FilledBracketGroup],
) -> BracketOrderOutcome:
    """Validate filled legs and compute the derived outcome record."""
    validate_filled_legs(order, filled)
    result = compute_trade_pl(direction, order, filled)
    # Keep the order's leg order regardless of how filled legs arrived
    by_id = {f.bracket_id: f for f in filled}
    return BracketOrderOutcome(
        filled_bracket_groups=[by_id[bid].model_copy() for bid in order.leg_ids()],
        final_pl_usd=result.total_pl,
        final_pl_pct=result.final_pl_pct,
        rr=result.rr,
        risk_defined=result.risk_defined,
    )


def resolve_outcome(resolver: OutcomeResolver, direction: Direction) -> BracketOrderOutcome:
    """Resolve the user's selections and compute the outcome in one step."""
    return build_outcome(direction, resolver.order, resolver.resolve())


# ---------------------------------------------------------------------------
# What-if scenarios
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScenarioResult:
    """P/L of a hypothetical take-profit / stop-loss mix."""

    total_pl: float = 0.0
    total_risk: float = 0.0  # Sum of losses on stopped-out legs
    total_reward: float = 0.0  # Sum of gains on take-profit legs
    rr: float = 0.0
    is_valid: bool = False


def simulate_scenario(
    direction: Direction,
    order: BracketOrder,
    leg_outcomes: dict[str, ClosureType],
) -> ScenarioResult:
    """Evaluate a planned order if each leg hits its TP or SL.

    Unlike :func:`compute_trade_pl`, the ratio here is reward over the
    losses of the stopped legs in this scenario.  Legs missing from
    ``leg_outcomes`` or mapped to anything but TP/SL are ignored.
    """
    if not all(
        is_usable(v)
        for v in (order.entry_price, order.primary_stop_loss, order.value_per_unit)
    ):
        return ScenarioResult()

    total_pl = total_risk = total_reward = 0.0
    for leg in order.bracket_groups:
        outcome = leg_outcomes.get(leg.bracket_id)
        if outcome == ClosureType.TAKE_PROFIT:
            pl = leg_pl(direction, order.entry_price, leg.take_profit_price,
                        leg.size, order.value_per_unit)
            total_pl += pl
            total_reward += pl
        elif outcome == ClosureType.STOP_LOSS:
            pl = leg_pl(direction, order.entry_price, leg.stop_loss_price,
                        leg.size, order.value_per_unit)
            total_pl += pl
            total_risk += abs(pl)

    return ScenarioResult(
        total_pl=finite_or_zero(total_pl),
        total_risk=finite_or_zero(total_risk),
        total_reward=finite_or_zero(total_reward),
        rr=safe_div(total_pl, total_risk),
        is_valid=True,
    )
