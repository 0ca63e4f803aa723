"""Position sizing.  Pure math, no I/O.

Turns a risk budget into a tradable size::

    risk_amount   = fixed dollars, or capital × risk_pct / 100
    stop_distance = |entry − stop|
    size          = risk_amount / (stop_distance × value_per_unit)

then rounds by asset type:

* crypto                     → 8 decimals (fractional sizes always allowed)
* fractional sizing allowed  → 2 decimals
* otherwise                  → whole units, rounded down

Every degenerate input (zero, negative or non-finite capital, prices,
value-per-unit or risk) sizes to 0 instead of raising, in either risk
mode, so callers can feed half-filled forms straight in.  A stop on the
wrong side of entry is different: sizing short-circuits to 0 *and* the
result carries the
:class:`~tradebook.core.errors.InvalidStopLossError` to show the user.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, localcontext

from tradebook.core.enums import AssetType, Direction, RiskMode
from tradebook.core.errors import InvalidStopLossError, LegConstraintError
from tradebook.core.guards import finite_or_zero, is_usable, safe_div, validate_stop_loss
from tradebook.core.models import BracketOrder, PositionSizerSnapshot

logger = logging.getLogger(__name__)

CRYPTO_DECIMALS = 8
FRACTIONAL_DECIMALS = 2


@dataclass
class SizingResult:
    """Outcome of a sizing computation."""

    recommended_size: float = 0.0
    risk_amount: float = 0.0
    stop_distance: float = 0.0
    actual_risk_dollars: float = 0.0  # Risk at the rounded size
    actual_risk_pct: float = 0.0  # ... as % of capital
    error: InvalidStopLossError | None = None

    @property
    def is_valid(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return {
            "recommended_size": self.recommended_size,
            "risk_amount": self.risk_amount,
            "stop_distance": self.stop_distance,
            "actual_risk_dollars": self.actual_risk_dollars,
            "actual_risk_pct": self.actual_risk_pct,
            "error": self.error.to_dict() if self.error else None,
        }


def round_size(
    size: float,
    asset_type: AssetType,
    allow_fractional: bool,
    *,
    crypto_decimals: int = CRYPTO_DECIMALS,
    fractional_decimals: int = FRACTIONAL_DECIMALS,
) -> float:
    """Apply the asset-type rounding policy to a raw size."""
    if not math.isfinite(size) or size <= 0:
        return 0.0
    if asset_type == AssetType.CRYPTO:
        return _quantize(size, crypto_decimals)
    if not allow_fractional:
        return float(math.floor(size))
    return _quantize(size, fractional_decimals)


def _quantize(value: float, decimals: int) -> float:
    d = Decimal(str(value))
    with localcontext() as ctx:
        # Room for every integer digit plus the requested decimals
        ctx.prec = max(ctx.prec, d.adjusted() + decimals + 2)
        return float(d.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP))


def resolve_risk_amount(
    risk_mode: RiskMode,
    account_capital: float,
    risk_percentage: float,
    risk_amount: float,
) -> float:
    """Dollar risk budget for the chosen mode (0.0 when unusable)."""
    if risk_mode == RiskMode.FIXED_AMOUNT:
        amount = risk_amount
    else:
        amount = account_capital * risk_percentage / 100.0
    if not is_usable(amount) or amount < 0:
        return 0.0
    return amount


def calculate_position_size(
    *,
    direction: Direction,
    entry_price: float,
    stop_price: float,
    account_capital: float,
    value_per_unit: float,
    risk_mode: RiskMode = RiskMode.PERCENTAGE,
    risk_percentage: float = 0.0,
    risk_amount: float = 0.0,
    asset_type: AssetType = AssetType.FUTURES,
    allow_fractional: bool = False,
    crypto_decimals: int = CRYPTO_DECIMALS,
    fractional_decimals: int = FRACTIONAL_DECIMALS,
) -> SizingResult:
    """Recommend a position size for the given risk budget.

    Returns:
        A :class:`SizingResult`.  ``recommended_size`` is 0.0 whenever an
        input is unusable; ``error`` is set only for a misplaced stop.
    """
    try:
        validate_stop_loss(direction, entry_price, stop_price)
    except InvalidStopLossError as exc:
        logger.debug("Sizing blocked: %s", exc.message)
        return SizingResult(error=exc)

    for value in (entry_price, stop_price, account_capital, value_per_unit):
        if not is_usable(value) or value < 0:
            return SizingResult()

    budget = resolve_risk_amount(risk_mode, account_capital, risk_percentage, risk_amount)
    if budget == 0.0:
        return SizingResult()

    stop_distance = abs(entry_price - stop_price)
    raw = safe_div(budget, stop_distance * value_per_unit)
    size = round_size(
        raw,
        asset_type,
        allow_fractional,
        crypto_decimals=crypto_decimals,
        fractional_decimals=fractional_decimals,
    )

    actual_risk = finite_or_zero(size * stop_distance * value_per_unit)
    return SizingResult(
        recommended_size=size,
        risk_amount=budget,
        stop_distance=stop_distance,
        actual_risk_dollars=actual_risk,
        actual_risk_pct=finite_or_zero(safe_div(actual_risk, account_capital) * 100.0),
    )


def split_evenly(
    total_size: float,
    n_legs: int,
    asset_type: AssetType,
    allow_fractional: bool,
) -> list[float]:
    """Divide a recommended size evenly across ``n_legs`` legs.

    Each share is rounded with the same policy as the total, so the legs
    may sum to slightly less than ``total_size`` for whole-unit assets.

    Raises:
        LegConstraintError: If there is nothing to split.
    """
    if n_legs <= 0:
        raise LegConstraintError(
            "Cannot populate: order has no legs", field="bracket_groups"
        )
    if not is_usable(total_size) or total_size < 0:
        raise LegConstraintError(
            "Cannot populate: calculated position size is zero",
            field="position_size",
        )
    share = round_size(total_size / n_legs, asset_type, allow_fractional)
    return [share] * n_legs


@dataclass
class PositionSizer:
    """Risk settings for one trade entry, with a helper to size and snapshot.

    Parameters
    ----------
    account_capital : float
        Account equity the percentage risk applies to.
    risk_mode : RiskMode
        Percentage of capital or fixed dollar amount.
    asset_type : AssetType
        Drives the rounding policy.  Crypto always sizes fractionally.
    """

    account_capital: float = 0.0
    value_per_unit: float = 0.0
    risk_mode: RiskMode = RiskMode.PERCENTAGE
    risk_percentage: float = 1.0
    risk_amount: float = 0.0
    asset_type: AssetType = AssetType.FUTURES
    allow_fractional_size: bool = False
    contract_lot_unit: str = "contracts"
    crypto_decimals: int = field(default=CRYPTO_DECIMALS, repr=False)
    fractional_decimals: int = field(default=FRACTIONAL_DECIMALS, repr=False)

    def __post_init__(self) -> None:
        if self.asset_type == AssetType.CRYPTO:
            self.allow_fractional_size = True

    def size(self, direction: Direction, entry_price: float, stop_price: float) -> SizingResult:
        return calculate_position_size(
            direction=direction,
            entry_price=entry_price,
            stop_price=stop_price,
            account_capital=self.account_capital,
            value_per_unit=self.value_per_unit,
            risk_mode=self.risk_mode,
            risk_percentage=self.risk_percentage,
            risk_amount=self.risk_amount,
            asset_type=self.asset_type,
            allow_fractional=self.allow_fractional_size,
            crypto_decimals=self.crypto_decimals,
            fractional_decimals=self.fractional_decimals,
        )

    def populate_legs(self, order: BracketOrder, direction: Direction) -> SizingResult:
        """Size the order from its entry / primary stop and spread it over its legs."""
        result = self.size(direction, order.entry_price, order.primary_stop_loss)
        if result.error is not None:
            raise result.error
        shares = split_evenly(
            result.recommended_size,
            len(order.bracket_groups),
            self.asset_type,
            self.allow_fractional_size,
        )
        for leg, share in zip(order.bracket_groups, shares):
            leg.size = share
        order.position_sizer = self.snapshot(order.entry_price, order.primary_stop_loss)
        return result

    def snapshot(self, entry_price: float, stop_price: float) -> PositionSizerSnapshot:
        return PositionSizerSnapshot(
            account_capital=self.account_capital,
            risk_mode=self.risk_mode,
            risk_percentage=self.risk_percentage,
            risk_amount=self.risk_amount,
            asset_type=self.asset_type,
            allow_fractional_size=self.allow_fractional_size,
            contract_lot_unit=self.contract_lot_unit,
            entry_price=entry_price,
            primary_stop_loss=stop_price,
            value_per_point=self.value_per_unit,
        )

    @classmethod
    def from_snapshot(cls, snapshot: PositionSizerSnapshot) -> PositionSizer:
        """Rebuild sizing settings from a stored snapshot (for replay)."""
        return cls(
            account_capital=snapshot.account_capital,
            value_per_unit=snapshot.value_per_point,
            risk_mode=snapshot.risk_mode,
            risk_percentage=snapshot.risk_percentage,
            risk_amount=snapshot.risk_amount,
            asset_type=snapshot.asset_type,
            allow_fractional_size=snapshot.allow_fractional_size,
            contract_lot_unit=snapshot.contract_lot_unit,
        )
