"""Per-leg outcome state machine for bracket orders.

Each leg of a bracket order holds exactly one :data:`LegClosure`::

    Unresolved ──▶ TakeProfit | StopLoss | BreakEven(price) | ManualClose(price)

Because the closure is a single tagged value rather than a set of
booleans, a leg can never be both break-even and manual-close: enabling
one replaces the other at the moment of toggling, and selecting
take-profit or stop-loss replaces either.

Usage::

    resolver = OutcomeResolver(trade.bracket_order)
    resolver.select_take_profit(leg_a)
    resolver.toggle_manual_close(leg_b, price=101.5)
    filled = resolver.resolve()   # raises OutcomeValidationError if incomplete
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tradebook.core.enums import ClosureType
from tradebook.core.errors import (
    ConflictingClosureError,
    IntegrityError,
    MissingPriceError,
    OutcomeValidationError,
    UnresolvedLegError,
    ValidationError,
)
from tradebook.core.guards import is_usable
from tradebook.core.models import (
    BracketGroup,
    BracketOrder,
    BracketOrderOutcome,
    FilledBracketGroup,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Closure variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Unresolved:
    """No outcome selected yet."""


@dataclass(frozen=True)
class TakeProfit:
    """Leg closed at its take-profit price."""


@dataclass(frozen=True)
class StopLoss:
    """Leg closed at its stop-loss price."""


@dataclass(frozen=True)
class BreakEven:
    """Leg closed at a user-entered break-even price."""

    price: float | None = None


@dataclass(frozen=True)
class ManualClose:
    """Leg closed by hand at a user-entered price."""

    price: float | None = None


LegClosure = Unresolved | TakeProfit | StopLoss | BreakEven | ManualClose

UNRESOLVED = Unresolved()

_CLOSURE_TYPES: dict[type, ClosureType] = {
    TakeProfit: ClosureType.TAKE_PROFIT,
    StopLoss: ClosureType.STOP_LOSS,
    BreakEven: ClosureType.BREAK_EVEN,
    ManualClose: ClosureType.MANUAL_CLOSE,
}


def closure_type_of(closure: LegClosure) -> ClosureType | None:
    """The persisted closure type for a variant (None while unresolved)."""
    return _CLOSURE_TYPES.get(type(closure))


def break_even_default(entry_price: float) -> float:
    """Price a break-even closure uses when none is given: the entry."""
    return entry_price


def closure_price(leg: BracketGroup, closure: LegClosure) -> float | None:
    """Price the leg closed at, or None while unresolved."""
    if isinstance(closure, TakeProfit):
        return leg.take_profit_price
    if isinstance(closure, StopLoss):
        return leg.stop_loss_price
    if isinstance(closure, (BreakEven, ManualClose)):
        return closure.price
    return None


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class OutcomeResolver:
    """Collects the user's per-leg outcome choices for one bracket order.

    Parameters
    ----------
    order : BracketOrder
        The order whose legs are being closed.  It is read, never mutated.
    """

    def __init__(self, order: BracketOrder) -> None:
        self._order = order
        self._closures: dict[str, LegClosure] = {
            leg.bracket_id: UNRESOLVED for leg in order.bracket_groups
        }

    @property
    def order(self) -> BracketOrder:
        return self._order

    # ------------------------------------------------------------------ #
    # State inspection                                                     #
    # ------------------------------------------------------------------ #

    def closure(self, bracket_id: str) -> LegClosure:
        self._require_leg(bracket_id)
        return self._closures[bracket_id]

    def closures(self) -> dict[str, LegClosure]:
        return dict(self._closures)

    @property
    def is_fully_selected(self) -> bool:
        return all(
            not isinstance(self._closures.get(leg.bracket_id, UNRESOLVED), Unresolved)
            for leg in self._order.bracket_groups
        )

    # ------------------------------------------------------------------ #
    # Transitions                                                          #
    # ------------------------------------------------------------------ #

    def select_take_profit(self, bracket_id: str) -> None:
        self._set(bracket_id, TakeProfit())

    def select_stop_loss(self, bracket_id: str) -> None:
        self._set(bracket_id, StopLoss())

    def toggle_break_even(
        self, bracket_id: str, enabled: bool = True, price: float | None = None
    ) -> None:
        """Enable or disable break-even on a leg.

        Enabling replaces any other closure, manual-close included.  With
        no price given the entry price is used.
        """
        current = self.closure(bracket_id)
        if enabled:
            if price is None:
                price = break_even_default(self._order.entry_price)
            self._set(bracket_id, BreakEven(price))
        elif isinstance(current, BreakEven):
            self._set(bracket_id, UNRESOLVED)

    def toggle_manual_close(
        self, bracket_id: str, enabled: bool = True, price: float | None = None
    ) -> None:
        """Enable or disable manual close.  Enabling replaces break-even."""
        current = self.closure(bracket_id)
        if enabled:
            if price is None and isinstance(current, ManualClose):
                price = current.price
            self._set(bracket_id, ManualClose(price))
        elif isinstance(current, ManualClose):
            self._set(bracket_id, UNRESOLVED)

    def set_break_even_price(self, bracket_id: str, price: float | None) -> None:
        if not isinstance(self.closure(bracket_id), BreakEven):
            raise ValidationError(
                f"Bracket {self._order.leg_number(bracket_id)}: "
                "break-even is not enabled on this leg",
                field="break_even_price",
                leg_id=bracket_id,
            )
        self._set(bracket_id, BreakEven(price))

    def set_manual_close_price(self, bracket_id: str, price: float | None) -> None:
        if not isinstance(self.closure(bracket_id), ManualClose):
            raise ValidationError(
                f"Bracket {self._order.leg_number(bracket_id)}: "
                "manual close is not enabled on this leg",
                field="manual_close_price",
                leg_id=bracket_id,
            )
        self._set(bracket_id, ManualClose(price))

    def select(
        self, bracket_id: str, closure_type: ClosureType, price: float | None = None
    ) -> None:
        """Select a closure by its persisted type."""
        if closure_type == ClosureType.TAKE_PROFIT:
            self.select_take_profit(bracket_id)
        elif closure_type == ClosureType.STOP_LOSS:
            self.select_stop_loss(bracket_id)
        elif closure_type == ClosureType.BREAK_EVEN:
            self.toggle_break_even(bracket_id, True, price)
        else:
            self.toggle_manual_close(bracket_id, True, price)

    def clear(self, bracket_id: str) -> None:
        self._set(bracket_id, UNRESOLVED)

    # ------------------------------------------------------------------ #
    # Save-time validation                                                 #
    # ------------------------------------------------------------------ #

    def validate(self) -> list[ValidationError]:
        """Every problem that blocks saving, one entry per offending leg."""
        issues: list[ValidationError] = []
        for n, leg in enumerate(self._order.bracket_groups, start=1):
            closure = self._closures.get(leg.bracket_id, UNRESOLVED)
            lid = leg.bracket_id
            if isinstance(closure, Unresolved):
                issues.append(UnresolvedLegError(
                    f"Bracket {n}: select an outcome before saving",
                    field="closure_type", leg_id=lid,
                ))
            elif isinstance(closure, BreakEven) and not is_usable(closure.price):
                issues.append(MissingPriceError(
                    f"Bracket {n}: enter a break-even price",
                    field="break_even_price", leg_id=lid,
                ))
            elif isinstance(closure, ManualClose) and not is_usable(closure.price):
                issues.append(MissingPriceError(
                    f"Bracket {n}: enter a manual close price",
                    field="manual_close_price", leg_id=lid,
                ))
            elif isinstance(closure, TakeProfit) and not is_usable(leg.take_profit_price):
                issues.append(MissingPriceError(
                    f"Bracket {n}: take profit price is not set",
                    field="take_profit_price", leg_id=lid,
                ))
            elif isinstance(closure, StopLoss) and not is_usable(leg.stop_loss_price):
                issues.append(MissingPriceError(
                    f"Bracket {n}: stop loss price is not set",
                    field="stop_loss_price", leg_id=lid,
                ))
        return issues

    def resolve(self) -> list[FilledBracketGroup]:
        """Build the filled legs in order.

        Raises:
            OutcomeValidationError: Listing every leg that blocks the save.
        """
        issues = self.validate()
        if issues:
            logger.debug("Outcome rejected with %d issue(s)", len(issues))
            raise OutcomeValidationError(issues)

        filled: list[FilledBracketGroup] = []
        for leg in self._order.bracket_groups:
            closure = self._closures.get(leg.bracket_id, UNRESOLVED)
            price = closure_price(leg, closure)
            filled.append(FilledBracketGroup(
                bracket_id=leg.bracket_id,
                closure_type=closure_type_of(closure),
                closure_price=price,
                size=leg.size,
                break_even_applied=isinstance(closure, BreakEven),
                manual_close_applied=isinstance(closure, ManualClose),
                break_even_price=price if isinstance(closure, BreakEven) else None,
                manual_close_price=price if isinstance(closure, ManualClose) else None,
            ))
        return filled

    # ------------------------------------------------------------------ #
    # Reload                                                               #
    # ------------------------------------------------------------------ #

    @classmethod
    def from_outcome(
        cls, order: BracketOrder, outcome: BracketOrderOutcome
    ) -> OutcomeResolver:
        """Rebuild editing state from a saved outcome.

        Raises:
            IntegrityError: A filled leg names a bracket the order lacks,
                or names one twice.
            ConflictingClosureError: A stored leg has both flags set.
        """
        resolver = cls(order)
        seen: set[str] = set()
        for filled in outcome.filled_bracket_groups:
            bid = filled.bracket_id
            if bid not in resolver._closures:
                raise IntegrityError("filled leg references unknown bracket", [bid])
            if bid in seen:
                raise IntegrityError("bracket filled more than once", [bid])
            seen.add(bid)
            resolver._closures[bid] = closure_from_filled(order, filled)
        return resolver

    # ------------------------------------------------------------------ #
    # Internals                                                            #
    # ------------------------------------------------------------------ #

    def _require_leg(self, bracket_id: str) -> None:
        if bracket_id not in self._closures:
            # leg_number raises the field-addressable error
            self._order.leg_number(bracket_id)
            self._closures[bracket_id] = UNRESOLVED

    def _set(self, bracket_id: str, closure: LegClosure) -> None:
        self._require_leg(bracket_id)
        self._closures[bracket_id] = closure


def closure_from_filled(order: BracketOrder, filled: FilledBracketGroup) -> LegClosure:
    """Map a stored filled leg back onto its closure variant."""
    if filled.break_even_applied and filled.manual_close_applied:
        raise ConflictingClosureError(
            f"Bracket {order.leg_number(filled.bracket_id)}: "
            "break-even and manual close cannot both be applied",
            field="closure_type",
            leg_id=filled.bracket_id,
        )
    if filled.closure_type == ClosureType.TAKE_PROFIT:
        return TakeProfit()
    if filled.closure_type == ClosureType.STOP_LOSS:
        return StopLoss()
    if filled.closure_type == ClosureType.BREAK_EVEN:
        price = filled.break_even_price
        return BreakEven(filled.closure_price if price is None else price)
    price = filled.manual_close_price
    return ManualClose(filled.closure_price if price is None else price)
