"""Core record models shared by every part of the engine.

These mirror the records the storage layer hands us.  The engine reads
them, computes the derived fields (position size, outcome, adherence
score) and hands them back; nothing else on a record is rewritten.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .enums import (
    ZONE_ORDER,
    AssetType,
    CalculationMethod,
    ClosureType,
    Direction,
    RiskMode,
    Zone,
)
from .errors import LegConstraintError, MissingPriceError, ValidationError
from .guards import is_usable, stop_loss_is_valid
from .ids import new_id, now_ns


# ---------------------------------------------------------------------------
# Models (checklists)
# ---------------------------------------------------------------------------

class ToolConfig(BaseModel):
    """One checklist tool configured on a model."""

    id: str = Field(default_factory=new_id)
    type: str  # e.g. "FVG", "Order Block", "Liquidity Sweep"
    zone: Zone
    properties: str = "{}"  # JSON blob written by the tool editor
    actions: list[str] = Field(default_factory=list)
    interactions: list[str] = Field(default_factory=list)
    position: int = 0

    def parsed_properties(self) -> dict[str, Any]:
        """Decode ``properties``; malformed JSON yields an empty dict."""
        try:
            props = json.loads(self.properties)
        except (TypeError, ValueError):
            return {}
        return props if isinstance(props, dict) else {}

    @property
    def display_name(self) -> str:
        return self.parsed_properties().get("name") or self.type or "Unknown Tool"


class Model(BaseModel):
    """A reusable trading model: ordered tool lists per zone."""

    id: str = Field(default_factory=new_id)
    name: str = ""
    description: str = ""
    narrative: list[ToolConfig] = Field(default_factory=list)
    framework: list[ToolConfig] = Field(default_factory=list)
    execution: list[ToolConfig] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ns)

    def tools_in(self, zone: Zone) -> list[ToolConfig]:
        return {
            Zone.NARRATIVE: self.narrative,
            Zone.FRAMEWORK: self.framework,
            Zone.EXECUTION: self.execution,
        }[zone]

    def tool_types(self, zone: Zone) -> set[str]:
        return {tool.type for tool in self.tools_in(zone)}

    def all_tools(self) -> list[tuple[Zone, ToolConfig]]:
        """Every tool in checklist order, tagged with the zone it sits in."""
        return [(zone, tool) for zone in ZONE_ORDER for tool in self.tools_in(zone)]


class ModelCondition(BaseModel):
    """One checklist line as recorded on a trade."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    zone: Zone
    description: str = ""
    is_checked: bool = Field(default=False, alias="isChecked")


# ---------------------------------------------------------------------------
# Bracket order
# ---------------------------------------------------------------------------

class PositionSizerSnapshot(BaseModel):
    """Inputs used to size a trade, stored for audit / replay."""

    account_capital: float = 0.0
    risk_mode: RiskMode = RiskMode.PERCENTAGE
    risk_percentage: float = 0.0
    risk_amount: float = 0.0
    asset_type: AssetType = AssetType.FUTURES
    allow_fractional_size: bool = False
    contract_lot_unit: str = "contracts"
    entry_price: float = 0.0
    primary_stop_loss: float = 0.0
    value_per_point: float = 0.0


class BracketGroup(BaseModel):
    """One leg of an OCO bracket order."""

    bracket_id: str = Field(default_factory=new_id)
    size: float = 0.0
    take_profit_price: float = 0.0
    stop_loss_price: float = 0.0
    # Flips to True the first time a human edits this leg's stop; the leg
    # then no longer follows the primary stop.  Persisted, never recomputed.
    sl_modified_by_user: bool = False


class BracketOrder(BaseModel):
    """Multi-leg OCO order.  ``position_size`` is always the sum of legs."""

    entry_price: float = 0.0
    primary_stop_loss: float = 0.0
    bracket_groups: list[BracketGroup] = Field(default_factory=list)
    calculation_method: CalculationMethod = CalculationMethod.POINT
    value_per_unit: float = 0.0
    position_sizer: PositionSizerSnapshot = Field(default_factory=PositionSizerSnapshot)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def position_size(self) -> float:
        return sum(leg.size for leg in self.bracket_groups)

    # ------------------------------------------------------------------ #
    # Leg lookup                                                           #
    # ------------------------------------------------------------------ #

    def leg_ids(self) -> list[str]:
        return [leg.bracket_id for leg in self.bracket_groups]

    def leg_number(self, bracket_id: str) -> int:
        """1-based position of a leg, for user-facing messages."""
        for i, leg in enumerate(self.bracket_groups):
            if leg.bracket_id == bracket_id:
                return i + 1
        raise LegConstraintError(
            f"Unknown bracket leg {bracket_id}",
            field="bracket_id",
            leg_id=bracket_id,
        )

    def get_leg(self, bracket_id: str) -> BracketGroup:
        return self.bracket_groups[self.leg_number(bracket_id) - 1]

    # ------------------------------------------------------------------ #
    # Mutation helpers                                                     #
    # ------------------------------------------------------------------ #

    def add_leg(self, size: float = 0.0, take_profit_price: float = 0.0) -> BracketGroup:
        """Append a leg pegged to the current primary stop."""
        leg = BracketGroup(
            size=size,
            take_profit_price=take_profit_price,
            stop_loss_price=self.primary_stop_loss,
            sl_modified_by_user=False,
        )
        self.bracket_groups.append(leg)
        return leg

    def remove_leg(self, bracket_id: str) -> None:
        """Remove a leg.  An order always keeps at least one leg."""
        index = self.leg_number(bracket_id) - 1
        if len(self.bracket_groups) <= 1:
            raise LegConstraintError(
                "A bracket order must keep at least one leg",
                field="bracket_groups",
                leg_id=bracket_id,
            )
        del self.bracket_groups[index]

    def update_leg(
        self,
        bracket_id: str,
        *,
        size: float | None = None,
        take_profit_price: float | None = None,
        stop_loss_price: float | None = None,
    ) -> BracketGroup:
        """Edit a leg in place.  Editing the stop detaches it from the primary."""
        leg = self.get_leg(bracket_id)
        if size is not None:
            leg.size = size
        if take_profit_price is not None:
            leg.take_profit_price = take_profit_price
        if stop_loss_price is not None:
            leg.stop_loss_price = stop_loss_price
            leg.sl_modified_by_user = True
        return leg

    def set_primary_stop_loss(self, price: float, *, propagate: bool = True) -> list[str]:
        """Change the primary stop; returns ids of legs that followed it."""
        self.primary_stop_loss = price
        if not propagate:
            return []
        synced = []
        for leg in self.bracket_groups:
            if not leg.sl_modified_by_user:
                leg.stop_loss_price = price
                synced.append(leg.bracket_id)
        return synced

    # ------------------------------------------------------------------ #
    # Entry-form validation                                                #
    # ------------------------------------------------------------------ #

    def validate_legs(self, direction: Direction) -> list[ValidationError]:
        """Collect every leg problem that blocks logging the trade."""
        issues: list[ValidationError] = []
        if not self.bracket_groups:
            issues.append(LegConstraintError(
                "Please add at least one bracket", field="bracket_groups",
            ))
            return issues
        if self.position_size == 0:
            issues.append(LegConstraintError(
                "Total position size cannot be zero", field="bracket_groups",
            ))

        entry = self.entry_price
        for n, leg in enumerate(self.bracket_groups, start=1):
            lid = leg.bracket_id
            if leg.size == 0:
                issues.append(LegConstraintError(
                    f"Bracket {n}: Size cannot be zero", field="size", leg_id=lid,
                ))
            if not is_usable(leg.take_profit_price):
                issues.append(MissingPriceError(
                    f"Bracket {n}: Take profit price cannot be zero",
                    field="take_profit_price", leg_id=lid,
                ))
            elif (leg.take_profit_price - entry) * direction.sign <= 0:
                side = "above" if direction == Direction.LONG else "below"
                issues.append(LegConstraintError(
                    f"Bracket {n}: For {direction.value} trades, "
                    f"take profit must be {side} entry",
                    field="take_profit_price", leg_id=lid,
                ))
            if not is_usable(leg.stop_loss_price):
                issues.append(MissingPriceError(
                    f"Bracket {n}: Stop loss price cannot be zero",
                    field="stop_loss_price", leg_id=lid,
                ))
            elif not stop_loss_is_valid(direction, entry, leg.stop_loss_price):
                side = "below" if direction == Direction.LONG else "above"
                issues.append(LegConstraintError(
                    f"Bracket {n}: For {direction.value} trades, "
                    f"stop loss must be {side} entry",
                    field="stop_loss_price", leg_id=lid,
                ))
        return issues


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------

class FilledBracketGroup(BaseModel):
    """How one leg was closed."""

    bracket_id: str
    closure_type: ClosureType
    closure_price: float
    size: float
    break_even_applied: bool = False
    manual_close_applied: bool = False
    break_even_price: float | None = None
    manual_close_price: float | None = None


class BracketOrderOutcome(BaseModel):
    """Derived result of a completed bracket order.  Never hand-edited."""

    filled_bracket_groups: list[FilledBracketGroup] = Field(default_factory=list)
    final_pl_usd: float = 0.0
    final_pl_pct: float = 0.0
    rr: float = 0.0
    # False when planned risk was zero, so rr / pct of 0 mean "undefined"
    risk_defined: bool = True


# ---------------------------------------------------------------------------
# Trade
# ---------------------------------------------------------------------------

class Trade(BaseModel):
    """A journaled trade logged against a model."""

    model_config = ConfigDict(protected_namespaces=())

    id: str = Field(default_factory=new_id)
    model_id: str = ""
    asset: str = ""
    direction: Direction = Direction.LONG
    created_at: int = Field(default_factory=now_ns)  # ns since epoch
    close_time: int | None = None  # ns since epoch
    bracket_order: BracketOrder = Field(default_factory=BracketOrder)
    bracket_order_outcome: BracketOrderOutcome | None = None
    model_conditions: list[ModelCondition] = Field(default_factory=list)
    adherence_score: float = 0.0
    is_completed: bool = False

    # Reflection
    notes: str = ""
    emotions: list[str] = Field(default_factory=list)
    mood: str = ""
    would_take_again: bool = False
    images: list[str] = Field(default_factory=list)

    @property
    def final_pl(self) -> float:
        """Realised P/L in account currency (0.0 while open)."""
        if not self.is_completed or self.bracket_order_outcome is None:
            return 0.0
        return self.bracket_order_outcome.final_pl_usd

    @property
    def rr(self) -> float:
        if not self.is_completed or self.bracket_order_outcome is None:
            return 0.0
        return self.bracket_order_outcome.rr

    @property
    def is_winner(self) -> bool:
        return self.is_completed and self.final_pl > 0

    @property
    def is_loser(self) -> bool:
        return self.is_completed and self.final_pl < 0

    def update_primary_stop_loss(self, price: float) -> list[str]:
        """Change the primary stop, re-pegging unedited legs while open.

        Legs only follow a stop that is non-zero and on the correct side
        of entry; a completed trade's legs never move.
        """
        order = self.bracket_order
        propagate = (
            not self.is_completed
            and is_usable(price)
            and stop_loss_is_valid(self.direction, order.entry_price, price)
        )
        return order.set_primary_stop_loss(price, propagate=propagate)

    def to_record(self) -> dict[str, Any]:
        """Serialise using the storage layer's field names."""
        return self.model_dump(mode="json", by_alias=True)
