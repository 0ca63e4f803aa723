"""Shared fixtures for the tradebook test suite."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from tradebook.core.enums import ClosureType, Direction, Zone
from tradebook.core.ids import datetime_to_ns
from tradebook.core.models import (
    BracketGroup,
    BracketOrder,
    Model,
    ModelCondition,
    ToolConfig,
    Trade,
)
from tradebook.journal import InMemoryModelStore, InMemoryTradeStore, TradeJournal
from tradebook.outcome.pnl import build_outcome
from tradebook.outcome.resolver import OutcomeResolver


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------

@pytest.fixture
def base_time() -> datetime:
    """Monday 2024-01-01 09:30 UTC (London session)."""
    return datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Orders and trades
# ---------------------------------------------------------------------------

@pytest.fixture
def make_order():
    """Factory: ``make_order(entry, stop, legs=[(size, tp), ...], value_per_unit)``."""

    def _make(
        entry: float = 100.0,
        stop: float = 95.0,
        legs: list[tuple[float, float]] | None = None,
        value_per_unit: float = 5.0,
    ) -> BracketOrder:
        legs = legs if legs is not None else [(10.0, 110.0)]
        return BracketOrder(
            entry_price=entry,
            primary_stop_loss=stop,
            value_per_unit=value_per_unit,
            bracket_groups=[
                BracketGroup(
                    bracket_id=f"leg-{i + 1}",
                    size=size,
                    take_profit_price=tp,
                    stop_loss_price=stop,
                )
                for i, (size, tp) in enumerate(legs)
            ],
        )

    return _make


@pytest.fixture
def make_trade(make_order, base_time):
    """Factory for open trades."""
    counter = iter(range(1, 10_000))

    def _make(
        direction: Direction = Direction.LONG,
        entry: float = 100.0,
        stop: float = 95.0,
        legs: list[tuple[float, float]] | None = None,
        value_per_unit: float = 5.0,
        model_id: str = "model-a",
        created_at: datetime | None = None,
        checked: tuple[bool, ...] = (),
    ) -> Trade:
        n = next(counter)
        return Trade(
            id=f"trade-{n}",
            model_id=model_id,
            asset="ES",
            direction=direction,
            created_at=datetime_to_ns(created_at or base_time),
            bracket_order=make_order(entry, stop, legs, value_per_unit),
            model_conditions=[
                ModelCondition(id=f"c{i}", zone=Zone.FRAMEWORK, is_checked=flag)
                for i, flag in enumerate(checked)
            ],
        )

    return _make


@pytest.fixture
def close_trade():
    """Complete a trade: ``close_trade(trade, [ClosureType | (ClosureType, price)])``."""

    def _close(trade: Trade, closures: list, close_time: datetime | None = None) -> Trade:
        resolver = OutcomeResolver(trade.bracket_order)
        for leg, closure in zip(trade.bracket_order.bracket_groups, closures):
            if isinstance(closure, tuple):
                closure_type, price = closure
            else:
                closure_type, price = closure, None
            resolver.select(leg.bracket_id, closure_type, price)
        outcome = build_outcome(trade.direction, trade.bracket_order, resolver.resolve())
        return trade.model_copy(update={
            "bracket_order_outcome": outcome,
            "is_completed": True,
            "close_time": datetime_to_ns(close_time) if close_time else trade.created_at,
        })

    return _close


@pytest.fixture
def winner(make_trade, close_trade):
    """Factory for a completed long trade that hit TP (+500, 2R)."""

    def _make(**kwargs) -> Trade:
        return close_trade(make_trade(**kwargs), [ClosureType.TAKE_PROFIT])

    return _make


@pytest.fixture
def loser(make_trade, close_trade):
    """Factory for a completed long trade that hit SL (-250, -1R)."""

    def _make(**kwargs) -> Trade:
        return close_trade(make_trade(**kwargs), [ClosureType.STOP_LOSS])

    return _make


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

def _tool(tool_id: str, tool_type: str, zone: Zone, **props) -> ToolConfig:
    return ToolConfig(id=tool_id, type=tool_type, zone=zone, properties=json.dumps(props))


@pytest.fixture
def sample_model() -> Model:
    """Five-condition model: 1 narrative, 2 framework, 2 execution."""
    return Model(
        id="model-a",
        name="Trend continuation",
        narrative=[_tool("n1", "HTF Bias", Zone.NARRATIVE, direction="Bullish")],
        framework=[
            _tool("f1", "FVG", Zone.FRAMEWORK, timeframe={"value": 15, "unit": "m"}),
            _tool("f2", "Order Block", Zone.FRAMEWORK),
        ],
        execution=[
            _tool("e1", "Liquidity Sweep", Zone.EXECUTION),
            _tool("e2", "MSS", Zone.EXECUTION, structuralState="Regular"),
        ],
    )


@pytest.fixture
def second_model() -> Model:
    return Model(
        id="model-b",
        name="Range reversal",
        framework=[_tool("g1", "FVG", Zone.FRAMEWORK), _tool("g2", "Breaker", Zone.FRAMEWORK)],
    )


# ---------------------------------------------------------------------------
# Journal
# ---------------------------------------------------------------------------

@pytest.fixture
def journal(sample_model, second_model) -> TradeJournal:
    return TradeJournal(
        InMemoryTradeStore(),
        InMemoryModelStore([sample_model, second_model]),
    )
