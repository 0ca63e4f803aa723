"""Bracket outcome resolution and P/L.

OutcomeResolver   Per-leg closure state machine (tagged closure variants)
compute_trade_pl  Per-leg and aggregate P/L, % of risk, R:R
build_outcome     Validated BracketOrderOutcome for a completed trade
simulate_scenario What-if TP/SL mixes for a planned order
"""

from .pnl import (
    PLResult,
    ScenarioResult,
    build_outcome,
    compute_trade_pl,
    leg_pl,
    planned_risk,
    resolve_outcome,
    simulate_scenario,
    validate_filled_legs,
)
from .resolver import (
    BreakEven,
    LegClosure,
    ManualClose,
    OutcomeResolver,
    StopLoss,
    TakeProfit,
    Unresolved,
    break_even_default,
)

__all__ = [
    "BreakEven",
    "LegClosure",
    "ManualClose",
    "OutcomeResolver",
    "PLResult",
    "ScenarioResult",
    "StopLoss",
    "TakeProfit",
    "Unresolved",
    "break_even_default",
    "build_outcome",
    "compute_trade_pl",
    "leg_pl",
    "planned_risk",
    "resolve_outcome",
    "simulate_scenario",
    "validate_filled_legs",
]
