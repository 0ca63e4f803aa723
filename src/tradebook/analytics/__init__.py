"""Aggregate statistics over completed trades.

metrics        Win rate, profit factor, expectancy
tool_impact    Per-tool performance versus baseline
time_buckets   Hour / weekday / session breakdowns
adherence      Performance by adherence range
brackets       Per-leg hit rates
equity         Equity curve and drawdown
distributions  R histogram
monte_carlo    Bootstrap projection over R
scope          Trade filters
calendar       Per-day P/L
report         Everything above in one dict
"""

from .adherence import adherence_buckets, compare_adherence
from .brackets import leg_metrics
from .calendar import DayAggregate, aggregate_by_day
from .distributions import bin_r_values
from .equity import equity_curve, max_drawdown
from .metrics import (
    INFINITE_PROFIT_FACTOR,
    BucketStats,
    PerformanceMetrics,
    completed_trades,
    compute_metrics,
    profit_factor,
)
from .monte_carlo import MonteCarloResult, MonteCarloSimulator
from .report import build_report
from .scope import filter_trades
from .time_buckets import hour_buckets, infer_session, session_buckets, weekday_buckets
from .tool_impact import ToolImpact, compute_tool_impact

__all__ = [
    "INFINITE_PROFIT_FACTOR",
    "BucketStats",
    "DayAggregate",
    "MonteCarloResult",
    "MonteCarloSimulator",
    "PerformanceMetrics",
    "ToolImpact",
    "adherence_buckets",
    "aggregate_by_day",
    "bin_r_values",
    "build_report",
    "compare_adherence",
    "completed_trades",
    "compute_metrics",
    "compute_tool_impact",
    "equity_curve",
    "filter_trades",
    "hour_buckets",
    "infer_session",
    "leg_metrics",
    "max_drawdown",
    "profit_factor",
    "session_buckets",
    "weekday_buckets",
]
