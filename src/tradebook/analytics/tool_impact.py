"""Tool-impact analysis: does a checklist tool go with better trades?

For every tool type that appears in any model, trades logged against a
model containing that tool form the "used" sample.  The baseline is all
completed trades.  Then::

    win_rate_delta = win_rate(used) − win_rate(baseline)     (percentage points)
    avg_pl_delta   = avg_pl(used)   − avg_pl(baseline)
    impact_score   = 0.5 × win_rate_delta + 0.5 × avg_pl_delta

Tools with fewer than ``min_sample_size`` used trades are left out of the
report entirely so single-trade flukes do not show up as signal.

Each model's tool types are collected once up front; every trade then
only touches the tool types of its own model.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable

from tradebook.core.enums import Zone
from tradebook.core.models import Model, Trade

from .metrics import BucketStats, completed_trades

logger = logging.getLogger(__name__)

DEFAULT_MIN_SAMPLE_SIZE = 3


@dataclass
class ToolImpact:
    tool_type: str
    zones: list[str] = field(default_factory=list)
    sample_size: int = 0
    win_rate_with_tool: float = 0.0
    win_rate_baseline: float = 0.0
    avg_pl_with_tool: float = 0.0
    avg_pl_baseline: float = 0.0
    win_rate_delta: float = 0.0
    avg_pl_delta: float = 0.0
    impact_score: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _model_tool_index(models: Iterable[Model]) -> tuple[dict[str, set[str]], dict[str, set[Zone]]]:
    """model_id → tool types, and tool type → zones it appears in."""
    types_by_model: dict[str, set[str]] = {}
    zones_by_type: dict[str, set[Zone]] = defaultdict(set)
    for model in models:
        types = set()
        for zone, tool in model.all_tools():
            types.add(tool.type)
            zones_by_type[tool.type].add(zone)
        types_by_model[model.id] = types
    return types_by_model, zones_by_type


def compute_tool_impact(
    trades: Iterable[Trade],
    models: Iterable[Model],
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE,
) -> list[ToolImpact]:
    """Impact report for every tool type with enough samples.

    Returns:
        Rows sorted by absolute impact score, largest first.
    """
    done = completed_trades(trades)
    if not done:
        return []

    types_by_model, zones_by_type = _model_tool_index(models)

    baseline = BucketStats()
    used: dict[str, BucketStats] = defaultdict(BucketStats)
    for trade in done:
        baseline.record(trade)
        for tool_type in types_by_model.get(trade.model_id, ()):
            used[tool_type].record(trade)

    impacts: list[ToolImpact] = []
    for tool_type, stats in used.items():
        if stats.trades < min_sample_size:
            logger.debug(
                "Skipping tool %s: %d trades < %d", tool_type, stats.trades, min_sample_size
            )
            continue
        wr_delta = stats.win_rate - baseline.win_rate
        pl_delta = stats.avg_pl - baseline.avg_pl
        impacts.append(ToolImpact(
            tool_type=tool_type,
            zones=sorted(z.value for z in zones_by_type[tool_type]),
            sample_size=stats.trades,
            win_rate_with_tool=stats.win_rate,
            win_rate_baseline=baseline.win_rate,
            avg_pl_with_tool=stats.avg_pl,
            avg_pl_baseline=baseline.avg_pl,
            win_rate_delta=wr_delta,
            avg_pl_delta=pl_delta,
            impact_score=0.5 * wr_delta + 0.5 * pl_delta,
        ))

    return sorted(impacts, key=lambda i: abs(i.impact_score), reverse=True)
