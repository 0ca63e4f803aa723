"""Day-by-day P/L keyed on the UTC date a trade was closed."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from tradebook.core.guards import safe_div
from tradebook.core.ids import ns_to_datetime
from tradebook.core.models import Trade
from tradebook.outcome.pnl import planned_risk


@dataclass
class DayAggregate:
    date: str  # YYYY-MM-DD
    total_pl: float = 0.0
    total_pl_pct: float = 0.0  # sum of per-trade P/L as % of planned risk
    net_r: float = 0.0
    trade_count: int = 0
    trade_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "total_pl": round(self.total_pl, 2),
            "total_pl_pct": round(self.total_pl_pct, 4),
            "net_r": round(self.net_r, 4),
            "trade_count": self.trade_count,
            "trade_ids": list(self.trade_ids),
        }


def aggregate_by_day(trades: Iterable[Trade]) -> dict[str, DayAggregate]:
    """Completed trades with a close time, grouped by close date (sorted)."""
    days: dict[str, DayAggregate] = {}
    for trade in trades:
        if not trade.is_completed or trade.close_time is None:
            continue
        key = ns_to_datetime(trade.close_time).date().isoformat()
        pl = trade.final_pl
        risk = planned_risk(trade.bracket_order)

        day = days.setdefault(key, DayAggregate(date=key))
        day.total_pl += pl
        day.total_pl_pct += safe_div(pl, risk) * 100.0
        day.net_r += trade.rr
        day.trade_count += 1
        day.trade_ids.append(trade.id)
    return dict(sorted(days.items()))
