"""Cumulative P/L curve and drawdown."""

from __future__ import annotations

from typing import Any, Iterable

from tradebook.core.ids import ns_to_datetime
from tradebook.core.models import Trade

from .metrics import completed_trades


def equity_curve(trades: Iterable[Trade]) -> list[dict[str, Any]]:
    """Running P/L after each completed trade, oldest first."""
    ordered = sorted(completed_trades(trades), key=lambda t: t.created_at)
    equity = 0.0
    curve = []
    for index, trade in enumerate(ordered, start=1):
        equity += trade.final_pl
        curve.append({
            "index": index,
            "trade_id": trade.id,
            "equity": equity,
            "date": ns_to_datetime(trade.created_at).date().isoformat(),
        })
    return curve


def max_drawdown(curve: list[dict[str, Any]]) -> float:
    """Largest peak-to-trough decline of the curve, as a positive number."""
    if not curve:
        return 0.0
    peak = curve[0]["equity"]
    worst = 0.0
    for point in curve:
        equity = point["equity"]
        if equity > peak:
            peak = equity
        worst = max(worst, peak - equity)
    return worst
