"""Per-leg statistics: how often leg N hits its target or stop."""

from __future__ import annotations

from typing import Any, Iterable

from tradebook.core.enums import ClosureType
from tradebook.core.guards import safe_div
from tradebook.core.models import Trade

from .metrics import completed_trades


def leg_metrics(trades: Iterable[Trade]) -> list[dict[str, Any]]:
    """TP / SL hit rate and average R for each leg position.

    A leg's R is its price move measured in primary-stop distances.
    Positions no trade reached are omitted.
    """
    done = [
        t for t in completed_trades(trades)
        if t.bracket_order_outcome and t.bracket_order_outcome.filled_bracket_groups
    ]
    if not done:
        return []

    max_legs = max(len(t.bracket_order.bracket_groups) for t in done)
    rows = []
    for i in range(max_legs):
        tp = sl = count = 0
        total_r = 0.0
        for trade in done:
            legs = trade.bracket_order.bracket_groups
            if i >= len(legs):
                continue
            bid = legs[i].bracket_id
            filled = next(
                (f for f in trade.bracket_order_outcome.filled_bracket_groups
                 if f.bracket_id == bid),
                None,
            )
            if filled is None:
                continue
            count += 1
            if filled.closure_type == ClosureType.TAKE_PROFIT:
                tp += 1
            elif filled.closure_type == ClosureType.STOP_LOSS:
                sl += 1
            order = trade.bracket_order
            move = trade.direction.sign * (filled.closure_price - order.entry_price)
            total_r += safe_div(move, abs(order.entry_price - order.primary_stop_loss))

        if count:
            rows.append({
                "leg_index": i,
                "trades": count,
                "tp_hit_rate": tp / count * 100.0,
                "sl_hit_rate": sl / count * 100.0,
                "avg_r": total_r / count,
            })
    return rows
