"""Headline performance metrics over a trade collection.

Every reducer in :mod:`tradebook.analytics` starts from
:func:`completed_trades`; open trades never count.  A trade is a win when
its realised P/L is above zero and a loss when below; exact zero is a
scratch and counts toward neither side.

Profit factor is ``gross_profit / gross_loss``.  With no losing trades it
is unbounded; rather than letting ``inf`` leak into JSON, it is reported
as :data:`INFINITE_PROFIT_FACTOR` with ``profit_factor_infinite=True``
(and 0.0 when there is neither profit nor loss).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable

from tradebook.core.guards import safe_div
from tradebook.core.models import Trade

# Stand-in for an unbounded profit factor; non-negative and JSON-safe
INFINITE_PROFIT_FACTOR = 999.0


def completed_trades(trades: Iterable[Trade]) -> list[Trade]:
    return [t for t in trades if t.is_completed]


def profit_factor(gross_profit: float, gross_loss: float) -> tuple[float, bool]:
    """Return ``(value, is_infinite)`` for the given gross totals."""
    if gross_loss > 0:
        return safe_div(gross_profit, gross_loss), False
    if gross_profit > 0:
        return INFINITE_PROFIT_FACTOR, True
    return 0.0, False


@dataclass
class BucketStats:
    """Accumulator for one group of trades (hour, session, tool, ...)."""

    trades: int = 0
    wins: int = 0
    losses: int = 0
    total_pl: float = 0.0
    total_r: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0

    def record(self, trade: Trade) -> None:
        pl = trade.final_pl
        self.trades += 1
        self.total_pl += pl
        self.total_r += trade.rr
        if pl > 0:
            self.wins += 1
            self.gross_profit += pl
        elif pl < 0:
            self.losses += 1
            self.gross_loss += abs(pl)

    @property
    def win_rate(self) -> float:
        """Percentage of trades that were winners (0-100)."""
        return safe_div(self.wins, self.trades) * 100.0

    @property
    def avg_pl(self) -> float:
        return safe_div(self.total_pl, self.trades)

    @property
    def avg_r(self) -> float:
        return safe_div(self.total_r, self.trades)

    def to_dict(self) -> dict[str, Any]:
        return {
            "trades": self.trades,
            "wins": self.wins,
            "losses": self.losses,
            "win_rate": round(self.win_rate, 4),
            "total_pl": round(self.total_pl, 2),
            "avg_pl": round(self.avg_pl, 2),
            "avg_r": round(self.avg_r, 4),
        }


@dataclass
class PerformanceMetrics:
    total_trades: int = 0
    total_wins: int = 0
    total_losses: int = 0
    win_rate: float = 0.0  # percent
    total_pl: float = 0.0
    avg_pl: float = 0.0
    avg_r: float = 0.0
    profit_factor: float = 0.0
    profit_factor_infinite: bool = False
    avg_win: float = 0.0
    avg_loss: float = 0.0  # positive magnitude
    largest_win: float = 0.0
    largest_loss: float = 0.0
    expectancy: float = 0.0  # expected P/L per trade

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_metrics(trades: Iterable[Trade]) -> PerformanceMetrics:
    """Win rate, profit factor, averages and expectancy for completed trades."""
    done = completed_trades(trades)
    if not done:
        return PerformanceMetrics()

    stats = BucketStats()
    for trade in done:
        stats.record(trade)

    pls = [t.final_pl for t in done]
    pf, pf_infinite = profit_factor(stats.gross_profit, stats.gross_loss)
    avg_win = safe_div(stats.gross_profit, stats.wins)
    avg_loss = safe_div(stats.gross_loss, stats.losses)
    win_frac = safe_div(stats.wins, stats.trades)
    loss_frac = safe_div(stats.losses, stats.trades)

    return PerformanceMetrics(
        total_trades=stats.trades,
        total_wins=stats.wins,
        total_losses=stats.losses,
        win_rate=stats.win_rate,
        total_pl=stats.total_pl,
        avg_pl=stats.avg_pl,
        avg_r=stats.avg_r,
        profit_factor=pf,
        profit_factor_infinite=pf_infinite,
        avg_win=avg_win,
        avg_loss=avg_loss,
        largest_win=max((p for p in pls if p > 0), default=0.0),
        largest_loss=min((p for p in pls if p < 0), default=0.0),
        expectancy=win_frac * avg_win - loss_frac * avg_loss,
    )
