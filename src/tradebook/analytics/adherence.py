"""Performance grouped by how closely trades followed their model."""

from __future__ import annotations

from typing import Any, Iterable

from tradebook.core.errors import ConfigError
from tradebook.core.models import Trade

from .metrics import BucketStats, completed_trades

DEFAULT_BUCKET_WIDTH_PCT = 20


def adherence_buckets(
    trades: Iterable[Trade], width_pct: int = DEFAULT_BUCKET_WIDTH_PCT
) -> list[dict[str, Any]]:
    """Fixed-width adherence ranges with count, win rate and average P/L.

    Ranges are half-open ``[lo, hi)`` except the last, which includes 100.
    Every range is listed, empty ones as zero rows.
    """
    if width_pct <= 0 or 100 % width_pct != 0:
        raise ConfigError(f"bucket width must divide 100, got {width_pct}")
    n_buckets = 100 // width_pct
    buckets = [BucketStats() for _ in range(n_buckets)]

    for trade in completed_trades(trades):
        pct = round(min(max(trade.adherence_score, 0.0), 1.0) * 100.0, 9)
        index = min(int(pct // width_pct), n_buckets - 1)
        buckets[index].record(trade)

    rows = []
    for i, stats in enumerate(buckets):
        lo = i * width_pct
        hi = lo + width_pct
        rows.append({
            "range": f"{lo}-{hi}%",
            "min_pct": lo,
            "max_pct": hi,
            "trades": stats.trades,
            "win_rate": round(stats.win_rate, 4),
            "avg_pl": round(stats.avg_pl, 2),
        })
    return rows


def compare_adherence(trades: Iterable[Trade], threshold: float) -> dict[str, Any]:
    """Trades at or above ``threshold`` adherence versus all completed trades."""
    done = completed_trades(trades)
    high, low, everyone = BucketStats(), BucketStats(), BucketStats()
    for trade in done:
        everyone.record(trade)
        (high if trade.adherence_score >= threshold else low).record(trade)

    return {
        "threshold": threshold,
        "high_adherence": {"trades": high.trades, "win_rate": high.win_rate, "total_pl": high.total_pl},
        "low_adherence": {"trades": low.trades, "win_rate": low.win_rate, "total_pl": low.total_pl},
        "all": {"trades": everyone.trades, "win_rate": everyone.win_rate, "total_pl": everyone.total_pl},
        "win_rate_delta": high.win_rate - everyone.win_rate,
        "pl_delta": high.total_pl - everyone.total_pl,
        "avg_adherence": (
            sum(t.adherence_score for t in done) / len(done) if done else 0.0
        ),
    }
