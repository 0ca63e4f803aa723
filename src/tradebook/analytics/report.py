"""Full analytics summary for a trade collection.

Everything is recomputed from the trades on each call; nothing is cached.
The result only holds JSON-safe values.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from tradebook.core.config import Settings
from tradebook.core.models import Model, Trade

from .adherence import adherence_buckets, compare_adherence
from .brackets import leg_metrics
from .distributions import bin_r_values
from .equity import equity_curve, max_drawdown
from .metrics import compute_metrics, completed_trades
from .monte_carlo import MonteCarloSimulator
from .time_buckets import hour_buckets, session_buckets, weekday_buckets
from .tool_impact import compute_tool_impact

logger = logging.getLogger(__name__)


def build_report(
    trades: Iterable[Trade],
    models: Iterable[Model],
    settings: Settings | None = None,
) -> dict[str, Any]:
    settings = settings or Settings()
    cfg = settings.analytics
    trades = list(trades)
    models = list(models)
    done = completed_trades(trades)

    curve = equity_curve(done)
    simulation = MonteCarloSimulator(
        runs=cfg.monte_carlo_runs,
        trades_per_run=cfg.monte_carlo_trades_per_run,
        min_trades=cfg.monte_carlo_min_trades,
        seed=cfg.monte_carlo_seed,
    ).run(done)

    report = {
        "trade_count": len(trades),
        "completed_count": len(done),
        "metrics": compute_metrics(done).to_dict(),
        "tool_impact": [
            t.to_dict()
            for t in compute_tool_impact(done, models, cfg.min_tool_sample_size)
        ],
        "by_hour": hour_buckets(done, cfg.include_empty_time_buckets),
        "by_weekday": weekday_buckets(done, cfg.include_empty_time_buckets),
        "by_session": session_buckets(done),
        "by_adherence": adherence_buckets(done, cfg.adherence_bucket_width_pct),
        "adherence_comparison": compare_adherence(done, cfg.high_adherence_threshold),
        "legs": leg_metrics(done),
        "equity_curve": curve,
        "max_drawdown": max_drawdown(curve),
        "r_distribution": bin_r_values([t.rr for t in done], cfg.r_histogram_bins),
        "monte_carlo": simulation.to_dict() if simulation else None,
    }
    logger.debug("Report built over %d completed trades", len(done))
    return report
