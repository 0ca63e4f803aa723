"""Monte Carlo projection over historical R-multiples.

Bootstrap-resamples the realised R of completed trades into many
hypothetical equity paths (in R units, starting at 0) to show the range
of outcomes the current edge could produce.

Usage::

    sim = MonteCarloSimulator(runs=100, trades_per_run=200, seed=7)
    result = sim.run(trades)
    if result is not None:
        print(result.min_equity, result.avg_equity, result.max_equity)
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Iterable

from tradebook.core.models import Trade

from .metrics import completed_trades

logger = logging.getLogger(__name__)


@dataclass
class MonteCarloResult:
    paths: list[list[float]] = field(default_factory=list)
    min_equity: float = 0.0
    avg_equity: float = 0.0
    max_equity: float = 0.0
    min_path: list[float] = field(default_factory=list)
    avg_path: list[float] = field(default_factory=list)
    max_path: list[float] = field(default_factory=list)

    def to_dict(self, include_paths: bool = False) -> dict[str, Any]:
        d: dict[str, Any] = {
            "runs": len(self.paths),
            "min_equity": self.min_equity,
            "avg_equity": self.avg_equity,
            "max_equity": self.max_equity,
            "min_path": self.min_path,
            "avg_path": self.avg_path,
            "max_path": self.max_path,
        }
        if include_paths:
            d["paths"] = self.paths
        return d


class MonteCarloSimulator:
    """Seeded bootstrap simulator.

    Parameters
    ----------
    runs : int
        Number of simulated paths.
    trades_per_run : int
        Trades drawn per path.
    min_trades : int
        Completed trades required before a projection is attempted.
    seed : int | None
        Random seed for reproducibility.  None = non-deterministic.
    """

    def __init__(
        self,
        *,
        runs: int = 100,
        trades_per_run: int = 200,
        min_trades: int = 5,
        seed: int | None = None,
    ) -> None:
        self._runs = max(1, runs)
        self._trades_per_run = max(1, trades_per_run)
        self._min_trades = min_trades
        self._rng = random.Random(seed)

    def run(self, trades: Iterable[Trade]) -> MonteCarloResult | None:
        """Simulate equity paths, or ``None`` when there is too little history."""
        r_values = [t.rr for t in completed_trades(trades)]
        if len(r_values) < self._min_trades:
            logger.debug(
                "Monte Carlo skipped: %d completed trades (need %d)",
                len(r_values), self._min_trades,
            )
            return None

        paths: list[list[float]] = []
        for _ in range(self._runs):
            equity = 0.0
            path = [equity]
            for _ in range(self._trades_per_run):
                equity += self._rng.choice(r_values)
                path.append(equity)
            paths.append(path)

        finals = [p[-1] for p in paths]
        min_equity, max_equity = min(finals), max(finals)
        avg_path = [
            sum(p[i] for p in paths) / self._runs
            for i in range(self._trades_per_run + 1)
        ]

        return MonteCarloResult(
            paths=paths,
            min_equity=min_equity,
            avg_equity=sum(finals) / self._runs,
            max_equity=max_equity,
            min_path=paths[finals.index(min_equity)],
            avg_path=avg_path,
            max_path=paths[finals.index(max_equity)],
        )
