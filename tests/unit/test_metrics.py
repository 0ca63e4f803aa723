"""Tests for headline performance metrics."""

import json

import pytest

from tradebook.analytics import INFINITE_PROFIT_FACTOR, compute_metrics, profit_factor
from tradebook.core.enums import ClosureType


class TestProfitFactor:
    def test_ratio(self):
        assert profit_factor(300.0, 150.0) == (2.0, False)

    def test_no_losses_is_sentinel(self):
        value, infinite = profit_factor(500.0, 0.0)
        assert value == INFINITE_PROFIT_FACTOR
        assert infinite is True

    def test_nothing_at_all(self):
        assert profit_factor(0.0, 0.0) == (0.0, False)


class TestComputeMetrics:
    def test_empty(self):
        metrics = compute_metrics([])
        assert metrics.total_trades == 0
        assert metrics.win_rate == 0.0
        assert metrics.profit_factor == 0.0

    def test_open_trades_ignored(self, make_trade, winner):
        metrics = compute_metrics([make_trade(), winner()])
        assert metrics.total_trades == 1

    def test_mixed(self, winner, loser):
        trades = [winner(), winner(), loser()]
        metrics = compute_metrics(trades)
        assert metrics.total_trades == 3
        assert metrics.total_wins == 2
        assert metrics.total_losses == 1
        assert metrics.win_rate == pytest.approx(200 / 3)
        assert metrics.total_pl == pytest.approx(750.0)
        assert metrics.profit_factor == pytest.approx(4.0)
        assert metrics.profit_factor_infinite is False
        assert metrics.avg_win == pytest.approx(500.0)
        assert metrics.avg_loss == pytest.approx(250.0)
        assert metrics.largest_win == pytest.approx(500.0)
        assert metrics.largest_loss == pytest.approx(-250.0)
        assert metrics.avg_r == pytest.approx(1.0)
        assert metrics.expectancy == pytest.approx(250.0)

    def test_all_winners_json_safe(self, winner):
        metrics = compute_metrics([winner(), winner()])
        assert metrics.profit_factor == INFINITE_PROFIT_FACTOR
        assert metrics.profit_factor_infinite is True
        json.dumps(metrics.to_dict(), allow_nan=False)

    def test_scratch_is_neither(self, make_trade, close_trade):
        scratch = close_trade(make_trade(), [ClosureType.BREAK_EVEN])
        metrics = compute_metrics([scratch])
        assert metrics.total_wins == 0
        assert metrics.total_losses == 0
        assert metrics.win_rate == 0.0
