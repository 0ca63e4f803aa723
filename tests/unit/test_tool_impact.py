"""Tests for per-tool impact analysis."""

import pytest

from tradebook.analytics import compute_tool_impact


class TestToolImpact:
    def test_small_sample_excluded(self, winner, loser, sample_model, second_model):
        # model-a: 3 trades, model-b: 2 trades
        trades = [
            winner(model_id="model-a"),
            winner(model_id="model-a"),
            loser(model_id="model-a"),
            loser(model_id="model-b"),
            loser(model_id="model-b"),
        ]
        impacts = compute_tool_impact(trades, [sample_model, second_model], min_sample_size=3)
        types = {i.tool_type for i in impacts}
        # Breaker only appears in model-b (2 trades)
        assert "Breaker" not in types
        assert "Order Block" in types
        # FVG is in both models: 5 trades
        fvg = next(i for i in impacts if i.tool_type == "FVG")
        assert fvg.sample_size == 5

    def test_deltas_against_all_trades(self, winner, loser, sample_model, second_model):
        trades = [
            winner(model_id="model-a"),
            winner(model_id="model-a"),
            loser(model_id="model-a"),
            loser(model_id="model-b"),
            loser(model_id="model-b"),
            loser(model_id="model-b"),
        ]
        impacts = {i.tool_type: i for i in compute_tool_impact(trades, [sample_model, second_model])}
        ob = impacts["Order Block"]
        assert ob.win_rate_baseline == pytest.approx(100 / 3)
        assert ob.win_rate_with_tool == pytest.approx(200 / 3)
        assert ob.win_rate_delta == pytest.approx(100 / 3)
        # baseline avg = (1000 - 1000) / 6 = 0; with tool = 750 / 3 = 250
        assert ob.avg_pl_delta == pytest.approx(250.0)
        assert ob.impact_score == pytest.approx(0.5 * 100 / 3 + 0.5 * 250.0)
        assert ob.zones == ["framework"]

        breaker = impacts["Breaker"]
        assert breaker.win_rate_delta == pytest.approx(-100 / 3)

    def test_sorted_by_absolute_impact(self, winner, loser, sample_model, second_model):
        trades = [winner(model_id="model-a")] * 3 + [loser(model_id="model-b")] * 3
        impacts = compute_tool_impact(trades, [sample_model, second_model])
        scores = [abs(i.impact_score) for i in impacts]
        assert scores == sorted(scores, reverse=True)

    def test_unknown_model_counts_in_baseline_only(self, winner, sample_model):
        trades = [winner(model_id="model-a")] * 3 + [winner(model_id="gone")]
        impacts = compute_tool_impact(trades, [sample_model])
        assert all(i.sample_size == 3 for i in impacts)
        assert all(i.win_rate_delta == 0.0 for i in impacts)

    def test_no_trades(self, sample_model):
        assert compute_tool_impact([], [sample_model]) == []
