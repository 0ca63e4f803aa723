"""Property tests: analytics stay bounded and JSON-safe."""

import json
import math

from hypothesis import given, settings, strategies as st

from tradebook.adherence import compute_adherence
from tradebook.analytics import adherence_buckets, compute_metrics, profit_factor
from tradebook.core.enums import Zone
from tradebook.core.models import BracketOrderOutcome, ModelCondition, Trade


@given(flags=st.lists(st.booleans(), max_size=30))
def test_adherence_is_a_fraction(flags):
    conditions = [
        ModelCondition(id=str(i), zone=Zone.FRAMEWORK, is_checked=f) for i, f in enumerate(flags)
    ]
    score = compute_adherence(conditions)
    assert 0.0 <= score <= 1.0
    if flags:
        assert math.isclose(score, sum(flags) / len(flags))


@given(
    gross_profit=st.floats(min_value=0, max_value=1e9),
    gross_loss=st.floats(min_value=0, max_value=1e9),
)
def test_profit_factor_non_negative_and_finite(gross_profit, gross_loss):
    value, infinite = profit_factor(gross_profit, gross_loss)
    assert value >= 0
    assert math.isfinite(value)
    assert infinite == (gross_loss == 0 and gross_profit > 0)


def _trade(pl: float, rr: float, score: float) -> Trade:
    return Trade(
        is_completed=True,
        adherence_score=score,
        bracket_order_outcome=BracketOrderOutcome(final_pl_usd=pl, rr=rr),
    )


trades_strategy = st.lists(
    st.builds(
        _trade,
        pl=st.floats(min_value=-10_000, max_value=10_000),
        rr=st.floats(min_value=-5, max_value=10),
        score=st.floats(min_value=0, max_value=1),
    ),
    max_size=40,
)


@given(trades=trades_strategy)
@settings(max_examples=100)
def test_metrics_json_safe(trades):
    metrics = compute_metrics(trades)
    json.dumps(metrics.to_dict(), allow_nan=False)
    assert 0.0 <= metrics.win_rate <= 100.0
    assert metrics.total_wins + metrics.total_losses <= metrics.total_trades


@given(trades=trades_strategy)
@settings(max_examples=100)
def test_every_trade_lands_in_one_adherence_range(trades):
    rows = adherence_buckets(trades)
    assert len(rows) == 5
    assert sum(r["trades"] for r in rows) == len(trades)
