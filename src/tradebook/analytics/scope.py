"""Narrow a trade collection before analysis."""

from __future__ import annotations

from typing import Iterable

from tradebook.core.enums import TradingSession
from tradebook.core.models import Trade

from .time_buckets import infer_session


def filter_trades(
    trades: Iterable[Trade],
    *,
    model_id: str | None = None,
    session: TradingSession | str | None = None,
    adherence_threshold: float | None = None,
) -> list[Trade]:
    """Keep trades matching every given criterion.

    ``model_id="all"`` and ``session="All"`` mean no filter, like ``None``.
    The adherence threshold is inclusive.
    """
    result = list(trades)
    if model_id and model_id != "all":
        result = [t for t in result if t.model_id == model_id]
    if session and session != "All":
        wanted = TradingSession(session)
        result = [t for t in result if infer_session(t.created_at) == wanted]
    if adherence_threshold is not None:
        result = [t for t in result if t.adherence_score >= adherence_threshold]
    return result
