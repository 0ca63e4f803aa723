"""Hour-of-day, weekday and trading-session breakdowns.

Trades are bucketed on their ``created_at`` timestamp in UTC.  The
``include_empty`` flag applies to a whole hour or weekday report: either
every bucket is listed (empty ones as zero rows) or only buckets with
trades are.  Session reports list all three sessions unless told not to.
"""

from __future__ import annotations

from typing import Any, Iterable

from tradebook.core.enums import TradingSession
from tradebook.core.ids import ns_to_datetime
from tradebook.core.models import Trade

from .metrics import BucketStats, completed_trades

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

SESSION_ORDER = (TradingSession.ASIA, TradingSession.LONDON, TradingSession.NEW_YORK)


def infer_session(timestamp_ns: int) -> TradingSession:
    """Asia 00-08, London 08-16, New York 16-24 (UTC hours)."""
    hour = ns_to_datetime(timestamp_ns).hour
    if hour < 8:
        return TradingSession.ASIA
    if hour < 16:
        return TradingSession.LONDON
    return TradingSession.NEW_YORK


def _rows(
    keys: Iterable[Any],
    buckets: dict[Any, BucketStats],
    label: str,
    include_empty: bool,
) -> list[dict[str, Any]]:
    rows = []
    for key in keys:
        stats = buckets.get(key, BucketStats())
        if stats.trades == 0 and not include_empty:
            continue
        rows.append({label: key, **stats.to_dict()})
    return rows


def hour_buckets(trades: Iterable[Trade], include_empty: bool = False) -> list[dict[str, Any]]:
    """Trade count, win rate and P/L per UTC hour (0-23)."""
    buckets: dict[int, BucketStats] = {}
    for trade in completed_trades(trades):
        hour = ns_to_datetime(trade.created_at).hour
        buckets.setdefault(hour, BucketStats()).record(trade)
    return _rows(range(24), buckets, "hour", include_empty)


def weekday_buckets(trades: Iterable[Trade], include_empty: bool = False) -> list[dict[str, Any]]:
    """Trade count, win rate and P/L per UTC weekday, Monday first."""
    buckets: dict[str, BucketStats] = {}
    for trade in completed_trades(trades):
        day = DAY_NAMES[ns_to_datetime(trade.created_at).weekday()]
        buckets.setdefault(day, BucketStats()).record(trade)
    return _rows(DAY_NAMES, buckets, "weekday", include_empty)


def session_buckets(trades: Iterable[Trade], include_empty: bool = True) -> list[dict[str, Any]]:
    """Performance per trading session.  All three sessions by default."""
    buckets: dict[str, BucketStats] = {}
    for trade in completed_trades(trades):
        session = infer_session(trade.created_at).value
        buckets.setdefault(session, BucketStats()).record(trade)
    return _rows([s.value for s in SESSION_ORDER], buckets, "session", include_empty)
