"""Trade journal service: the write path for trades and their outcomes.

Sits between the storage collaborators and the pure engine functions.
Each public operation runs under its own trace id (see
:func:`tradebook.observability.logger.operation_context`).

Saving an outcome is all-or-nothing: validation and P/L computation
happen on a copy of the stored trade, and only a fully valid result is
written back.  Re-saving replaces the previous outcome entirely.
"""

from __future__ import annotations

from typing import Any, Iterable

from tradebook.adherence.scorer import Observation, compute_adherence, rank_models
from tradebook.analytics.calendar import aggregate_by_day
from tradebook.analytics.report import build_report
from tradebook.analytics.scope import filter_trades
from tradebook.core.config import Settings
from tradebook.core.errors import (
    InvalidStopLossError,
    NotFoundError,
    TradebookError,
    TradeStateError,
)
from tradebook.core.guards import validate_stop_loss
from tradebook.core.ids import now_ns
from tradebook.core.interfaces import ModelStore, TradeStore
from tradebook.core.models import Trade
from tradebook.observability.logger import get_logger, operation_context
from tradebook.outcome.pnl import build_outcome
from tradebook.outcome.resolver import OutcomeResolver

log = get_logger(__name__)


class TradeJournal:
    """Orchestrates trade entry, outcome saving and summaries.

    Parameters
    ----------
    trade_store : TradeStore
        Where trades are read from and written to.
    model_store : ModelStore
        Source of the trading models trades are logged against.
    settings : Settings | None
        Analytics and sizing settings.  Defaults apply when omitted.
    """

    def __init__(
        self,
        trade_store: TradeStore,
        model_store: ModelStore,
        settings: Settings | None = None,
    ) -> None:
        self._trades = trade_store
        self._models = model_store
        self._settings = settings or Settings()

    # ------------------------------------------------------------------ #
    # Trade entry                                                          #
    # ------------------------------------------------------------------ #

    def open_trade(self, trade: Trade) -> Trade:
        """Validate and store a new, not yet completed trade.

        Raises:
            TradeStateError: The trade is already marked completed.
            NotFoundError: The trade's model is unknown.
            ValidationError: Stop on the wrong side of entry, or a leg
                fails its constraints (the first problem is raised).
        """
        with operation_context("open_trade", trade_id=trade.id):
            if trade.is_completed:
                raise TradeStateError(f"Trade {trade.id} is already completed")
            if trade.model_id and self._models.get(trade.model_id) is None:
                raise NotFoundError(f"Model {trade.model_id} not found")

            order = trade.bracket_order
            validate_stop_loss(trade.direction, order.entry_price, order.primary_stop_loss)
            issues = order.validate_legs(trade.direction)
            if issues:
                log.warning("trade_rejected", issues=[i.to_dict() for i in issues])
                raise issues[0]

            stored = trade.model_copy(
                update={"adherence_score": compute_adherence(trade.model_conditions)}
            )
            self._trades.save(stored)
            log.info(
                "trade_opened",
                model_id=stored.model_id,
                direction=stored.direction.value,
                legs=len(order.bracket_groups),
                position_size=order.position_size,
            )
            return stored

    def update_stop_loss(self, trade_id: str, price: float) -> list[str]:
        """Move the primary stop; returns the legs that followed it.

        Raises:
            InvalidStopLossError: The new stop is on the wrong side of
                entry.  The stored trade is left unchanged.
        """
        with operation_context("update_stop_loss", trade_id=trade_id):
            trade = self._require(trade_id)
            try:
                validate_stop_loss(trade.direction, trade.bracket_order.entry_price, price)
            except InvalidStopLossError as exc:
                log.warning("stop_loss_rejected", price=price, error=exc.message)
                raise
            followed = trade.update_primary_stop_loss(price)
            self._trades.save(trade)
            log.info("stop_loss_updated", price=price, legs_followed=followed)
            return followed

    # ------------------------------------------------------------------ #
    # Outcomes                                                             #
    # ------------------------------------------------------------------ #

    def resolver_for(self, trade_id: str) -> OutcomeResolver:
        """A resolver for the trade, pre-filled from any saved outcome."""
        trade = self._require(trade_id)
        if trade.bracket_order_outcome is None:
            return OutcomeResolver(trade.bracket_order)
        return OutcomeResolver.from_outcome(trade.bracket_order, trade.bracket_order_outcome)

    def save_outcome(
        self,
        trade_id: str,
        resolver: OutcomeResolver,
        close_time: int | None = None,
    ) -> Trade:
        """Validate the resolver's selections and store the completed trade.

        Raises:
            NotFoundError: Unknown trade id.
            OutcomeValidationError: A leg is unresolved or lacks a price.
            IntegrityError: The resolver's legs do not match the trade's.
        """
        with operation_context("save_outcome", trade_id=trade_id):
            trade = self._require(trade_id)
            try:
                outcome = build_outcome(trade.direction, trade.bracket_order, resolver.resolve())
            except TradebookError as exc:
                log.warning("outcome_rejected", error=str(exc))
                raise

            completed = trade.model_copy(update={
                "bracket_order_outcome": outcome,
                "adherence_score": compute_adherence(trade.model_conditions),
                "is_completed": True,
                "close_time": close_time if close_time is not None else now_ns(),
            })
            self._trades.save(completed)
            log.info(
                "outcome_saved",
                final_pl=outcome.final_pl_usd,
                rr=outcome.rr,
                risk_defined=outcome.risk_defined,
                replaced=trade.bracket_order_outcome is not None,
            )
            return completed

    # ------------------------------------------------------------------ #
    # Queries                                                              #
    # ------------------------------------------------------------------ #

    def summary(
        self,
        *,
        model_id: str | None = None,
        session: str | None = None,
        adherence_threshold: float | None = None,
    ) -> dict[str, Any]:
        """Full analytics report over the (optionally filtered) trades."""
        with operation_context("summary"):
            trades = filter_trades(
                self._trades.list(),
                model_id=model_id,
                session=session,
                adherence_threshold=adherence_threshold,
            )
            report = build_report(trades, self._models.list(), self._settings)
            log.info(
                "summary_built",
                trades=report["trade_count"],
                completed=report["completed_count"],
            )
            return report

    def calendar(self) -> dict[str, dict[str, Any]]:
        return {day: agg.to_dict() for day, agg in aggregate_by_day(self._trades.list()).items()}

    def identify_models(
        self, observations: Iterable[Observation], threshold: float = 0.0
    ) -> list[dict[str, Any]]:
        """Models ranked by how well they match the observed tools."""
        with operation_context("identify_models"):
            matches = rank_models(self._models.list(), observations, threshold)
            log.info("models_ranked", matches=len(matches), threshold=threshold)
            return [m.to_dict() for m in matches]

    def _require(self, trade_id: str) -> Trade:
        trade = self._trades.get(trade_id)
        if trade is None:
            raise NotFoundError(f"Trade {trade_id} not found")
        return trade
