"""CLI entry point for the trade journal engine."""

from __future__ import annotations

import json

import click
from pydantic import ValidationError as PydanticValidationError

from .core.enums import AssetType, Direction, RiskMode, Zone
from .core.errors import TradebookError


def _load(config: str | None, log_level: str | None):
    from .core.config import load_settings
    from .observability.logger import setup_logging

    settings = load_settings(config)
    setup_logging(
        log_level or settings.observability.log_level,
        settings.observability.log_format,
    )
    return settings


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, sort_keys=False, default=str))


@click.group()
def main() -> None:
    """Trade journal risk-sizing and analytics engine."""


@main.command()
@click.option("--direction", type=click.Choice([d.value for d in Direction]), required=True)
@click.option("--entry", type=float, required=True, help="Entry price")
@click.option("--stop", type=float, required=True, help="Primary stop-loss price")
@click.option("--capital", type=float, default=0.0, help="Account capital")
@click.option("--value-per-unit", type=float, required=True, help="Dollar value of one point/tick")
@click.option("--risk-pct", type=float, default=None, help="Risk as % of capital")
@click.option("--risk-amount", type=float, default=None, help="Fixed dollar risk (overrides --risk-pct)")
@click.option("--asset", type=click.Choice([a.value for a in AssetType]), default=None)
@click.option("--fractional", is_flag=True, help="Allow fractional sizes")
@click.option("--legs", type=int, default=1, help="Split the size evenly over N legs")
@click.option("--config", default=None, help="Config file path")
def size(
    direction: str,
    entry: float,
    stop: float,
    capital: float,
    value_per_unit: float,
    risk_pct: float | None,
    risk_amount: float | None,
    asset: str | None,
    fractional: bool,
    legs: int,
    config: str | None,
) -> None:
    """Recommend a position size for a planned trade."""
    from .sizing.position_sizer import PositionSizer, split_evenly

    try:
        settings = _load(config, None)
        sizer = PositionSizer(
            account_capital=capital,
            value_per_unit=value_per_unit,
            risk_mode=RiskMode.FIXED_AMOUNT if risk_amount is not None else RiskMode.PERCENTAGE,
            risk_percentage=risk_pct if risk_pct is not None else settings.sizing.default_risk_pct,
            risk_amount=risk_amount or 0.0,
            asset_type=AssetType(asset) if asset else settings.sizing.default_asset_type,
            allow_fractional_size=fractional,
            crypto_decimals=settings.sizing.crypto_decimals,
            fractional_decimals=settings.sizing.fractional_decimals,
        )
        result = sizer.size(Direction(direction), entry, stop)
        out = result.to_dict()
        if result.is_valid and legs > 1:
            out["legs"] = split_evenly(
                result.recommended_size, legs, sizer.asset_type, sizer.allow_fractional_size
            )
    except TradebookError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(out)
    if not result.is_valid:
        raise SystemExit(1)


@main.command()
@click.option("--trades", "trades_path", required=True, help="JSON file of trade records")
@click.option("--models", "models_path", default=None, help="JSON file of model records")
@click.option("--model-id", default=None, help="Only trades logged against this model")
@click.option("--session", type=click.Choice(["Asia", "London", "NY", "All"]), default=None)
@click.option("--min-adherence", type=float, default=None, help="Adherence threshold (0-1)")
@click.option("--calendar", "show_calendar", is_flag=True, help="Print per-day P/L instead")
@click.option("--config", default=None, help="Config file path")
@click.option("--log-level", default=None, help="Override log level")
def summary(
    trades_path: str,
    models_path: str | None,
    model_id: str | None,
    session: str | None,
    min_adherence: float | None,
    show_calendar: bool,
    config: str | None,
    log_level: str | None,
) -> None:
    """Print the analytics report for a set of journaled trades."""
    from .core.models import Model, Trade
    from .journal import InMemoryModelStore, InMemoryTradeStore, TradeJournal, load_json_records

    try:
        settings = _load(config, log_level)
        trades = [Trade.model_validate(r) for r in load_json_records(trades_path)]
        models = (
            [Model.model_validate(r) for r in load_json_records(models_path)]
            if models_path else []
        )
        journal = TradeJournal(InMemoryTradeStore(trades), InMemoryModelStore(models), settings)
        if show_calendar:
            out = journal.calendar()
        else:
            out = journal.summary(
                model_id=model_id, session=session, adherence_threshold=min_adherence
            )
    except (TradebookError, PydanticValidationError) as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(out)


@main.command()
@click.option("--models", "models_path", required=True, help="JSON file of model records")
@click.option(
    "--observe",
    multiple=True,
    required=True,
    help="Observed tool as ZONE:TYPE, e.g. framework:fvg (repeatable)",
)
@click.option("--threshold", type=float, default=0.0, help="Minimum adherence (0-1)")
@click.option("--config", default=None, help="Config file path")
def identify(models_path: str, observe: tuple[str, ...], threshold: float, config: str | None) -> None:
    """Rank models by how well they match the observed tools."""
    from .adherence.scorer import Observation
    from .core.models import Model
    from .journal import InMemoryModelStore, InMemoryTradeStore, TradeJournal, load_json_records

    observations = []
    for item in observe:
        zone, sep, tool_type = item.partition(":")
        if not sep or zone not in {z.value for z in Zone}:
            raise click.BadParameter(f"expected ZONE:TYPE, got {item!r}", param_hint="--observe")
        observations.append(Observation(tool_type=tool_type, zone=Zone(zone)))

    try:
        settings = _load(config, None)
        models = [Model.model_validate(r) for r in load_json_records(models_path)]
        journal = TradeJournal(InMemoryTradeStore(), InMemoryModelStore(models), settings)
        out = journal.identify_models(observations, threshold)
    except (TradebookError, PydanticValidationError) as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(out)


if __name__ == "__main__":
    main()
