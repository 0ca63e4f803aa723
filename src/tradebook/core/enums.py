"""Enumerations used across the journal engine."""

from enum import Enum


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"

    @property
    def sign(self) -> int:
        """+1 for long, -1 for short."""
        return 1 if self is Direction.LONG else -1


class ClosureType(str, Enum):
    """How a single bracket leg was closed."""

    TAKE_PROFIT = "take_profit"
    STOP_LOSS = "stop_loss"
    BREAK_EVEN = "break_even"
    MANUAL_CLOSE = "manual_close"


class Zone(str, Enum):
    """Checklist zone a model tool belongs to."""

    NARRATIVE = "narrative"
    FRAMEWORK = "framework"
    EXECUTION = "execution"


# Canonical zone order used when flattening a model checklist
ZONE_ORDER = (Zone.NARRATIVE, Zone.FRAMEWORK, Zone.EXECUTION)


class AssetType(str, Enum):
    FUTURES = "futures"
    FOREX = "forex"
    CRYPTO = "crypto"
    STOCKS = "stocks"


class CalculationMethod(str, Enum):
    """Unit in which value-per-unit is quoted."""

    TICK = "tick"
    POINT = "point"


class RiskMode(str, Enum):
    """How the risk budget is expressed."""

    PERCENTAGE = "percentage"    # % of account capital
    FIXED_AMOUNT = "fixed_amount"  # Fixed dollar amount


class TradingSession(str, Enum):
    """UTC session buckets used by analytics."""

    ASIA = "Asia"        # 00:00-08:00 UTC
    LONDON = "London"    # 08:00-16:00 UTC
    NEW_YORK = "NY"      # 16:00-24:00 UTC
