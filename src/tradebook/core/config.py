"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings

from .enums import AssetType
from .errors import ConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class SizingConfig(BaseModel):
    default_risk_pct: float = Field(default=1.0, ge=0.0, le=100.0)
    default_asset_type: AssetType = AssetType.FUTURES
    crypto_decimals: int = Field(default=8, ge=0, le=12)
    fractional_decimals: int = Field(default=2, ge=0, le=12)


class AnalyticsConfig(BaseModel):
    min_tool_sample_size: int = Field(default=3, ge=1)
    adherence_bucket_width_pct: int = 20  # Must divide 100
    high_adherence_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    include_empty_time_buckets: bool = False
    monte_carlo_runs: int = Field(default=100, ge=1)
    monte_carlo_trades_per_run: int = Field(default=200, ge=1)
    monte_carlo_min_trades: int = Field(default=5, ge=1)
    monte_carlo_seed: int | None = None
    r_histogram_bins: int = Field(default=10, ge=1)


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level engine settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    sizing: SizingConfig = Field(default_factory=SizingConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "TRADEBOOK_", "env_nested_delimiter": "__"}

    def validate_consistency(self) -> None:
        """Cross-field checks pydantic constraints cannot express."""
        width = self.analytics.adherence_bucket_width_pct
        if width <= 0 or 100 % width != 0:
            raise ConfigError(
                f"adherence_bucket_width_pct must divide 100, got {width}"
            )
        if self.observability.log_format not in ("json", "console"):
            raise ConfigError(
                f"log_format must be 'json' or 'console', "
                f"got {self.observability.log_format!r}"
            )


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.

    Raises:
        ConfigError: If the file is unreadable or any value is invalid.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            try:
                with open(path, "rb") as f:
                    data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if overrides:
        data.update(overrides)

    try:
        settings = Settings(**data)
    except PydanticValidationError as exc:
        raise ConfigError(str(exc)) from exc

    settings.validate_consistency()
    return settings
