"""Test Settings loading and consistency checks."""

import pytest

from tradebook.core.config import Settings, load_settings
from tradebook.core.enums import AssetType
from tradebook.core.errors import ConfigError


class TestSettingsDefaults:
    def test_default_settings(self):
        settings = Settings()
        assert settings.sizing.default_risk_pct == 1.0
        assert settings.sizing.default_asset_type == AssetType.FUTURES
        assert settings.sizing.crypto_decimals == 8

    def test_analytics_defaults(self):
        analytics = Settings().analytics
        assert analytics.min_tool_sample_size == 3
        assert analytics.adherence_bucket_width_pct == 20
        assert analytics.monte_carlo_runs == 100
        assert analytics.monte_carlo_trades_per_run == 200
        assert analytics.include_empty_time_buckets is False


class TestLoadSettings:
    def test_load_toml(self, tmp_path):
        path = tmp_path / "tradebook.toml"
        path.write_text(
            "[sizing]\n"
            "default_risk_pct = 0.5\n"
            'default_asset_type = "crypto"\n'
            "\n"
            "[analytics]\n"
            "min_tool_sample_size = 5\n"
            "adherence_bucket_width_pct = 25\n"
        )
        settings = load_settings(path)
        assert settings.sizing.default_risk_pct == 0.5
        assert settings.sizing.default_asset_type == AssetType.CRYPTO
        assert settings.analytics.min_tool_sample_size == 5
        assert settings.analytics.adherence_bucket_width_pct == 25

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "nope.toml")
        assert settings.analytics.min_tool_sample_size == 3

    def test_overrides(self):
        settings = load_settings(overrides={"observability": {"log_format": "json"}})
        assert settings.observability.log_format == "json"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TRADEBOOK_ANALYTICS__MIN_TOOL_SAMPLE_SIZE", "7")
        assert load_settings().analytics.min_tool_sample_size == 7

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[sizing\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_settings(path)

    def test_invalid_value(self):
        with pytest.raises(ConfigError):
            load_settings(overrides={"sizing": {"default_risk_pct": -1}})

    def test_bucket_width_must_divide_100(self):
        with pytest.raises(ConfigError, match="must divide 100"):
            load_settings(overrides={"analytics": {"adherence_bucket_width_pct": 30}})

    def test_log_format(self):
        with pytest.raises(ConfigError, match="log_format"):
            load_settings(overrides={"observability": {"log_format": "xml"}})
