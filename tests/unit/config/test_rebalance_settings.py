"""
Settings tests
"""
import pytest
from decimal import Decimal

from rebalancer.config.settings import (
    BinanceConfig,
    RebalanceConfig,
    get_env_decimal,
    get_env_float,
    get_env_int,
    validate_all_configs,
)
from rebalancer.exceptions import ConfigurationError


class TestEnvHelpers:
    """Environment variable readers."""

    def test_int_default(self, monkeypatch):
        monkeypatch.delenv("TEST_INT", raising=False)

        assert get_env_int("TEST_INT", 7) == 7

    def test_int_value(self, monkeypatch):
        monkeypatch.setenv("TEST_INT", "42")

        assert get_env_int("TEST_INT", 7, min_value=1, max_value=100) == 42

    @pytest.mark.parametrize("value", ["abc", "0", "101"])
    def test_int_invalid(self, monkeypatch, value):
        monkeypatch.setenv("TEST_INT", value)

        with pytest.raises(ConfigurationError) as exc_info:
            get_env_int("TEST_INT", 7, min_value=1, max_value=100)

        assert exc_info.value.config_key == "TEST_INT"

    def test_float_below_minimum(self, monkeypatch):
        monkeypatch.setenv("TEST_FLOAT", "-0.5")

        with pytest.raises(ConfigurationError):
            get_env_float("TEST_FLOAT", 1.0, min_value=0.0)

    def test_decimal_value(self, monkeypatch):
        monkeypatch.setenv("TEST_DECIMAL", " 250.5 ")

        assert get_env_decimal("TEST_DECIMAL", "100") == Decimal("250.5")

    def test_decimal_default(self, monkeypatch):
        monkeypatch.delenv("TEST_DECIMAL", raising=False)

        assert get_env_decimal("TEST_DECIMAL", "100") == Decimal("100")

    @pytest.mark.parametrize("value", ["lots", "NaN", "Infinity", "-1"])
    def test_decimal_invalid(self, monkeypatch, value):
        monkeypatch.setenv("TEST_DECIMAL", value)

        with pytest.raises(ConfigurationError):
            get_env_decimal("TEST_DECIMAL", "100", min_value=Decimal("0"))


class TestRebalanceConfig:

    def test_dev_mode(self, monkeypatch):
        monkeypatch.setattr(RebalanceConfig, "APP_ENV", "development")

        assert RebalanceConfig.is_dev_mode() is True

    def test_production_mode(self, monkeypatch):
        monkeypatch.setattr(RebalanceConfig, "APP_ENV", "production")

        assert RebalanceConfig.is_dev_mode() is False

    def test_negative_limit_is_invalid(self, monkeypatch):
        monkeypatch.setattr(RebalanceConfig, "MAX_TRADE_VALUE_USD", Decimal("-1"))

        with pytest.raises(ConfigurationError) as exc_info:
            RebalanceConfig.validate()

        assert exc_info.value.config_key == "MAX_TRADE_VALUE_USD"


class TestBinanceConfig:

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.setattr(BinanceConfig, "API_KEY", None)
        monkeypatch.setattr(BinanceConfig, "API_SECRET", None)

        with pytest.raises(ConfigurationError) as exc_info:
            BinanceConfig.validate()

        assert exc_info.value.config_key == "BINANCE_API_KEY"

    def test_unsupported_redeem_type(self, monkeypatch):
        monkeypatch.setattr(BinanceConfig, "API_KEY", "key")
        monkeypatch.setattr(BinanceConfig, "API_SECRET", "secret")
        monkeypatch.setattr(BinanceConfig, "REDEEM_TYPE", "SLOW")

        with pytest.raises(ConfigurationError):
            BinanceConfig.validate()

    def test_validate_all_configs(self, monkeypatch):
        monkeypatch.setattr(RebalanceConfig, "MAX_TRADE_VALUE_USD", Decimal("100"))
        monkeypatch.setattr(RebalanceConfig, "SETTLEMENT_DELAY_SECONDS", 5.0)
        monkeypatch.setattr(RebalanceConfig, "REDEEM_BUFFER_RATE", Decimal("0.1"))
        monkeypatch.setattr(BinanceConfig, "API_KEY", "key")
        monkeypatch.setattr(BinanceConfig, "API_SECRET", "secret")
        monkeypatch.setattr(BinanceConfig, "REDEEM_TYPE", "NORMAL")

        validate_all_configs()
