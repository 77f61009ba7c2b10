"""
Rebalancer settings.

Values come from environment variables (a ``.env`` file is loaded first)
and are validated when read.
"""
import os
from decimal import Decimal, InvalidOperation
from typing import Optional

from dotenv import load_dotenv

from rebalancer.exceptions import ConfigurationError

load_dotenv()


def get_env_int(key: str, default: int, min_value: Optional[int] = None, max_value: Optional[int] = None) -> int:
    """Read an integer environment variable (with bounds check)."""
    value = os.getenv(key)
    if value is None:
        return default

    try:
        int_value = int(value)
    except ValueError:
        raise ConfigurationError(key, f"not an integer: {value}")
    if min_value is not None and int_value < min_value:
        raise ConfigurationError(key, f"value {int_value} is below minimum {min_value}")
    if max_value is not None and int_value > max_value:
        raise ConfigurationError(key, f"value {int_value} is above maximum {max_value}")
    return int_value


def get_env_float(key: str, default: float, min_value: Optional[float] = None, max_value: Optional[float] = None) -> float:
    """Read a float environment variable (with bounds check)."""
    value = os.getenv(key)
    if value is None:
        return default

    try:
        float_value = float(value)
    except ValueError:
        raise ConfigurationError(key, f"not a number: {value}")
    if min_value is not None and float_value < min_value:
        raise ConfigurationError(key, f"value {float_value} is below minimum {min_value}")
    if max_value is not None and float_value > max_value:
        raise ConfigurationError(key, f"value {float_value} is above maximum {max_value}")
    return float_value


def get_env_decimal(key: str, default: str, min_value: Optional[Decimal] = None) -> Decimal:
    """Read a Decimal environment variable (finite, with lower bound)."""
    value = os.getenv(key, default)

    try:
        decimal_value = Decimal(value.strip())
    except InvalidOperation:
        raise ConfigurationError(key, f"not a number: {value}")
    if not decimal_value.is_finite():
        raise ConfigurationError(key, f"must be finite: {value}")
    if min_value is not None and decimal_value < min_value:
        raise ConfigurationError(key, f"value {decimal_value} is below minimum {min_value}")
    return decimal_value


def get_env_str(key: str, default: str) -> str:
    """Read a string environment variable."""
    return os.getenv(key, default)


class RebalanceConfig:
    """Rebalance engine settings."""
    MAX_TRADE_VALUE_USD = get_env_decimal("MAX_TRADE_VALUE_USD", "100", min_value=Decimal("0"))
    SETTLEMENT_DELAY_SECONDS = get_env_float("REBALANCE_SETTLEMENT_DELAY_SECONDS", 5.0, min_value=0.0, max_value=300.0)
    # Extra quote redeemed on buy-side rebalances, as a fraction of the needed amount
    REDEEM_BUFFER_RATE = get_env_decimal("REBALANCE_REDEEM_BUFFER_RATE", "0.1", min_value=Decimal("0"))
    SERIALIZE_PAIRS = get_env_str("REBALANCE_SERIALIZE_PAIRS", "true").lower() in ("1", "true", "yes")
    APP_ENV = get_env_str("APP_ENV", get_env_str("NODE_ENV", "production")).lower()

    @classmethod
    def is_dev_mode(cls) -> bool:
        """Development environments simulate every trade."""
        return cls.APP_ENV == "development"

    @classmethod
    def validate(cls):
        """Validate rebalance settings."""
        if cls.MAX_TRADE_VALUE_USD < 0:
            raise ConfigurationError("MAX_TRADE_VALUE_USD", "must not be negative")
        if cls.SETTLEMENT_DELAY_SECONDS < 0:
            raise ConfigurationError("REBALANCE_SETTLEMENT_DELAY_SECONDS", "must not be negative")
        if cls.REDEEM_BUFFER_RATE < 0:
            raise ConfigurationError("REBALANCE_REDEEM_BUFFER_RATE", "must not be negative")


class BinanceConfig:
    """Binance API settings."""
    API_KEY = os.getenv("BINANCE_API_KEY")
    API_SECRET = os.getenv("BINANCE_API_SECRET")
    BASE_URL = get_env_str("BINANCE_BASE_URL", "https://api.binance.com")
    RECV_WINDOW = get_env_int("BINANCE_RECV_WINDOW", 60000, min_value=1, max_value=60000)
    TIMEOUT_SECONDS = get_env_float("BINANCE_TIMEOUT_SECONDS", 10.0, min_value=0.1)
    REDEEM_TYPE = get_env_str("BINANCE_REDEEM_TYPE", "FAST")

    @classmethod
    def validate(cls):
        """Validate Binance credentials."""
        if not cls.API_KEY or not cls.API_SECRET:
            raise ConfigurationError(
                "BINANCE_API_KEY",
                "set BINANCE_API_KEY and BINANCE_API_SECRET in the environment or .env file",
            )
        if cls.REDEEM_TYPE not in ("FAST", "NORMAL"):
            raise ConfigurationError("BINANCE_REDEEM_TYPE", f"unsupported redeem type: {cls.REDEEM_TYPE}")


def validate_all_configs():
    """Validate every settings class."""
    RebalanceConfig.validate()
    BinanceConfig.validate()
