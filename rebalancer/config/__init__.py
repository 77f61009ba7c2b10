"""Rebalancer configuration."""
from rebalancer.config.settings import (
    RebalanceConfig,
    BinanceConfig,
    validate_all_configs,
)

__all__ = [
    "RebalanceConfig",
    "BinanceConfig",
    "validate_all_configs",
]
