"""Exchange adapters."""
from rebalancer.infrastructure.adapters.exchange.binance_adapter import BinanceExchangeAdapter

__all__ = ["BinanceExchangeAdapter"]
