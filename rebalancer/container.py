"""
Dependency Injection Container.

Central place wiring ports, adapters and use cases.

Usage:
    # Production
    container = Container()
    rebalance = container.get_rebalance_pair_use_case()

    # Testing
    container = Container(exchange_port=mock_exchange, settlement_delay_seconds=0)
"""
from decimal import Decimal
from typing import Optional

from rebalancer.application.ports.outbound.exchange_port import ExchangePort
from rebalancer.application.ports.outbound.lock_port import LockPort
from rebalancer.application.use_cases.get_price import GetPriceUseCase
from rebalancer.application.use_cases.rebalance_pair import RebalancePairUseCase
from rebalancer.application.use_cases.redeem_earn import RedeemEarnUseCase
from rebalancer.config.settings import RebalanceConfig


class Container:
    """
    Dependency Injection Container.

    Ports and use cases are created on first use and cached.
    """

    def __init__(
        self,
        exchange_port: Optional[ExchangePort] = None,
        lock_port: Optional[LockPort] = None,
        max_trade_value_usd: Optional[Decimal] = None,
        settlement_delay_seconds: Optional[float] = None,
        redeem_buffer_rate: Optional[Decimal] = None,
        dev_mode: Optional[bool] = None,
        serialize_pairs: Optional[bool] = None,
    ):
        """
        Initialize container with optional overrides.

        Args:
            exchange_port: Exchange port implementation (Binance if None)
            lock_port: Lock port implementation (in-memory if None)
            max_trade_value_usd: Single trade ceiling (config if None)
            settlement_delay_seconds: Redeem-to-order wait (config if None)
            redeem_buffer_rate: Buy-side redemption buffer (config if None)
            dev_mode: Environment-level simulate flag (config if None)
            serialize_pairs: Reject concurrent rebalances of a pair (config if None)
        """
        self._exchange_port = exchange_port
        self._lock_port = lock_port

        self.max_trade_value_usd = (
            max_trade_value_usd if max_trade_value_usd is not None else RebalanceConfig.MAX_TRADE_VALUE_USD
        )
        self.settlement_delay_seconds = (
            settlement_delay_seconds if settlement_delay_seconds is not None
            else RebalanceConfig.SETTLEMENT_DELAY_SECONDS
        )
        self.redeem_buffer_rate = (
            redeem_buffer_rate if redeem_buffer_rate is not None else RebalanceConfig.REDEEM_BUFFER_RATE
        )
        self.dev_mode = dev_mode if dev_mode is not None else RebalanceConfig.is_dev_mode()
        self.serialize_pairs = serialize_pairs if serialize_pairs is not None else RebalanceConfig.SERIALIZE_PAIRS

        # Cached use cases
        self._get_price_use_case: Optional[GetPriceUseCase] = None
        self._rebalance_pair_use_case: Optional[RebalancePairUseCase] = None
        self._redeem_earn_use_case: Optional[RedeemEarnUseCase] = None

    # --- Port Getters ---

    def get_exchange_port(self) -> ExchangePort:
        """Get exchange port implementation."""
        if self._exchange_port is None:
            from rebalancer.infrastructure.adapters.exchange.binance_adapter import BinanceExchangeAdapter
            self._exchange_port = BinanceExchangeAdapter()
        return self._exchange_port

    def get_lock_port(self) -> LockPort:
        """Get lock port implementation."""
        if self._lock_port is None:
            from rebalancer.infrastructure.adapters.persistence.memory_lock_adapter import InMemoryLockAdapter
            self._lock_port = InMemoryLockAdapter()
        return self._lock_port

    # --- Use Case Getters ---

    def get_price_use_case(self) -> GetPriceUseCase:
        """Get GetPriceUseCase with wired dependencies."""
        if self._get_price_use_case is None:
            self._get_price_use_case = GetPriceUseCase(exchange=self.get_exchange_port())
        return self._get_price_use_case

    def get_rebalance_pair_use_case(self) -> RebalancePairUseCase:
        """Get RebalancePairUseCase with wired dependencies."""
        if self._rebalance_pair_use_case is None:
            self._rebalance_pair_use_case = RebalancePairUseCase(
                exchange=self.get_exchange_port(),
                lock=self.get_lock_port() if self.serialize_pairs else None,
                settlement_delay_seconds=self.settlement_delay_seconds,
                redeem_buffer_rate=self.redeem_buffer_rate,
            )
        return self._rebalance_pair_use_case

    def get_redeem_earn_use_case(self) -> RedeemEarnUseCase:
        """Get RedeemEarnUseCase with wired dependencies."""
        if self._redeem_earn_use_case is None:
            self._redeem_earn_use_case = RedeemEarnUseCase(exchange=self.get_exchange_port())
        return self._redeem_earn_use_case

    # --- Lifecycle ---

    async def aclose(self) -> None:
        """Release adapter resources (HTTP clients)."""
        close = getattr(self._exchange_port, "aclose", None)
        if close is not None:
            await close()
