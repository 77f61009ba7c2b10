"""
ExchangePort - Interface for exchange operations.

This port defines everything the rebalancer needs from an exchange.
Adapters implementing it handle request signing, transport and
vendor-specific payloads.
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from rebalancer.domain.entities.rebalance import FillReport, RedeemReceipt


class ExchangePort(ABC):
    """
    Port interface for exchange operations.

    Every method raises GatewayError when the exchange call fails.
    """

    # --- Market Data ---

    @abstractmethod
    async def get_price(self, symbol: str) -> Optional[Decimal]:
        """
        Get the latest spot price for a symbol.

        Args:
            symbol: Trading pair (e.g., "BTCUSDT")

        Returns:
            Price in quote currency per 1 base unit, or None when the
            exchange reported no price

        Raises:
            SymbolNotFoundError: If the exchange does not list the symbol
            GatewayError: If the API call fails
        """
        pass

    @abstractmethod
    async def get_lot_step_size(self, symbol: str) -> Optional[Decimal]:
        """
        Get the LOT_SIZE step of a symbol.

        Args:
            symbol: Trading pair

        Returns:
            Minimum quantity increment, or None if the symbol has no
            LOT_SIZE constraint
        """
        pass

    # --- Earn ---

    @abstractmethod
    async def redeem_flexible(self, asset: str, amount: Decimal) -> RedeemReceipt:
        """
        Redeem funds from the asset's flexible Earn product into spot.

        Args:
            asset: Asset to redeem (e.g., "USDT")
            amount: Amount of asset to redeem

        Returns:
            RedeemReceipt for the redemption
        """
        pass

    # --- Orders ---

    @abstractmethod
    async def market_buy(self, symbol: str, quantity: Decimal) -> FillReport:
        """
        Place a market buy order.

        Args:
            symbol: Trading pair
            quantity: Base asset quantity to buy (already lot-size adjusted)

        Returns:
            FillReport with executed quantity and quote value
        """
        pass

    @abstractmethod
    async def market_sell(self, symbol: str, quantity: Decimal) -> FillReport:
        """
        Place a market sell order.

        Args:
            symbol: Trading pair
            quantity: Base asset quantity to sell (already lot-size adjusted)

        Returns:
            FillReport with executed quantity and quote value
        """
        pass
