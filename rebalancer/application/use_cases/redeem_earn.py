"""
RedeemEarnUseCase - Redeem an asset from flexible Earn without trading.

Useful for checking Earn permissions of the configured API key.
"""
import logging
from decimal import Decimal
from typing import Any

from rebalancer.application.dto.rebalance import RedeemResult
from rebalancer.application.ports.outbound.exchange_port import ExchangePort
from rebalancer.domain.entities.rebalance import to_decimal
from rebalancer.exceptions import InvalidRequestError

logger = logging.getLogger(__name__)


class RedeemEarnUseCase:
    """Redeem-only operation, honouring simulate mode."""

    def __init__(self, exchange: ExchangePort):
        self.exchange = exchange

    async def execute(self, asset: Any, amount: Any, simulate: bool = False) -> RedeemResult:
        """
        Args:
            asset: Asset to redeem
            amount: Amount to redeem, must be positive
            simulate: Report what would be redeemed without calling the exchange

        Raises:
            InvalidRequestError: Missing asset or non-positive amount
        """
        if not isinstance(asset, str) or not asset.strip():
            raise InvalidRequestError("Missing required parameters. Please provide asset and amount.")
        if amount is None:
            raise InvalidRequestError("Missing required parameters. Please provide asset and amount.")
        value = to_decimal(amount, "amount")
        if value <= Decimal("0"):
            raise InvalidRequestError("amount must be positive")

        asset = asset.strip().upper()
        if simulate:
            logger.info(f"[DEV MODE] Would redeem {value} {asset} from Simple Earn")
            return RedeemResult(asset=asset, amount=value, simulated=True)

        receipt = await self.exchange.redeem_flexible(asset, value)
        return RedeemResult(asset=asset, amount=value, simulated=False, receipt=receipt)
