"""
Rebalance API endpoints.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from backend.app.core.dependencies import get_container, resolve_dev_mode, simulate_requested
from backend.app.services.metrics import record_rebalance
from rebalancer.container import Container
from rebalancer.domain.entities.rebalance import RebalanceRequest
from rebalancer.exceptions import InvalidRequestError

logger = logging.getLogger(__name__)

router = APIRouter()


class RebalanceBody(BaseModel):
    """Rebalance request body."""
    base_asset: Optional[str] = Field(None, description="Base asset ticker, e.g. BTC")
    quote_asset: Optional[str] = Field(None, description="Quote asset ticker, e.g. USDT")
    base_asset_qty: Optional[Decimal] = Field(None, description="Base asset held")
    quote_asset_qty: Optional[Decimal] = Field(None, description="Quote asset held")
    dev: Optional[bool] = Field(None, description="Simulate the trade")


class RedeemBody(BaseModel):
    """Redeem-only request body."""
    asset: Optional[str] = Field(None, description="Asset to redeem from flexible Earn")
    amount: Optional[Decimal] = Field(None, description="Amount to redeem")
    dev: Optional[bool] = Field(None, description="Simulate the redemption")


@router.post("")
async def rebalance(
    body: RebalanceBody,
    dev_mode: bool = Depends(resolve_dev_mode),
    container: Container = Depends(get_container),
) -> Dict[str, Any]:
    """
    Rebalance a base/quote pair toward a 50/50 value split.

    - Balanced or over-limit plans are reported without trading
    - Dev mode returns the plan without redeeming or ordering
    - Otherwise Earn funds are redeemed and a market order is placed
    """
    dev_mode = simulate_requested(dev_mode, body.dev)
    logger.info(f"Environment: {'DEV' if dev_mode else 'PROD'}")
    if (
        not body.base_asset
        or not body.quote_asset
        or body.base_asset_qty is None
        or body.quote_asset_qty is None
    ):
        raise InvalidRequestError("Missing required parameters.")

    request = RebalanceRequest(
        base_asset=body.base_asset,
        quote_asset=body.quote_asset,
        base_asset_qty=body.base_asset_qty,
        quote_asset_qty=body.quote_asset_qty,
        simulate=dev_mode,
        max_trade_value_usd=container.max_trade_value_usd,
    )
    result = await container.get_rebalance_pair_use_case().run(request)

    fill = result.outcome.fill
    record_rebalance(
        symbol=result.plan.symbol,
        action=result.plan.action.value,
        outcome=result.outcome.status.value,
        side=fill.side.value if fill else "",
        quote_value=float(fill.cumulative_quote_qty) if fill else 0.0,
    )
    return result.to_response()


@router.post("/test-redeem")
async def test_redeem(
    body: RedeemBody,
    dev_mode: bool = Depends(resolve_dev_mode),
    container: Container = Depends(get_container),
) -> Dict[str, Any]:
    """Redeem from flexible Earn without trading."""
    dev_mode = simulate_requested(dev_mode, body.dev)
    logger.info(f"Environment: {'DEV' if dev_mode else 'PROD'}")
    result = await container.get_redeem_earn_use_case().execute(
        body.asset, body.amount, simulate=dev_mode
    )
    return result.to_response()
