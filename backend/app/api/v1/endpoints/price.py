"""
Price API endpoint.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from backend.app.core.dependencies import get_container
from backend.app.core.errors import error_response
from rebalancer.container import Container
from rebalancer.exceptions import RebalancerError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{symbol}")
async def get_price(
    symbol: str,
    container: Container = Depends(get_container),
) -> Dict[str, Any]:
    """
    Latest spot price of a trading pair.

    Any failure, including an unknown symbol, is reported as 500.
    """
    try:
        quote = await container.get_price_use_case().execute(symbol)
    except RebalancerError as e:
        logger.error(f"Price fetch error for {symbol}: {e.message}")
        return error_response(500, e.message, details=getattr(e, "details", None))

    return {
        "symbol": quote.symbol,
        "price": float(quote.price),
        "timestamp": quote.timestamp.isoformat(),
    }
