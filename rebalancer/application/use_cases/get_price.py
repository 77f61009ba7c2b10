"""
GetPriceUseCase - Current spot price of a trading pair.
"""
import logging

from rebalancer.application.ports.outbound.exchange_port import ExchangePort
from rebalancer.domain.entities.rebalance import PriceQuote
from rebalancer.exceptions import PriceUnavailableError, SymbolNotFoundError

logger = logging.getLogger(__name__)


async def fetch_quote(exchange: ExchangePort, symbol: str) -> PriceQuote:
    """
    Fetch and validate the price of ``symbol``.

    Raises:
        PriceUnavailableError: Unknown symbol or unusable price
        GatewayError: Any other exchange failure
    """
    try:
        price = await exchange.get_price(symbol)
    except SymbolNotFoundError as e:
        raise PriceUnavailableError(symbol, e.message) from e

    quote = PriceQuote(symbol=symbol, price=price)
    logger.info(f"Price fetched for {symbol}: {quote.price}")
    return quote


class GetPriceUseCase:
    """Look up the current price of a symbol."""

    def __init__(self, exchange: ExchangePort):
        self.exchange = exchange

    async def execute(self, symbol: str) -> PriceQuote:
        """
        Args:
            symbol: Trading pair in any case (e.g., "btcusdt")

        Returns:
            PriceQuote for the upper-cased symbol
        """
        return await fetch_quote(self.exchange, symbol.strip().upper())
