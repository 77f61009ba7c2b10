"""
BinanceExchangeAdapter - Binance spot and Simple Earn implementation of ExchangePort.

Talks to the Binance REST API with httpx. Private endpoints are signed with
HMAC-SHA256 over the query string, as Binance requires.
"""
import hashlib
import hmac
import logging
import time
from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_UP
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

import httpx

from rebalancer.application.ports.outbound.exchange_port import ExchangePort
from rebalancer.config.settings import BinanceConfig
from rebalancer.domain.entities.rebalance import FillReport, OrderSide, RedeemReceipt
from rebalancer.exceptions import GatewayError, SymbolNotFoundError

logger = logging.getLogger(__name__)

# Binance error code for an unknown symbol
INVALID_SYMBOL_CODE = -1121

# Quantities are sent with at most 8 decimals
WIRE_DECIMALS = 8


def format_decimal(value: Decimal, rounding: str = ROUND_DOWN) -> str:
    """Render a Decimal the way Binance expects (plain notation, <= 8 decimals)."""
    quantized = value.quantize(Decimal(1).scaleb(-WIRE_DECIMALS), rounding=rounding)
    text = format(quantized.normalize(), "f")
    return text if text != "-0" else "0"


def parse_decimal(value: Any) -> Optional[Decimal]:
    """Parse a Binance numeric string, None if it is not a number."""
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


class BinanceExchangeAdapter(ExchangePort):
    """
    Binance adapter implementing ExchangePort.

    Uses a lazily created httpx.AsyncClient; call ``aclose`` on shutdown.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        recv_window: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        redeem_type: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize Binance adapter.

        Args:
            api_key: Binance API key (uses config if not provided)
            api_secret: Binance API secret (uses config if not provided)
            base_url: REST base URL (uses config if not provided)
            recv_window: Signed request validity window in ms
            timeout_seconds: HTTP timeout
            redeem_type: Simple Earn redeem type ("FAST" or "NORMAL")
            transport: Custom httpx transport (tests)
            clock: Returns current time in seconds
        """
        self._api_key = api_key or BinanceConfig.API_KEY or ""
        self._api_secret = api_secret or BinanceConfig.API_SECRET or ""
        self._base_url = (base_url or BinanceConfig.BASE_URL).rstrip("/")
        self._recv_window = recv_window or BinanceConfig.RECV_WINDOW
        self._timeout = timeout_seconds or BinanceConfig.TIMEOUT_SECONDS
        self._redeem_type = redeem_type or BinanceConfig.REDEEM_TYPE
        self._transport = transport
        self._clock = clock
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy initialization of the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # --- Transport ---

    def sign(self, query: str) -> str:
        """HMAC-SHA256 signature of a query string."""
        return hmac.new(
            self._api_secret.encode("utf-8"),
            query.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        signed: bool = False,
    ) -> Any:
        """Send a request and return the decoded JSON body."""
        params = dict(params or {})
        headers = {}
        if signed:
            params["timestamp"] = int(self._clock() * 1000)
            params["recvWindow"] = self._recv_window
            query = urlencode(params)
            query = f"{query}&signature={self.sign(query)}"
            headers["X-MBX-APIKEY"] = self._api_key
        else:
            query = urlencode(params)

        url = f"{path}?{query}" if query else path
        try:
            response = await self.client.request(method, url, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Error calling {path}: {e}")
            raise GatewayError(f"Binance request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if response.is_error:
            self._raise_for_error(path, response.status_code, body)
        return body

    def _raise_for_error(self, path: str, status_code: int, body: Any) -> None:
        code = body.get("code") if isinstance(body, dict) else None
        message = body.get("msg") if isinstance(body, dict) else None
        message = message or f"HTTP {status_code}"
        logger.error(f"Error calling {path}: {status_code} {body}")

        error_cls = SymbolNotFoundError if code == INVALID_SYMBOL_CODE else GatewayError
        raise error_cls(message, details=body, status_code=status_code, exchange_code=code)

    # --- Market Data ---

    async def get_price(self, symbol: str) -> Optional[Decimal]:
        """Latest price from /api/v3/ticker/price."""
        data = await self._request("GET", "/api/v3/ticker/price", {"symbol": symbol})
        if not isinstance(data, dict):
            return None
        return parse_decimal(data.get("price"))

    async def get_lot_step_size(self, symbol: str) -> Optional[Decimal]:
        """LOT_SIZE stepSize from /api/v3/exchangeInfo."""
        data = await self._request("GET", "/api/v3/exchangeInfo", {"symbol": symbol})
        symbols = data.get("symbols") if isinstance(data, dict) else None
        if not symbols:
            return None

        for filter_ in symbols[0].get("filters", []):
            if filter_.get("filterType") == "LOT_SIZE":
                return parse_decimal(filter_.get("stepSize"))
        return None

    # --- Earn ---

    async def get_flexible_product_id(self, asset: str) -> str:
        """First flexible Simple Earn product listed for an asset."""
        data = await self._request(
            "GET",
            "/sapi/v1/simple-earn/flexible/list",
            {"asset": asset},
            signed=True,
        )
        rows = data.get("rows") if isinstance(data, dict) else None
        if not rows:
            raise GatewayError(f"Product ID not found for {asset}", details=data)
        return str(rows[0]["productId"])

    async def redeem_flexible(self, asset: str, amount: Decimal) -> RedeemReceipt:
        """Redeem from flexible Simple Earn."""
        product_id = await self.get_flexible_product_id(asset)
        data = await self._request(
            "POST",
            "/sapi/v1/simple-earn/flexible/redeem",
            {
                "productId": product_id,
                "amount": format_decimal(amount, rounding=ROUND_UP),
                "redeemType": self._redeem_type,
            },
            signed=True,
        )
        data = data if isinstance(data, dict) else {"response": data}
        if data.get("success") is False:
            raise GatewayError(f"Redemption of {asset} was rejected", details=data)

        logger.info(f"Redeemed {amount} {asset} from Simple Earn (product {product_id})")
        return RedeemReceipt(
            asset=asset,
            amount=amount,
            product_id=product_id,
            success=bool(data.get("success", True)),
            raw=data,
        )

    # --- Orders ---

    async def market_buy(self, symbol: str, quantity: Decimal) -> FillReport:
        """Market BUY of a base quantity."""
        return await self._market_order(symbol, OrderSide.BUY, quantity)

    async def market_sell(self, symbol: str, quantity: Decimal) -> FillReport:
        """Market SELL of a base quantity."""
        return await self._market_order(symbol, OrderSide.SELL, quantity)

    async def _market_order(self, symbol: str, side: OrderSide, quantity: Decimal) -> FillReport:
        data = await self._request(
            "POST",
            "/api/v3/order",
            {
                "symbol": symbol.upper(),
                "side": side.value,
                "type": "MARKET",
                "quantity": format_decimal(quantity),
                "newOrderRespType": "FULL",
            },
            signed=True,
        )
        if not isinstance(data, dict):
            raise GatewayError("Unexpected order response", details=data)

        logger.info(f"Market {side.value.lower()} order placed: {symbol} {quantity}")
        return FillReport(
            order_id=str(data.get("orderId", "")),
            symbol=data.get("symbol", symbol.upper()),
            side=side,
            status=data.get("status", ""),
            executed_qty=parse_decimal(data.get("executedQty")) or Decimal("0"),
            cumulative_quote_qty=parse_decimal(data.get("cummulativeQuoteQty")) or Decimal("0"),
            raw=data,
        )
