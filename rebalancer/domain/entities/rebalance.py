"""
Rebalance Domain Entities

Request-scoped value objects created at the start of a rebalance call and
discarded once the response is produced.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional

from rebalancer.exceptions import InvalidRequestError, PriceUnavailableError


def to_decimal(value: Any, field_name: str) -> Decimal:
    """
    Convert a caller-supplied quantity to a finite Decimal.

    Raises:
        InvalidRequestError: If the value is missing, not numeric, or not finite
    """
    if value is None or isinstance(value, bool):
        raise InvalidRequestError(f"Missing or invalid {field_name}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidRequestError(f"{field_name} must be numeric, got {value!r}")
    if not result.is_finite():
        raise InvalidRequestError(f"{field_name} must be a finite number, got {value!r}")
    return result


class OrderSide(Enum):
    """Order side (buy or sell)."""
    BUY = "BUY"
    SELL = "SELL"


class RebalanceAction(Enum):
    """Direction of the trade that restores a 50/50 split."""
    BALANCED = "BALANCED"
    SELL_BASE_BUY_QUOTE = "SELL_BASE_BUY_QUOTE"
    BUY_BASE_SELL_QUOTE = "BUY_BASE_SELL_QUOTE"

    @property
    def order_side(self) -> Optional[OrderSide]:
        """Order side on the base asset, None when balanced."""
        if self == RebalanceAction.SELL_BASE_BUY_QUOTE:
            return OrderSide.SELL
        if self == RebalanceAction.BUY_BASE_SELL_QUOTE:
            return OrderSide.BUY
        return None


@dataclass(frozen=True)
class RebalanceRequest:
    """
    Input of a single rebalance call.

    Attributes:
        base_asset: Base asset ticker (e.g., "BTC")
        quote_asset: Quote asset ticker (e.g., "USDT")
        base_asset_qty: Base asset currently held
        quote_asset_qty: Quote asset currently held, valued 1:1
        simulate: Compute the plan but never redeem or trade
        max_trade_value_usd: Ceiling for a single trade's notional value
    """
    base_asset: str
    quote_asset: str
    base_asset_qty: Decimal
    quote_asset_qty: Decimal
    simulate: bool = False
    max_trade_value_usd: Decimal = Decimal("100")

    def __post_init__(self) -> None:
        """Validate and normalize the request."""
        if not isinstance(self.base_asset, str) or not self.base_asset.strip():
            raise InvalidRequestError("Missing required parameters: base_asset")
        if not isinstance(self.quote_asset, str) or not self.quote_asset.strip():
            raise InvalidRequestError("Missing required parameters: quote_asset")

        object.__setattr__(self, "base_asset", self.base_asset.strip())
        object.__setattr__(self, "quote_asset", self.quote_asset.strip())

        base_qty = to_decimal(self.base_asset_qty, "base_asset_qty")
        quote_qty = to_decimal(self.quote_asset_qty, "quote_asset_qty")
        if base_qty < 0:
            raise InvalidRequestError("base_asset_qty must not be negative")
        if quote_qty < 0:
            raise InvalidRequestError("quote_asset_qty must not be negative")
        object.__setattr__(self, "base_asset_qty", base_qty)
        object.__setattr__(self, "quote_asset_qty", quote_qty)
        object.__setattr__(
            self, "max_trade_value_usd", to_decimal(self.max_trade_value_usd, "max_trade_value_usd")
        )

    @property
    def symbol(self) -> str:
        """Exchange symbol, e.g. "BTCUSDT"."""
        return f"{self.base_asset}{self.quote_asset}".upper()


@dataclass(frozen=True)
class PriceQuote:
    """
    Spot price of a symbol in quote currency per 1 base unit.

    Raises:
        PriceUnavailableError: If the price is not a finite positive number
    """
    symbol: str
    price: Decimal
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        price = self.price
        if price is None or isinstance(price, bool):
            raise PriceUnavailableError(self.symbol, "no price returned")
        try:
            price = price if isinstance(price, Decimal) else Decimal(str(price))
        except (InvalidOperation, ValueError):
            raise PriceUnavailableError(self.symbol, f"unparsable price {self.price!r}")
        if not price.is_finite() or price <= 0:
            raise PriceUnavailableError(self.symbol, f"unusable price {self.price!r}")
        object.__setattr__(self, "price", price)


@dataclass(frozen=True)
class RebalancePlan:
    """
    Immutable result of the rebalance computation.

    Attributes:
        symbol: Trading pair
        price: Price used for valuation
        base_value: Base holding valued in quote currency
        quote_value: Quote holding
        total_value: base_value + quote_value
        target_each: Half of total_value
        action: Trade direction
        raw_amount: Base units to trade before lot-size quantization
        amount: Base units to trade after quantization
        diff_value: Quote-currency notional of the imbalance
        over_limit: diff_value exceeds max_trade_value_usd
        max_trade_value_usd: Limit the plan was checked against
        step_size: Lot step size used for quantization, if any
    """
    symbol: str
    price: Decimal
    base_value: Decimal
    quote_value: Decimal
    total_value: Decimal
    target_each: Decimal
    action: RebalanceAction
    raw_amount: Decimal
    amount: Decimal
    diff_value: Decimal
    over_limit: bool
    max_trade_value_usd: Decimal
    step_size: Optional[Decimal] = None

    @property
    def is_tradeable(self) -> bool:
        """A trade is needed and its quantized amount is non-zero."""
        return self.action != RebalanceAction.BALANCED and self.amount > 0

    @property
    def trade_value(self) -> Decimal:
        """Notional of the quantized amount."""
        return self.amount * self.price


@dataclass(frozen=True)
class FillReport:
    """
    Market order fill as returned by the exchange.

    Attributes:
        order_id: Exchange order ID
        symbol: Trading pair
        side: Buy or sell
        status: Exchange order status (e.g., "FILLED")
        executed_qty: Executed base quantity
        cumulative_quote_qty: Quote value actually filled
        raw: Raw exchange response
    """
    order_id: str
    symbol: str
    side: OrderSide
    status: str
    executed_qty: Decimal
    cumulative_quote_qty: Decimal
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def average_price(self) -> Optional[Decimal]:
        """Average fill price, None when nothing was filled."""
        if self.executed_qty <= 0:
            return None
        return self.cumulative_quote_qty / self.executed_qty

    def to_dict(self) -> Dict[str, Any]:
        average_price = self.average_price
        return {
            "order_id": self.order_id,
            "symbol": self.symbol,
            "side": self.side.value,
            "status": self.status,
            "executed_qty": str(self.executed_qty),
            "cumulative_quote_qty": str(self.cumulative_quote_qty),
            "average_price": str(average_price) if average_price is not None else None,
            "raw": self.raw,
        }


@dataclass(frozen=True)
class RedeemReceipt:
    """
    Flexible Earn redemption receipt.

    Attributes:
        asset: Redeemed asset
        amount: Requested amount
        product_id: Earn product the funds came from
        success: Exchange-reported success flag
        raw: Raw exchange response
    """
    asset: str
    amount: Decimal
    product_id: str
    success: bool = True
    raw: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset": self.asset,
            "amount": str(self.amount),
            "product_id": self.product_id,
            "success": self.success,
            "raw": self.raw,
        }


class OutcomeStatus(Enum):
    """Terminal state of the execution step."""
    SKIPPED = "skipped"
    SIMULATED = "simulated"
    EXECUTED = "executed"


class SkipReason(Enum):
    """Why no trade was attempted."""
    BALANCED = "balanced"
    OVER_LIMIT = "over_limit"


@dataclass(frozen=True)
class ExecutionOutcome:
    """
    Result of executing a plan.

    Exactly one of the factories below should be used to build it.
    """
    status: OutcomeStatus
    reason: Optional[SkipReason] = None
    plan: Optional[RebalancePlan] = None
    fill: Optional[FillReport] = None
    redeem: Optional[RedeemReceipt] = None

    @classmethod
    def skipped(cls, reason: SkipReason) -> ExecutionOutcome:
        """No trade attempted."""
        return cls(status=OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def simulated(cls, plan: RebalancePlan) -> ExecutionOutcome:
        """Dry run: the plan is reported, nothing is sent."""
        return cls(status=OutcomeStatus.SIMULATED, plan=plan)

    @classmethod
    def executed(cls, fill: FillReport, redeem: Optional[RedeemReceipt] = None) -> ExecutionOutcome:
        """Funds redeemed and market order filled."""
        return cls(status=OutcomeStatus.EXECUTED, fill=fill, redeem=redeem)

    @property
    def is_skipped(self) -> bool:
        return self.status == OutcomeStatus.SKIPPED

    @property
    def is_simulated(self) -> bool:
        return self.status == OutcomeStatus.SIMULATED

    @property
    def is_executed(self) -> bool:
        return self.status == OutcomeStatus.EXECUTED
