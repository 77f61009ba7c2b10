"""
RebalancePairUseCase - Restore a 50/50 value split between two assets.

A call runs strictly in sequence:

    price -> plan -> (lot step -> quantize) -> skip | simulate |
    redeem from Earn -> settlement delay -> market order

Each step needs the previous result, so nothing runs concurrently inside a
call. Concurrent calls for the same pair are rejected while a LockPort is
wired.
"""
import asyncio
import logging
import math
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from rebalancer.application.dto.rebalance import RebalanceResult
from rebalancer.application.ports.outbound.exchange_port import ExchangePort
from rebalancer.application.ports.outbound.lock_port import (
    LockAcquisitionError,
    LockPort,
    pair_lock_name,
)
from rebalancer.application.use_cases.get_price import fetch_quote
from rebalancer.domain.entities.rebalance import (
    ExecutionOutcome,
    FillReport,
    RebalanceAction,
    RebalancePlan,
    RebalanceRequest,
    RedeemReceipt,
    SkipReason,
)
from rebalancer.domain.services.rebalance_calculator import assess_imbalance, build_plan
from rebalancer.exceptions import ExecutionFailedError, RebalanceInProgressError

logger = logging.getLogger(__name__)

DEFAULT_SETTLEMENT_DELAY_SECONDS = 5.0
DEFAULT_REDEEM_BUFFER_RATE = Decimal("0.1")
# Pair lock lifetime on top of the settlement delay
PAIR_LOCK_TIMEOUT_SECONDS = 300


class RebalancePairUseCase:
    """
    Plans and executes a single-pair rebalance.

    Attributes:
        exchange: Exchange port for prices, Earn redemption and orders
        lock: Optional lock port serializing calls per pair
        settlement_delay_seconds: Wait between redemption and order placement
        redeem_buffer_rate: Extra fraction of quote redeemed before a buy
    """

    def __init__(
        self,
        exchange: ExchangePort,
        lock: Optional[LockPort] = None,
        settlement_delay_seconds: float = DEFAULT_SETTLEMENT_DELAY_SECONDS,
        redeem_buffer_rate: Decimal = DEFAULT_REDEEM_BUFFER_RATE,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize with required ports.

        Args:
            exchange: Exchange port
            lock: Lock port; None disables per-pair serialization
            settlement_delay_seconds: Seconds to wait after redeeming
            redeem_buffer_rate: e.g. 0.1 redeems 110% of the quote needed
            sleep: Awaitable delay function
        """
        if settlement_delay_seconds < 0:
            raise ValueError("settlement_delay_seconds must not be negative")
        if redeem_buffer_rate < 0:
            raise ValueError("redeem_buffer_rate must not be negative")

        self.exchange = exchange
        self.lock = lock
        self.settlement_delay_seconds = settlement_delay_seconds
        self.lock_timeout_seconds = PAIR_LOCK_TIMEOUT_SECONDS + math.ceil(settlement_delay_seconds)
        self.redeem_buffer_rate = Decimal(str(redeem_buffer_rate))
        self._sleep = sleep

    async def run(self, request: RebalanceRequest) -> RebalanceResult:
        """
        Compute the plan and execute it.

        Raises:
            RebalanceInProgressError: Another call holds the pair's lock
            PriceUnavailableError: No usable price for the pair
            GatewayError: Exchange failure while planning
            ExecutionFailedError: Failure while redeeming or ordering
        """
        if self.lock is None:
            return await self._plan_and_execute(request)

        try:
            async with self.lock.lock(
                pair_lock_name(request.symbol),
                timeout_seconds=self.lock_timeout_seconds,
                raise_on_failure=True,
            ):
                return await self._plan_and_execute(request)
        except LockAcquisitionError as e:
            logger.warning(f"Rebalance for {request.symbol} rejected: already in progress")
            raise RebalanceInProgressError(request.symbol) from e

    async def _plan_and_execute(self, request: RebalanceRequest) -> RebalanceResult:
        plan = await self.compute(request)
        outcome = await self.execute(plan, request)
        return RebalanceResult(request=request, plan=plan, outcome=outcome)

    async def compute(self, request: RebalanceRequest) -> RebalancePlan:
        """
        Value both holdings and work out the trade that restores parity.

        The lot step size is only fetched when there is something to trade.
        """
        symbol = request.symbol
        quote = await fetch_quote(self.exchange, symbol)
        imbalance = assess_imbalance(request, quote.price)

        step_size = None
        if imbalance.amount > 0:
            step_size = await self.exchange.get_lot_step_size(symbol)

        plan = build_plan(request, imbalance, step_size)
        if plan.amount != plan.raw_amount:
            logger.info(
                f"[adjustToStepSize] {symbol}: {plan.raw_amount} -> {plan.amount} "
                f"(stepSize={plan.step_size})"
            )

        logger.info(
            f"Rebalance plan {symbol}: action={plan.action.value} amount={plan.amount} "
            f"diff_value={plan.diff_value} over_limit={plan.over_limit}"
        )
        return plan

    async def execute(self, plan: RebalancePlan, request: RebalanceRequest) -> ExecutionOutcome:
        """
        Decide whether to skip, simulate or trade, and trade if needed.

        The over-limit check comes before simulate mode, so an oversized
        trade is reported as skipped even in a dry run.
        """
        if not plan.is_tradeable:
            return ExecutionOutcome.skipped(SkipReason.BALANCED)

        if plan.over_limit:
            logger.warning(
                f"Skipping {plan.symbol} rebalance: trade value {plan.diff_value} "
                f"exceeds limit {plan.max_trade_value_usd}"
            )
            return ExecutionOutcome.skipped(SkipReason.OVER_LIMIT)

        if request.simulate:
            verb = "sell" if plan.action == RebalanceAction.SELL_BASE_BUY_QUOTE else "buy"
            logger.info(f"[DEV MODE] Would {verb} {plan.amount} {request.base_asset}")
            return ExecutionOutcome.simulated(plan)

        if plan.action == RebalanceAction.SELL_BASE_BUY_QUOTE:
            redeem_asset = request.base_asset
            redeem_amount = plan.amount
        else:
            needed_quote = plan.amount * plan.price
            redeem_asset = request.quote_asset
            redeem_amount = needed_quote * (Decimal("1") + self.redeem_buffer_rate)
            logger.info(f"Need {needed_quote} {redeem_asset}, redeeming {redeem_amount}")

        receipt = await self._redeem(redeem_asset, redeem_amount)
        fill = await self._settle_and_order(plan)
        return ExecutionOutcome.executed(fill, receipt)

    async def _redeem(self, asset: str, amount: Decimal) -> RedeemReceipt:
        try:
            receipt = await self.exchange.redeem_flexible(asset, amount)
        except Exception as e:
            logger.error(f"Failed to redeem {amount} {asset} from Earn: {e}")
            raise ExecutionFailedError(ExecutionFailedError.STAGE_REDEEM, e) from e

        logger.info(f"Redeemed {amount} {asset} from Simple Earn")
        return receipt

    async def _settle_and_order(self, plan: RebalancePlan) -> FillReport:
        try:
            await self._sleep(self.settlement_delay_seconds)
            if plan.action == RebalanceAction.SELL_BASE_BUY_QUOTE:
                fill = await self.exchange.market_sell(plan.symbol, plan.amount)
            else:
                fill = await self.exchange.market_buy(plan.symbol, plan.amount)
        except Exception as e:
            # Funds stay in spot; nothing is returned to Earn
            logger.error(
                f"Funds redeemed but order not placed for {plan.symbol} "
                f"({plan.action.value} {plan.amount}): {e}",
                exc_info=True,
            )
            raise ExecutionFailedError(ExecutionFailedError.STAGE_ORDER, e) from e

        logger.info(
            f"Market {fill.side.value} {plan.symbol} filled: "
            f"qty={fill.executed_qty} quote={fill.cumulative_quote_qty}"
        )
        return fill
