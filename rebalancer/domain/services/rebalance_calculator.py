"""
Rebalance Calculator Domain Service

Values both sides of a pair in quote currency, decides which side has to
shrink to reach a 50/50 split and how much base asset that takes.
"""
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from rebalancer.domain.entities.rebalance import (
    RebalanceAction,
    RebalancePlan,
    RebalanceRequest,
)
from rebalancer.domain.services.lot_size import quantize_to_step

ZERO = Decimal("0")
TWO = Decimal("2")


@dataclass(frozen=True)
class Imbalance:
    """
    Valuation of a pair and the raw trade that restores parity.

    Attributes:
        price: Price used for valuation
        base_value: base_asset_qty * price
        quote_value: quote_asset_qty
        total_value: base_value + quote_value
        target_each: total_value / 2
        action: Trade direction
        diff_value: Quote-currency notional to move
        amount: Base units to trade (diff_value / price)
    """
    price: Decimal
    base_value: Decimal
    quote_value: Decimal
    total_value: Decimal
    target_each: Decimal
    action: RebalanceAction
    diff_value: Decimal
    amount: Decimal


def assess_imbalance(request: RebalanceRequest, price: Decimal) -> Imbalance:
    """
    Decide the rebalance direction and raw size.

    Only strict comparisons trigger a trade, so an exact 50/50 split falls
    through both branches and is BALANCED.
    """
    base_value = request.base_asset_qty * price
    quote_value = request.quote_asset_qty
    total_value = base_value + quote_value
    target_each = total_value / TWO

    if base_value > target_each:
        action = RebalanceAction.SELL_BASE_BUY_QUOTE
        diff_value = base_value - target_each
        amount = diff_value / price
    elif quote_value > target_each:
        action = RebalanceAction.BUY_BASE_SELL_QUOTE
        diff_value = target_each - base_value
        amount = diff_value / price
    else:
        action = RebalanceAction.BALANCED
        diff_value = ZERO
        amount = ZERO

    return Imbalance(
        price=price,
        base_value=base_value,
        quote_value=quote_value,
        total_value=total_value,
        target_each=target_each,
        action=action,
        diff_value=diff_value,
        amount=amount,
    )


def build_plan(
    request: RebalanceRequest,
    imbalance: Imbalance,
    step_size: Optional[Decimal] = None,
) -> RebalancePlan:
    """
    Turn an imbalance into an immutable plan.

    The amount is quantized only when a positive step size is known. The
    over-limit check uses the unquantized imbalance value.
    """
    amount = imbalance.amount
    usable_step = step_size if step_size is not None and step_size > 0 else None
    if amount > 0 and usable_step is not None:
        amount = quantize_to_step(amount, usable_step)

    return RebalancePlan(
        symbol=request.symbol,
        price=imbalance.price,
        base_value=imbalance.base_value,
        quote_value=imbalance.quote_value,
        total_value=imbalance.total_value,
        target_each=imbalance.target_each,
        action=imbalance.action,
        raw_amount=imbalance.amount,
        amount=amount,
        diff_value=imbalance.diff_value,
        over_limit=imbalance.diff_value > request.max_trade_value_usd,
        max_trade_value_usd=request.max_trade_value_usd,
        step_size=usable_step,
    )
