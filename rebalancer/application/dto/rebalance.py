"""
Rebalance DTOs returned by the use cases to the HTTP layer.
"""
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from rebalancer.domain.entities.rebalance import (
    ExecutionOutcome,
    OrderSide,
    OutcomeStatus,
    RebalancePlan,
    RebalanceRequest,
    RedeemReceipt,
    SkipReason,
)

SKIP_MESSAGES = {
    SkipReason.BALANCED: "No trade needed (balanced)",
    SkipReason.OVER_LIMIT: "Skipped (over limit)",
}


def _number(value: Optional[Decimal]) -> Optional[float]:
    """JSON-friendly number."""
    return None if value is None else float(value)


@dataclass(frozen=True)
class RebalanceResult:
    """
    Plan and outcome of one rebalance call.

    Attributes:
        request: Validated request
        plan: Computed plan
        outcome: What happened with the plan
    """
    request: RebalanceRequest
    plan: RebalancePlan
    outcome: ExecutionOutcome

    def trade_result(self) -> Dict[str, Any]:
        """Describe the outcome for API consumers."""
        outcome = self.outcome
        if outcome.status == OutcomeStatus.SKIPPED:
            return {
                "status": outcome.status.value,
                "reason": outcome.reason.value,
                "message": SKIP_MESSAGES[outcome.reason],
            }

        side = self.plan.action.order_side
        if outcome.status == OutcomeStatus.SIMULATED:
            verb = "sell" if side == OrderSide.SELL else "buy"
            return {
                "status": outcome.status.value,
                "message": "Simulated trade (no order sent)",
                "side": side.value if side else None,
                "quantity": _number(self.plan.amount),
                "description": f"Would {verb} {self.plan.amount} {self.request.base_asset}",
            }

        return {
            "status": outcome.status.value,
            "message": "Order executed",
            "order": outcome.fill.to_dict() if outcome.fill else None,
            "redeem": outcome.redeem.to_dict() if outcome.redeem else None,
        }

    def to_response(self) -> Dict[str, Any]:
        """Response payload of POST /rebalance."""
        plan = self.plan
        return {
            "symbol": plan.symbol,
            "price": _number(plan.price),
            "base_asset": self.request.base_asset,
            "quote_asset": self.request.quote_asset,
            "base_asset_qty": _number(self.request.base_asset_qty),
            "quote_asset_qty": _number(self.request.quote_asset_qty),
            "base_value": _number(plan.base_value),
            "quote_value": _number(plan.quote_value),
            "total_value": _number(plan.total_value),
            "target_each": _number(plan.target_each),
            "action": plan.action.value,
            "trade_amount": _number(plan.amount),
            "trade_value": _number(plan.diff_value),
            "trade_over_limit": plan.over_limit,
            "trade_limit_usd": _number(plan.max_trade_value_usd),
            "dev_mode": self.request.simulate,
            "trade_result": self.trade_result(),
        }


@dataclass(frozen=True)
class RedeemResult:
    """Outcome of a redeem-only call."""
    asset: str
    amount: Decimal
    simulated: bool
    receipt: Optional[RedeemReceipt] = None

    def to_response(self) -> Dict[str, Any]:
        if self.simulated:
            return {
                "message": "Test mode - no actual redemption",
                "asset": self.asset,
                "amount": _number(self.amount),
            }
        return {
            "success": True,
            "asset": self.asset,
            "amount": _number(self.amount),
            "result": self.receipt.to_dict() if self.receipt else None,
        }
