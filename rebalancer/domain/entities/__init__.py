"""Domain entities."""
from rebalancer.domain.entities.rebalance import (
    RebalanceAction,
    RebalanceRequest,
    PriceQuote,
    RebalancePlan,
    OrderSide,
    FillReport,
    RedeemReceipt,
    OutcomeStatus,
    SkipReason,
    ExecutionOutcome,
)

__all__ = [
    "RebalanceAction",
    "RebalanceRequest",
    "PriceQuote",
    "RebalancePlan",
    "OrderSide",
    "FillReport",
    "RedeemReceipt",
    "OutcomeStatus",
    "SkipReason",
    "ExecutionOutcome",
]
