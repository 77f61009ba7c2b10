"""Application DTOs."""
from rebalancer.application.dto.rebalance import RebalanceResult, RedeemResult

__all__ = [
    "RebalanceResult",
    "RedeemResult",
]
