"""
Application Use Cases.

Business use cases that orchestrate domain logic through port interfaces.
"""
from rebalancer.application.use_cases.get_price import GetPriceUseCase, fetch_quote
from rebalancer.application.use_cases.rebalance_pair import RebalancePairUseCase
from rebalancer.application.use_cases.redeem_earn import RedeemEarnUseCase

__all__ = [
    "GetPriceUseCase",
    "fetch_quote",
    "RebalancePairUseCase",
    "RedeemEarnUseCase",
]
