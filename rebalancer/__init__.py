"""
Earn-aware 50/50 pair rebalancer.

Computes how far a base/quote split has drifted from a 50/50 value target
and, when allowed, redeems funds from flexible Earn and places the market
order that restores parity.
"""

__version__ = "1.0.0"
