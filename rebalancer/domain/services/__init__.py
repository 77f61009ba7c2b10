"""Domain services."""
from rebalancer.domain.services.lot_size import quantize_to_step, step_precision
from rebalancer.domain.services.rebalance_calculator import (
    Imbalance,
    assess_imbalance,
    build_plan,
)

__all__ = [
    "quantize_to_step",
    "step_precision",
    "Imbalance",
    "assess_imbalance",
    "build_plan",
]
