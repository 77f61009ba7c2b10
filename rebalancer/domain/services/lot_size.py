"""
Lot size quantization.

Exchanges only accept order quantities that are integer multiples of the
symbol's LOT_SIZE step. Quantities are snapped to the nearest step and then
rounded to the step's natural number of decimals.
"""
from decimal import Decimal, ROUND_HALF_UP


def step_precision(step_size: Decimal) -> int:
    """Decimal places implied by a step size (0.0001 -> 4, 1 -> 0)."""
    return int(round(-step_size.log10()))


def quantize_to_step(value: Decimal, step_size: Decimal) -> Decimal:
    """
    Snap ``value`` to the nearest multiple of ``step_size``.

    Args:
        value: Quantity to adjust
        step_size: Exchange lot step size, must be positive

    Returns:
        Quantity rounded to the nearest step, with at most
        ``step_precision(step_size)`` decimal places

    Raises:
        ValueError: If step_size is not positive
    """
    if not isinstance(step_size, Decimal):
        step_size = Decimal(str(step_size))
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    if not step_size.is_finite() or step_size <= 0:
        raise ValueError(f"step_size must be positive, got {step_size}")

    steps = (value / step_size).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    adjusted = steps * step_size

    precision = step_precision(step_size)
    return adjusted.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)
