"""Money rounding"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

CENT = Decimal("0.01")


def round_price(value: Optional[float]) -> Optional[float]:
    """
    Round a stored price to 2 decimal places, half up.

    The value goes through its shortest repr so that 19.005 rounds to 19.01
    instead of following the binary float expansion (19.00499...).

    Args:
        value: Raw stored price, may be None

    Returns:
        Rounded price, or None when value is None
    """
    if value is None:
        return None

    return float(Decimal(repr(float(value))).quantize(CENT, rounding=ROUND_HALF_UP))
