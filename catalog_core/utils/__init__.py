"""Shared helpers"""

from catalog_core.utils.logger import get_logger
from catalog_core.utils.rounding import round_price

__all__ = ["get_logger", "round_price"]
