"""Price, promotion and stock resolution"""

from catalog_core.inventory.actions import action_product_price, find_active_action
from catalog_core.inventory.availability import AvailabilityResolver

__all__ = ["AvailabilityResolver", "find_active_action", "action_product_price"]
