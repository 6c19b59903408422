"""Price and availability resolution from per-store inventory"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from catalog_core.database.models import (
    Action,
    Product,
    ProductPicture,
    ProductPrice,
    SiteProductQuantity,
    Store,
)
from catalog_core.inventory.actions import action_product_price, find_active_action
from catalog_core.matching.normalizer import AttributeNormalizer
from catalog_core.models.configs import CatalogConfig
from catalog_core.utils.logger import get_logger
from catalog_core.utils.rounding import round_price

logger = get_logger("inventory.availability")


class AvailabilityResolver:
    """
    Aggregates store inventory and prices into a product's sellable state.

    Only stores flagged ``enabled_for_order`` take part in the aggregation.
    Configuration is passed in explicitly; in "ALL" visibility mode every
    product is forced visible and in stock.
    """

    def __init__(
        self,
        config: Optional[CatalogConfig] = None,
        normalizer: Optional[AttributeNormalizer] = None,
    ):
        self.config = config or CatalogConfig()
        self.normalizer = normalizer or AttributeNormalizer(self.config)

    @staticmethod
    def enabled_store_ids(session: Session) -> List[int]:
        stmt = select(Store.id).where(Store.enabled_for_order.is_(True)).order_by(Store.id)
        return list(session.execute(stmt).scalars())

    @staticmethod
    def stocked_store_ids(session: Session, product: Product) -> List[int]:
        """Order-enabled stores holding positive stock of the product"""
        stmt = (
            select(SiteProductQuantity.store_id)
            .join(Store, Store.id == SiteProductQuantity.store_id)
            .where(
                SiteProductQuantity.product_id == product.id,
                Store.enabled_for_order.is_(True),
            )
            .group_by(SiteProductQuantity.store_id)
            .having(func.sum(SiteProductQuantity.quantity) > 0)
        )
        return list(session.execute(stmt).scalars())

    @staticmethod
    def enabled_quantity(session: Session, product: Product) -> int:
        stmt = (
            select(func.coalesce(func.sum(SiteProductQuantity.quantity), 0))
            .join(Store, Store.id == SiteProductQuantity.store_id)
            .where(
                SiteProductQuantity.product_id == product.id,
                Store.enabled_for_order.is_(True),
            )
        )
        return int(session.execute(stmt).scalar_one())

    def compute_price(
        self,
        session: Session,
        product: Product,
        action: Optional[Action] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Aggregate price, old price and promo price.

        Prices come from the stores that hold stock; when none does, every
        order-enabled store is used so out-of-stock items still carry a price.
        The maximum observed value wins. When neither price nor old price
        resolves the product is left untouched.

        Args:
            session: Shared transactional context
            product: Product to price
            action: Promotion to apply; looked up when not given
            now: Reference time for the action lookup

        Returns:
            True if the price fields were updated
        """
        store_ids = self.stocked_store_ids(session, product) or self.enabled_store_ids(
            session
        )

        price, old_price = session.execute(
            select(func.max(ProductPrice.price), func.max(ProductPrice.old_price)).where(
                ProductPrice.product_id == product.id,
                ProductPrice.store_id.in_(store_ids),
            )
        ).one()

        if not price and not old_price:
            logger.debug("No price found", extra={"product_code": product.code})
            return False

        if action is None:
            action = find_active_action(session, product, now)

        promo_price = price
        if action is not None:
            promo_price = action_product_price(session, action, product, price)

        product.price = price or old_price or 0
        product.old_price = old_price or price or 0
        product.promo_price = promo_price or old_price or 0
        session.flush()

        return True

    def compute_availability(self, session: Session, product: Product) -> None:
        """
        Recompute the in-stock and active flags.

        Run ``normalizer.sync_filterable`` afterwards (``refresh`` does) since
        assignment filterability depends on the result.
        """
        if self.config.all_visible:
            product.in_stock = True
            product.active = True
            product.disabled = False
            product.out_of_stock = False
            session.flush()
            return

        min_price = self.config.min_sellable_price
        price = round_price(product.price) or 0

        active = True
        if not product.brand_id or not product.category_id or price < min_price:
            active = False

        picture_count = session.execute(
            select(func.count(ProductPicture.id)).where(
                ProductPicture.product_id == product.id
            )
        ).scalar_one()

        if picture_count == 0:
            active = False

        quantity = self.enabled_quantity(session, product)

        product.in_stock = quantity > 0 and price > min_price
        product.active = active
        session.flush()

    def refresh(
        self, session: Session, product: Product, now: Optional[datetime] = None
    ) -> Product:
        """Price, then availability, then filterable sync, in one session"""
        self.compute_price(session, product, now=now)
        self.compute_availability(session, product)
        self.normalizer.sync_filterable(session, product)
        return product
