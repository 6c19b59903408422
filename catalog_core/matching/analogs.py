"""Substitute product discovery with widening price tolerance"""

from typing import List, Optional, Sequence

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session, selectinload

from catalog_core.database.filtering import ProductFilter
from catalog_core.database.models import Action, ActionProduct, Option, Product
from catalog_core.database.operations import get_product_variant
from catalog_core.models.configs import CatalogConfig
from catalog_core.utils.logger import get_logger

logger = get_logger("matching.analogs")


class AnalogFinder:
    """
    Finds in-stock products that could replace a reference product.

    Candidates share the reference's category (and gender, when it has one),
    belong to another series and are priced within a tolerance band. One
    product represents each series so colorways of the same item do not
    crowd the result.
    """

    def __init__(self, config: Optional[CatalogConfig] = None):
        self.config = config or CatalogConfig()

    def analog_filter(
        self, session: Session, product: Product, band: float
    ) -> ProductFilter:
        gender = get_product_variant(session, product, Option.GENDER)

        return (
            ProductFilter()
            .in_stock()
            .category_id(product.category_id)
            .exclude_series(product.series_id)
            .exclude_product(product.id)
            .price_band(product.price or 0, band)
            .option_variant(gender.id if gender else None)
        )

    def find_analogs(
        self, session: Session, product: Product, band: float
    ) -> List[int]:
        """
        Ids of substitutable products within one tolerance band.

        Args:
            session: SQLAlchemy session
            product: Reference product
            band: Fractional price deviation (0.1 = +/-10%)

        Returns:
            One product id per series (the lowest id of the series)
        """
        if not product.category_id or not product.price:
            return []

        expression = self.analog_filter(session, product, band).build()

        stmt = (
            select(func.min(Product.id))
            .where(expression)
            .group_by(Product.series_id)
            .order_by(func.min(Product.id))
        )
        return list(session.execute(stmt).scalars())

    def widen(
        self,
        session: Session,
        product: Product,
        limit: int,
        bands: Optional[Sequence[float]] = None,
    ) -> List[int]:
        """
        Try bands from narrowest to widest, stopping once ``limit`` is reached.

        Returns:
            Candidate ids of the last band tried
        """
        bands = bands or self.config.analogs.bands
        product_ids: List[int] = []

        for band in bands:
            product_ids = self.find_analogs(session, product, band)
            logger.debug(
                f"Band {band}: {len(product_ids)} analog(s)",
                extra={"product_code": product.code},
            )
            if len(product_ids) >= limit:
                break

        return product_ids

    def get_default_analogs(
        self,
        session: Session,
        product: Product,
        limit: int,
        bands: Optional[Sequence[float]] = None,
    ) -> List[Product]:
        """
        Analogs with display data loaded.

        Candidates linked only to inactive promotions are dropped; products
        with no promotion, an active one, or a dangling promotion link stay.

        Args:
            session: SQLAlchemy session
            product: Reference product
            limit: Desired number of analogs
            bands: Override the configured tolerance bands

        Returns:
            Up to ``limit`` products with images and promotions eager-loaded
        """
        product_ids = self.widen(session, product, limit, bands)

        if not product_ids:
            return []

        promotion_ok = or_(
            ~Product.action_products.any(),
            Product.action_products.any(
                or_(
                    ActionProduct.action_id.is_(None),
                    ActionProduct.action.has(Action.status == Action.STATUS_ACTIVE),
                )
            ),
        )

        stmt = (
            select(Product)
            .where(and_(ProductFilter().ids(product_ids).build(), promotion_ok))
            .options(
                selectinload(Product.images),
                selectinload(Product.action_products).selectinload(ActionProduct.action),
            )
            .order_by(Product.id)
            .limit(limit)
        )
        return list(session.execute(stmt).scalars())
