"""Composable product filter predicates"""

from typing import Iterable, List, Optional

from sqlalchemy import and_, or_, true
from sqlalchemy.sql.elements import ColumnElement

from catalog_core.database.models import (
    Category,
    Product,
    ProductOption,
    SiteProductQuantity,
    Store,
)


class ProductFilter:
    """
    Builder of named, composable filter predicates over Product.

    Each method appends one predicate and returns the builder, so filters
    chain naturally. ``build()`` combines everything with AND into a single
    SQLAlchemy boolean expression. Methods receiving an empty value add
    nothing, mirroring optional query parameters.

    Example:
        >>> expression = (
        ...     ProductFilter()
        ...     .in_stock()
        ...     .category(category_id)
        ...     .price_band(100.0, 0.1)
        ...     .build()
        ... )
        >>> session.execute(select(Product.id).where(expression))
    """

    def __init__(self):
        self._predicates: List[ColumnElement] = []
        self._names: List[str] = []

    def _add(self, name: str, predicate: ColumnElement) -> "ProductFilter":
        self._names.append(name)
        self._predicates.append(predicate)
        return self

    @property
    def names(self) -> List[str]:
        """Names of the predicates applied so far, in order"""
        return list(self._names)

    def in_stock(self) -> "ProductFilter":
        return self._add(
            "in_stock",
            and_(
                Product.in_stock.is_(True),
                Product.active.is_(True),
                Product.out_of_stock.is_(False),
                Product.disabled.is_(False),
            ),
        )

    def active(self) -> "ProductFilter":
        return self._add(
            "active", and_(Product.active.is_(True), Product.disabled.is_(False))
        )

    def product_id(self, product_id: Optional[int]) -> "ProductFilter":
        if product_id is None:
            return self
        return self._add("product_id", Product.id == product_id)

    def ids(self, ids: Iterable[int]) -> "ProductFilter":
        return self._add("ids", Product.id.in_(list(ids)))

    def category(
        self, category: Optional[Category], include_children: bool = True
    ) -> "ProductFilter":
        """Restrict to a category and, by default, its direct children"""
        if category is None:
            return self

        category_ids = [category.id]
        if include_children:
            category_ids.extend(child.id for child in category.children)

        return self._add("category", Product.category_id.in_(category_ids))

    def category_id(self, category_id: Optional[int]) -> "ProductFilter":
        if category_id is None:
            return self
        return self._add("category_id", Product.category_id == category_id)

    def brand(self, brand_id: Optional[int]) -> "ProductFilter":
        if brand_id is None:
            return self
        return self._add("brand", Product.brand_id == brand_id)

    def codes(self, codes: Optional[Iterable[str]]) -> "ProductFilter":
        if codes is None:
            return self
        return self._add("codes", Product.code.in_(list(codes)))

    def price_range(
        self, min_price: Optional[float], max_price: Optional[float]
    ) -> "ProductFilter":
        """Promo price range; applied only when both bounds are given"""
        if min_price is None or max_price is None:
            return self
        return self._add(
            "price_range", Product.promo_price.between(min_price, max_price)
        )

    def price_band(self, price: float, band: float) -> "ProductFilter":
        """Price within [price * (1 - band), price * (1 + band)]"""
        return self._add(
            "price_band",
            and_(
                Product.price >= price * (1 - band),
                Product.price <= price * (1 + band),
            ),
        )

    def option_variants(self, variant_ids: Iterable[int]) -> "ProductFilter":
        """Products carrying any of the variants as a filterable assignment"""
        variant_ids = list(variant_ids)
        if not variant_ids:
            return self
        return self._add(
            "option_variants",
            Product.options.any(
                and_(
                    ProductOption.variant_id.in_(variant_ids),
                    ProductOption.filterable.is_(True),
                )
            ),
        )

    def option_variant(self, variant_id: Optional[int]) -> "ProductFilter":
        """Products holding the variant, regardless of the filterable flag"""
        if variant_id is None:
            return self
        return self._add(
            "option_variant", Product.options.any(ProductOption.variant_id == variant_id)
        )

    def exclude_series(self, series_id: Optional[int]) -> "ProductFilter":
        """Products belonging to a series other than the given one"""
        if series_id is None:
            return self._add("exclude_series", Product.series_id.is_not(None))
        return self._add("exclude_series", Product.series_id != series_id)

    def exclude_product(self, product_id: int) -> "ProductFilter":
        return self._add("exclude_product", Product.id != product_id)

    def exact_search(self, search: Optional[str]) -> "ProductFilter":
        if not search:
            return self
        term = search.strip()
        return self._add(
            "exact_search", or_(Product.reference == term, Product.code == term)
        )

    def prefix_search(self, search: Optional[str]) -> "ProductFilter":
        if not search:
            return self
        return self._add("prefix_search", Product.code.like(f"{search}%"))

    def enabled_for_order(self, enabled: bool = True) -> "ProductFilter":
        """Products with a quantity row in (or outside) order-enabled stores"""
        store_clause = (
            Store.enabled_for_order.is_(True)
            if enabled
            else Store.enabled_for_order.is_(False)
        )
        return self._add(
            "enabled_for_order",
            Product.site_quantities.any(SiteProductQuantity.store.has(store_clause)),
        )

    def build(self) -> ColumnElement:
        """Combine all predicates into one expression"""
        if not self._predicates:
            return true()
        return and_(*self._predicates)

    def __repr__(self) -> str:
        return f"ProductFilter({', '.join(self._names)})"
