"""Tests for the composable product filter"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from sqlalchemy import select

from catalog_core.database.filtering import ProductFilter
from catalog_core.database.models import Option, Product


def matching_codes(session, product_filter):
    stmt = select(Product.code).where(product_filter.build()).order_by(Product.id)
    return list(session.execute(stmt).scalars())


class TestProductFilter:
    """Test suite for ProductFilter predicates"""

    @pytest.mark.unit
    def test_empty_filter_matches_everything(self, catalog, test_db_session):
        catalog.product("A")
        catalog.product("B")

        assert matching_codes(test_db_session, ProductFilter()) == ["A", "B"]

    @pytest.mark.unit
    def test_names_track_applied_predicates(self):
        product_filter = (
            ProductFilter().in_stock().category_id(None).price_band(100.0, 0.1)
        )

        assert product_filter.names == ["in_stock", "price_band"]
        assert repr(product_filter) == "ProductFilter(in_stock, price_band)"

    @pytest.mark.unit
    def test_in_stock(self, catalog, test_db_session):
        catalog.sellable_product("OK")
        catalog.sellable_product("GONE", out_of_stock=True)
        catalog.sellable_product("OFF", active=False)
        catalog.product("NEW")

        assert matching_codes(test_db_session, ProductFilter().in_stock()) == ["OK"]

    @pytest.mark.unit
    def test_category_includes_children(self, catalog, category_tree, test_db_session):
        catalog.product("ROOT", category_id=category_tree["apparel"].id)
        catalog.product("CHILD", category_id=category_tree["tops"].id)
        catalog.product("ELSEWHERE", category_id=category_tree["balls"].id)

        apparel = category_tree["apparel"]

        assert matching_codes(test_db_session, ProductFilter().category(apparel)) == [
            "ROOT",
            "CHILD",
        ]
        assert matching_codes(
            test_db_session, ProductFilter().category(apparel, include_children=False)
        ) == ["ROOT"]

    @pytest.mark.unit
    def test_price_range_needs_both_bounds(self, catalog, test_db_session):
        catalog.product("CHEAP", promo_price=10.0)
        catalog.product("MID", promo_price=50.0)

        assert matching_codes(test_db_session, ProductFilter().price_range(20, 60)) == [
            "MID"
        ]
        assert ProductFilter().price_range(20, None).names == []

    @pytest.mark.unit
    def test_exact_and_prefix_search(self, catalog, test_db_session):
        catalog.product("AB-100", style="X", model="Y")
        catalog.product("AB-200")

        assert matching_codes(test_db_session, ProductFilter().exact_search(" X-Y ")) == [
            "AB-100"
        ]
        assert matching_codes(test_db_session, ProductFilter().exact_search("AB-200")) == [
            "AB-200"
        ]
        assert matching_codes(test_db_session, ProductFilter().prefix_search("AB-")) == [
            "AB-100",
            "AB-200",
        ]

    @pytest.mark.unit
    def test_option_variants_requires_filterable(self, catalog, test_db_session):
        red = catalog.variant(Option.COLOR, "Красный")
        visible = catalog.product("VISIBLE")
        hidden = catalog.product("HIDDEN")
        catalog.assign(visible, Option.COLOR, red, filterable=True)
        catalog.assign(hidden, Option.COLOR, red, filterable=False)

        assert matching_codes(
            test_db_session, ProductFilter().option_variants([red.id])
        ) == ["VISIBLE"]
        assert matching_codes(test_db_session, ProductFilter().option_variant(red.id)) == [
            "VISIBLE",
            "HIDDEN",
        ]

    @pytest.mark.unit
    def test_enabled_for_order(self, catalog, test_db_session):
        shop = catalog.store("SHOP")
        warehouse = catalog.store("WAREHOUSE", enabled_for_order=False)
        in_shop = catalog.product("IN-SHOP")
        in_warehouse = catalog.product("IN-WAREHOUSE")
        catalog.stock(in_shop, shop, 1)
        catalog.stock(in_warehouse, warehouse, 1)

        assert matching_codes(test_db_session, ProductFilter().enabled_for_order()) == [
            "IN-SHOP"
        ]
        assert matching_codes(
            test_db_session, ProductFilter().enabled_for_order(False)
        ) == ["IN-WAREHOUSE"]
