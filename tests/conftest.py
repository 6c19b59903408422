"""Shared fixtures: an in-memory SQLite catalog and a builder for test data"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from catalog_core.database.models import (
    Base,
    Brand,
    Category,
    Option,
    OptionVariant,
    Product,
    ProductOption,
    ProductPicture,
    ProductPrice,
    SiteProductQuantity,
    Store,
)

OPTION_CODES = [
    Option.APPAREL_SIZE,
    Option.CUP_SIZE,
    Option.FOOTWEAR_SIZE,
    Option.INSOLE_LENGTH,
    Option.HARDWARE_SIZE,
    Option.COLOR,
    Option.GENDER,
    Option.SPORT,
    Option.OUTLET,
    Option.KIND,
    Option.BRAND,
    Option.ORIGINAL_SIZE,
    Option.ORIGINAL_COLOR,
    Option.ORIGINAL_GENDER,
    Option.ORIGINAL_SPORT,
    Option.ORIGINAL_KIND,
    Option.WEIGHT,
    Option.LENGTH,
    Option.WIDTH,
    Option.HEIGHT,
]


class CatalogBuilder:
    """Creates catalog rows with sensible defaults and flushes them"""

    def __init__(self, session: Session):
        self.session = session
        self._options = {}
        self._variant_count = 0

    def _save(self, instance):
        self.session.add(instance)
        self.session.flush()
        return instance

    def option(self, code: str) -> Option:
        if code not in self._options:
            self._options[code] = self._save(Option(code=code, name_ru=code, name_ua=code))
        return self._options[code]

    def variant(
        self,
        option_code: str,
        value_ru: str,
        value_ua: str = None,
        slug: str = None,
    ) -> OptionVariant:
        self._variant_count += 1
        option = self.option(option_code)
        return self._save(
            OptionVariant(
                option_id=option.id,
                slug=slug or f"{option_code}-{self._variant_count}",
                value_ru=value_ru,
                value_ua=value_ua if value_ua is not None else value_ru,
            )
        )

    def category(self, code: str, parent: Category = None) -> Category:
        return self._save(
            Category(code=code, name_ru=code, name_ua=code, parent=parent)
        )

    def brand(self, name: str) -> Brand:
        return self._save(Brand(code=name.lower(), name=name))

    def store(
        self, code: str, enabled_for_order: bool = True, is_outlet: bool = False
    ) -> Store:
        return self._save(
            Store(code=code, enabled_for_order=enabled_for_order, is_outlet=is_outlet)
        )

    def product(self, code: str, **fields) -> Product:
        return self._save(Product(code=code, **fields))

    def sellable_product(self, code: str, **fields) -> Product:
        defaults = dict(in_stock=True, active=True, out_of_stock=False, disabled=False)
        defaults.update(fields)
        return self.product(code, **defaults)

    def assign(
        self, product: Product, option_code: str, variant: OptionVariant, **flags
    ) -> ProductOption:
        option = self.option(option_code)
        assignment = self._save(
            ProductOption(
                product_id=product.id,
                option_id=option.id,
                variant_id=variant.id,
                category_id=product.category_id,
                **flags,
            )
        )
        self.session.expire(product, ["options"])
        return assignment

    def raw(
        self, product: Product, option_code: str, value_ru: str, value_ua: str = None
    ) -> OptionVariant:
        """Create a vendor value and assign it to the product"""
        variant = self.variant(option_code, value_ru, value_ua)
        self.assign(product, option_code, variant)
        return variant

    def stock(self, product: Product, store: Store, quantity: int) -> SiteProductQuantity:
        return self._save(
            SiteProductQuantity(product_id=product.id, store_id=store.id, quantity=quantity)
        )

    def price(
        self, product: Product, store: Store, price: float, old_price: float = None
    ) -> ProductPrice:
        return self._save(
            ProductPrice(
                product_id=product.id, store_id=store.id, price=price, old_price=old_price
            )
        )

    def picture(self, product: Product, path: str = "image.jpg") -> ProductPicture:
        return self._save(ProductPicture(product_id=product.id, path=path))


@pytest.fixture(scope="function")
def test_engine():
    """Create an in-memory SQLite database for testing"""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_engine):
    """Create a database session for testing"""
    connection = test_engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def catalog(test_db_session):
    """Builder with every option and the outlet variants in place"""
    builder = CatalogBuilder(test_db_session)

    for code in OPTION_CODES:
        builder.option(code)

    builder.variant(
        Option.OUTLET, "Аутлет", slug=OptionVariant.OUTLET_VARIANT_OUTLET
    )
    builder.variant(
        Option.OUTLET, "Обычный", "Звичайний", slug=OptionVariant.OUTLET_VARIANT_REGULAR
    )

    return builder


@pytest.fixture
def category_tree(catalog):
    """Root categories with one child each"""
    apparel = catalog.category("apparel")
    footwear = catalog.category("footwear")
    hardware = catalog.category("hardware")

    return {
        "apparel": apparel,
        "tops": catalog.category("tops", parent=apparel),
        "footwear": footwear,
        "running_shoes": catalog.category("running-shoes", parent=footwear),
        "hardware": hardware,
        "balls": catalog.category("balls", parent=hardware),
    }
