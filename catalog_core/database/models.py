"""SQLAlchemy database models for the catalog engine"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    event,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from catalog_core.products.reference import derive_reference

Base = declarative_base()


class Brand(Base):
    """Product brand"""

    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(64), nullable=False, unique=True)
    name = Column(String(255), nullable=False)


class Category(Base):
    """Hierarchical catalog category"""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(64), nullable=False, unique=True)
    name_ru = Column(String(255), default="")
    name_ua = Column(String(255), default="")
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True)

    parent = relationship("Category", remote_side=[id], back_populates="children")
    children = relationship("Category", back_populates="parent")

    __table_args__ = (Index("idx_category_parent", "parent_id"),)

    def ancestry(self) -> list:
        """Categories from the root down to (and including) this one"""
        chain = []
        node = self
        seen = set()

        while node is not None and node.id not in seen:
            seen.add(node.id)
            chain.append(node)
            node = node.parent

        return list(reversed(chain))

    def root(self) -> "Category":
        return self.ancestry()[0]


class Series(Base):
    """Groups colorway / size variants of one logical item"""

    __tablename__ = "series"

    id = Column(Integer, primary_key=True, autoincrement=True)
    model = Column(String(255), nullable=False, unique=True)

    products = relationship("Product", back_populates="series")


class Option(Base):
    """Attribute family (size, color, gender, ...)"""

    __tablename__ = "options"

    # Canonical families
    APPAREL_SIZE = "apparel_size"
    CUP_SIZE = "cup_size"
    FOOTWEAR_SIZE = "footwear_size"
    INSOLE_LENGTH = "insole_length"
    HARDWARE_SIZE = "hardware_size"
    COLOR = "color"
    GENDER = "gender"
    SPORT = "sport"
    OUTLET = "outlet"
    KIND = "kind"
    BRAND = "brand"

    # Vendor raw families written by the import
    ORIGINAL_SIZE = "original_size"
    ORIGINAL_COLOR = "original_color"
    ORIGINAL_GENDER = "original_gender"
    ORIGINAL_SPORT = "original_sport"
    ORIGINAL_KIND = "original_kind"

    # Shipping dimensions
    WEIGHT = "weight"
    LENGTH = "length"
    WIDTH = "width"
    HEIGHT = "height"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(64), nullable=False, unique=True)
    name_ru = Column(String(255), default="")
    name_ua = Column(String(255), default="")

    variants = relationship("OptionVariant", back_populates="option")
    groups = relationship("OptionGroup", back_populates="option")


class OptionGroup(Base):
    """Facet group within an option"""

    __tablename__ = "option_groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    option_id = Column(Integer, ForeignKey("options.id"), nullable=False)
    slug = Column(String(255), nullable=False)
    value_ru = Column(String(255), default="")
    value_ua = Column(String(255), default="")

    option = relationship("Option", back_populates="groups")


class OptionVariant(Base):
    """Canonical value of an option"""

    __tablename__ = "option_variants"

    OUTLET_VARIANT_OUTLET = "outlet"
    OUTLET_VARIANT_REGULAR = "regular"

    id = Column(Integer, primary_key=True, autoincrement=True)
    option_id = Column(Integer, ForeignKey("options.id"), nullable=False)
    group_id = Column(Integer, ForeignKey("option_groups.id"), nullable=True)
    slug = Column(String(255), nullable=False)
    value_ru = Column(String(255), default="")
    value_ua = Column(String(255), default="")

    option = relationship("Option", back_populates="variants")
    group = relationship("OptionGroup")

    __table_args__ = (Index("idx_variant_option_slug", "option_id", "slug"),)

    def value(self, locale: str) -> str:
        return getattr(self, f"value_{locale}", None) or ""


class VariantMapping(Base):
    """Raw vendor value -> canonical variant, qualified by brand/gender/kind"""

    __tablename__ = "variant_mappings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    option_id = Column(Integer, ForeignKey("options.id"), nullable=False)
    raw_value = Column(String(255), nullable=False)  # normalized, lower-case
    brand = Column(String(255), nullable=True)
    gender = Column(String(64), nullable=True)
    kind = Column(String(255), nullable=True)
    variant_id = Column(Integer, ForeignKey("option_variants.id"), nullable=False)
    additional_variant_id = Column(
        Integer, ForeignKey("option_variants.id"), nullable=True
    )  # secondary sport

    variant = relationship("OptionVariant", foreign_keys=[variant_id])
    additional_variant = relationship(
        "OptionVariant", foreign_keys=[additional_variant_id]
    )

    __table_args__ = (Index("idx_mapping_option_raw", "option_id", "raw_value"),)


class CategoryMapping(Base):
    """Vendor kind variant -> catalog category and canonical kind"""

    __tablename__ = "category_mappings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    original_variant_id = Column(
        Integer, ForeignKey("option_variants.id"), nullable=False, unique=True
    )
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    kind_variant_id = Column(Integer, ForeignKey("option_variants.id"), nullable=True)

    category = relationship("Category")
    kind_variant = relationship("OptionVariant", foreign_keys=[kind_variant_id])


class GenderText(Base):
    """Gender wording used in product names, optionally per kind"""

    __tablename__ = "gender_texts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    gender_variant_id = Column(
        Integer, ForeignKey("option_variants.id"), nullable=False
    )
    kind_variant_id = Column(Integer, ForeignKey("option_variants.id"), nullable=True)
    value_ru = Column(String(255), default="")
    value_ua = Column(String(255), default="")


class Store(Base):
    """Store location holding inventory"""

    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(64), nullable=False, unique=True)
    name = Column(String(255), default="")
    enabled_for_order = Column(Boolean, nullable=False, default=True)
    is_outlet = Column(Boolean, nullable=False, default=False)


class SiteProductQuantity(Base):
    """Per-store inventory count"""

    __tablename__ = "site_product_quantities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)

    store = relationship("Store")

    __table_args__ = (Index("idx_quantity_product_store", "product_id", "store_id"),)


class ProductPrice(Base):
    """Per-store price"""

    __tablename__ = "product_prices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False)
    price = Column(Float, nullable=True)
    old_price = Column(Float, nullable=True)

    __table_args__ = (Index("idx_price_product_store", "product_id", "store_id"),)


class ProductPicture(Base):
    """Product image reference"""

    __tablename__ = "product_pictures"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    path = Column(String(500), nullable=False)
    position = Column(Integer, default=0)

    product = relationship("Product", back_populates="images")


class Action(Base):
    """Time-bounded promotion"""

    __tablename__ = "actions"

    STATUS_ACTIVE = "active"
    STATUS_INACTIVE = "inactive"
    TYPE_FIXED_DISCOUNT = "fixed_discount"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), default="")
    type = Column(String(64), nullable=False, default=TYPE_FIXED_DISCOUNT)
    status = Column(String(32), nullable=False, default=STATUS_ACTIVE)
    starts_at = Column(DateTime, nullable=True)
    ends_at = Column(DateTime, nullable=True)
    discount_percent = Column(Float, nullable=True)
    discount_amount = Column(Float, nullable=True)

    action_products = relationship("ActionProduct", back_populates="action")


class ActionProduct(Base):
    """Promotion link; price overrides the action's discount when set"""

    __tablename__ = "action_products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action_id = Column(Integer, ForeignKey("actions.id"), nullable=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    price = Column(Float, nullable=True)

    action = relationship("Action", back_populates="action_products")
    product = relationship("Product", back_populates="action_products")


class BannerProduct(Base):
    """Promotional banner link, keyed by product code"""

    __tablename__ = "banner_products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    banner_id = Column(Integer, nullable=False)
    product_code = Column(String(25), nullable=False)


class SeriesRelationProduct(Base):
    """Explicit series link"""

    __tablename__ = "series_relation_products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    series_id = Column(Integer, ForeignKey("series.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)


class OrderProduct(Base):
    """Order line referencing a product"""

    __tablename__ = "order_products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, default=1)
    price = Column(Float, nullable=True)


class Product(Base):
    """Sellable catalog item"""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(25), nullable=False, default="")
    reference = Column(String(255), nullable=True)
    style = Column(String(255), nullable=True)
    model = Column(String(255), nullable=True)
    ean = Column(String(255), nullable=True)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=True)
    series_id = Column(Integer, ForeignKey("series.id"), nullable=True)

    name_ru = Column(String(255), default="")
    name_ua = Column(String(255), default="")
    description_ru = Column(Text, nullable=True)
    description_ua = Column(Text, nullable=True)

    # Raw dimensions: weight in grams, sizes in millimetres
    weight = Column(Float, nullable=False, default=0.0)
    width = Column(Float, nullable=False, default=0.0)
    height = Column(Float, nullable=False, default=0.0)
    length = Column(Float, nullable=False, default=0.0)

    # Stored with full precision, exposed rounded (see products.facts)
    price = Column(Float, nullable=True)
    old_price = Column(Float, nullable=True)
    promo_price = Column(Float, nullable=True, default=0.0)

    in_stock = Column(Boolean, nullable=False, default=False)
    out_of_stock = Column(Boolean, nullable=False, default=False)
    disabled = Column(Boolean, nullable=False, default=False)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    category = relationship("Category")
    brand = relationship("Brand")
    series = relationship("Series", back_populates="products")
    options = relationship("ProductOption", back_populates="product")
    images = relationship(
        "ProductPicture", back_populates="product", order_by="ProductPicture.position"
    )
    action_products = relationship("ActionProduct", back_populates="product")
    site_quantities = relationship("SiteProductQuantity", cascade="all, delete-orphan")
    prices = relationship("ProductPrice", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_product_code", "code"),
        Index("idx_product_reference", "reference"),
        Index("idx_product_category", "category_id"),
        Index("idx_product_series", "series_id"),
    )

    @property
    def sellable(self) -> bool:
        """Current sellable state, mirrored into ProductOption.filterable"""
        return bool(
            self.in_stock and self.active and not self.out_of_stock and not self.disabled
        )


class ProductOption(Base):
    """Assignment of a canonical (option, variant) pair to a product"""

    __tablename__ = "product_options"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    option_id = Column(Integer, ForeignKey("options.id"), nullable=False)
    variant_id = Column(Integer, ForeignKey("option_variants.id"), nullable=True)
    group_id = Column(Integer, ForeignKey("option_groups.id"), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)

    is_visible = Column(Boolean, nullable=False, default=True)
    is_top = Column(Boolean, nullable=False, default=False)
    is_filter = Column(Boolean, nullable=False, default=True)
    filterable = Column(Boolean, nullable=False, default=False)

    product = relationship("Product", back_populates="options")
    option = relationship("Option")
    variant = relationship("OptionVariant")
    group = relationship("OptionGroup")

    __table_args__ = (
        Index("idx_product_option_product", "product_id", "option_id"),
        Index("idx_product_option_variant", "variant_id", "filterable"),
    )


@event.listens_for(Product, "before_insert")
@event.listens_for(Product, "before_update")
def _handle_reference(mapper, connection, target):
    target.reference = derive_reference(target.style, target.model, target.code or "")


def create_all_tables(engine):
    """
    Create all database tables.

    Args:
        engine: SQLAlchemy engine
    """
    Base.metadata.create_all(engine)


def drop_all_tables(engine):
    """
    Drop all database tables. Use with caution!

    Args:
        engine: SQLAlchemy engine
    """
    Base.metadata.drop_all(engine)
