"""Database package for the catalog engine"""

from catalog_core.database.connection import check_connection, get_db_session, get_engine
from catalog_core.database.filtering import ProductFilter
from catalog_core.database.models import (
    Action,
    ActionProduct,
    Base,
    Brand,
    Category,
    CategoryMapping,
    Option,
    OptionVariant,
    Product,
    ProductOption,
    Series,
    Store,
    create_all_tables,
    drop_all_tables,
)

__all__ = [
    "get_engine",
    "get_db_session",
    "check_connection",
    "ProductFilter",
    "Action",
    "ActionProduct",
    "Base",
    "Brand",
    "Category",
    "CategoryMapping",
    "Option",
    "OptionVariant",
    "Product",
    "ProductOption",
    "Series",
    "Store",
    "create_all_tables",
    "drop_all_tables",
]
