"""Pure functions computing display facts from a product's stored fields"""

from typing import Iterable, List, Optional

from catalog_core.database.models import Category, Option, Product, ProductOption
from catalog_core.models.search import IndexDocument
from catalog_core.utils.rounding import round_price


def localized(product: Product, field: str, locale: str) -> str:
    """Value of a per-locale column such as name_ua / description_ru"""
    return getattr(product, f"{field}_{locale}", None) or ""


def localized_name(product: Product, locale: str) -> str:
    return localized(product, "name", locale)


def display_price(product: Product) -> Optional[float]:
    return round_price(product.price)


def display_old_price(product: Product) -> Optional[float]:
    return round_price(product.old_price)


def display_promo_price(product: Product) -> Optional[float]:
    return round_price(product.promo_price)


def site_in_stock(product: Product) -> bool:
    return bool(product.in_stock and not product.out_of_stock)


def find_assignment(product: Product, option_code: str) -> Optional[ProductOption]:
    """First loaded assignment of an option, by option code"""
    for product_option in product.options or []:
        if product_option.option is not None and product_option.option.code == option_code:
            return product_option
    return None


def _variant_value(product: Product, option_code: str, locale: str) -> str:
    assignment = find_assignment(product, option_code)
    if assignment is None or assignment.variant is None:
        return ""
    return assignment.variant.value(locale)


def color_label(product: Product, locale: str) -> str:
    return _variant_value(product, Option.COLOR, locale)


def sport_label(product: Product, locale: str) -> str:
    return _variant_value(product, Option.SPORT, locale)


def cup_size_label(product: Product, locale: str) -> str:
    return _variant_value(product, Option.CUP_SIZE, locale)


def index_name(product: Product, locale: str) -> str:
    """Name used by the full-text index: product name plus its sport"""
    return f"{localized_name(product, locale)} {sport_label(product, locale)}".strip()


def suggest_tokens(product: Product, locale: str) -> List[str]:
    """Completion inputs: the lower-cased words of the localized name"""
    return localized_name(product, locale).lower().split()


def breadcrumbs(product: Product) -> List[Category]:
    return product.category.ancestry() if product.category else []


def build_index_document(
    product: Product, locales: Iterable[str] = ("ru", "ua")
) -> IndexDocument:
    """Searchable representation of a product"""
    locales = list(locales)

    return IndexDocument(
        code=product.code,
        model=product.model or "",
        reference=product.reference or "",
        index_names={locale: index_name(product, locale) for locale in locales},
        suggest={locale: suggest_tokens(product, locale) for locale in locales},
    )
