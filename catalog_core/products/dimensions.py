"""Shipping dimensions of a product"""

from sqlalchemy.orm import Session

from catalog_core.database.models import Option, Product
from catalog_core.database.operations import get_product_variant

COMPANY_JUSTIN = "justin"

DEFAULT_SIDE_MM = 300
DEFAULT_WEIGHT_G = 1000


def _option_number(session: Session, product: Product, option_code: str):
    variant = get_product_variant(session, product, option_code)
    if variant is None:
        return None
    try:
        return float(variant.value_ru.replace(",", "."))
    except (TypeError, ValueError):
        return None


def weight_kg(session: Session, product: Product) -> float:
    """Weight option (grams), else the weight column, else 1 kg"""
    grams = _option_number(session, product, Option.WEIGHT)
    if grams is None:
        grams = product.weight or DEFAULT_WEIGHT_G
    return grams / 1000


def _side_mm(session: Session, product: Product, option_code: str, column: str) -> float:
    value = _option_number(session, product, option_code)
    if value is None:
        value = getattr(product, column) or DEFAULT_SIDE_MM
    return value


def length_mm(session: Session, product: Product) -> float:
    return _side_mm(session, product, Option.LENGTH, "length")


def width_mm(session: Session, product: Product) -> float:
    return _side_mm(session, product, Option.WIDTH, "width")


def height_mm(session: Session, product: Product) -> float:
    return _side_mm(session, product, Option.HEIGHT, "height")


def volume_m3(session: Session, product: Product) -> float:
    volume = (
        height_mm(session, product) * length_mm(session, product) * width_mm(session, product)
    )
    return (volume or 1_000_000) / 1_000_000_000


def volume_weight(session: Session, product: Product, company: str) -> float:
    """
    Chargeable weight in kg: the larger of real and volumetric weight.

    The volumetric divisor depends on the delivery company.
    """
    height = height_mm(session, product)
    width = width_mm(session, product)
    length = length_mm(session, product)
    weight = weight_kg(session, product)

    if company == COMPANY_JUSTIN:
        # 250 kg per cubic metre
        by_size = height * width * length / 1_000_000_000 * 250
    else:
        by_size = height * width * length / 4000 / 1000

    return by_size if by_size > weight else weight
