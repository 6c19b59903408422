"""Persisted derivations: product names and series assignment"""

from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from catalog_core.database.models import GenderText, Option, OptionVariant, Product, Series
from catalog_core.database.operations import get_product_variant


def _gender_text(
    session: Session,
    gender: Optional[OptionVariant],
    kind: Optional[OptionVariant],
    locale: str,
) -> str:
    """Gender wording for a name, preferring the kind specific text"""
    if gender is None:
        return ""

    stmt = (
        select(GenderText)
        .where(
            GenderText.gender_variant_id == gender.id,
            or_(
                GenderText.kind_variant_id == (kind.id if kind else None),
                GenderText.kind_variant_id.is_(None),
            ),
        )
        .order_by(GenderText.kind_variant_id.is_(None))
    )
    text = session.execute(stmt).scalars().first()

    if text is not None:
        return getattr(text, f"value_{locale}") or ""

    return gender.value(locale)


def compose_name(*parts: Optional[str]) -> str:
    return " ".join(part.strip() for part in parts if part and part.strip())


def init_names(session: Session, product: Product, locales=("ru", "ua")) -> Product:
    """
    Build the localized product names.

    Format: "<kind> <brand> <model or style> <gender text>" with the gender
    text lower-cased.
    """
    kind = get_product_variant(session, product, Option.KIND)
    gender = get_product_variant(session, product, Option.GENDER)
    brand = get_product_variant(session, product, Option.BRAND)

    for locale in locales:
        name = compose_name(
            kind.value(locale) if kind else "",
            brand.value(locale) if brand else "",
            product.model or product.style or "",
            _gender_text(session, gender, kind, locale).lower(),
        )
        setattr(product, f"name_{locale}", name)

    session.flush()
    return product


def series_signature(
    model: Optional[str],
    kind: Optional[str],
    gender: Optional[str],
    reference: Optional[str],
    code: str,
) -> str:
    """
    Key shared by the colorway / size variants of one logical item.

    Products with a model are grouped by model, kind and gender; without one
    they fall back to their reference, then code.
    """
    if model:
        parts = [model, kind, gender]
    else:
        parts = [reference or code]

    return "|".join(part.strip() for part in parts if part and part.strip())


def assign_series(session: Session, product: Product) -> Series:
    """Find or create the product's series and link the product to it"""
    kind = get_product_variant(session, product, Option.ORIGINAL_KIND)
    gender = get_product_variant(session, product, Option.ORIGINAL_GENDER)

    signature = series_signature(
        product.model,
        kind.value_ru if kind else None,
        gender.value_ru if gender else None,
        product.reference,
        product.code,
    )

    series = session.execute(
        select(Series).where(Series.model == signature)
    ).scalar_one_or_none()

    if series is None:
        series = Series(model=signature)
        session.add(series)
        session.flush()

    if product.series_id != series.id:
        product.series_id = series.id
        session.flush()

    return series
