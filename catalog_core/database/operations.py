"""Database operations shared by the catalog pipelines"""

from typing import Iterable, List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from catalog_core.database.models import (
    ActionProduct,
    BannerProduct,
    Option,
    OptionVariant,
    OrderProduct,
    Product,
    ProductOption,
    ProductPicture,
    SeriesRelationProduct,
)
from catalog_core.utils.logger import get_logger

logger = get_logger("database.operations")


def get_option(session: Session, code: str) -> Option:
    """
    Load an option by its stable code.

    Raises:
        sqlalchemy.exc.NoResultFound: If the reference data is missing
    """
    return session.execute(select(Option).where(Option.code == code)).scalar_one()


def find_variant(
    session: Session, option: Option, slug: str
) -> Optional[OptionVariant]:
    """Find a variant of an option by slug"""
    stmt = select(OptionVariant).where(
        OptionVariant.option_id == option.id, OptionVariant.slug == slug
    )
    return session.execute(stmt).scalars().first()


def get_variant(session: Session, option: Option, slug: str) -> OptionVariant:
    """
    Load a required variant of an option by slug.

    Raises:
        sqlalchemy.exc.NoResultFound: If the reference data is missing
    """
    stmt = select(OptionVariant).where(
        OptionVariant.option_id == option.id, OptionVariant.slug == slug
    )
    return session.execute(stmt).scalars().one()


def get_product_variant(
    session: Session, product: Product, option_code: str
) -> Optional[OptionVariant]:
    """
    Variant currently assigned to a product for an option code.

    Args:
        session: SQLAlchemy session
        product: Product to inspect
        option_code: Option code (e.g. Option.ORIGINAL_SIZE)

    Returns:
        First assigned OptionVariant, or None
    """
    stmt = (
        select(OptionVariant)
        .join(ProductOption, ProductOption.variant_id == OptionVariant.id)
        .join(Option, Option.id == ProductOption.option_id)
        .where(ProductOption.product_id == product.id, Option.code == option_code)
        .order_by(ProductOption.id)
    )
    return session.execute(stmt).scalars().first()


def get_product_assignments(
    session: Session, product: Product, option_id: Optional[int] = None
) -> List[ProductOption]:
    """Option assignments of a product, optionally for a single option"""
    stmt = select(ProductOption).where(ProductOption.product_id == product.id)
    if option_id is not None:
        stmt = stmt.where(ProductOption.option_id == option_id)
    return list(session.execute(stmt.order_by(ProductOption.id)).scalars())


def destroy_options(
    session: Session, product: Product, option_ids: Sequence[int]
) -> int:
    """
    Remove every assignment of the given options from a product.

    Returns:
        Number of deleted rows
    """
    result = session.execute(
        delete(ProductOption).where(
            ProductOption.product_id == product.id,
            ProductOption.option_id.in_(list(option_ids)),
        )
    )
    session.expire(product, ["options"])
    return result.rowcount


def create_option(
    session: Session,
    product: Product,
    option_id: int,
    variant: OptionVariant,
    **flags,
) -> ProductOption:
    """
    Assign a variant to a product.

    The new row inherits the product's current sellable state as its
    filterable flag; ``flags`` override is_visible / is_top / is_filter.
    """
    product_option = ProductOption(
        product_id=product.id,
        option_id=option_id,
        category_id=product.category_id,
        variant_id=variant.id,
        group_id=variant.group_id,
        filterable=product.sellable,
        **flags,
    )
    session.add(product_option)
    session.flush()
    session.expire(product, ["options"])
    return product_option


def sync_product_options(
    session: Session,
    product: Product,
    assignments: Iterable[dict],
    option_ids: Optional[Sequence[int]] = None,
    **fields,
) -> Product:
    """
    Update product fields and reconcile its option set with a desired list.

    Assignments already present with the same (option_id, variant_id) are
    kept untouched; every other existing row (restricted to ``option_ids`` when
    given) is deleted, then the missing assignments are inserted.

    Args:
        session: SQLAlchemy session
        product: Product being imported
        assignments: Dicts with option_id, variant_id and optional flags
        option_ids: Limit reconciliation to these options
        **fields: Product column values to update

    Returns:
        The updated product
    """
    for name, value in fields.items():
        setattr(product, name, value)
    session.flush()

    to_insert = list(assignments)
    keep_ids = []

    for existing in get_product_assignments(session, product):
        remaining = []
        for item in to_insert:
            if (
                int(existing.option_id) == int(item["option_id"])
                and int(existing.variant_id or 0) == int(item["variant_id"])
            ):
                keep_ids.append(existing.id)
            else:
                remaining.append(item)
        to_insert = remaining

    query = delete(ProductOption).where(
        ProductOption.product_id == product.id,
        ProductOption.id.not_in(keep_ids),
    )
    if option_ids is not None:
        query = query.where(ProductOption.option_id.in_(list(option_ids)))
    session.execute(query)

    session.add_all(
        ProductOption(product_id=product.id, category_id=product.category_id, **item)
        for item in to_insert
    )
    session.flush()
    session.expire(product, ["options"])

    return product


def _owned_relation_deletes(product: Product) -> list:
    """Delete statements for every relation owned by a product, in order"""
    return [
        ("action_products", delete(ActionProduct).where(ActionProduct.product_id == product.id)),
        ("banner_products", delete(BannerProduct).where(BannerProduct.product_code == product.code)),
        (
            "series_relation_products",
            delete(SeriesRelationProduct).where(SeriesRelationProduct.product_id == product.id),
        ),
        ("order_products", delete(OrderProduct).where(OrderProduct.product_id == product.id)),
        ("product_options", delete(ProductOption).where(ProductOption.product_id == product.id)),
        ("product_pictures", delete(ProductPicture).where(ProductPicture.product_id == product.id)),
    ]


def destroy_product(session: Session, product: Product) -> dict:
    """
    Hard-delete a product together with every relation it owns.

    Args:
        session: SQLAlchemy session (transactional context)
        product: Product to delete

    Returns:
        Dictionary of relation name -> deleted row count
    """
    stats = {}
    code = product.code

    for name, statement in _owned_relation_deletes(product):
        stats[name] = session.execute(statement).rowcount

    session.expire(product)
    session.delete(product)
    session.flush()

    logger.info(f"Product {code} deleted", extra={"product_code": code})

    return stats


def destroy_products(session: Session, *criteria) -> int:
    """
    Delete every product matching the criteria, relations first.

    Returns:
        Number of deleted products
    """
    products = list(session.execute(select(Product).where(*criteria)).scalars())

    for product in products:
        destroy_product(session, product)

    return len(products)
