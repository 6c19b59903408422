"""Promotional action lookup and promo price computation"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from catalog_core.database.models import Action, ActionProduct, Product
from catalog_core.utils.rounding import round_price


def find_active_action(
    session: Session, product: Product, now: Optional[datetime] = None
) -> Optional[Action]:
    """
    Active fixed-discount action currently linked to a product.

    An action is current when its status is active and ``now`` falls inside
    its (optional) start / end window.

    Args:
        session: SQLAlchemy session
        product: Product to look up
        now: Reference time, defaults to datetime.now()

    Returns:
        The first matching Action, or None
    """
    now = now or datetime.now()

    stmt = (
        select(Action)
        .join(ActionProduct, ActionProduct.action_id == Action.id)
        .where(
            ActionProduct.product_id == product.id,
            Action.status == Action.STATUS_ACTIVE,
            Action.type == Action.TYPE_FIXED_DISCOUNT,
            or_(Action.starts_at.is_(None), Action.starts_at <= now),
            or_(Action.ends_at.is_(None), Action.ends_at >= now),
        )
        .order_by(Action.id)
    )
    return session.execute(stmt).scalars().first()


def action_product_price(
    session: Session, action: Action, product: Product, base_price: Optional[float]
) -> Optional[float]:
    """
    Promo price an action gives a product.

    A per-product price on the action link wins; otherwise the action's
    percentage or fixed discount is applied to ``base_price``.

    Returns:
        Discounted price, or None when the action yields nothing
    """
    link = session.execute(
        select(ActionProduct).where(
            ActionProduct.action_id == action.id,
            ActionProduct.product_id == product.id,
        )
    ).scalars().first()

    if link is not None and link.price:
        return link.price

    if not base_price:
        return None

    if action.discount_percent:
        return round_price(base_price * (1 - action.discount_percent / 100))

    if action.discount_amount:
        return round_price(max(base_price - action.discount_amount, 0.0))

    return None
