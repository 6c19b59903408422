"""
Attribute normalization pipeline.

Turns the vendor raw option assignments written by the import
(original_size, original_color, ...) into canonical assignments. Every
family pass owns its ProductOption rows: it destroys them and recreates them
from the current raw data inside the caller's session, so a pass can be
re-run at any time without leaving stale combinations behind.
"""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from catalog_core.database.models import (
    Category,
    CategoryMapping,
    Option,
    OptionVariant,
    Product,
    ProductOption,
    SiteProductQuantity,
    Store,
)
from catalog_core.database.operations import (
    create_option,
    destroy_options,
    get_option,
    get_product_assignments,
    get_product_variant,
    get_variant,
)
from catalog_core.matching.variant_resolver import VariantResolver
from catalog_core.models.configs import CatalogConfig
from catalog_core.models.normalization import (
    NormalizationReport,
    NormalizationWarning,
    VariantContext,
)
from catalog_core.utils.logger import get_logger

logger = get_logger("matching.normalizer")


@dataclass(frozen=True)
class SizeFamily:
    """A size family gated by a root category"""

    name: str
    size_code: str
    adjunct_code: Optional[str] = None
    raw_locale: str = "ua"
    use_context: bool = True
    adjunct_uses_gender: bool = True


APPAREL = SizeFamily(
    name="apparel",
    size_code=Option.APPAREL_SIZE,
    adjunct_code=Option.CUP_SIZE,
    adjunct_uses_gender=False,
)
FOOTWEAR = SizeFamily(
    name="footwear",
    size_code=Option.FOOTWEAR_SIZE,
    adjunct_code=Option.INSOLE_LENGTH,
)
HARDWARE = SizeFamily(
    name="hardware",
    size_code=Option.HARDWARE_SIZE,
    raw_locale="ru",
    use_context=False,
)

SIZE_FAMILIES = (APPAREL, FOOTWEAR, HARDWARE)


class AttributeNormalizer:
    """
    Runs the per-family normalization passes for one product.

    Each ``normalize_*`` method returns the warnings it produced; unresolved
    raw values never raise. Database errors propagate so the caller can roll
    back the whole session.
    """

    def __init__(
        self,
        config: Optional[CatalogConfig] = None,
        resolver: Optional[VariantResolver] = None,
    ):
        self.config = config or CatalogConfig()
        self.resolver = resolver or VariantResolver(self.config.resolver)

    # -- helpers ---------------------------------------------------------

    def _warn(
        self, product: Product, message: str, **context
    ) -> NormalizationWarning:
        record = NormalizationWarning(
            message=message, product_code=product.code, context=context
        )
        logger.warning(
            record.message,
            extra={"product_code": record.product_code, "context": record.context},
        )
        return record

    @staticmethod
    def _raw(
        session: Session, product: Product, option_code: str, locale: str = "ru"
    ) -> Optional[str]:
        variant = get_product_variant(session, product, option_code)
        if variant is None:
            return None
        return variant.value(locale) or None

    def context_for(
        self, session: Session, product: Product, locale: str = "ua"
    ) -> VariantContext:
        """Brand / vendor gender / kind hints of a product"""
        brand = self._raw(session, product, Option.BRAND, locale)
        if brand is None and product.brand is not None:
            brand = product.brand.name

        return VariantContext(
            brand=brand,
            gender=self._raw(session, product, Option.ORIGINAL_GENDER, locale),
            kind=self._raw(session, product, Option.KIND, locale),
        )

    def _root_code(self, family: SizeFamily) -> str:
        return getattr(self.config.categories, family.name)

    @staticmethod
    def category_ancestry(session: Session, product: Product) -> List[Category]:
        """Categories from the root down to the product's category"""
        if not product.category_id:
            return []

        category = session.get(Category, product.category_id)
        return category.ancestry() if category else []

    def descends_from(self, session: Session, product: Product, root_code: str) -> bool:
        """True when the product's category sits below the given root"""
        ancestry = self.category_ancestry(session, product)
        return any(category.code == root_code for category in ancestry[:-1])

    # -- size ------------------------------------------------------------

    def normalize_size_family(
        self, session: Session, product: Product, family: SizeFamily
    ) -> List[NormalizationWarning]:
        """
        Replace the size (and adjunct) assignments of one size family.

        Stale assignments are always removed first; a product whose category
        is not under the family's root ends up with none.
        """
        size_option = get_option(session, family.size_code)
        adjunct_option = (
            get_option(session, family.adjunct_code) if family.adjunct_code else None
        )

        option_ids = [size_option.id]
        if adjunct_option is not None:
            option_ids.append(adjunct_option.id)
        destroy_options(session, product, option_ids)

        if not self.descends_from(session, product, self._root_code(family)):
            logger.debug(
                f"Skipping {family.name} size, category outside root",
                extra={"product_code": product.code},
            )
            return []

        vendor_size = self._raw(
            session, product, Option.ORIGINAL_SIZE, family.raw_locale
        )
        if vendor_size is None:
            return []

        context = (
            self.context_for(session, product) if family.use_context else VariantContext()
        )
        warnings = []

        size_variant = self.resolver.resolve(session, size_option, vendor_size, context)
        if size_variant is not None:
            create_option(session, product, size_option.id, size_variant)
        else:
            warnings.append(
                self._warn(
                    product,
                    f"Missing {family.name} size variant",
                    family=family.size_code,
                    raw_value=vendor_size,
                    **context.model_dump(exclude_none=True),
                )
            )

        if adjunct_option is not None:
            adjunct_context = (
                context
                if family.adjunct_uses_gender
                else context.model_copy(update={"gender": None})
            )
            adjunct_variant = self.resolver.resolve(
                session, adjunct_option, vendor_size, adjunct_context
            )
            if adjunct_variant is not None:
                create_option(session, product, adjunct_option.id, adjunct_variant)

        return warnings

    def normalize_apparel_size(self, session: Session, product: Product):
        return self.normalize_size_family(session, product, APPAREL)

    def normalize_footwear_size(self, session: Session, product: Product):
        return self.normalize_size_family(session, product, FOOTWEAR)

    def normalize_hardware_size(self, session: Session, product: Product):
        return self.normalize_size_family(session, product, HARDWARE)

    def normalize_size(
        self, session: Session, product: Product
    ) -> List[NormalizationWarning]:
        """All size families; category roots make them mutually exclusive"""
        warnings = []
        for family in SIZE_FAMILIES:
            warnings.extend(self.normalize_size_family(session, product, family))
        return warnings

    # -- color / gender / sport --------------------------------------------

    def normalize_color(
        self, session: Session, product: Product
    ) -> List[NormalizationWarning]:
        """Fan a raw color out to every canonical color facet it maps to"""
        option = get_option(session, Option.COLOR)
        source_color = self._raw(session, product, Option.ORIGINAL_COLOR)

        variants = (
            self.resolver.resolve_all(session, option, source_color)
            if source_color
            else []
        )

        warnings = []
        if source_color and not variants:
            warnings.append(
                self._warn(
                    product,
                    "Missing color variant",
                    family=Option.COLOR,
                    raw_value=source_color,
                )
            )

        destroy_options(session, product, [option.id])

        filterable = product.sellable
        session.add_all(
            ProductOption(
                product_id=product.id,
                category_id=product.category_id,
                option_id=option.id,
                group_id=variant.group_id,
                variant_id=variant.id,
                filterable=filterable,
            )
            for variant in variants
        )
        session.flush()
        session.expire(product, ["options"])

        return warnings

    def normalize_gender(
        self, session: Session, product: Product
    ) -> List[NormalizationWarning]:
        option = get_option(session, Option.GENDER)
        source_gender = self._raw(session, product, Option.ORIGINAL_GENDER)

        variant = (
            self.resolver.resolve(session, option, source_gender)
            if source_gender
            else None
        )

        destroy_options(session, product, [option.id])

        if variant is not None:
            create_option(session, product, option.id, variant)
            return []

        if source_gender:
            return [
                self._warn(
                    product,
                    "Missing gender variant",
                    family=Option.GENDER,
                    raw_value=source_gender,
                )
            ]
        return []

    def normalize_sport(
        self, session: Session, product: Product
    ) -> List[NormalizationWarning]:
        """Primary sport plus an optional additional sport facet"""
        option = get_option(session, Option.SPORT)
        source_sport = self._raw(session, product, Option.ORIGINAL_SPORT)
        source_kind = self._raw(session, product, Option.ORIGINAL_KIND)

        primary, additional = (
            self.resolver.resolve_pair(
                session, option, source_sport, VariantContext(kind=source_kind)
            )
            if source_sport
            else (None, None)
        )

        destroy_options(session, product, [option.id])

        if primary is not None:
            create_option(session, product, option.id, primary)
        if additional is not None and (primary is None or additional.id != primary.id):
            create_option(session, product, option.id, additional)

        if source_sport and primary is None:
            return [
                self._warn(
                    product,
                    "Missing sport variant",
                    family=Option.SPORT,
                    raw_value=source_sport,
                    kind=source_kind,
                )
            ]
        return []

    # -- outlet ------------------------------------------------------------

    def normalize_outlet(
        self, session: Session, product: Product
    ) -> List[NormalizationWarning]:
        """
        Classify the product as outlet or regular from its stock distribution.

        Outlet means positive quantity in outlet stores and none anywhere else.
        The assignment is filterable but never shown as a normal facet.
        """
        option = get_option(session, Option.OUTLET)
        destroy_options(session, product, [option.id])

        positive = (
            select(func.count(SiteProductQuantity.id))
            .join(Store, Store.id == SiteProductQuantity.store_id)
            .where(
                SiteProductQuantity.product_id == product.id,
                SiteProductQuantity.quantity > 0,
            )
        )
        count_in_stores = session.execute(positive).scalar_one()
        count_in_regular_stores = session.execute(
            positive.where(Store.is_outlet.is_(False))
        ).scalar_one()

        slug = (
            OptionVariant.OUTLET_VARIANT_OUTLET
            if count_in_stores > 0 and count_in_regular_stores == 0
            else OptionVariant.OUTLET_VARIANT_REGULAR
        )
        variant = get_variant(session, option, slug)

        create_option(
            session,
            product,
            option.id,
            variant,
            is_filter=True,
            is_visible=False,
            is_top=False,
        )
        return []

    # -- category / kind ---------------------------------------------------

    def normalize_category_and_kind(
        self, session: Session, product: Product
    ) -> List[NormalizationWarning]:
        """Set category and canonical kind from the vendor kind"""
        original_kind = get_product_variant(session, product, Option.ORIGINAL_KIND)
        if original_kind is None:
            return []

        mapping = session.execute(
            select(CategoryMapping).where(
                CategoryMapping.original_variant_id == original_kind.id
            )
        ).scalar_one_or_none()

        if mapping is None or not mapping.category_id or not mapping.kind_variant_id:
            return [
                self._warn(
                    product,
                    "Category not found",
                    family=Option.KIND,
                    raw_value=original_kind.value_ua,
                )
            ]

        kind_option = get_option(session, Option.KIND)

        product.category_id = mapping.category_id
        session.flush()
        session.expire(product, ["category"])

        existing = get_product_assignments(session, product, kind_option.id)
        if existing:
            existing[0].category_id = product.category_id
            existing[0].variant_id = mapping.kind_variant_id
            existing[0].group_id = mapping.kind_variant.group_id
            session.flush()
        else:
            create_option(session, product, kind_option.id, mapping.kind_variant)

        return []

    # -- filterable sync ---------------------------------------------------

    def sync_filterable(self, session: Session, product: Product) -> int:
        """
        Mirror the product's sellable state into every assignment it holds.

        Returns:
            Number of updated assignments
        """
        result = session.execute(
            update(ProductOption)
            .where(ProductOption.product_id == product.id)
            .values(filterable=product.sellable)
            .execution_options(synchronize_session="evaluate")
        )
        session.expire(product, ["options"])
        return result.rowcount

    # -- full pass ---------------------------------------------------------

    def normalize_all(self, session: Session, product: Product) -> NormalizationReport:
        """
        Run every family pass in order and collect the warnings.

        Args:
            session: Shared transactional context
            product: Product to normalize

        Returns:
            NormalizationReport
        """
        report = NormalizationReport(product_code=product.code)

        steps = [
            ("category_and_kind", self.normalize_category_and_kind),
            ("size", self.normalize_size),
            ("color", self.normalize_color),
            ("gender", self.normalize_gender),
            ("sport", self.normalize_sport),
            ("outlet", self.normalize_outlet),
        ]

        for family, step in steps:
            report.warnings.extend(step(session, product))
            report.families.append(family)

        self.sync_filterable(session, product)
        report.families.append("filterable")

        logger.info(
            f"Normalized {product.code}: {len(report.warnings)} warning(s)",
            extra={"product_code": product.code},
        )
        return report
