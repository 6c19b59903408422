"""Raw vendor value -> canonical option variant resolution"""

import re
from typing import List, Optional, Tuple

from rapidfuzz import fuzz, process
from sqlalchemy import select
from sqlalchemy.orm import Session

from catalog_core.database.models import Option, OptionVariant, VariantMapping
from catalog_core.models.configs import ResolverConfig
from catalog_core.models.normalization import VariantContext
from catalog_core.utils.logger import get_logger

logger = get_logger("matching.variant_resolver")

_WHITESPACE = re.compile(r"\s+")


def normalize_raw_value(value: Optional[str], numeric: bool = False) -> Optional[str]:
    """
    Normalize a raw vendor value for lookup.

    Args:
        value: Raw value as imported
        numeric: Convert a decimal comma to a dot (footwear sizes, lengths)

    Returns:
        Lower-cased, whitespace-collapsed value, or None when empty
    """
    if value is None:
        return None

    cleaned = _WHITESPACE.sub(" ", str(value)).strip().lower()

    if numeric:
        cleaned = cleaned.replace(",", ".")

    return cleaned or None


def _normalize_hint(value: Optional[str]) -> Optional[str]:
    return normalize_raw_value(value)


class VariantResolver:
    """
    Table-driven resolver backed by VariantMapping rows.

    Lookup key is (raw value, brand, gender, kind). When the fully qualified
    key has no row, the resolver retries with kind dropped, then gender, then
    brand. Mapping rows store NULL for the parts they do not qualify on.
    For options with a configured fuzzy threshold, a raw value with no row at
    all is matched against the option's known raw values with rapidfuzz.
    """

    def __init__(self, config: Optional[ResolverConfig] = None):
        self.config = config or ResolverConfig()

    def is_numeric(self, option: Option) -> bool:
        return option.code in self.config.numeric_options

    def _rows_for(
        self, session: Session, option: Option, raw_value: str
    ) -> List[VariantMapping]:
        stmt = (
            select(VariantMapping)
            .where(
                VariantMapping.option_id == option.id,
                VariantMapping.raw_value == raw_value,
            )
            .order_by(VariantMapping.id)
        )
        return list(session.execute(stmt).scalars())

    def _fuzzy_raw_value(
        self, session: Session, option: Option, raw_value: str
    ) -> Optional[str]:
        threshold = self.config.fuzzy_thresholds.get(option.code)
        if threshold is None:
            return None

        known = session.execute(
            select(VariantMapping.raw_value)
            .where(VariantMapping.option_id == option.id)
            .distinct()
        ).scalars()

        result = process.extractOne(
            raw_value, list(known), scorer=fuzz.ratio, score_cutoff=threshold
        )

        if result:
            matched, score, _ = result
            logger.debug(
                f"Fuzzy matched '{raw_value}' to '{matched}' ({score:.0f}) for {option.code}"
            )
            return matched

        return None

    @staticmethod
    def _select(
        rows: List[VariantMapping], context: VariantContext
    ) -> List[VariantMapping]:
        """Rows matching the most specific available key"""
        for brand, gender, kind in context.fallback_keys():
            key = (_normalize_hint(brand), _normalize_hint(gender), _normalize_hint(kind))
            matched = [
                row
                for row in rows
                if (
                    _normalize_hint(row.brand),
                    _normalize_hint(row.gender),
                    _normalize_hint(row.kind),
                )
                == key
            ]
            if matched:
                return matched

        return []

    def resolve_mappings(
        self,
        session: Session,
        option: Option,
        raw_value: Optional[str],
        context: Optional[VariantContext] = None,
    ) -> List[VariantMapping]:
        """
        Mapping rows selected for a raw value.

        Args:
            session: SQLAlchemy session
            option: Canonical option to resolve into
            raw_value: Raw vendor value
            context: Brand / gender / kind hints

        Returns:
            Matching VariantMapping rows (empty when unmapped)
        """
        context = context or VariantContext()
        normalized = normalize_raw_value(raw_value, numeric=self.is_numeric(option))

        if normalized is None:
            return []

        rows = self._rows_for(session, option, normalized)

        if not rows:
            fuzzy_value = self._fuzzy_raw_value(session, option, normalized)
            if fuzzy_value is not None:
                rows = self._rows_for(session, option, fuzzy_value)

        return self._select(rows, context)

    def resolve(
        self,
        session: Session,
        option: Option,
        raw_value: Optional[str],
        context: Optional[VariantContext] = None,
    ) -> Optional[OptionVariant]:
        """Best canonical variant for a raw value, or None if unmapped"""
        rows = self.resolve_mappings(session, option, raw_value, context)
        return rows[0].variant if rows else None

    def resolve_all(
        self,
        session: Session,
        option: Option,
        raw_value: Optional[str],
        context: Optional[VariantContext] = None,
    ) -> List[OptionVariant]:
        """Every canonical variant a raw value fans out to (e.g. base color + pattern)"""
        variants = []
        seen = set()

        for row in self.resolve_mappings(session, option, raw_value, context):
            if row.variant_id not in seen:
                seen.add(row.variant_id)
                variants.append(row.variant)

        return variants

    def resolve_pair(
        self,
        session: Session,
        option: Option,
        raw_value: Optional[str],
        context: Optional[VariantContext] = None,
    ) -> Tuple[Optional[OptionVariant], Optional[OptionVariant]]:
        """Primary and additional variant (sports may map to two facets)"""
        rows = self.resolve_mappings(session, option, raw_value, context)

        if not rows:
            return None, None

        return rows[0].variant, rows[0].additional_variant


def register_mapping(
    session: Session,
    option: Option,
    raw_value: str,
    variant: OptionVariant,
    brand: Optional[str] = None,
    gender: Optional[str] = None,
    kind: Optional[str] = None,
    additional_variant: Optional[OptionVariant] = None,
    config: Optional[ResolverConfig] = None,
) -> VariantMapping:
    """
    Store a mapping row with its raw value normalized for lookup.

    Args:
        session: SQLAlchemy session
        option: Canonical option the variant belongs to
        raw_value: Raw vendor value
        variant: Canonical variant
        brand: Qualify on brand (None = any)
        gender: Qualify on vendor gender (None = any)
        kind: Qualify on vendor kind (None = any)
        additional_variant: Secondary variant (sports)
        config: Resolver config deciding which options are numeric

    Returns:
        The created VariantMapping
    """
    mapping = VariantMapping(
        option_id=option.id,
        raw_value=normalize_raw_value(
            raw_value, numeric=VariantResolver(config).is_numeric(option)
        ),
        brand=brand,
        gender=gender,
        kind=kind,
        variant_id=variant.id,
        additional_variant_id=additional_variant.id if additional_variant else None,
    )
    session.add(mapping)
    session.flush()
    return mapping
