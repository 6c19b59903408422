"""Free-text query resolution to product codes"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from catalog_core.database.filtering import ProductFilter
from catalog_core.database.models import Product
from catalog_core.matching.search_index import SearchIndex
from catalog_core.models.configs import CatalogConfig
from catalog_core.models.search import SearchHit, SearchResolution, Suggestion
from catalog_core.utils.logger import get_logger

logger = get_logger("matching.search")


class SearchOrchestrator:
    """
    Resolves a query in two tiers.

    An exact reference / code match answers immediately. Otherwise the index
    is consulted: every hit tied at the maximum score is returned, and the
    top suggestion for the locale is offered only above the confidence
    threshold.
    """

    def __init__(self, index: SearchIndex, config: Optional[CatalogConfig] = None):
        self.index = index
        self.config = config or CatalogConfig()

    def exact_match(self, session: Session, query: str) -> Optional[Product]:
        expression = ProductFilter().exact_search(query).build()
        stmt = select(Product).where(expression).order_by(Product.id).limit(1)
        return session.execute(stmt).scalars().first()

    def top_codes(self, hits: List[SearchHit]) -> List[str]:
        """Codes of every hit scoring the maximum, in index order"""
        if not hits:
            return []

        max_score = max(hit.score for hit in hits)
        codes = []
        for hit in hits:
            if hit.score >= max_score and hit.code not in codes:
                codes.append(hit.code)

        max_codes = self.config.search.max_codes
        if max_codes is not None and len(codes) > max_codes:
            logger.warning(
                f"{len(codes)} hits tied at score {max_score}, keeping {max_codes}"
            )
            codes = codes[:max_codes]

        return codes

    def pick_suggestion(self, suggestions: List[Suggestion]) -> Optional[Suggestion]:
        if not suggestions:
            return None

        top = suggestions[0]
        if top.score > self.config.search.suggestion_threshold:
            return top

        return None

    def resolve(
        self, session: Session, query: Optional[str], locale: Optional[str] = None
    ) -> SearchResolution:
        """
        Resolve a free-text query.

        Args:
            session: SQLAlchemy session used for the exact lookup
            query: User query
            locale: Suggestion locale, defaults to the configured one

        Returns:
            SearchResolution (codes is None for an empty query)
        """
        if not query or not query.strip():
            return SearchResolution()

        product = self.exact_match(session, query)
        if product is not None:
            return SearchResolution(codes=[product.code], exact=True)

        locale = locale or self.config.search.default_locale
        response = self.index.search(query)

        return SearchResolution(
            codes=self.top_codes(response.hits),
            suggestion=self.pick_suggestion(response.suggestions.get(locale, [])),
        )
