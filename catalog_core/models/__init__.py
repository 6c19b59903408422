"""Pydantic models for the catalog engine"""

from catalog_core.models.configs import (
    AnalogsConfig,
    CatalogConfig,
    CategoryRoots,
    ResolverConfig,
    SearchConfig,
)
from catalog_core.models.normalization import (
    NormalizationReport,
    NormalizationWarning,
    VariantContext,
)
from catalog_core.models.search import (
    IndexDocument,
    SearchHit,
    SearchResolution,
    SearchResponse,
    Suggestion,
)

__all__ = [
    "AnalogsConfig",
    "CatalogConfig",
    "CategoryRoots",
    "ResolverConfig",
    "SearchConfig",
    "NormalizationReport",
    "NormalizationWarning",
    "VariantContext",
    "IndexDocument",
    "SearchHit",
    "SearchResolution",
    "SearchResponse",
    "Suggestion",
]
