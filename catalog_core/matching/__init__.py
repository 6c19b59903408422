"""Attribute normalization, analog lookup and search resolution"""

from catalog_core.matching.analogs import AnalogFinder
from catalog_core.matching.normalizer import AttributeNormalizer
from catalog_core.matching.search import SearchOrchestrator
from catalog_core.matching.search_index import InMemorySearchIndex, SearchIndex
from catalog_core.matching.variant_resolver import (
    VariantResolver,
    normalize_raw_value,
    register_mapping,
)

__all__ = [
    "AnalogFinder",
    "AttributeNormalizer",
    "SearchOrchestrator",
    "InMemorySearchIndex",
    "SearchIndex",
    "VariantResolver",
    "normalize_raw_value",
    "register_mapping",
]
