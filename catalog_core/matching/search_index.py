"""Search index contract and a local rapidfuzz-backed implementation"""

from typing import Dict, Iterable, List, Optional, Protocol

from rapidfuzz import fuzz, process

from catalog_core.database.models import Product
from catalog_core.models.configs import CatalogConfig
from catalog_core.models.search import (
    IndexDocument,
    SearchHit,
    SearchResponse,
    Suggestion,
)
from catalog_core.products.facts import build_index_document


class SearchIndex(Protocol):
    """Indexed search collaborator: ranked hits plus per-locale suggestions"""

    def search(self, text: str) -> SearchResponse: ...


class InMemorySearchIndex:
    """
    Local search index over product documents.

    Codes are matched exactly; model, reference and the localized index names
    are scored with rapidfuzz WRatio (0-100). Suggestions are the closest
    completion tokens of each locale, scored 0-1.
    """

    def __init__(
        self,
        documents: Iterable[IndexDocument] = (),
        locales: Iterable[str] = ("ru", "ua"),
        score_cutoff: float = 60.0,
        suggestion_limit: int = 5,
    ):
        self.locales = list(locales)
        self.score_cutoff = score_cutoff
        self.suggestion_limit = suggestion_limit
        self._documents: Dict[str, IndexDocument] = {}

        for document in documents:
            self.add(document)

    @classmethod
    def from_config(
        cls, config: CatalogConfig, documents: Iterable[IndexDocument] = ()
    ) -> "InMemorySearchIndex":
        return cls(
            documents,
            locales=config.locales,
            score_cutoff=config.search.index_score_cutoff,
        )

    def __len__(self) -> int:
        return len(self._documents)

    def add(self, document: IndexDocument) -> None:
        self._documents[document.code] = document

    def add_product(self, product: Product) -> IndexDocument:
        document = build_index_document(product, self.locales)
        self.add(document)
        return document

    def remove(self, code: str) -> None:
        self._documents.pop(code, None)

    def _score(self, query: str, document: IndexDocument) -> float:
        if query == document.code.lower():
            return 100.0

        fields = [document.model, document.reference, *document.index_names.values()]
        scores = [fuzz.WRatio(query, field.lower()) for field in fields if field]

        return max(scores, default=0.0)

    def _suggestions(self, query: str, locale: str) -> List[Suggestion]:
        vocabulary = sorted(
            {
                token
                for document in self._documents.values()
                for token in document.suggest.get(locale, [])
            }
        )

        matches = process.extract(
            query, vocabulary, scorer=fuzz.ratio, limit=self.suggestion_limit
        )

        return [
            Suggestion(text=token, score=round(score / 100, 4))
            for token, score, _ in matches
        ]

    def search(self, text: str, locale: Optional[str] = None) -> SearchResponse:
        query = text.strip().lower()

        hits = []
        for document in self._documents.values():
            score = self._score(query, document)
            if score >= self.score_cutoff:
                hits.append(SearchHit(code=document.code, score=score))

        hits.sort(key=lambda hit: hit.score, reverse=True)

        locales = [locale] if locale else self.locales
        suggestions = {loc: self._suggestions(query, loc) for loc in locales}

        return SearchResponse(hits=hits, suggestions=suggestions)
