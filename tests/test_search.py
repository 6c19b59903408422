"""Tests for search resolution and the local search index"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from catalog_core.database.models import Option
from catalog_core.matching.search import SearchOrchestrator
from catalog_core.matching.search_index import InMemorySearchIndex
from catalog_core.models.configs import CatalogConfig, SearchConfig
from catalog_core.models.search import (
    IndexDocument,
    SearchHit,
    SearchResponse,
    Suggestion,
)
from catalog_core.products.facts import build_index_document


class StubIndex:
    """Returns a canned response and records the queries it receives"""

    def __init__(self, hits=(), suggestions=None):
        self.response = SearchResponse(
            hits=[SearchHit(code=code, score=score) for code, score in hits],
            suggestions={
                locale: [Suggestion(text=text, score=score) for text, score in items]
                for locale, items in (suggestions or {}).items()
            },
        )
        self.queries = []

    def search(self, text):
        self.queries.append(text)
        return self.response


class TestSearchOrchestrator:
    """Test suite for query resolution"""

    @pytest.mark.unit
    def test_exact_code_short_circuits(self, catalog, test_db_session):
        catalog.product("A-1001")
        index = StubIndex(hits=[("B-1", 9.0)], suggestions={"ua": [("abc", 0.9)]})

        resolution = SearchOrchestrator(index).resolve(test_db_session, "A-1001")

        assert resolution.codes == ["A-1001"]
        assert resolution.exact is True
        assert resolution.suggestion is None
        assert index.queries == []

    @pytest.mark.unit
    def test_exact_reference_is_trimmed(self, catalog, test_db_session):
        product = catalog.product("A-2002", style="DX1234", model="100")
        assert product.reference == "DX1234-100"

        resolution = SearchOrchestrator(StubIndex()).resolve(
            test_db_session, "  DX1234-100 "
        )

        assert resolution.codes == ["A-2002"]
        assert resolution.exact is True

    @pytest.mark.unit
    def test_all_top_ties_returned(self, test_db_session):
        index = StubIndex(hits=[("A", 7.2), ("B", 7.2), ("C", 5.0)])

        resolution = SearchOrchestrator(index).resolve(test_db_session, "running shoes")

        assert resolution.codes == ["A", "B"]
        assert resolution.exact is False
        assert index.queries == ["running shoes"]

    @pytest.mark.unit
    def test_no_hits_is_empty_list(self, test_db_session):
        resolution = SearchOrchestrator(StubIndex()).resolve(test_db_session, "zzz")

        assert resolution.codes == []
        assert resolution.suggestion is None

    @pytest.mark.unit
    def test_max_codes_caps_ties(self, test_db_session):
        index = StubIndex(hits=[("A", 3.0), ("B", 3.0), ("C", 3.0)])
        config = CatalogConfig(search=SearchConfig(max_codes=2))

        resolution = SearchOrchestrator(index, config).resolve(test_db_session, "ball")

        assert resolution.codes == ["A", "B"]

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "score,expected",
        [(0.76, "кросівки"), (0.75, None), (0.74, None)],
    )
    def test_suggestion_threshold(self, test_db_session, score, expected):
        index = StubIndex(suggestions={"ua": [("кросівки", score), ("кроси", 0.9)]})

        resolution = SearchOrchestrator(index).resolve(test_db_session, "кросивки")

        if expected is None:
            assert resolution.suggestion is None
        else:
            assert resolution.suggestion.text == expected
            assert resolution.suggestion.score == score

    @pytest.mark.unit
    def test_suggestion_uses_requested_locale(self, test_db_session):
        index = StubIndex(suggestions={"ru": [("кроссовки", 0.9)]})
        orchestrator = SearchOrchestrator(index)

        assert orchestrator.resolve(test_db_session, "кросовки").suggestion is None
        assert (
            orchestrator.resolve(test_db_session, "кросовки", locale="ru").suggestion.text
            == "кроссовки"
        )

    @pytest.mark.unit
    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_empty_query(self, catalog, test_db_session, query):
        catalog.product("A-1")
        index = StubIndex(hits=[("A-1", 1.0)])

        resolution = SearchOrchestrator(index).resolve(test_db_session, query)

        assert resolution.codes is None
        assert resolution.suggestion is None
        assert index.queries == []


@pytest.fixture
def indexed_products(catalog):
    running = catalog.variant(Option.SPORT, "Бег", "Біг")

    shoes = catalog.product(
        "SH-1",
        model="AM90",
        name_ru="Кроссовки Nike Air Max",
        name_ua="Кросівки Nike Air Max",
    )
    catalog.assign(shoes, Option.SPORT, running)

    flask = catalog.product(
        "TH-1",
        model="ST10",
        name_ru="Термос Stanley",
        name_ua="Термос Stanley",
    )
    return shoes, flask


class TestInMemorySearchIndex:
    """Test suite for the rapidfuzz-backed index"""

    @pytest.mark.unit
    def test_index_document(self, indexed_products):
        shoes, _ = indexed_products

        document = build_index_document(shoes, ["ru", "ua"])

        assert document.code == "SH-1"
        assert document.reference == "-AM90"
        assert document.index_names["ua"] == "Кросівки Nike Air Max Біг"
        assert document.suggest["ru"] == ["кроссовки", "nike", "air", "max"]

    @pytest.mark.unit
    def test_code_scores_full(self, indexed_products):
        index = InMemorySearchIndex()
        for product in indexed_products:
            index.add_product(product)

        response = index.search("sh-1")

        assert response.hits[0] == SearchHit(code="SH-1", score=100.0)

    @pytest.mark.unit
    def test_name_tokens_match(self, indexed_products):
        index = InMemorySearchIndex()
        for product in indexed_products:
            index.add_product(product)

        codes = [hit.code for hit in index.search("air max").hits]

        assert codes == ["SH-1"]

    @pytest.mark.unit
    def test_suggestions_per_locale(self, indexed_products):
        index = InMemorySearchIndex()
        for product in indexed_products:
            index.add_product(product)

        response = index.search("кросивки")

        assert set(response.suggestions) == {"ru", "ua"}
        top = response.suggestions["ua"][0]
        assert top.text == "кросівки"
        assert top.score > 0.75

    @pytest.mark.unit
    def test_orchestrator_with_local_index(self, indexed_products, test_db_session):
        index = InMemorySearchIndex()
        for product in indexed_products:
            index.add_product(product)

        resolution = SearchOrchestrator(index).resolve(test_db_session, "кросивки")

        assert resolution.exact is False
        assert resolution.codes == ["SH-1"]
        assert resolution.suggestion.text == "кросівки"

    @pytest.mark.unit
    def test_from_config(self, indexed_products):
        config = CatalogConfig(
            locales=["ua"], search=SearchConfig(index_score_cutoff=100.0)
        )
        index = InMemorySearchIndex.from_config(config)
        for product in indexed_products:
            index.add_product(product)

        assert index.locales == ["ua"]
        assert index.score_cutoff == 100.0
        assert [hit.code for hit in index.search("sh-1").hits] == ["SH-1"]
        assert index.search("air max").hits == []
        assert set(index.search("кросивки").suggestions) == {"ua"}

    @pytest.mark.unit
    def test_add_and_remove(self):
        index = InMemorySearchIndex([IndexDocument(code="X-1", model="Tiro")])
        assert len(index) == 1

        index.remove("X-1")

        assert len(index) == 0
        assert index.search("tiro").hits == []
