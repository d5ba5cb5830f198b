"""
Unit tests for services.search_service module.
"""
import pytest
from conftest import DATASET_ID, LOCAL_ID, FakeEngine, FakePageStore, highlight_response
from core.exceptions import InvalidSearchRequest, MalformedEnginePayload, RecordNotFound
from core.models import EngineHit, Granularity, LocatedHit
from services.search_service import FullTextSearchService

AUS_DER = "{target1} <em>Aus der</em> 49. Verlustliste."
PHRASE = "{target1} Na ELSENEUR, Kaptein <em>Daniel</em> <em>Ehlert</em>, van Koningsbergen"
TEST_TEST = "{target2} another <em>test</em> <em>test</em>"


def _search(service, query="q", page_size=12, types=None, debug=False):
    return service.search_issue(
        search_id="search-1",
        dataset_id=DATASET_ID,
        local_id=LOCAL_ID,
        query=query,
        page_size=page_size,
        types=types,
        debug=debug
    )


def _ids(result):
    return [item.annotation.id for item in result.items]


class TestSearchIssue:
    """Tests for FullTextSearchService.search_issue."""

    def test_hit_at_snippet_start(self, fake_store):
        """Test words of a hit at the start of a page are found."""
        service = FullTextSearchService(FakeEngine(highlight_response(AUS_DER)), fake_store)

        result = _search(service, "Aus der")

        assert _ids(result) == ["p1w1", "p1w2"]
        assert result.search_id == "search-1"
        assert result.hits is None

    def test_engine_query(self, fake_store):
        """Test the engine is asked for the record id and page size."""
        engine = FakeEngine(highlight_response(AUS_DER))
        service = FullTextSearchService(engine, fake_store)

        _search(service, "Aus der", page_size=5)

        assert engine.calls == [(f"/{DATASET_ID}/{LOCAL_ID}", "Aus der", 5, False)]

    def test_phrase_hits_merged(self, fake_store):
        """Test adjacent highlights are located as one phrase."""
        service = FullTextSearchService(FakeEngine(highlight_response(PHRASE)), fake_store)

        result = _search(service, '"Daniel Ehlert"', debug=True)

        assert _ids(result) == ["p1w8", "p1w9"]
        assert result.debug.merged_hits == 1
        assert result.hits == [LocatedHit(47, 60, "Daniel Ehlert")]

    def test_only_referenced_pages_fetched(self, fake_store):
        """Test storage is asked for the pages with hits only."""
        service = FullTextSearchService(FakeEngine(highlight_response(AUS_DER)), fake_store)

        _search(service)

        assert fake_store.requested_keys == [{"target1"}]

    def test_multiple_pages(self, fake_store):
        """Test hits on several pages are all matched."""
        engine = FakeEngine(highlight_response(AUS_DER, TEST_TEST))
        service = FullTextSearchService(engine, fake_store)

        result = _search(service)

        assert _ids(result) == ["p1w1", "p1w2", "p2w4", "p2w5"]
        assert fake_store.cursors[0].closed

    def test_page_size_stops_search(self, fake_store):
        """Test search stops at page size and releases the cursor."""
        engine = FakeEngine(highlight_response(AUS_DER, TEST_TEST))
        service = FullTextSearchService(engine, fake_store)

        result = _search(service, page_size=1)

        assert _ids(result) == ["p1w1"]
        cursor = fake_store.cursors[0]
        assert cursor.closed
        assert cursor.fetched == 1

    def test_line_granularity(self, fake_store):
        """Test requested line annotations come with the hit as highlight."""
        service = FullTextSearchService(FakeEngine(highlight_response(AUS_DER)), fake_store)

        result = _search(service, types=[Granularity.LINE])

        assert _ids(result) == ["p1l1"]
        assert result.items[0].highlights == [LocatedHit(0, 7, "Aus der")]

    def test_line_hit_twice_is_one_item(self, fake_store):
        """Test two hits in the same line give one item with two highlights."""
        engine = FakeEngine(highlight_response("{target2} <em>This</em> is another <em>test</em> test"))
        service = FullTextSearchService(engine, fake_store)

        result = _search(service, types=[Granularity.LINE])

        assert result.item_count == 1
        assert len(result.items[0].highlights) == 2

    def test_languages_processed_in_order(self, fake_store):
        """Test snippets of every language are used."""
        response = {
            'de': {'snippets': [AUS_DER]},
            'en': {'snippets': ["{target2} is another <em>test</em> test"]},
        }
        service = FullTextSearchService(FakeEngine(response), fake_store)

        result = _search(service)

        assert _ids(result) == ["p1w1", "p1w2", "p2w4"]

    def test_debug_information(self, fake_store):
        """Test engine query and snippets are kept when debugging."""
        service = FullTextSearchService(FakeEngine(highlight_response(AUS_DER)), fake_store)

        result = _search(service, "Aus der", debug=True)

        assert result.debug.engine_query == f"fake:/{DATASET_ID}/{LOCAL_ID}?q=Aus der"
        assert result.debug.snippets == [AUS_DER]
        assert result.hits == [LocatedHit(0, 7, "Aus der")]


class TestNoHits:
    """Tests for searches without usable engine hits."""

    def test_existing_record(self, fake_store):
        """Test an existing record without hits gives an empty result."""
        service = FullTextSearchService(FakeEngine({}), fake_store)

        result = _search(service)

        assert result.items == []
        assert fake_store.cursors == []

    def test_missing_record(self):
        """Test a missing record raises RecordNotFound instead of an empty result."""
        service = FullTextSearchService(FakeEngine({}), FakePageStore([]))

        with pytest.raises(RecordNotFound):
            _search(service)

    def test_unparseable_snippets_only(self, fake_store):
        """Test snippets without highlights are treated as no hits."""
        engine = FakeEngine(highlight_response("{target1} nothing marked", "no page key"))
        service = FullTextSearchService(engine, fake_store)

        result = _search(service)

        assert result.items == []
        assert fake_store.cursors == []

    def test_hits_on_unknown_pages(self):
        """Test engine pages missing from storage raise RecordNotFound."""
        service = FullTextSearchService(FakeEngine(highlight_response(AUS_DER)), FakePageStore([]))

        with pytest.raises(RecordNotFound):
            _search(service)

    def test_hit_not_in_full_text(self, fake_store):
        """Test hits that cannot be located are counted and skipped."""
        engine = FakeEngine(highlight_response("{target1} <em>Verlustlisten</em> 50"))
        service = FullTextSearchService(engine, fake_store)

        result = _search(service)

        assert result.items == []
        assert result.unlocated_hits == 1


class TestInvalidInput:
    """Tests for request validation and engine errors."""

    @pytest.mark.parametrize("query", ["", "   "])
    def test_blank_query(self, fake_store, query):
        """Test blank queries are rejected."""
        service = FullTextSearchService(FakeEngine({}), fake_store)

        with pytest.raises(InvalidSearchRequest):
            _search(service, query)

    def test_page_size_too_small(self, fake_store):
        """Test page size must be positive."""
        service = FullTextSearchService(FakeEngine({}), fake_store)

        with pytest.raises(InvalidSearchRequest):
            _search(service, page_size=0)

    def test_malformed_payload(self, fake_store):
        """Test wrong payload shapes raise MalformedEnginePayload."""
        service = FullTextSearchService(FakeEngine({'nl': ["{target1} <em>x</em>"]}), fake_store)

        with pytest.raises(MalformedEnginePayload):
            _search(service)


class TestGroupHitsByPage:
    """Tests for FullTextSearchService.group_hits_by_page."""

    def test_grouping_keeps_order(self):
        """Test pages and hits keep their first-seen order."""
        hits = [
            EngineHit(page_key="b", exact="1"),
            EngineHit(page_key="a", exact="2"),
            EngineHit(page_key="b", exact="3"),
        ]

        grouped = FullTextSearchService.group_hits_by_page(hits)

        assert list(grouped) == ["b", "a"]
        assert [hit.exact for hit in grouped["b"]] == ["1", "3"]
