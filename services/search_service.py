"""
Full Text Search Service - Searches inside one record.

Orchestrates the search workflow:
1. Query the search engine for highlight snippets of the record
2. Parse, rebase and merge the hits of every snippet
3. Group the hits by page and fetch only those pages from storage
4. Locate every hit in the page full text and match it to annotations,
   stopping as soon as the page size is reached
"""
import logging
import time
from collections import OrderedDict
from typing import Any, Collection, Dict, List, Optional

from core.constants import FIRST_PAGE_ID, HIT_MERGE_MAX_DISTANCE
from core.exceptions import InvalidSearchRequest, RecordNotFound
from core.interfaces import PageStore, SearchEngineClient
from core.models import EngineHit, Granularity, Page, SearchResult
from search.locator import locate
from search.matcher import match
from search.merger import merge_snippet_hits
from search.offsets import normalize_payload
from search.payload import HighlightPayload

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class FullTextSearchService:
    """Service for searching annotations inside a record."""

    def __init__(
        self,
        engine: SearchEngineClient,
        store: PageStore,
        max_merge_distance: int = HIT_MERGE_MAX_DISTANCE
    ):
        """
        Initialize search service.

        Args:
            engine: Search engine client returning highlight snippets
            store: Storage of annotation pages
            max_merge_distance: Maximum gap between hits that are merged
        """
        self.engine = engine
        self.store = store
        self.max_merge_distance = max_merge_distance

    def search_issue(
        self,
        search_id: str,
        dataset_id: str,
        local_id: str,
        query: str,
        page_size: int,
        types: Optional[Collection[Granularity]] = None,
        debug: bool = False
    ) -> SearchResult:
        """
        Search the full text of one record and return matching annotations.

        Args:
            search_id: Id of the search request, used in the result
            dataset_id: Dataset of the record
            local_id: Local id of the record
            query: Free-text query
            page_size: Maximum number of annotations to return
            types: Annotation granularities to return (default: words)
            debug: Keep located hits and engine information in the result

        Returns:
            SearchResult with at most page_size items

        Raises:
            InvalidSearchRequest: If query or page size are invalid
            RecordNotFound: If the record does not exist
            MalformedEnginePayload: If the engine returns unexpected data
            SearchEngineUnavailable: If the engine cannot be queried
        """
        if not query or not query.strip():
            raise InvalidSearchRequest("Query must not be empty", field='q')
        if page_size < 1:
            raise InvalidSearchRequest(f"Page size must be at least 1, got {page_size}", field='pageSize')
        requested_types = frozenset(types) if types else frozenset({Granularity.WORD})

        result = SearchResult(search_id=search_id, debug_enabled=debug)
        record_id = f"/{dataset_id}/{local_id}"

        start = time.monotonic()
        if debug:
            result.debug.engine_query = self.engine.describe_query(record_id, query, page_size, debug)
        highlights = self.engine.query(record_id, query, page_size, debug)
        logger.debug("Engine query for %s took %d ms", record_id, _elapsed_ms(start))

        hits_per_page = self.group_hits_by_page(self.parse_highlight_data(highlights, result))
        if not hits_per_page:
            self.check_record_exists(dataset_id, local_id)
            logger.info("No hits for %r in %s", query, record_id)
            return result

        start = time.monotonic()
        self.find_annotations(result, dataset_id, local_id, hits_per_page, requested_types, page_size)
        logger.debug(
            "Matching %d pages of %s took %d ms, found %d annotations",
            len(hits_per_page), record_id, _elapsed_ms(start), result.item_count
        )
        return result

    def check_record_exists(self, dataset_id: str, local_id: str):
        """
        Make sure a record exists when the engine found nothing.

        Raises:
            RecordNotFound: If the first page of the record is not stored
        """
        start = time.monotonic()
        exists = self.store.exists(dataset_id, local_id, FIRST_PAGE_ID)
        logger.debug("Existence check for /%s/%s took %d ms", dataset_id, local_id, _elapsed_ms(start))
        if not exists:
            raise RecordNotFound(dataset_id, local_id)

    def parse_highlight_data(
        self,
        highlights: Dict[str, Any],
        result: Optional[SearchResult] = None
    ) -> List[EngineHit]:
        """
        Turn the engine highlight data of all languages into merged hits.

        Args:
            highlights: Mapping of language to raw highlight payload
            result: Result that receives debug information (optional)

        Returns:
            Hits in engine order
        """
        hits: List[EngineHit] = []
        for language, raw_payload in highlights.items():
            payload = HighlightPayload.from_raw(raw_payload)
            logger.debug("Language %s: %d snippets", language, len(payload.snippets))
            if result is not None and result.debug is not None:
                result.debug.snippets.extend(payload.snippets)

            for snippet in normalize_payload(payload):
                merged, nr_merged = merge_snippet_hits(snippet, self.max_merge_distance)
                if nr_merged and result is not None and result.debug is not None:
                    result.debug.merged_hits += nr_merged
                hits.extend(merged)
        return hits

    @staticmethod
    def group_hits_by_page(hits: List[EngineHit]) -> "OrderedDict[str, List[EngineHit]]":
        """Bucket hits by page key, keeping the order in which pages and hits appear."""
        grouped: "OrderedDict[str, List[EngineHit]]" = OrderedDict()
        for hit in hits:
            grouped.setdefault(hit.page_key, []).append(hit)
        return grouped

    def find_annotations(
        self,
        result: SearchResult,
        dataset_id: str,
        local_id: str,
        hits_per_page: Dict[str, List[EngineHit]],
        types: Collection[Granularity],
        page_size: int
    ):
        """
        Fetch the pages that have hits and match the hits to their annotations.

        Raises:
            RecordNotFound: If storage returns none of the pages the engine found
        """
        nr_pages = 0
        with self.store.fetch_pages(dataset_id, local_id, hits_per_page.keys(), types) as cursor:
            for page in cursor:
                nr_pages += 1
                self.find_annotations_on_page(result, page, hits_per_page.get(page.page_key, []), types, page_size)
                if result.item_count >= page_size:
                    logger.debug("Page size %d reached", page_size)
                    break

        if nr_pages == 0:
            raise RecordNotFound(
                dataset_id, local_id,
                f"Search engine found hits in /{dataset_id}/{local_id} but no pages are stored"
            )

    def find_annotations_on_page(
        self,
        result: SearchResult,
        page: Page,
        hits: List[EngineHit],
        types: Collection[Granularity],
        page_size: int
    ) -> int:
        """
        Locate the hits of one page and add the matching annotations.

        Returns:
            Number of annotation matches on this page
        """
        found = 0
        for hit in hits:
            located_hits = locate(hit, page.full_text, page_size)
            if not located_hits:
                result.unlocated_hits += 1
                logger.warning(
                    "Unable to find hit %s on /%s/%s/annopage/%s",
                    hit.debug_info(), page.dataset_id, page.local_id, page.page_id
                )
                continue

            for located in located_hits:
                found += match(located, page, types, result, page_size - result.item_count)
                if result.item_count >= page_size:
                    return found

        if found == 0:
            logger.info(
                "No matching annotations on /%s/%s/annopage/%s for %d hits",
                page.dataset_id, page.local_id, page.page_id, len(hits)
            )
        return found
