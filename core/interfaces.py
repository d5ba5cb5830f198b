"""
Base abstract classes for the collaborators of the search service.

The search engine and the page store are external systems; the search
service only talks to them through these interfaces.
"""
from abc import ABC, abstractmethod
from typing import Any, Collection, ContextManager, Dict, Iterator, Optional

from .constants import FIRST_PAGE_ID
from .models import Granularity, Page


class SearchEngineClient(ABC):
    """
    Abstract base class for free-text search engines.
    """

    @abstractmethod
    def query(self, record_id: str, text: str, page_size: int, debug: bool = False) -> Dict[str, Any]:
        """
        Search the full text of one record.

        Args:
            record_id: Record id, "/<datasetId>/<localId>"
            text: Free-text query
            page_size: Maximum number of snippets wanted
            debug: Whether debug information is requested

        Returns:
            Mapping of language to highlight payload, empty if nothing matched
        """
        pass

    def describe_query(self, record_id: str, text: str, page_size: int, debug: bool = False) -> Optional[str]:
        """Human-readable form of a query for debug output."""
        return None


class PageStore(ABC):
    """
    Abstract base class for storage of annotation pages.
    """

    @abstractmethod
    def fetch_pages(
        self,
        dataset_id: str,
        local_id: str,
        page_keys: Collection[str],
        types: Optional[Collection[Granularity]] = None
    ) -> ContextManager[Iterator[Page]]:
        """
        Open a cursor over the pages with the given page keys.

        The returned object must be used as a context manager; leaving the
        block releases the cursor.
        """
        pass

    @abstractmethod
    def exists(
        self,
        dataset_id: str,
        local_id: str,
        page_id: str = FIRST_PAGE_ID,
        granularity: Optional[Granularity] = None
    ) -> bool:
        """Check if a page of a record exists."""
        pass
