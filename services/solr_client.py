"""
Solr client for full-text highlight queries.

Queries one record (newspaper issue, book, ...) and returns the highlight data
per language. Each Solr document holds the full text of a whole record, with
every page preceded by "{pageKey} ", so snippets tell us which page they come
from.
"""
import logging
import time
from typing import Any, Dict, Optional

import httpx

from core.exceptions import InvalidSearchRequest, MalformedEnginePayload, SearchEngineUnavailable
from core.interfaces import SearchEngineClient

logger = logging.getLogger(__name__)


def quote_phrase(value: str) -> str:
    """Quote a value for a Solr phrase, escaping backslashes and double quotes."""
    escaped = value.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


class SolrSearchClient(SearchEngineClient):
    """
    Search engine client backed by a Solr collection.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        id_field: str = "europeana_id",
        highlight_field_prefix: str = "fulltext.",
        client: Optional[httpx.Client] = None
    ):
        """
        Initialize Solr client.

        Args:
            base_url: Solr collection URL (e.g. http://localhost:8983/solr/fulltext)
            timeout: Request timeout in seconds
            id_field: Field holding the record id ("/<datasetId>/<localId>")
            highlight_field_prefix: Prefix of the per-language full-text fields
            client: Optional pre-configured httpx client (used in tests)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.id_field = id_field
        self.highlight_field_prefix = highlight_field_prefix
        self.client = client or httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout)
        )

    def build_params(self, record_id: str, text: str, page_size: int, debug: bool = False) -> Dict[str, Any]:
        """Build the Solr request parameters for a highlight query."""
        params = {
            'q': text,
            'fq': f"{self.id_field}:{quote_phrase(record_id)}",
            'fl': self.id_field,
            'rows': 1,
            'wt': 'json',
            'hl': 'on',
            'hl.method': 'unified',
            'hl.fl': f'{self.highlight_field_prefix}*',
            'hl.snippets': page_size,
            'hl.weightMatches': 'true',
            'hl.tag.pre': '<em>',
            'hl.tag.post': '</em>',
        }
        if debug:
            params['debugQuery'] = 'true'
        return params

    def describe_query(self, record_id: str, text: str, page_size: int, debug: bool = False) -> str:
        """Get the full request URL of a query, for debug output."""
        url = httpx.URL(f"{self.base_url}/select", params=self.build_params(record_id, text, page_size, debug))
        return str(url)

    def query(self, record_id: str, text: str, page_size: int, debug: bool = False) -> Dict[str, Any]:
        """
        Query highlights for one record.

        Args:
            record_id: Record id, e.g. "/9200355/BibliographicResource_3000096341989"
            text: Free-text query
            page_size: Maximum number of snippets wanted
            debug: Ask Solr for debug information

        Returns:
            Mapping of language to raw highlight payload ({} when nothing matched)

        Raises:
            InvalidSearchRequest: If Solr rejects the query syntax (status 400)
            SearchEngineUnavailable: If Solr cannot be reached or returns another error
            MalformedEnginePayload: If the response has an unexpected shape
        """
        params = self.build_params(record_id, text, page_size, debug)
        start = time.monotonic()
        try:
            response = self.client.get("/select", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            # Solr answers 400 to queries it cannot parse
            if e.response.status_code == 400:
                raise InvalidSearchRequest(
                    f"Solr rejected query {text!r}: {e.response.text[:200]}", field='q'
                ) from e
            raise SearchEngineUnavailable(
                f"Solr returned error: {e.response.status_code} - {e.response.text[:200]}",
                status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise SearchEngineUnavailable(f"Could not query Solr at {self.base_url}: {e}") from e

        logger.debug("Solr query for %s took %d ms", record_id, (time.monotonic() - start) * 1000)

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedEnginePayload(f"Invalid JSON response from Solr: {response.text[:200]}") from e

        return self.extract_highlights(body)

    def extract_highlights(self, body: Any) -> Dict[str, Any]:
        """
        Get the per-language highlight payloads from a Solr response.

        Expected data:
            {"highlighting": {"<doc id>": {"fulltext.<lang>": {"snippets": [...], "passages": [...]}}}}
        """
        if not isinstance(body, dict):
            raise MalformedEnginePayload(f"Unexpected Solr response type: {type(body).__name__}")

        highlighting = body.get('highlighting')
        if not highlighting:
            return {}
        if not isinstance(highlighting, dict):
            raise MalformedEnginePayload(
                f"Unexpected highlighting type: {type(highlighting).__name__}", field='highlighting'
            )

        # only one document is queried
        doc_highlights = next(iter(highlighting.values()))
        if not isinstance(doc_highlights, dict):
            raise MalformedEnginePayload(
                f"Unexpected document highlights type: {type(doc_highlights).__name__}", field='highlighting'
            )

        result = {}
        for field_name, payload in doc_highlights.items():
            if isinstance(payload, dict) and not payload.get('snippets'):
                continue
            language = field_name
            if field_name.startswith(self.highlight_field_prefix):
                language = field_name[len(self.highlight_field_prefix):]
            result[language] = payload
        return result

    def close(self):
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> 'SolrSearchClient':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
