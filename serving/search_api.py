"""
Search API for full-text search inside a record.

Provides endpoints for:
- Searching the annotations of a record (IIIF v2 or v3 output)
- Service information
"""
import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.dependencies import get_search_service
from api.schemas import ErrorResponse, SearchParams
from config.log_config import configure_logging
from config.settings import UrlConfig, settings
from core.exceptions import (
    InvalidSearchRequest,
    MalformedEnginePayload,
    RecordNotFound,
    SearchEngineUnavailable,
    SearchException,
)
from services.search_service import FullTextSearchService
from .iiif_mapping import to_annotation_list

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    RecordNotFound: 404,
    InvalidSearchRequest: 400,
    MalformedEnginePayload: 502,
    SearchEngineUnavailable: 503,
}


def get_url_config() -> UrlConfig:
    """Dependency for the output URL configuration."""
    return settings.get_url_config()


# Create FastAPI app
search_app = FastAPI(
    title="Full-Text Search API",
    description="Search inside a record and get the matching word, line and block annotations",
    version="1.0.0"
)


@search_app.on_event("startup")
async def startup_event():
    """Configure logging on startup."""
    configure_logging()
    logger.info("Search API initialized")


@search_app.exception_handler(SearchException)
async def search_exception_handler(request: Request, exc: SearchException):
    """Map search errors to JSON error responses."""
    status_code = ERROR_STATUS.get(type(exc), 500)
    if status_code >= 500:
        logger.error("Search %s failed: %s", request.url.path, exc.message)
    body = ErrorResponse(error=exc.message, code=exc.error_code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def build_search_id(urls: UrlConfig, dataset_id: str, local_id: str, params: SearchParams) -> str:
    """Id of a search request, e.g. .../9200355/BibliographicResource_1/search?q=Aus"""
    query = {'q': params.q}
    if params.page_size != settings.default_page_size:
        query['pageSize'] = params.page_size
    query['textGranularity'] = ','.join(g.label for g in params.text_granularity)
    return f"{urls.search_base_url}{dataset_id}/{local_id}/search?{urlencode(query)}"


@search_app.get("/presentation/{dataset_id}/{local_id}/search")
def search_record(
    dataset_id: str,
    local_id: str,
    q: Optional[str] = Query(None, description="Free-text query"),
    page_size: int = Query(settings.default_page_size, alias="pageSize", description="Maximum number of annotations"),
    text_granularity: Optional[str] = Query(None, alias="textGranularity", description="e.g. Word,Line"),
    debug: bool = Query(False, description="Include debug information"),
    format: str = Query("2", description="IIIF version, 2 or 3"),
    service: FullTextSearchService = Depends(get_search_service),
    urls: UrlConfig = Depends(get_url_config)
):
    """
    Search the full text of a record.

    Args:
        dataset_id: Dataset of the record
        local_id: Local id of the record
        q: Free-text query
        page_size: Maximum number of annotations to return
        text_granularity: Comma separated annotation levels
        debug: Include engine query, snippets and located hits
        format: IIIF presentation version

    Returns:
        IIIF annotation list
    """
    try:
        params = SearchParams(
            q=q or "",
            page_size=page_size,
            text_granularity=text_granularity,
            debug=debug,
            format=format
        )
    except ValidationError as e:
        error = e.errors()[0]
        field = '.'.join(str(part) for part in error['loc'])
        raise InvalidSearchRequest(f"Invalid {field}: {error['msg']}", field=field) from e

    if params.page_size > settings.max_page_size:
        raise InvalidSearchRequest(
            f"pageSize must be at most {settings.max_page_size}", field='pageSize'
        )

    result = service.search_issue(
        search_id=build_search_id(urls, dataset_id, local_id, params),
        dataset_id=dataset_id,
        local_id=local_id,
        query=params.q,
        page_size=params.page_size,
        types=params.text_granularity,
        debug=params.debug
    )
    return to_annotation_list(result, urls, params.format)


@search_app.get("/")
async def root():
    """API root endpoint."""
    return {
        "name": "Full-Text Search API",
        "version": "1.0.0",
        "endpoints": {
            "search": "GET /presentation/{dataset_id}/{local_id}/search?q=",
        }
    }


# Export app for uvicorn
app = search_app
