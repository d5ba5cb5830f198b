"""
API Dependencies - Dependency injection for FastAPI.

Provides reusable dependencies for database sessions, the search engine
client and the search service. Tests override them with
app.dependency_overrides.
"""
from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from config.settings import settings
from core.interfaces import SearchEngineClient
from data.database import get_db_manager
from data.repositories import PageRepository
from services.search_service import FullTextSearchService
from services.solr_client import SolrSearchClient


def get_db() -> Generator:
    """
    Dependency for a read-only database session.

    Yields:
        SQLAlchemy session
    """
    with get_db_manager().session(read_only=True) as db:
        yield db


def get_engine_client() -> Generator:
    """
    Dependency for the search engine client.

    Yields:
        SolrSearchClient configured from settings
    """
    client = SolrSearchClient(
        base_url=settings.solr_url,
        timeout=settings.solr_timeout,
        id_field=settings.solr_id_field,
        highlight_field_prefix=settings.solr_highlight_field_prefix
    )
    try:
        yield client
    finally:
        client.close()


def get_search_service(
    db: Session = Depends(get_db),
    engine: SearchEngineClient = Depends(get_engine_client)
) -> FullTextSearchService:
    """
    Dependency for the search service.

    Returns:
        FullTextSearchService using the request's session and engine client
    """
    return FullTextSearchService(
        engine=engine,
        store=PageRepository(db),
        max_merge_distance=settings.hit_merge_max_distance
    )
