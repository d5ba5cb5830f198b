"""Core package - Domain models, constants, exceptions and collaborator interfaces."""

from .models import (
    Granularity,
    TargetRect,
    Annotation,
    EngineHit,
    Snippet,
    LocatedHit,
    Page,
    SearchItem,
    SearchDebug,
    SearchResult,
)
from .constants import (
    HIT_MARKER_OPEN,
    HIT_MARKER_CLOSE,
    HIT_MERGE_MAX_DISTANCE,
    FIRST_PAGE_ID,
    DEFAULT_SEARCH_PARAMS,
)
from .exceptions import (
    SearchException,
    RecordNotFound,
    MalformedEnginePayload,
    SearchEngineUnavailable,
    InvalidSearchRequest,
)
from .interfaces import SearchEngineClient, PageStore

__all__ = [
    # Models
    'Granularity',
    'TargetRect',
    'Annotation',
    'EngineHit',
    'Snippet',
    'LocatedHit',
    'Page',
    'SearchItem',
    'SearchDebug',
    'SearchResult',

    # Constants
    'HIT_MARKER_OPEN',
    'HIT_MARKER_CLOSE',
    'HIT_MERGE_MAX_DISTANCE',
    'FIRST_PAGE_ID',
    'DEFAULT_SEARCH_PARAMS',

    # Exceptions
    'SearchException',
    'RecordNotFound',
    'MalformedEnginePayload',
    'SearchEngineUnavailable',
    'InvalidSearchRequest',

    # Interfaces
    'SearchEngineClient',
    'PageStore',
]
