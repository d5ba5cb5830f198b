"""Data access layer - Database models, connections and repositories."""

from .db_models import Base, AnnoPage, AnnotationRecord, AnnotationTarget
from .database import (
    DatabaseManager,
    get_db_manager,
    session_scope,
    init_database,
)
from .repositories import PageRepository, PageCursor

__all__ = [
    # Models
    'Base',
    'AnnoPage',
    'AnnotationRecord',
    'AnnotationTarget',

    # Database
    'DatabaseManager',
    'get_db_manager',
    'session_scope',
    'init_database',

    # Repositories
    'PageRepository',
    'PageCursor',
]
