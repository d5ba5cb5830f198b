"""
Database connection and session management for the annotation page store.

Pages are written by the import CLI and only read while searching, so search
sessions are opened read-only and never commit.
"""
import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session

from config.settings import settings
from .db_models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Annotations and targets must point to stored pages."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Manages the page store engine and its sessions."""

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        """
        Initialize database manager.

        Args:
            database_url: SQLAlchemy database URL. If None, uses settings.database_url
            echo: Log SQL statements. If None, uses settings.database_echo
        """
        self.database_url = database_url or settings.database_url
        echo = settings.database_echo if echo is None else echo

        if self.database_url.startswith('sqlite'):
            # SQLite connections are shared with the API worker threads
            self.engine = create_engine(
                self.database_url,
                connect_args={'check_same_thread': False},
                echo=echo
            )
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self.engine = create_engine(self.database_url, echo=echo)

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    def create_tables(self):
        """Create all database tables."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created at %s", self.database_url)

    def drop_tables(self):
        """Drop all database tables. Use with caution!"""
        Base.metadata.drop_all(bind=self.engine)
        logger.warning("Database tables dropped from %s", self.database_url)

    @contextmanager
    def session(self, read_only: bool = False) -> Generator[Session, None, None]:
        """
        Context manager for database sessions.

        Commits on success and rolls back on exception. Read-only sessions
        always roll back.

        Usage:
            with db_manager.session(read_only=True) as session:
                ...
        """
        session = self.SessionLocal()
        try:
            yield session
            if read_only:
                session.rollback()
            else:
                session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


# Global database manager instance
_db_manager = None


def get_db_manager(database_url: Optional[str] = None) -> DatabaseManager:
    """
    Get or create global database manager instance.

    Args:
        database_url: Optional database URL. Only used on first call.

    Returns:
        DatabaseManager instance
    """
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)
    return _db_manager


def init_database(database_url: Optional[str] = None):
    """Create all tables of the page store."""
    get_db_manager(database_url).create_tables()


@contextmanager
def session_scope(read_only: bool = False) -> Generator[Session, None, None]:
    """
    Context manager for database sessions using global manager.

    Usage:
        from data.database import session_scope

        with session_scope(read_only=True) as session:
            repo = PageRepository(session)
            ...
    """
    with get_db_manager().session(read_only=read_only) as session:
        yield session
