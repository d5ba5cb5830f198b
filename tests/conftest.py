"""
Pytest configuration and global fixtures.
"""
import re
import sys
from contextlib import contextmanager
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.interfaces import PageStore, SearchEngineClient
from core.models import Annotation, Granularity, Page, TargetRect
from data.db_models import Base


DATASET_ID = "9200355"
LOCAL_ID = "BibliographicResource_3000096341989"


def word_annotations(full_text, prefix="w", language=None):
    """Create a WORD annotation for every whitespace separated token."""
    annotations = []
    for idx, token in enumerate(re.finditer(r"\S+", full_text)):
        annotations.append(Annotation(
            id=f"{prefix}{idx + 1}",
            granularity=Granularity.WORD,
            span=(token.start(), token.end()),
            target_rects=(TargetRect(10 * idx, 20, 10 * len(token.group()), 12),),
            language=language
        ))
    return annotations


def make_page(full_text, page_id="1", page_key=None, annotations=None, with_line=False,
              dataset_id=DATASET_ID, local_id=LOCAL_ID, language="nl"):
    """Build a domain page; words are annotated unless annotations are given."""
    if annotations is None:
        annotations = word_annotations(full_text, prefix=f"p{page_id}w")
        if with_line:
            annotations.append(Annotation(
                id=f"p{page_id}l1",
                granularity=Granularity.LINE,
                span=(0, len(full_text)),
                target_rects=(TargetRect(0, 20, 800, 12),)
            ))
        annotations.insert(0, Annotation(id=f"p{page_id}p", granularity=Granularity.PAGE))
    return Page(
        dataset_id=dataset_id,
        local_id=local_id,
        page_id=page_id,
        page_key=page_key or f"target{page_id}",
        full_text=full_text,
        annotations=annotations,
        language=language,
        resource_id=f"res{page_id}"
    )


class FakeEngine(SearchEngineClient):
    """Search engine returning a fixed highlight response."""

    def __init__(self, response=None, error=None):
        self.response = response or {}
        self.error = error
        self.calls = []

    def query(self, record_id, text, page_size, debug=False):
        self.calls.append((record_id, text, page_size, debug))
        if self.error is not None:
            raise self.error
        return self.response

    def describe_query(self, record_id, text, page_size, debug=False):
        return f"fake:{record_id}?q={text}"


class FakeCursor:
    """Iterator over pages that remembers whether it was closed."""

    def __init__(self, pages):
        self._pages = iter(pages)
        self.closed = False
        self.fetched = 0

    def __iter__(self):
        return self

    def __next__(self):
        page = next(self._pages)
        self.fetched += 1
        return page


class FakePageStore(PageStore):
    """In-memory page store in insertion order."""

    def __init__(self, pages=None):
        self.pages = list(pages or [])
        self.cursors = []
        self.requested_keys = []

    @contextmanager
    def fetch_pages(self, dataset_id, local_id, page_keys, types=None):
        keys = set(page_keys)
        self.requested_keys.append(keys)
        selected = []
        for page in self.pages:
            if page.dataset_id == dataset_id and page.local_id == local_id and page.page_key in keys:
                annotations = [a for a in page.annotations if not types or a.granularity in types]
                selected.append(Page(
                    dataset_id=page.dataset_id,
                    local_id=page.local_id,
                    page_id=page.page_id,
                    page_key=page.page_key,
                    full_text=page.full_text,
                    annotations=annotations,
                    language=page.language,
                    resource_id=page.resource_id
                ))
        cursor = FakeCursor(selected)
        self.cursors.append(cursor)
        try:
            yield cursor
        finally:
            cursor.closed = True

    def exists(self, dataset_id, local_id, page_id="1", granularity=None):
        return any(
            page.dataset_id == dataset_id and page.local_id == local_id and page.page_id == page_id
            for page in self.pages
        )


@pytest.fixture
def test_db_engine():
    """Create in-memory SQLite engine for tests, shared across threads."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def test_db_session(test_db_engine):
    """Create fresh database session for each test."""
    Session = sessionmaker(bind=test_db_engine)
    session = Session()

    yield session

    # Rollback any uncommitted changes and close
    session.rollback()
    session.close()


@pytest.fixture
def temp_dir(tmp_path):
    """Provide temporary directory for test files."""
    return tmp_path


@pytest.fixture
def newspaper_page():
    """Page with the text used by most search tests."""
    return make_page(
        "Aus der 49. Verlustliste. Na ELSENEUR, Kaptein Daniel Ehlert, van Koningsbergen",
        page_id="1",
        with_line=True
    )


@pytest.fixture
def second_page():
    """Another page of the same record."""
    return make_page("This is another test test", page_id="2", with_line=True)


@pytest.fixture
def fake_store(newspaper_page, second_page):
    """Page store holding both sample pages."""
    return FakePageStore([newspaper_page, second_page])


def highlight_response(*snippets, language="nl", passages=None):
    """Engine response with the given raw snippets for one language."""
    payload = {"snippets": list(snippets)}
    if passages is not None:
        payload["passages"] = passages
    return {language: payload}
