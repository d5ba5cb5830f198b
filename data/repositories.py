"""
Repository pattern for data access.

Converts stored annotation pages to the domain Page model used by the search
code, so nothing outside this package depends on SQLAlchemy objects.
"""
import logging
from typing import Collection, Iterator, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from core.constants import FIRST_PAGE_ID
from core.interfaces import PageStore
from core.models import Annotation, Granularity, Page, TargetRect
from data.db_models import AnnoPage, AnnotationRecord, AnnotationTarget

logger = logging.getLogger(__name__)


def to_domain_annotation(record: AnnotationRecord) -> Optional[Annotation]:
    """Convert a stored annotation, None if it violates the span invariant."""
    granularity = Granularity.from_code(record.dc_type)
    span = None
    if record.from_index is not None and record.to_index is not None:
        span = (record.from_index, record.to_index)
    try:
        return Annotation(
            id=record.annotation_id,
            granularity=granularity,
            span=span,
            target_rects=tuple(TargetRect(t.x, t.y, t.w, t.h) for t in record.targets),
            language=record.language
        )
    except ValueError as e:
        logger.warning("Skipping stored annotation %s: %s", record.annotation_id, e)
        return None


def to_domain_page(record: AnnoPage) -> Page:
    """Convert a stored page with its loaded annotations."""
    annotations = []
    for anno_record in record.annotations:
        annotation = to_domain_annotation(anno_record)
        if annotation is not None:
            annotations.append(annotation)
    return Page(
        dataset_id=record.dataset_id,
        local_id=record.local_id,
        page_id=record.page_id,
        page_key=record.target_id,
        full_text=record.full_text or "",
        annotations=annotations,
        language=record.language,
        resource_id=record.resource_id
    )


class PageCursor:
    """
    Forward-only cursor over fetched pages.

    Use it as a context manager so the underlying database result is released
    on every exit path:

        with repo.fetch_pages(...) as cursor:
            for page in cursor:
                ...
    """

    def __init__(self, result):
        self._result = result
        self._rows = iter(result)
        self._closed = False

    def __iter__(self) -> Iterator[Page]:
        return self

    def __next__(self) -> Page:
        if self._closed:
            raise StopIteration
        try:
            record = next(self._rows)
        except StopIteration:
            self.close()
            raise
        return to_domain_page(record)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        """Release the database result."""
        if not self._closed:
            self._closed = True
            self._result.close()

    def __enter__(self) -> 'PageCursor':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class PageRepository(PageStore):
    """Repository for annotation page operations."""

    def __init__(self, session: Session, batch_size: int = 20):
        self.session = session
        self.batch_size = batch_size

    def add_page(self, page: Page) -> AnnoPage:
        """Store a domain page with its annotations."""
        record = AnnoPage(
            dataset_id=page.dataset_id,
            local_id=page.local_id,
            page_id=page.page_id,
            target_id=page.page_key,
            resource_id=page.resource_id,
            language=page.language,
            full_text=page.full_text
        )
        for idx, annotation in enumerate(page.annotations):
            anno_record = AnnotationRecord(
                annotation_id=annotation.id,
                dc_type=annotation.granularity.code,
                from_index=annotation.from_index,
                to_index=annotation.to_index,
                language=annotation.language,
                sequence_order=idx
            )
            for rect_idx, rect in enumerate(annotation.target_rects):
                anno_record.targets.append(AnnotationTarget(
                    x=rect.x, y=rect.y, w=rect.w, h=rect.h, sequence_order=rect_idx
                ))
            record.annotations.append(anno_record)

        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def fetch_pages(
        self,
        dataset_id: str,
        local_id: str,
        page_keys: Collection[str],
        types: Optional[Collection[Granularity]] = None
    ) -> PageCursor:
        """
        Fetch the pages of a record that have one of the given page keys.

        Args:
            dataset_id: Dataset of the record
            local_id: Local id of the record
            page_keys: Keys the search engine used for the pages
            types: Only load annotations of these granularities (all if None)

        Returns:
            PageCursor, to be closed by the caller
        """
        annotations = AnnoPage.annotations
        if types:
            annotations = annotations.and_(
                AnnotationRecord.dc_type.in_([granularity.code for granularity in types])
            )

        stmt = (
            select(AnnoPage)
            .where(
                AnnoPage.dataset_id == dataset_id,
                AnnoPage.local_id == local_id,
                AnnoPage.target_id.in_(list(page_keys))
            )
            .options(selectinload(annotations).selectinload(AnnotationRecord.targets))
            .execution_options(yield_per=self.batch_size)
        )
        return PageCursor(self.session.scalars(stmt))

    def exists(
        self,
        dataset_id: str,
        local_id: str,
        page_id: str = FIRST_PAGE_ID,
        granularity: Optional[Granularity] = None
    ) -> bool:
        """Check if a page exists (optionally only if it has annotations of a granularity)."""
        stmt = select(AnnoPage.id).where(
            AnnoPage.dataset_id == dataset_id,
            AnnoPage.local_id == local_id,
            AnnoPage.page_id == page_id
        )
        if granularity is not None:
            stmt = stmt.where(
                AnnoPage.annotations.any(AnnotationRecord.dc_type == granularity.code)
            )
        return bool(self.session.scalar(select(stmt.exists())))

    def count_pages(self, dataset_id: str, local_id: str) -> int:
        """Count the stored pages of a record."""
        return self.session.scalar(
            select(func.count(AnnoPage.id)).where(
                AnnoPage.dataset_id == dataset_id,
                AnnoPage.local_id == local_id
            )
        ) or 0
