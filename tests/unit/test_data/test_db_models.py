"""
Unit tests for data.db_models module.
"""
import pytest
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from data.db_models import AnnoPage, AnnotationRecord, AnnotationTarget


def _anno_page(page_id="1"):
    return AnnoPage(
        dataset_id="9200355",
        local_id="BibliographicResource_1",
        page_id=page_id,
        target_id=f"target{page_id}",
        full_text="Aus der 49. Verlustliste."
    )


class TestAnnoPage:
    """Tests for AnnoPage model."""

    def test_create_page(self, test_db_session):
        """Test creating a page."""
        page = _anno_page()

        test_db_session.add(page)
        test_db_session.commit()

        assert page.id is not None
        assert page.target_id == "target1"
        assert isinstance(page.created_at, datetime)

    def test_unique_page_per_record(self, test_db_session):
        """Test a record cannot have the same page twice."""
        test_db_session.add(_anno_page())
        test_db_session.commit()

        test_db_session.add(_anno_page())
        with pytest.raises(IntegrityError):
            test_db_session.commit()

    def test_annotations_ordered(self, test_db_session):
        """Test annotations relationship follows sequence order."""
        page = _anno_page()
        page.annotations.append(AnnotationRecord(annotation_id="b", dc_type="W", from_index=4, to_index=7, sequence_order=1))
        page.annotations.append(AnnotationRecord(annotation_id="a", dc_type="W", from_index=0, to_index=3, sequence_order=0))
        test_db_session.add(page)
        test_db_session.commit()
        test_db_session.expire_all()

        stored = test_db_session.get(AnnoPage, page.id)

        assert [anno.annotation_id for anno in stored.annotations] == ["a", "b"]


class TestAnnotationRecord:
    """Tests for AnnotationRecord model."""

    def test_page_annotation_without_span(self, test_db_session):
        """Test span columns are nullable."""
        page = _anno_page()
        page.annotations.append(AnnotationRecord(annotation_id="p", dc_type="P"))
        test_db_session.add(page)
        test_db_session.commit()

        anno = page.annotations[0]
        assert anno.from_index is None
        assert anno.anno_page is page

    def test_targets_cascade(self, test_db_session):
        """Test targets are stored and deleted with their annotation."""
        page = _anno_page()
        anno = AnnotationRecord(annotation_id="w1", dc_type="W", from_index=0, to_index=3)
        anno.targets.append(AnnotationTarget(x=1, y=2, w=3, h=4))
        page.annotations.append(anno)
        test_db_session.add(page)
        test_db_session.commit()

        assert test_db_session.query(AnnotationTarget).count() == 1

        test_db_session.delete(page)
        test_db_session.commit()

        assert test_db_session.query(AnnotationRecord).count() == 0
        assert test_db_session.query(AnnotationTarget).count() == 0
