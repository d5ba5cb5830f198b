"""
Database models for annotation page storage.

Stores pages (full text of one scanned page of a record), their annotations
(page, block, line and word spans) and the image rectangles of each annotation.
"""
import uuid
from datetime import datetime

from sqlalchemy import (
    Column, String, Integer, Text, DateTime, ForeignKey, UniqueConstraint, Index
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def generate_uuid():
    """Generate UUID string for primary keys."""
    return str(uuid.uuid4())


class AnnoPage(Base):
    """A page of a record with its canonical full text."""

    __tablename__ = 'anno_pages'
    __table_args__ = (
        UniqueConstraint('dataset_id', 'local_id', 'page_id', name='uq_anno_page'),
        Index('ix_anno_page_target', 'dataset_id', 'local_id', 'target_id'),
    )

    id = Column(String, primary_key=True, default=generate_uuid)
    dataset_id = Column(String, nullable=False)
    local_id = Column(String, nullable=False)
    page_id = Column(String, nullable=False)

    # Key the search engine uses for this page in its snippets
    target_id = Column(String, nullable=False)

    resource_id = Column(String)
    language = Column(String)
    full_text = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    annotations = relationship(
        "AnnotationRecord",
        back_populates="anno_page",
        cascade="all, delete-orphan",
        order_by="AnnotationRecord.sequence_order"
    )

    def __repr__(self):
        return f"<AnnoPage(id={self.id}, record=/{self.dataset_id}/{self.local_id}, page={self.page_id})>"


class AnnotationRecord(Base):
    """Annotation with a character span in the page full text."""

    __tablename__ = 'annotations'

    id = Column(String, primary_key=True, default=generate_uuid)
    anno_page_id = Column(String, ForeignKey('anno_pages.id'), nullable=False)
    annotation_id = Column(String, nullable=False)

    # 'P', 'B', 'L' or 'W'
    dc_type = Column(String(1), nullable=False)

    # Half-open span, both empty for page annotations
    from_index = Column(Integer)
    to_index = Column(Integer)

    language = Column(String)

    # Position in the page, search results follow this order
    sequence_order = Column(Integer, nullable=False, default=0)

    # Relationships
    anno_page = relationship("AnnoPage", back_populates="annotations")
    targets = relationship(
        "AnnotationTarget",
        back_populates="annotation",
        cascade="all, delete-orphan",
        order_by="AnnotationTarget.sequence_order"
    )

    def __repr__(self):
        return f"<AnnotationRecord(id={self.annotation_id}, type={self.dc_type}, span=({self.from_index},{self.to_index}))>"


class AnnotationTarget(Base):
    """Rectangle on the page image covered by an annotation."""

    __tablename__ = 'annotation_targets'

    id = Column(String, primary_key=True, default=generate_uuid)
    annotation_id = Column(String, ForeignKey('annotations.id'), nullable=False)
    x = Column(Integer, nullable=False)
    y = Column(Integer, nullable=False)
    w = Column(Integer, nullable=False)
    h = Column(Integer, nullable=False)
    sequence_order = Column(Integer, nullable=False, default=0)

    # Relationships
    annotation = relationship("AnnotationRecord", back_populates="targets")

    def __repr__(self):
        return f"<AnnotationTarget(xywh={self.x},{self.y},{self.w},{self.h})>"
