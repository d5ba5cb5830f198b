"""
Pydantic schemas for API request/response validation.
"""
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from core.models import Annotation, Granularity, Page, TargetRect


class SearchParams(BaseModel):
    """Query parameters of a search request."""
    q: str = Field(min_length=1)
    page_size: int = Field(default=12, ge=1)
    text_granularity: List[Granularity] = Field(default_factory=lambda: [Granularity.WORD])
    debug: bool = False
    format: str = "2"

    @field_validator('q')
    @classmethod
    def _strip_query(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("query must not be blank")
        return value

    @field_validator('text_granularity', mode='before')
    @classmethod
    def _parse_granularity(cls, value):
        """Accept "Word,Line", ["w", "line"] or Granularity values."""
        if value is None or value == "":
            return [Granularity.WORD]
        if isinstance(value, str):
            value = value.split(',')
        return [item if isinstance(item, Granularity) else Granularity.parse(item) for item in value if item]

    @field_validator('format')
    @classmethod
    def _check_format(cls, value: str) -> str:
        if value not in ('2', '3'):
            raise ValueError("format must be 2 or 3")
        return value


class ErrorResponse(BaseModel):
    """Body of an error response."""
    success: bool = False
    error: str
    code: str


class TargetRectIn(BaseModel):
    """Rectangle of an annotation on the page image."""
    x: int
    y: int
    w: int
    h: int


class AnnotationIn(BaseModel):
    """Annotation as found in an import file."""
    id: str
    type: Granularity
    from_index: Optional[int] = Field(default=None, alias='from')
    to_index: Optional[int] = Field(default=None, alias='to')
    targets: List[TargetRectIn] = Field(default_factory=list)
    language: Optional[str] = None

    @field_validator('type', mode='before')
    @classmethod
    def _parse_type(cls, value):
        return value if isinstance(value, Granularity) else Granularity.parse(value)

    def to_domain(self) -> Annotation:
        span = None
        if self.from_index is not None and self.to_index is not None:
            span = (self.from_index, self.to_index)
        return Annotation(
            id=self.id,
            granularity=self.type,
            span=span,
            target_rects=tuple(TargetRect(t.x, t.y, t.w, t.h) for t in self.targets),
            language=self.language
        )


class PageIn(BaseModel):
    """Annotation page as found in an import file."""
    dataset_id: str
    local_id: str
    page_id: str
    page_key: str
    full_text: str
    resource_id: Optional[str] = None
    language: Optional[str] = None
    annotations: List[AnnotationIn] = Field(default_factory=list)

    def to_domain(self) -> Page:
        return Page(
            dataset_id=self.dataset_id,
            local_id=self.local_id,
            page_id=self.page_id,
            page_key=self.page_key,
            full_text=self.full_text,
            annotations=[annotation.to_domain() for annotation in self.annotations],
            language=self.language,
            resource_id=self.resource_id
        )
