"""
Core domain models for searching inside a document.

These are pure data structures without business logic.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .constants import GRANULARITY_CODES, GRANULARITY_LABELS


class Granularity(str, Enum):
    """Level of an annotation on a page."""
    PAGE = 'PAGE'
    BLOCK = 'BLOCK'
    LINE = 'LINE'
    WORD = 'WORD'

    @property
    def code(self) -> str:
        """Single-letter abbreviation used in storage ('P', 'B', 'L', 'W')."""
        return GRANULARITY_CODES[self.value]

    @property
    def label(self) -> str:
        """Label used in presentation output ('Page', 'Block', ...)."""
        return GRANULARITY_LABELS[self.value]

    @classmethod
    def from_code(cls, code: str) -> 'Granularity':
        """Get granularity from its storage abbreviation."""
        for granularity in cls:
            if granularity.code == code.upper():
                return granularity
        raise ValueError(f"Unknown annotation type code: {code!r}")

    @classmethod
    def parse(cls, value: str) -> 'Granularity':
        """
        Parse a granularity from user input.

        Accepts names ('word', 'Line') and abbreviations ('W').
        """
        text = value.strip().upper()
        if text in cls.__members__:
            return cls[text]
        return cls.from_code(text)


@dataclass(frozen=True)
class TargetRect:
    """Rectangle on the page image that an annotation refers to."""
    x: int
    y: int
    w: int
    h: int

    def to_fragment(self) -> str:
        """Media fragment selector for this rectangle."""
        return f"xywh={self.x},{self.y},{self.w},{self.h}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'x': self.x,
            'y': self.y,
            'w': self.w,
            'h': self.h
        }


@dataclass(frozen=True)
class Annotation:
    """
    A word, line, block or page annotation.

    The span is a half-open [from, to) range in the page full text and is only
    allowed to be missing for page annotations.
    """
    id: str
    granularity: Granularity
    span: Optional[Tuple[int, int]] = None
    target_rects: Tuple[TargetRect, ...] = ()
    language: Optional[str] = None

    def __post_init__(self):
        if self.span is None and self.granularity != Granularity.PAGE:
            raise ValueError(f"{self.granularity.label} annotation {self.id} has no text span")
        if self.span is not None and self.span[0] > self.span[1]:
            raise ValueError(f"Annotation {self.id} has an inverted span {self.span}")

    @property
    def from_index(self) -> Optional[int]:
        return self.span[0] if self.span else None

    @property
    def to_index(self) -> Optional[int]:
        return self.span[1] if self.span else None

    @property
    def length(self) -> int:
        """Number of characters covered (0 for page annotations)."""
        return self.span[1] - self.span[0] if self.span else 0


@dataclass
class EngineHit:
    """
    A search term occurrence parsed from a highlight snippet.

    Prefix and suffix are the single characters around the term in the snippet
    (None at snippet boundaries). Start and end are snippet-local and only used
    for merging; the absolute position is found later in the page full text.
    Text start and end always index the plain snippet text. Start and end may be
    replaced by engine offsets, which count UTF-16 code units.
    """
    page_key: Optional[str]
    exact: str
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    start: Optional[int] = None
    end: Optional[int] = None
    text_start: Optional[int] = None
    text_end: Optional[int] = None

    def debug_info(self) -> str:
        """Short description for log messages."""
        return f"{self.prefix!r}[{self.exact}]{self.suffix!r} ({self.start},{self.end})"


@dataclass
class Snippet:
    """A highlight snippet without page key and markers, plus the hits inside it."""
    page_key: str
    text: str
    hits: List[EngineHit] = field(default_factory=list)


@dataclass(frozen=True)
class LocatedHit:
    """A hit resolved to a half-open [start, end) range of one page's full text."""
    start: int
    end: int
    exact: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'start': self.start,
            'end': self.end,
            'exact': self.exact
        }


@dataclass
class Page:
    """A page of a record: canonical full text plus its annotations in stored order."""
    dataset_id: str
    local_id: str
    page_id: str
    page_key: str
    full_text: str
    annotations: List[Annotation] = field(default_factory=list)
    language: Optional[str] = None
    resource_id: Optional[str] = None

    def text_of(self, annotation: Annotation) -> str:
        """Get the full text covered by an annotation."""
        if annotation.span is None:
            return self.full_text
        return self.full_text[annotation.span[0]:annotation.span[1]]


@dataclass
class SearchItem:
    """An annotation that matched the query, with the hit ranges that led to it."""
    dataset_id: str
    local_id: str
    page_id: str
    page_key: str
    annotation: Annotation
    text: str = ""
    resource_id: Optional[str] = None
    language: Optional[str] = None
    highlights: List[LocatedHit] = field(default_factory=list)


@dataclass
class SearchDebug:
    """Debug information collected during one search."""
    engine_query: Optional[str] = None
    snippets: List[str] = field(default_factory=list)
    merged_hits: int = 0


@dataclass
class SearchResult:
    """
    Accumulates matched annotations for one search request.

    Items are unique per (page, annotation); matching an annotation again only
    adds the new highlight to the existing item, so item_count never decreases
    and only grows when a new annotation is found.
    """
    search_id: str
    debug_enabled: bool = False
    items: List[SearchItem] = field(default_factory=list)
    hits: Optional[List[LocatedHit]] = None
    debug: Optional[SearchDebug] = None
    unlocated_hits: int = 0
    unmatched_hits: int = 0
    _index: Dict[Tuple[str, str, str, str], SearchItem] = field(
        default_factory=dict, repr=False
    )

    def __post_init__(self):
        if self.debug_enabled:
            if self.hits is None:
                self.hits = []
            if self.debug is None:
                self.debug = SearchDebug()

    @property
    def item_count(self) -> int:
        """Number of distinct matched annotations."""
        return len(self.items)

    def add_item(
        self,
        page: Page,
        annotation: Annotation,
        highlight: Optional[LocatedHit] = None
    ) -> bool:
        """
        Add a matched annotation.

        Returns:
            True if the annotation was new, False if it was already in the result
        """
        key = (page.dataset_id, page.local_id, page.page_id, annotation.id)
        item = self._index.get(key)
        is_new = item is None
        if is_new:
            item = SearchItem(
                dataset_id=page.dataset_id,
                local_id=page.local_id,
                page_id=page.page_id,
                page_key=page.page_key,
                annotation=annotation,
                text=page.text_of(annotation) if annotation.span else "",
                resource_id=page.resource_id,
                language=annotation.language or page.language
            )
            self._index[key] = item
            self.items.append(item)
        if highlight is not None and highlight not in item.highlights:
            item.highlights.append(highlight)
        return is_new

    def add_hit(self, hit: LocatedHit):
        """Record a located hit (kept only when debugging)."""
        if self.hits is not None:
            self.hits.append(hit)
