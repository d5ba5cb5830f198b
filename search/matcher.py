"""
Annotation Matcher

Finds the annotations of a page that overlap a located hit and adds them to
the search result.

Rules:
1. Only requested granularities with a text span are considered
2. Overlap is inclusive on both ends
3. Annotations of at most one character are ignored; a trailing dot or comma
   directly after a keyword is often stored as a word of its own
4. Word annotations are added without highlight, the word itself is the hit
"""
import logging
from typing import Collection, Optional

from core.models import Annotation, Granularity, LocatedHit, Page, SearchResult

logger = logging.getLogger(__name__)


def overlap(s1: int, e1: int, s2: int, e2: int) -> bool:
    """
    Check if two ranges overlap, touching ends included.

    Args:
        s1: Start of range 1
        e1: End of range 1
        s2: Start of range 2
        e2: End of range 2
    """
    return s1 <= e2 and e1 >= s2


def is_candidate(annotation: Annotation, requested_types: Collection[Granularity]) -> bool:
    """Check if an annotation can be matched at all."""
    return annotation.granularity in requested_types and annotation.span is not None


def match(
    hit: LocatedHit,
    page: Page,
    requested_types: Collection[Granularity],
    into: SearchResult,
    page_size_remaining: Optional[int] = None
) -> int:
    """
    Add all annotations overlapping a hit to the result.

    Args:
        hit: Hit located in the page full text
        page: Page whose annotations are searched
        requested_types: Granularities to report
        into: Result that collects the matched annotations
        page_size_remaining: Number of new items that may still be added,
            None for no limit

    Returns:
        Number of annotations that matched the hit
    """
    budget_end = None if page_size_remaining is None else into.item_count + page_size_remaining
    if budget_end is not None and into.item_count >= budget_end:
        return 0

    found = 0
    for anno in page.annotations:
        if is_candidate(anno, requested_types) and overlap(hit.start, hit.end, anno.from_index, anno.to_index):
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "  Found overlap between %d,%d and annotation %s (%d,%d) with text %r",
                    hit.start, hit.end, anno.id, anno.from_index, anno.to_index, page.text_of(anno)
                )
            if anno.length > 1:
                found += 1
                if anno.granularity == Granularity.WORD:
                    into.add_item(page, anno, None)
                else:
                    into.add_item(page, anno, hit)
            else:
                logger.debug("Ignoring overlap with annotation %s because it's only 1 character long", anno.id)

        if budget_end is not None and into.item_count >= budget_end:
            break

    if found:
        into.add_hit(hit)
    else:
        into.unmatched_hits += 1
        logger.warning(
            "No annotations found for %d,%d on /%s/%s/annopage/%s",
            hit.start, hit.end, page.dataset_id, page.local_id, page.page_id
        )
    return found
