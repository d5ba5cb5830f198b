"""
Hit Merger

Merges hits that are (almost) next to each other in a snippet, so that a
phrase query like "Daniel Ehlert" highlighted as two separate terms
"<em>Daniel</em> <em>Ehlert</em>" is searched in the full text as one hit.

Strategy:
1. Walk the hits of one snippet in order
2. Compare each hit only with the hit directly before it
3. Merge when the gap between them is at most the maximum merge distance
"""
import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from core.constants import HIT_MERGE_MAX_DISTANCE
from core.models import EngineHit, Snippet

logger = logging.getLogger(__name__)


def calculate_gap(previous: EngineHit, current: EngineHit) -> Optional[int]:
    """
    Calculate the distance between two hits.

    Returns:
        Gap in snippet positions (engine offsets when available), or None if
        either hit has no position
    """
    if previous.end is None or current.start is None:
        return None
    return current.start - previous.end


def can_merge_hits(
    previous: EngineHit,
    current: EngineHit,
    max_distance: int = HIT_MERGE_MAX_DISTANCE
) -> bool:
    """Check if two consecutive hits are close enough to merge."""
    gap = calculate_gap(previous, current)
    return gap is not None and gap <= max_distance


def merge_two_hits(
    previous: EngineHit,
    current: EngineHit,
    text: Optional[str] = None
) -> EngineHit:
    """
    Merge current into previous.

    The merged hit keeps the prefix of the first hit and the suffix of the
    second. Its exact text is the snippet text covering both hits when the
    markup positions fall inside the snippet, otherwise the two texts are
    concatenated. Engine offsets are never used to slice the text.

    Args:
        previous: Earlier hit
        current: Later hit
        text: Plain snippet text the markup positions refer to

    Returns:
        New merged hit
    """
    text_start = previous.text_start if previous.text_start is not None else previous.start
    text_end = current.text_end if current.text_end is not None else current.end
    if (text is not None and text_start is not None and text_end is not None
            and 0 <= text_start <= text_end <= len(text)):
        exact = text[text_start:text_end]
    else:
        exact = previous.exact + current.exact

    return replace(
        previous,
        exact=exact,
        suffix=current.suffix,
        end=current.end,
        text_end=current.text_end
    )


def merge_adjacent_hits(
    hits: List[EngineHit],
    text: Optional[str] = None,
    max_distance: int = HIT_MERGE_MAX_DISTANCE
) -> Tuple[List[EngineHit], int]:
    """
    Merge adjacent hits of one snippet.

    Args:
        hits: Hits in snippet order
        text: Plain snippet text (used to build merged exact text)
        max_distance: Maximum gap in characters that still merges

    Returns:
        Tuple of (merged hits, number of hits that were merged away)
    """
    merged: List[EngineHit] = []
    nr_merged = 0

    for hit in hits:
        if merged and can_merge_hits(merged[-1], hit, max_distance):
            logger.debug("Merging %s with %s", merged[-1].debug_info(), hit.debug_info())
            merged[-1] = merge_two_hits(merged[-1], hit, text)
            nr_merged += 1
        else:
            merged.append(hit)

    return merged, nr_merged


def merge_snippet_hits(
    snippet: Snippet,
    max_distance: int = HIT_MERGE_MAX_DISTANCE
) -> Tuple[List[EngineHit], int]:
    """Merge the hits of a parsed snippet using its own text."""
    return merge_adjacent_hits(snippet.hits, snippet.text, max_distance)
