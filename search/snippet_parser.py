"""
Snippet Parser

Extracts highlighted terms from engine snippets such as
"Kaptein <em>Daniel</em> <em>Ehlert</em>, van Koningsbergen".

Each marked span becomes an EngineHit with:
- the exact marked text
- the character before and after it (None at the snippet boundaries)
- its start/end position in the snippet text with all markers removed
  (kept as text_start/text_end when engine offsets replace start/end)

Spans are reported left to right and never merged here.
"""
import logging
from typing import List, Optional, Tuple

from core.constants import HIT_MARKER_OPEN, HIT_MARKER_CLOSE
from core.models import EngineHit

logger = logging.getLogger(__name__)


def find_marked_spans(
    text: str,
    open_marker: str = HIT_MARKER_OPEN,
    close_marker: str = HIT_MARKER_CLOSE
) -> Tuple[str, List[Tuple[int, int]]]:
    """
    Remove highlight markers from a snippet.

    Args:
        text: Snippet text containing marker pairs
        open_marker: Marker that opens a highlighted span
        close_marker: Marker that closes a highlighted span

    Returns:
        Tuple of (plain text, list of [start, end) spans in the plain text)
    """
    parts = []
    spans = []
    plain_length = 0
    cursor = 0

    while True:
        open_idx = text.find(open_marker, cursor)
        if open_idx < 0:
            break
        close_idx = text.find(close_marker, open_idx + len(open_marker))
        if close_idx < 0:
            logger.debug("Unterminated highlight marker at %d in %r", open_idx, text)
            break

        before = text[cursor:open_idx]
        exact = text[open_idx + len(open_marker):close_idx]
        parts.append(before)
        parts.append(exact)
        plain_length += len(before)
        spans.append((plain_length, plain_length + len(exact)))
        plain_length += len(exact)
        cursor = close_idx + len(close_marker)

    parts.append(text[cursor:])
    return ''.join(parts), spans


def parse_hits(text: str, page_key: Optional[str] = None) -> List[EngineHit]:
    """
    Parse all highlighted spans of a snippet into hits.

    Args:
        text: Snippet text (page key prefix already removed)
        page_key: Page the snippet belongs to

    Returns:
        Hits in left-to-right order, empty if nothing is marked
    """
    plain, spans = find_marked_spans(text)
    hits = []
    for start, end in spans:
        if start == end:
            logger.debug("Skipping empty highlight at %d", start)
            continue
        hits.append(EngineHit(
            page_key=page_key,
            exact=plain[start:end],
            prefix=plain[start - 1] if start > 0 else None,
            suffix=plain[end] if end < len(plain) else None,
            start=start,
            end=end,
            text_start=start,
            text_end=end
        ))
    return hits


def strip_markers(text: str) -> str:
    """Get snippet text without highlight markers."""
    return find_marked_spans(text)[0]
