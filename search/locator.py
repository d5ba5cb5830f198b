"""
Full Text Locator

Finds where a hit from a snippet occurs in the canonical full text of a page.
The engine only tells us the hit text and the characters around it, so we scan
the full text for the exact text and keep the occurrences whose surrounding
characters agree with the snippet.

Context rules:
- A known prefix/suffix character must match the neighbouring character exactly
- A missing prefix/suffix means the snippet was cut right at the hit, so the
  occurrence has to sit on a word boundary (start/end of text or whitespace)
"""
from typing import List, Optional

from core.models import EngineHit, LocatedHit


def _is_boundary(full_text: str, index: int) -> bool:
    """Check if index is outside the text or points at whitespace."""
    return index < 0 or index >= len(full_text) or full_text[index].isspace()


def matches_context(full_text: str, start: int, end: int, prefix: Optional[str], suffix: Optional[str]) -> bool:
    """
    Check the characters around an occurrence of the exact text.

    Args:
        full_text: Page full text
        start: Start of the occurrence
        end: End of the occurrence (exclusive)
        prefix: Expected character before the occurrence, None for a boundary
        suffix: Expected character after the occurrence, None for a boundary

    Returns:
        True if both sides agree
    """
    if prefix:
        if start == 0 or full_text[start - 1] != prefix:
            return False
    elif not _is_boundary(full_text, start - 1):
        return False

    if suffix:
        if end >= len(full_text) or full_text[end] != suffix:
            return False
    elif not _is_boundary(full_text, end):
        return False

    return True


def locate(hit: EngineHit, full_text: str, max_hits: int) -> List[LocatedHit]:
    """
    Find all occurrences of a hit in a full text.

    Args:
        hit: Hit parsed from a snippet
        full_text: Canonical full text of the page
        max_hits: Maximum number of occurrences to return

    Returns:
        Located hits in ascending order (empty if none match)
    """
    located: List[LocatedHit] = []
    exact = hit.exact
    if not exact or not full_text or max_hits <= 0:
        return located

    start = full_text.find(exact)
    while start >= 0 and len(located) < max_hits:
        end = start + len(exact)
        if matches_context(full_text, start, end, hit.prefix, hit.suffix):
            located.append(LocatedHit(start=start, end=end, exact=exact))
        start = full_text.find(exact, start + 1)

    return located
