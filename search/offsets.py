"""
Offset normalization for engine snippets.

Every snippet starts with the key of the page it was found on: "{pageKey} text".
The engine's match offsets count from the start of the whole indexed record, so
they are rebased onto the snippet text by subtracting the passage start offset
and the length of the "{pageKey} " prefix.
"""
import logging
from typing import List, Optional, Tuple

from core.constants import PAGE_KEY_OPEN, PAGE_KEY_CLOSE, PAGE_KEY_SEPARATOR_LENGTH
from core.models import Snippet
from .payload import HighlightPayload, PassageOffsets
from .snippet_parser import parse_hits, strip_markers

logger = logging.getLogger(__name__)


def split_page_key(raw_snippet: str) -> Optional[Tuple[str, str, int]]:
    """
    Split a raw snippet into page key and text.

    Args:
        raw_snippet: Snippet as returned by the engine, e.g. "{p3} Aus der ..."

    Returns:
        Tuple of (page key, snippet text, prefix length) or None if the
        snippet does not start with a bracketed page key
    """
    if not raw_snippet.startswith(PAGE_KEY_OPEN):
        return None
    close_idx = raw_snippet.find(PAGE_KEY_CLOSE)
    if close_idx < 0:
        return None

    page_key = raw_snippet[len(PAGE_KEY_OPEN):close_idx]
    if not page_key:
        return None
    # close_idx is the length of "{pageKey"; the separator is "} "
    prefix_length = close_idx + PAGE_KEY_SEPARATOR_LENGTH
    return page_key, raw_snippet[prefix_length:], prefix_length


def rebase_match_offsets(
    passage: PassageOffsets,
    prefix_length: int
) -> List[Tuple[int, int]]:
    """
    Rebase the match start/end pairs of one passage onto its snippet.

    A pair is dropped when its start falls before the snippet, so starts and
    ends stay aligned.

    Args:
        passage: Engine offsets for the snippet
        prefix_length: Length of the "{pageKey} " prefix

    Returns:
        List of (start, end) tuples in snippet coordinates
    """
    base = passage.text_start_offset + prefix_length
    pairs = []
    for start, end in zip(passage.match_starts, passage.match_ends):
        if start - base < 0 or end - base < 0:
            continue
        pairs.append((start - base, end - base))
    return pairs


def normalize_snippet(
    raw_snippet: str,
    passage: Optional[PassageOffsets] = None
) -> Optional[Snippet]:
    """
    Turn one raw engine snippet into a Snippet with parsed hits.

    When engine offsets are given and their count matches the number of
    highlighted spans, they replace the start/end positions derived from the
    markup. The markup positions stay on the hits as text_start/text_end.

    Args:
        raw_snippet: "{pageKey} text" string from the engine
        passage: Optional engine offsets for this snippet

    Returns:
        Snippet, or None if the snippet has no page key or no highlights
    """
    split = split_page_key(raw_snippet)
    if split is None:
        logger.warning("Skipping snippet without page key: %r", raw_snippet[:80])
        return None
    page_key, text, prefix_length = split

    hits = parse_hits(text, page_key)
    if not hits:
        logger.warning("Skipping snippet without highlights on page %s: %r", page_key, text[:80])
        return None

    if passage is not None:
        pairs = rebase_match_offsets(passage, prefix_length)
        if len(pairs) == len(hits):
            for hit, (start, end) in zip(hits, pairs):
                hit.start = start
                hit.end = end
        else:
            logger.debug(
                "Page %s: %d engine offsets for %d highlights, keeping markup positions",
                page_key, len(pairs), len(hits)
            )

    return Snippet(page_key=page_key, text=strip_markers(text), hits=hits)


def normalize_payload(payload: HighlightPayload) -> List[Snippet]:
    """
    Normalize all snippets of one language.

    Args:
        payload: Validated highlight payload

    Returns:
        Parsed snippets in engine order (unparseable ones are left out)
    """
    snippets = []
    for i, raw_snippet in enumerate(payload.snippets):
        passage = payload.passages[i] if payload.passages is not None else None
        snippet = normalize_snippet(raw_snippet, passage)
        if snippet is not None:
            snippets.append(snippet)
    return snippets
