"""Search package - Snippet parsing, hit merging, locating and annotation matching."""

from .snippet_parser import (
    find_marked_spans,
    parse_hits,
    strip_markers,
)

from .payload import (
    HighlightPayload,
    PassageOffsets,
    parse_offset_list,
)

from .offsets import (
    split_page_key,
    rebase_match_offsets,
    normalize_snippet,
    normalize_payload,
)

from .merger import (
    calculate_gap,
    can_merge_hits,
    merge_two_hits,
    merge_adjacent_hits,
    merge_snippet_hits,
)

from .locator import (
    locate,
    matches_context,
)

from .matcher import (
    overlap,
    is_candidate,
    match,
)

__all__ = [
    # Snippet parsing
    'find_marked_spans',
    'parse_hits',
    'strip_markers',

    # Engine payload
    'HighlightPayload',
    'PassageOffsets',
    'parse_offset_list',

    # Offsets
    'split_page_key',
    'rebase_match_offsets',
    'normalize_snippet',
    'normalize_payload',

    # Merging
    'calculate_gap',
    'can_merge_hits',
    'merge_two_hits',
    'merge_adjacent_hits',
    'merge_snippet_hits',

    # Locating
    'locate',
    'matches_context',

    # Matching
    'overlap',
    'is_candidate',
    'match',
]
