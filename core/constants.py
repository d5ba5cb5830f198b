"""
Constants for full-text search within a document.
"""

# Highlight markers the search engine wraps around matched terms
HIT_MARKER_OPEN = '<em>'
HIT_MARKER_CLOSE = '</em>'

# Hits that are this close (in characters) to the previous hit are merged
HIT_MERGE_MAX_DISTANCE = 2

# Snippets start with "{pageKey} ", the closing bracket plus a space follow the key
PAGE_KEY_OPEN = '{'
PAGE_KEY_CLOSE = '}'
PAGE_KEY_SEPARATOR_LENGTH = 2

# Keys inside the engine highlight payload
PAYLOAD_OFFSETS = 'passages'
TEXT_START_OFFSET = 'startOffsetUtf16'
HIT_START_OFFSETS = 'matchStartsUtf16'
HIT_END_OFFSETS = 'matchEndsUtf16'

# Storage abbreviations and presentation labels for annotation granularity
GRANULARITY_CODES = {
    'PAGE': 'P',
    'BLOCK': 'B',
    'LINE': 'L',
    'WORD': 'W',
}

GRANULARITY_LABELS = {
    'PAGE': 'Page',
    'BLOCK': 'Block',
    'LINE': 'Line',
    'WORD': 'Word',
}

# Page that is checked to see whether a record exists at all
FIRST_PAGE_ID = '1'

# Request defaults
DEFAULT_SEARCH_PARAMS = {
    'page_size': 12,
    'max_page_size': 100,
    'granularity': ['WORD'],
}

# IIIF presentation
IIIF_SEARCH_CONTEXT = 'http://iiif.io/api/search/1/context.json'
IIIF_V2_CONTEXT = 'http://iiif.io/api/presentation/2/context.json'
IIIF_V3_CONTEXT = 'http://iiif.io/api/presentation/3/context.json'
V2_MOTIVATION = 'sc:painting'
V3_MOTIVATION = 'transcribing'
