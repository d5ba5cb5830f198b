"""
Unit tests for search.offsets module.
"""
import pytest
from search.offsets import (
    normalize_payload,
    normalize_snippet,
    rebase_match_offsets,
    split_page_key,
)
from search.payload import HighlightPayload, PassageOffsets


def _passage(start, match_starts, match_ends):
    return PassageOffsets(text_start_offset=start, match_starts=match_starts, match_ends=match_ends)


class TestSplitPageKey:
    """Tests for split_page_key function."""

    def test_split(self):
        """Test key, text and prefix length."""
        assert split_page_key("{t1} Aus der") == ("t1", "Aus der", 5)

    def test_long_key(self):
        """Test prefix length grows with the key."""
        key, text, prefix_length = split_page_key("{https://iiif.example/p/3} text")

        assert key == "https://iiif.example/p/3"
        assert text == "text"
        assert prefix_length == len("{https://iiif.example/p/3} ")

    @pytest.mark.parametrize("raw", ["Aus der", "{} Aus der", "{t1 Aus der", ""])
    def test_no_page_key(self, raw):
        """Test snippets without a bracketed key."""
        assert split_page_key(raw) is None


class TestRebaseMatchOffsets:
    """Tests for rebase_match_offsets function."""

    def test_pairs_dropped_together(self):
        """Test start and end of a match stay aligned."""
        passage = _passage(100, [104, 110, 120], [108, 116, 126])

        assert rebase_match_offsets(passage, 5) == [(5, 11), (15, 21)]

    def test_no_matches(self):
        """Test empty offset lists."""
        assert rebase_match_offsets(_passage(0, [], []), 5) == []


class TestNormalizeSnippet:
    """Tests for normalize_snippet function."""

    RAW = "{t1} Kaptein <em>Daniel</em> <em>Ehlert</em>, van"

    def test_markup_only(self):
        """Test hits keep positions derived from the markup."""
        snippet = normalize_snippet(self.RAW)

        assert snippet.page_key == "t1"
        assert snippet.text == "Kaptein Daniel Ehlert, van"
        assert [(hit.start, hit.end) for hit in snippet.hits] == [(8, 14), (15, 21)]
        assert all(hit.page_key == "t1" for hit in snippet.hits)

    def test_engine_offsets_replace_positions(self):
        """Test rebased engine offsets are used when they pair up with the spans."""
        passage = _passage(1000, [1013, 1021], [1019, 1027])

        snippet = normalize_snippet(self.RAW, passage)

        assert [(hit.start, hit.end) for hit in snippet.hits] == [(8, 14), (16, 22)]
        assert [(hit.text_start, hit.text_end) for hit in snippet.hits] == [(8, 14), (15, 21)]

    def test_offset_count_mismatch(self):
        """Test markup positions are kept when the counts differ."""
        passage = _passage(1000, [1013], [1019])

        snippet = normalize_snippet(self.RAW, passage)

        assert [(hit.start, hit.end) for hit in snippet.hits] == [(8, 14), (15, 21)]

    def test_without_page_key(self):
        """Test snippets without page key are skipped."""
        assert normalize_snippet("Kaptein <em>Daniel</em>") is None

    def test_without_highlight(self):
        """Test snippets without marked spans are skipped."""
        assert normalize_snippet("{t1} Kaptein Daniel") is None


class TestNormalizePayload:
    """Tests for normalize_payload function."""

    def test_skips_unparseable(self):
        """Test bad snippets are left out, good ones keep engine order."""
        payload = HighlightPayload(snippets=[
            "{t2} <em>Aus der</em> 49.",
            "no page key <em>x</em>",
            "{t1} nothing marked",
            "{t1} Kaptein <em>Daniel</em>",
        ])

        snippets = normalize_payload(payload)

        assert [snippet.page_key for snippet in snippets] == ["t2", "t1"]

    def test_parallel_passages(self):
        """Test each snippet gets its own offsets."""
        payload = HighlightPayload(
            snippets=["{t1} <em>a</em> b", "{t22} c <em>d</em>"],
            passages=[_passage(0, [5], [6]), _passage(50, [58], [59])]
        )

        snippets = normalize_payload(payload)

        assert (snippets[0].hits[0].start, snippets[0].hits[0].end) == (0, 1)
        assert (snippets[1].hits[0].start, snippets[1].hits[0].end) == (2, 3)
