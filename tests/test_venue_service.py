"""
Tests for Venue Service - Venue List Aggregation

Tests cover venue resolution, chain grouping, lexical ordering, truncation
with "N more" entries, and plain-text and HTML rendering.
"""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from data.models import DisplayItem
from services.venue_service import (
    aggregate_venues, build_display_items, build_venue_table, join_display_texts,
    pluralize_group_name, resolve_venues, truncate_display_items,
)


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def mixed_venues(venue_factory):
    """Two Picturehouses, five ODEONs and an independent: eight venues."""
    venues = [
        venue_factory("ph-central", "Picturehouse Central", group_name="Picturehouse"),
        venue_factory("ph-hackney", "Hackney Picturehouse", group_name="Picturehouse"),
        venue_factory("rio", "Rio"),
    ]
    for branch in ["Camden", "Holloway", "Leicester Square", "Streatham", "Swiss Cottage"]:
        venues.append(venue_factory(f"odeon-{branch}", f"ODEON {branch}", group_name="ODEON"))
    return venues


# =============================================================================
# Resolution Tests
# =============================================================================

class TestResolveVenues:
    """Tests for looking up venue ids."""

    def test_drops_unknown_ids(self, venue_factory):
        """Ids missing from the venue table are skipped."""
        table = {"rio": venue_factory("rio", "Rio")}

        venues = resolve_venues(["rio", "gone"], table)

        assert [v.id for v in venues] == ["rio"]

    def test_deduplicates_preserving_first_occurrence(self, venue_factory):
        """Repeated ids appear once, in first-seen order."""
        table = {
            "rio": venue_factory("rio", "Rio"),
            "bfi": venue_factory("bfi", "BFI Southbank"),
        }

        venues = resolve_venues(["bfi", "rio", "bfi", "rio"], table)

        assert [v.id for v in venues] == ["bfi", "rio"]

    def test_build_venue_table_parses_raw_entries(self, raw_venues):
        """Raw venue entries become Venue objects keyed by id."""
        table = build_venue_table(raw_venues)

        assert table["odeon-camden"].group_name == "ODEON"
        assert table["rio"].handle_for("twitter") == "riocinema"
        assert table["barbican"].handle_for("instagram") is None


# =============================================================================
# Grouping Tests
# =============================================================================

class TestBuildDisplayItems:
    """Tests for chain grouping and ordering."""

    def test_seven_or_fewer_venues_are_listed_individually(self, venue_factory):
        """Chains are not grouped when there are at most seven venues."""
        venues = [
            venue_factory("o1", "ODEON Camden", group_name="ODEON"),
            venue_factory("o2", "ODEON Holloway", group_name="ODEON"),
            venue_factory("rio", "Rio"),
        ]

        items = build_display_items(venues)

        assert [i.text for i in items] == ["ODEON Camden", "ODEON Holloway", "Rio"]
        assert all(i.venue_count == 1 for i in items)

    def test_groups_chains_when_more_than_seven(self, mixed_venues):
        """Eight venues collapse into chain counts plus independents."""
        items = build_display_items(mixed_venues)

        assert items == [
            DisplayItem("2 Picturehouses", 2),
            DisplayItem("5 ODEONs", 5),
            DisplayItem("Rio", 1),
        ]

    def test_single_member_group_keeps_venue_name(self, venue_factory):
        """A chain with one venue shows the venue's own name."""
        venues = [venue_factory(f"v{i}", f"Venue {i}") for i in range(7)]
        venues.append(venue_factory("curzon", "Curzon Soho", group_name="Curzon"))

        items = build_display_items(venues)

        assert DisplayItem("Curzon Soho", 1) in items

    def test_items_are_sorted_case_insensitively(self, venue_factory):
        """Lexical order ignores case."""
        venues = [venue_factory("a", "rio"), venue_factory("b", "Barbican"), venue_factory("c", "castle")]

        items = build_display_items(venues)

        assert [i.text for i in items] == ["Barbican", "castle", "rio"]

    def test_pluralize_group_name(self):
        """An 's' is added unless the label already ends in one."""
        assert pluralize_group_name("ODEON") == "ODEONs"
        assert pluralize_group_name("Everyman Cinemas") == "Everyman Cinemas"


# =============================================================================
# Truncation Tests
# =============================================================================

class TestTruncateDisplayItems:
    """Tests for folding long lists into an "N more" entry."""

    def test_short_list_is_unchanged(self):
        """Seven items or fewer are returned as they are."""
        items = [DisplayItem(f"Venue {i}") for i in range(7)]

        assert truncate_display_items(items) == items

    def test_keeps_six_and_counts_the_rest(self):
        """Nine items become six plus "3 more"."""
        items = [DisplayItem(f"Venue {i}") for i in range(9)]

        truncated = truncate_display_items(items)

        assert len(truncated) == 7
        assert truncated[-1] == DisplayItem("3 more", 3)

    def test_more_entry_counts_venues_not_items(self, venue_factory):
        """A folded chain entry adds its venue count to "N more"."""
        venues = [venue_factory(f"o{i}", f"ODEON {i}", group_name="ODEON") for i in range(3)]
        venues += [venue_factory(f"v{c}", f"{c} Cinema") for c in "ABCDEFGH"]

        items = truncate_display_items(build_display_items(venues))

        assert [i.text for i in items] == [
            "3 ODEONs", "A Cinema", "B Cinema", "C Cinema", "D Cinema", "E Cinema", "3 more"
        ]

    def test_venue_count_is_preserved(self, venue_factory):
        """The venue counts of the final items add up to the number of venues."""
        venues = [venue_factory(f"o{i}", f"ODEON {i}", group_name="ODEON") for i in range(4)]
        venues += [venue_factory(f"p{i}", f"Picturehouse {i}", group_name="Picturehouse") for i in range(2)]
        venues += [venue_factory(f"v{i}", f"Independent {i}") for i in range(9)]

        items = truncate_display_items(build_display_items(venues))

        assert sum(i.venue_count for i in items) == len(venues)


# =============================================================================
# Rendering Tests
# =============================================================================

class TestJoinAndRender:
    """Tests for joining entries as prose."""

    @pytest.mark.parametrize("texts,expected", [
        ([], ""),
        (["A"], "A"),
        (["A", "B"], "A & B"),
        (["A", "B", "C"], "A, B, & C"),
        (["A", "B", "C", "D"], "A, B, C, & D"),
    ])
    def test_join_display_texts(self, texts, expected):
        """Entries are joined with commas and a final ampersand."""
        assert join_display_texts(texts) == expected

    def test_aggregate_mixed_venues(self, mixed_venues):
        """Eight venues render as chain counts and an independent."""
        summary = aggregate_venues(mixed_venues)

        assert summary.text == "2 Picturehouses, 5 ODEONs, & Rio"
        assert summary.venue_count == 8
        assert summary.html == (
            '<span class="venue-name">2 Picturehouses</span>, '
            '<span class="venue-name">5 ODEONs</span>, & '
            '<span class="venue-name">Rio</span>'
        )

    def test_html_escapes_venue_names(self, venue_factory):
        """Venue names are escaped inside their spans."""
        summary = aggregate_venues([venue_factory("pc", "Prince Charles <Leicester> & Co")])

        assert summary.html == '<span class="venue-name">Prince Charles &lt;Leicester&gt; &amp; Co</span>'
        assert summary.text == "Prince Charles <Leicester> & Co"

    def test_empty_venue_list(self):
        """No venues render as empty strings."""
        summary = aggregate_venues([])

        assert summary.items == ()
        assert summary.text == ""
        assert summary.html == ""
        assert summary.venue_count == 0
