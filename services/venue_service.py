"""
Venue Service Module

This module turns a set of venues into a compact, human-readable phrase list.
Long lists are grouped by cinema chain ("5 ODEONs") and truncated with a
"N more" entry that still accounts for every venue it stands in for.
"""

from dataclasses import dataclass
from itertools import groupby
from typing import Dict, Iterable, List, Optional, Tuple

from config import settings
from data.models import DisplayItem, Venue
from utils.helpers import escape_html, sort_key
from utils.logger import get_logger

logger = get_logger(__name__)

VENUE_NAME_HTML = '<span class="venue-name">{}</span>'


@dataclass(frozen=True)
class VenueSummary:
    """Display items for a venue set and their plain-text and HTML renderings."""
    items: Tuple[DisplayItem, ...]
    text: str
    html: str
    venue_count: int


def build_venue_table(raw_venues: Dict[str, Dict]) -> Dict[str, Venue]:
    """Parse the raw venue table of the catalogue, keyed by venue id."""
    return {venue_id: Venue.from_dict(venue_id, raw) for venue_id, raw in (raw_venues or {}).items()}


def resolve_venues(venue_ids: Iterable[str], venue_table: Dict[str, Venue]) -> List[Venue]:
    """
    Look up venue ids, dropping unknown ids and duplicates.

    Args:
        venue_ids: Venue identifiers, possibly repeated
        venue_table: Venue lookup keyed by id

    Returns:
        List[Venue]: Known venues in first-seen order
    """
    venues = []
    seen = set()
    for venue_id in venue_ids:
        if venue_id in seen:
            continue
        seen.add(venue_id)
        venue = venue_table.get(venue_id)
        if venue is None:
            logger.debug(f"Venue {venue_id} not in venue table, skipping")
            continue
        venues.append(venue)
    return venues


def pluralize_group_name(group_name: str) -> str:
    """Pluralize a chain label: "ODEON" -> "ODEONs", "Everyman Cinemas" stays."""
    return group_name if group_name.endswith("s") else f"{group_name}s"


def _group_items(venues: List[Venue]) -> List[DisplayItem]:
    """Collapse venues sharing a chain label into one item per chain."""
    grouped = sorted((v for v in venues if v.group_name), key=lambda v: sort_key(v.group_name))
    ungrouped = sorted((v for v in venues if not v.group_name), key=lambda v: sort_key(v.name))

    items = []
    for group_name, members in groupby(grouped, key=lambda v: v.group_name):
        members = list(members)
        if len(members) == 1:
            items.append(DisplayItem(text=members[0].name, venue_count=1))
        else:
            items.append(DisplayItem(
                text=f"{len(members)} {pluralize_group_name(group_name)}",
                venue_count=len(members),
            ))

    items.extend(DisplayItem(text=v.name, venue_count=1) for v in ungrouped)
    return items


def build_display_items(venues: List[Venue],
                        max_items: int = settings.MAX_DISPLAY_ITEMS) -> List[DisplayItem]:
    """
    Build display items for a deduplicated venue list.

    Venues are only grouped by chain when there are more than max_items of them.
    The result is sorted lexically by display text.
    """
    if len(venues) <= max_items:
        items = [DisplayItem(text=v.name, venue_count=1) for v in venues]
    else:
        items = _group_items(venues)
    return sorted(items, key=lambda item: sort_key(item.text))


def truncate_display_items(items: List[DisplayItem],
                           max_items: int = settings.MAX_DISPLAY_ITEMS) -> List[DisplayItem]:
    """
    Keep at most max_items entries, folding the rest into a "N more" entry.

    N counts venues, not display items, so a folded "3 ODEONs" adds 3.
    """
    if len(items) <= max_items:
        return list(items)

    kept = list(items[:max_items - 1])
    more_count = sum(item.venue_count for item in items[max_items - 1:])
    kept.append(DisplayItem(text=f"{more_count} more", venue_count=more_count))
    return kept


def join_display_texts(texts: List[str]) -> str:
    """
    Join names as prose: "", "A", "A & B", "A, B, & C".

    Args:
        texts: Already formatted entries

    Returns:
        str: The joined phrase
    """
    if not texts:
        return ""
    if len(texts) == 1:
        return texts[0]
    if len(texts) == 2:
        return f"{texts[0]} & {texts[1]}"
    return f"{', '.join(texts[:-1])}, & {texts[-1]}"


def format_venue_items(items: List[DisplayItem], as_html: bool = False) -> str:
    """Render display items as plain text or as escaped, styled HTML."""
    if as_html:
        return join_display_texts([VENUE_NAME_HTML.format(escape_html(item.text)) for item in items])
    return join_display_texts([item.text for item in items])


def aggregate_venues(venues: List[Venue],
                     max_items: Optional[int] = None) -> VenueSummary:
    """
    Group, sort, truncate and render a deduplicated venue list.

    Args:
        venues: Venues to describe, already resolved and deduplicated
        max_items: Display entry limit, defaults to settings.MAX_DISPLAY_ITEMS

    Returns:
        VenueSummary: Final items with their text and HTML renderings
    """
    max_items = max_items or settings.MAX_DISPLAY_ITEMS
    items = truncate_display_items(build_display_items(venues, max_items), max_items)

    logger.debug(f"Venues ({len(venues)} total): {', '.join(i.text for i in items) or 'none'}")

    return VenueSummary(
        items=tuple(items),
        text=format_venue_items(items),
        html=format_venue_items(items, as_html=True),
        venue_count=len(venues),
    )
