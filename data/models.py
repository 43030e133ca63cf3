"""
Data Models for the Spotlight Generator

This module contains data classes and models used throughout the application.
All models are built fresh for each spotlight run and are not mutated afterwards.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Tuple, Callable

from config import settings


@dataclass(frozen=True)
class MovieSummary:
    """A movie selected for a spotlight, flattened for formatting."""
    id: str
    title: str
    poster_url: Optional[str] = None
    rating: Optional[float] = None
    performance_count: int = 0
    venue_count: int = 0
    timestamp: str = ""                # ISO time: last performance or first seen, per theme
    venue_id: Optional[str] = None     # Venue tied to the timestamp


@dataclass(frozen=True)
class Venue:
    """A cinema from the venue table."""
    id: str
    name: str
    group_name: Optional[str] = None   # Chain label, e.g. "ODEON"
    socials: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, venue_id: str, raw: Dict[str, Any]) -> "Venue":
        """
        Build a Venue from a raw venue table entry.

        Args:
            venue_id: Key of the entry in the venue table
            raw: The raw entry with name, groupName and socials

        Returns:
            Venue: The parsed venue
        """
        return cls(
            id=venue_id,
            name=raw.get("name") or "",
            group_name=raw.get("groupName") or None,
            socials=dict(raw.get("socials") or {}),
        )

    def handle_for(self, platform: Optional[str]) -> Optional[str]:
        """Return the venue's handle on a platform, if it has one."""
        if not platform:
            return None
        return self.socials.get(platform) or None


@dataclass(frozen=True)
class DisplayItem:
    """An entry in a rendered venue list and the number of real venues behind it."""
    text: str
    venue_count: int = 1


@dataclass(frozen=True)
class PosterPlacement:
    """Position of one poster in a collage, in percent of the display area."""
    left_percent: float
    top_percent: float
    width_percent: float
    rotation_deg: float
    z_index: int


@dataclass(frozen=True)
class CollageLayout:
    """A complete collage layout sharing one poster width."""
    placements: Tuple[PosterPlacement, ...]
    width_percent: float
    cols: int
    rows: int


@dataclass(frozen=True)
class SocialPostConfig:
    """Configuration for rendering the social text of one theme on one platform."""
    platform: Optional[str]
    header: str
    intro_template: str
    hashtags: str
    footer: str
    venue_id_field: str = "venue_id"
    character_limit: Optional[int] = None
    line_formatter: Optional[Callable[..., str]] = None
    sort_by_timestamp: bool = False
    use_compact: bool = False
    top_picks_count: int = settings.COMPACT_TOP_PICKS_COUNT
    min_venue_films: int = settings.COMPACT_MIN_VENUE_FILMS


@dataclass(frozen=True)
class RatingSet:
    """Ratings for one movie from the three providers; empty values mean unknown."""
    imdb: str = ""
    letterboxd: str = ""
    rt_critics: Optional[int] = None
    rt_audience: Optional[int] = None

    @property
    def rt_critics_fresh(self) -> bool:
        return self.rt_critics is not None and self.rt_critics >= settings.RT_FRESH_THRESHOLD

    @property
    def rt_audience_fresh(self) -> bool:
        return self.rt_audience is not None and self.rt_audience >= settings.RT_FRESH_THRESHOLD

    @property
    def has_rotten_tomatoes(self) -> bool:
        return self.rt_critics is not None or self.rt_audience is not None
