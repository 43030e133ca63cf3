"""
Social Text Service Module

This module renders the social media text for a spotlight: movies grouped by
venue, wrapped in a themed header and a hashtag footer.

Two renderings are supported:
- Full: every venue and every movie, optionally cut to a character limit
  with a "+more" marker where venue blocks had to be left out.
- Compact: a "top picks" list plus the busiest venues, shrunk until it fits
  the platform's character limit.
"""

import random
from dataclasses import dataclass
from datetime import datetime, timezone
from itertools import groupby
from typing import Dict, List, Optional, Sequence, Tuple

from config.theme_copy import MORE_MARKER, PROMO_LINE
from config.validators import COUNT_PLACEHOLDER, validate_social_config
from data.models import MovieSummary, SocialPostConfig, Venue
from services.protocols import LineFormatter
from utils.exceptions import BudgetExceededError
from utils.helpers import format_rating, parse_iso, sort_key
from utils.logger import get_logger

logger = get_logger(__name__)

EMOJIS = [
    "\U0001F3AC",
    "\U0001F3A5",
    "\U0001F4FD",
    "✨",
    "⭐",
    "\U0001F37F",
]
HEADER_EMOJI = "\U0001F3AC"
INTRO_EMOJI = "\U0001F39F\U0001F37F"
VENUE_PIN = "\U0001F4CD"
SEPARATOR = "---"
TOP_PICKS_TITLE = "⭐ TOP PICKS"
VENUES_TITLE = f"{VENUE_PIN} VENUES"

UNKNOWN_VENUE_ID = "unknown"
UNKNOWN_VENUE_NAME = "Unknown venue"
COMPACT_DROPPED_PREFIX = "These "
TOP_PICKS_STEP = 2

_NO_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class VenueGroup:
    """Movies sharing one venue, in display order."""
    venue_id: str
    name: str
    venue: Optional[Venue]
    movies: Tuple[MovieSummary, ...]


def default_line_formatter(movie: MovieSummary, emoji: str, compact: bool = False) -> str:
    """Movie line with its IMDB rating when known."""
    rating_text = f" ({format_rating(movie.rating)} IMDB)" if movie.rating else ""
    if compact:
        return f"{emoji} {movie.title}{rating_text}\n"
    return f"   {emoji} {movie.title}{rating_text}\n"


def condense_intro(intro_template: str) -> str:
    """Drop the leading "These " so the intro starts with the count."""
    if intro_template.startswith(COMPACT_DROPPED_PREFIX):
        return intro_template[len(COMPACT_DROPPED_PREFIX):]
    return intro_template


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class SocialTextService:
    """Service for rendering spotlight social text for a platform."""

    def __init__(self, venues: Dict[str, Venue], rng: Optional[random.Random] = None):
        """
        Initialize the social text service.

        Args:
            venues: Venue lookup keyed by id, read-only for the whole run
            rng: Random source for line emojis
        """
        self.venues = venues
        self.rng = rng or random.Random()

    def _random_emoji(self) -> str:
        return self.rng.choice(EMOJIS)

    def _venue_name(self, venue_id: Optional[str]) -> str:
        venue = self.venues.get(venue_id) if venue_id else None
        return venue.name if venue and venue.name else UNKNOWN_VENUE_NAME

    @staticmethod
    def _handle_text(venue: Optional[Venue], platform: Optional[str]) -> str:
        handle = venue.handle_for(platform) if venue else None
        return f" (@{handle})" if handle else ""

    # -------------------------------------------------------------------------
    # Grouping
    # -------------------------------------------------------------------------

    def group_by_venue(self, movies: Sequence[MovieSummary], config: SocialPostConfig) -> Tuple[VenueGroup, ...]:
        """
        Bucket movies by the venue named in config.venue_id_field.

        Buckets are ordered by venue name; movies inside a bucket by title, or by
        timestamp when the theme orders by time.

        Args:
            movies: Movies to group
            config: Social configuration of the theme

        Returns:
            Tuple[VenueGroup, ...]: Ordered venue groups
        """
        def venue_id_of(movie: MovieSummary) -> str:
            return getattr(movie, config.venue_id_field, None) or UNKNOWN_VENUE_ID

        def movie_key(movie: MovieSummary):
            if config.sort_by_timestamp:
                moment = parse_iso(movie.timestamp) if movie.timestamp else _NO_TIMESTAMP
                return not movie.timestamp, moment, sort_key(movie.title)
            return sort_key(movie.title)

        groups = []
        for venue_id, members in groupby(sorted(movies, key=venue_id_of), key=venue_id_of):
            groups.append(VenueGroup(
                venue_id=venue_id,
                name=self._venue_name(venue_id),
                venue=self.venues.get(venue_id),
                movies=tuple(sorted(members, key=movie_key)),
            ))

        return tuple(sorted(groups, key=lambda g: (sort_key(g.name), g.venue_id)))

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    def header_block(self, config: SocialPostConfig, count: int, compact: bool = False) -> str:
        """Emoji-wrapped header and intro; the full form adds the promo line and a separator."""
        intro_template = condense_intro(config.intro_template) if compact else config.intro_template
        intro = intro_template.replace(COUNT_PLACEHOLDER, str(count))

        text = f"{HEADER_EMOJI} {config.header} {HEADER_EMOJI}\n\n"
        text += f"{intro} {INTRO_EMOJI}\n\n"
        if not compact:
            text += f"{PROMO_LINE}\n\n"
            text += f"{SEPARATOR}\n\n"
        return text

    @staticmethod
    def footer_block(config: SocialPostConfig) -> str:
        return f"{SEPARATOR}\n\n{config.hashtags}\n\n{config.footer}"

    def venue_block(self, group: VenueGroup, config: SocialPostConfig) -> str:
        """Venue name and handle, one line per movie, then a blank line."""
        formatter: LineFormatter = config.line_formatter or default_line_formatter

        text = f"{VENUE_PIN} {group.name}{self._handle_text(group.venue, config.platform)}\n"
        for movie in group.movies:
            text += formatter(movie, self._random_emoji(), compact=False)
        text += "\n"
        return text

    # -------------------------------------------------------------------------
    # Full mode
    # -------------------------------------------------------------------------

    def generate_full_text(self, movies: Sequence[MovieSummary], config: SocialPostConfig) -> str:
        """
        Render every venue block between the header and footer.

        With a character limit, venue blocks are added in order until the next one
        would not fit; the rest are replaced by a "+more" marker.

        Args:
            movies: Movies for the social text
            config: Social configuration for the platform

        Returns:
            str: The post text

        Raises:
            ConfigurationError: If the configuration is invalid
            BudgetExceededError: If header, marker and footer alone exceed the limit
        """
        validate_social_config(config)

        header = self.header_block(config, len(movies))
        footer = self.footer_block(config)
        blocks = [self.venue_block(group, config) for group in self.group_by_venue(movies, config)]

        if config.character_limit is None:
            return header + "".join(blocks) + footer

        return self._fit_blocks(header, blocks, footer, config.character_limit)

    @staticmethod
    def _fit_blocks(header: str, blocks: List[str], footer: str, limit: int) -> str:
        marker = f"{MORE_MARKER}\n\n"
        body = ""

        for index, block in enumerate(blocks):
            # Leave room for the marker unless this is the last block
            reserve = "" if index == len(blocks) - 1 else marker
            if len(header) + len(body) + len(block) + len(reserve) + len(footer) > limit:
                logger.info(f"Omitting {len(blocks) - index} of {len(blocks)} venue blocks to fit {limit} characters")
                text = header + body + marker + footer
                break
            body += block
        else:
            text = header + body + footer

        if len(text) > limit:
            raise BudgetExceededError(
                f"Header and footer need {len(text)} characters, over the limit of {limit}"
            )
        return text

    # -------------------------------------------------------------------------
    # Compact mode
    # -------------------------------------------------------------------------

    def _top_picks_section(self, movies: Sequence[MovieSummary], config: SocialPostConfig, count: int) -> str:
        formatter: LineFormatter = config.line_formatter or default_line_formatter
        ranked = sorted(
            movies,
            key=lambda m: (m.rating is None, -(m.rating or 0), sort_key(m.title)),
        )

        text = f"{TOP_PICKS_TITLE}\n"
        for movie in ranked[:count]:
            line = formatter(movie, self._random_emoji(), compact=True).rstrip("\n")
            venue_name = self._venue_name(getattr(movie, config.venue_id_field, None))
            text += f"{line} @ {venue_name}\n"
        text += "\n"
        return text

    def _venues_section(self, groups: Sequence[VenueGroup], config: SocialPostConfig) -> str:
        listed = [g for g in groups if len(g.movies) >= config.min_venue_films]
        remaining = len(groups) - len(listed)

        text = f"{VENUES_TITLE}\n"
        for group in listed:
            handle_text = self._handle_text(group.venue, config.platform)
            text += f"{group.name}{handle_text} - {_plural(len(group.movies), 'film')}\n"
        if remaining:
            text += f"{remaining_venues_line(remaining, config.min_venue_films)}\n"
        text += "\n"
        return text

    def render_compact(self, movies: Sequence[MovieSummary], config: SocialPostConfig,
                       top_picks_count: int) -> str:
        """Render the compact text once, with a fixed number of top picks."""
        groups = self.group_by_venue(movies, config)

        text = self.header_block(config, len(movies), compact=True)
        if movies:
            text += self._top_picks_section(movies, config, top_picks_count)
            text += self._venues_section(groups, config)
        text += self.footer_block(config)
        return text

    def generate_compact_text(self, movies: Sequence[MovieSummary], config: SocialPostConfig) -> str:
        """
        Render the compact text, shrinking the top picks until it fits.

        The top picks count starts at config.top_picks_count and drops by two on
        each attempt; the search stops once the count would reach zero.

        Args:
            movies: Movies for the social text
            config: Social configuration with a character limit

        Returns:
            str: Text no longer than config.character_limit

        Raises:
            ConfigurationError: If the configuration is invalid
            BudgetExceededError: If no top picks count makes the text fit
        """
        validate_social_config(config)
        limit = config.character_limit

        count = config.top_picks_count
        while count > 0:
            text = self.render_compact(movies, config, count)
            if limit is None or len(text) <= limit:
                return text
            logger.debug(f"Compact text is {len(text)} characters with {count} top picks, limit {limit}")
            count -= TOP_PICKS_STEP

        raise BudgetExceededError(
            f"Compact text for {config.platform or 'generic'} does not fit {limit} characters "
            f"with any top picks count from {config.top_picks_count}"
        )

    def generate_for_platform(self, movies: Sequence[MovieSummary], config: SocialPostConfig) -> str:
        """Compact text when the theme opts in and a limit applies, full text otherwise."""
        if config.use_compact and config.character_limit is not None:
            return self.generate_compact_text(movies, config)
        return self.generate_full_text(movies, config)


def remaining_venues_line(remaining: int, min_venue_films: int) -> str:
    """Summary line for venues too small to list, e.g. "+4 more venues with 1 film each"."""
    venues = "venue" if remaining == 1 else "venues"
    if min_venue_films <= 2:
        detail = "1 film" if remaining == 1 else "1 film each"
    else:
        detail = f"fewer than {min_venue_films} films" + ("" if remaining == 1 else " each")
    return f"+{remaining} more {venues} with {detail}"
