"""
Spotlight Service Module

This module selects the movies for the weekly spotlight themes and runs a
theme end to end: collage HTML from a strictly filtered selection, social
text for every platform from the unfiltered selection.

Themes:
- last-chance: films whose final performance falls within this week
- new-films: films first seen this week
"""

import random
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from config import settings
from config.theme_copy import LAST_CHANCE_COPY, NEW_FILMS_COPY
from data.loader import SpotlightData
from data.models import MovieSummary, SocialPostConfig
from data.output import load_template
from data.protocols import OutputStorage
from services.collage_service import render_collage_html
from services.protocols import MovieFinder
from services.social_text_service import SocialTextService
from services.thread_service import ThreadChunker, format_thread
from services.venue_service import build_venue_table
from utils.helpers import (
    datetime_to_ms, find_genre_id_by_name, format_date, format_rating,
    format_social_date, get_earliest_seen_timestamp, get_end_of_week,
    get_start_of_week, get_timestamp, get_zone, ms_to_iso, sort_key,
)
from utils.logger import get_logger

logger = get_logger(__name__)

NEW_FILM_EMOJI = "\U0001F3AC"


# =============================================================================
# Movie selection
# =============================================================================

def _is_feature_film(movie: Dict[str, Any], uncategorised_genre_id: Optional[str]) -> bool:
    """Feature length and not an uncategorised event."""
    duration = movie.get("duration")
    if not duration or duration < settings.MIN_DURATION_MS:
        return False
    if uncategorised_genre_id and uncategorised_genre_id in (movie.get("genres") or []):
        return False
    return True


def _passes_quality_filters(movie: Dict[str, Any], rating: Optional[float]) -> bool:
    """Strict collage filters shared by all themes: poster, cast and IMDB rating."""
    if not movie.get("posterPath"):
        return False
    # No actors usually means an event or a documentary
    if not movie.get("actors"):
        return False
    return bool(rating) and rating >= settings.MIN_IMDB_RATING


def _poster_url(movie: Dict[str, Any]) -> Optional[str]:
    poster_path = movie.get("posterPath")
    return settings.TMDB_IMAGE_BASE + poster_path if poster_path else None


def _venue_ids(movie: Dict[str, Any]) -> set:
    showings = movie.get("showings") or {}
    return {s.get("venueId") for s in showings.values() if s.get("venueId")}


def _venue_of_performance(movie: Dict[str, Any], performance: Optional[Dict[str, Any]]) -> Optional[str]:
    if not performance:
        return None
    showing = (movie.get("showings") or {}).get(performance.get("showingId")) or {}
    return showing.get("venueId")


def _rating_of(imdb_ratings: Dict[str, Any], movie_id: str) -> Optional[float]:
    return (imdb_ratings.get(movie_id) or {}).get("rating")


def _now(now: Optional[datetime]) -> datetime:
    return (now or datetime.now(get_zone())).astimezone(get_zone())


def find_last_chance_movies(catalogue: Dict[str, Any], imdb_ratings: Dict[str, Any],
                            uncategorised_genre_id: Optional[str], strict_filters: bool = True,
                            now: Optional[datetime] = None) -> List[MovieSummary]:
    """
    Find movies with no performances after the end of this week.

    Args:
        catalogue: Combined data with a "movies" table
        imdb_ratings: IMDB ratings keyed by movie id
        uncategorised_genre_id: Genre marking events rather than films, if known
        strict_filters: Also require poster, cast, a good rating and a limited run
        now: Reference time, defaults to the current local time

    Returns:
        List[MovieSummary]: Matching movies sorted by title, stamped with their
        last performance and its venue
    """
    now = _now(now)
    now_ms = datetime_to_ms(now)
    end_of_week_ms = datetime_to_ms(get_end_of_week(now))

    movies = []
    for movie_id, movie in (catalogue.get("movies") or {}).items():
        performances = movie.get("performances") or []
        if not performances:
            continue

        if not _is_feature_film(movie, uncategorised_genre_id):
            continue

        latest = max(performances, key=lambda p: p["time"])
        upcoming = [p for p in performances if p["time"] > now_ms]
        if not upcoming or latest["time"] > end_of_week_ms:
            continue

        movie_key = movie.get("id", movie_id)
        rating = _rating_of(imdb_ratings, movie_key)
        venue_count = len(_venue_ids(movie))

        if strict_filters:
            if not _passes_quality_filters(movie, rating):
                continue
            # Widely available films and likely blockbusters
            if len(upcoming) > settings.MAX_PERFORMANCES or venue_count > settings.MAX_VENUES:
                continue

        movies.append(MovieSummary(
            id=movie_key,
            title=movie.get("title") or "",
            poster_url=_poster_url(movie),
            rating=rating,
            performance_count=len(upcoming),
            venue_count=venue_count,
            timestamp=ms_to_iso(latest["time"]),
            venue_id=_venue_of_performance(movie, latest),
        ))

    return sorted(movies, key=lambda m: sort_key(m.title))


def find_new_films(catalogue: Dict[str, Any], imdb_ratings: Dict[str, Any],
                   uncategorised_genre_id: Optional[str], strict_filters: bool = True,
                   now: Optional[datetime] = None) -> List[MovieSummary]:
    """
    Find movies first seen this week that still have performances ahead.

    Args:
        catalogue: Combined data with a "movies" table
        imdb_ratings: IMDB ratings keyed by movie id
        uncategorised_genre_id: Genre marking events rather than films, if known
        strict_filters: Also require poster, cast and a good rating
        now: Reference time, defaults to the current local time

    Returns:
        List[MovieSummary]: Matching movies sorted by title, stamped with when
        they were first seen and the venue of their next performance
    """
    now = _now(now)
    now_ms = datetime_to_ms(now)
    start_of_week_ms = datetime_to_ms(get_start_of_week(now))

    movies = []
    for movie_id, movie in (catalogue.get("movies") or {}).items():
        earliest_seen = get_earliest_seen_timestamp(movie)
        if not earliest_seen or earliest_seen < start_of_week_ms:
            continue

        if not _is_feature_film(movie, uncategorised_genre_id):
            continue

        upcoming = sorted(
            (p for p in movie.get("performances") or [] if p["time"] > now_ms),
            key=lambda p: p["time"],
        )
        if not upcoming:
            continue

        movie_key = movie.get("id", movie_id)
        rating = _rating_of(imdb_ratings, movie_key)

        if strict_filters and not _passes_quality_filters(movie, rating):
            continue

        movies.append(MovieSummary(
            id=movie_key,
            title=movie.get("title") or "",
            poster_url=_poster_url(movie),
            rating=rating,
            performance_count=len(upcoming),
            venue_count=len(_venue_ids(movie)),
            timestamp=ms_to_iso(earliest_seen),
            venue_id=_venue_of_performance(movie, upcoming[0]),
        ))

    return sorted(movies, key=lambda m: sort_key(m.title))


# =============================================================================
# Line formatters
# =============================================================================

class LastChanceLineFormatter:
    """Movie line with the date of its final performance."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = _now(now)

    def __call__(self, movie: MovieSummary, emoji: str, compact: bool = False) -> str:
        when = format_social_date(movie.timestamp, compact=compact, now=self.now) if movie.timestamp else ""
        suffix = f" - {when}" if when else ""
        if compact:
            return f"{emoji} {movie.title}{suffix}\n"
        return f"   {emoji} {movie.title}{suffix}\n"


def format_new_film_line(movie: MovieSummary, emoji: str, compact: bool = False) -> str:
    """New films always use the clapper board; the compact form is the bare title."""
    if compact:
        return f"{movie.title}\n"
    return f"   {NEW_FILM_EMOJI} {movie.title}\n"


# =============================================================================
# Themes
# =============================================================================

@dataclass(frozen=True)
class SpotlightTheme:
    """Everything that distinguishes one spotlight theme from another.

    Attributes:
        name (str): Theme name, used for output file names.
        template_name (str): HTML template file for the collage.
        finder (MovieFinder): Selects the theme's movies.
        describe_movie (callable): One-line log description of a movie.
        social (SocialPostConfig): Social text configuration, platform unset.
        window_description (callable, optional): Log lines describing the time window.
        max_collage_movies (int): Posters in the collage at most.
    """
    name: str
    template_name: str
    finder: MovieFinder
    describe_movie: Callable[[MovieSummary], str]
    social: SocialPostConfig
    window_description: Optional[Callable[[datetime], List[str]]] = None
    max_collage_movies: int = settings.MAX_COLLAGE_MOVIES


def _describe_counts(movie: MovieSummary) -> str:
    return (
        f"{movie.title} ({format_rating(movie.rating) or 'n/a'} IMDB, "
        f"{movie.performance_count} showings, {movie.venue_count} venues"
    )


def _describe_last_chance(movie: MovieSummary) -> str:
    last = format_date(movie.timestamp) if movie.timestamp else "unknown"
    return f"{_describe_counts(movie)}, last: {last})"


def _describe_new_film(movie: MovieSummary) -> str:
    seen = format_date(movie.timestamp) if movie.timestamp else "unknown"
    return f"{_describe_counts(movie)}, seen: {seen})"


def last_chance_theme(now: Optional[datetime] = None) -> SpotlightTheme:
    """The last-chance theme, with dates rendered relative to now."""
    return SpotlightTheme(
        name="last-chance",
        template_name="last-chance.html",
        finder=find_last_chance_movies,
        describe_movie=_describe_last_chance,
        social=SocialPostConfig(
            platform=None,
            header=LAST_CHANCE_COPY["header"],
            intro_template=LAST_CHANCE_COPY["intro"],
            hashtags=LAST_CHANCE_COPY["hashtags"],
            footer=LAST_CHANCE_COPY["footer"],
            line_formatter=LastChanceLineFormatter(now),
            sort_by_timestamp=True,
            use_compact=True,
        ),
        window_description=lambda when: [f"End of week: {get_end_of_week(when).isoformat()}"],
    )


def new_films_theme(now: Optional[datetime] = None) -> SpotlightTheme:
    """The new-films theme."""
    return SpotlightTheme(
        name="new-films",
        template_name="new-films.html",
        finder=find_new_films,
        describe_movie=_describe_new_film,
        social=SocialPostConfig(
            platform=None,
            header=NEW_FILMS_COPY["header"],
            intro_template=NEW_FILMS_COPY["intro"],
            hashtags=NEW_FILMS_COPY["hashtags"],
            footer=NEW_FILMS_COPY["footer"],
            line_formatter=format_new_film_line,
            use_compact=True,
        ),
        window_description=lambda when: [
            f"Start of week: {get_start_of_week(when).isoformat()}",
            f"End of week: {get_end_of_week(when).isoformat()}",
        ],
    )


THEMES = {
    "last-chance": last_chance_theme,
    "new-films": new_films_theme,
}


# =============================================================================
# Runner
# =============================================================================

@dataclass
class SpotlightResult:
    """Rendered artifacts of one spotlight run, keyed by platform name for text."""
    name: str
    html: str
    texts: Dict[str, str] = field(default_factory=dict)
    collage_count: int = 0
    text_count: int = 0
    timestamp: str = ""


class SpotlightRunner:
    """Runs a spotlight theme: select, render everything, then write."""

    def __init__(self, data: SpotlightData, output_storage: OutputStorage,
                 rng: Optional[random.Random] = None, now: Optional[datetime] = None,
                 platforms: Optional[List[Optional[str]]] = None,
                 template_loader: Callable[[str], str] = load_template):
        """
        Initialize the spotlight runner.

        Args:
            data: Catalogue and ratings
            output_storage: Where the HTML and text files go
            rng: Random source for the collage and line emojis
            now: Reference time, defaults to the current local time
            platforms: Platforms to render, None meaning generic
            template_loader: Reads an HTML template by name
        """
        self.data = data
        self.output_storage = output_storage
        self.rng = rng or random.Random()
        self.now = _now(now)
        self.platforms = platforms if platforms is not None else settings.DEFAULT_PLATFORMS
        self.template_loader = template_loader
        self.social_text_service = SocialTextService(build_venue_table(data.venues), self.rng)

    def render_text(self, movies: List[MovieSummary], social: SocialPostConfig,
                    platform: Optional[str]) -> str:
        """
        Render the social text of one platform.

        Twitter gets the full text split into a numbered thread. Instagram gets
        compact text when the theme opts in, otherwise full text cut to the
        caption limit. Anything else gets the full text.
        """
        if platform == "twitter":
            config = replace(social, platform=platform, character_limit=None)
            full_text = self.social_text_service.generate_full_text(movies, config)
            return format_thread(ThreadChunker().chunk(full_text))

        if platform == "instagram":
            config = replace(social, platform=platform,
                             character_limit=settings.INSTAGRAM_CHARACTER_LIMIT)
            return self.social_text_service.generate_for_platform(movies, config)

        config = replace(social, platform=platform, character_limit=None)
        return self.social_text_service.generate_full_text(movies, config)

    def build(self, theme: SpotlightTheme) -> SpotlightResult:
        """
        Select and render every artifact of a theme without writing anything.

        The collage uses the strictly filtered selection; the social text uses
        the unfiltered one.
        """
        catalogue = self.data.catalogue
        uncategorised_genre_id = find_genre_id_by_name(
            catalogue.get("genres"), settings.UNCATEGORISED_GENRE_NAME
        )

        logger.info(f"Current time: {self.now.isoformat()}")
        if theme.window_description:
            for line in theme.window_description(self.now):
                logger.info(line)

        collage_movies = theme.finder(catalogue, self.data.imdb, uncategorised_genre_id,
                                      strict_filters=True, now=self.now)
        logger.info(f"Found {len(collage_movies)} movies for collage (filtered)")
        for movie in collage_movies:
            logger.debug(f"  - {theme.describe_movie(movie)}")

        limited = collage_movies[:theme.max_collage_movies]
        html = render_collage_html(limited, self.template_loader(theme.template_name), self.rng)

        text_movies = theme.finder(catalogue, self.data.imdb, uncategorised_genre_id,
                                   strict_filters=False, now=self.now)
        logger.info(f"Found {len(text_movies)} movies for social text (all)")

        texts = {}
        for platform in self.platforms:
            platform_name = platform or settings.GENERIC_PLATFORM_NAME
            texts[platform_name] = self.render_text(text_movies, theme.social, platform)

        return SpotlightResult(
            name=theme.name,
            html=html,
            texts=texts,
            collage_count=len(limited),
            text_count=len(text_movies),
            timestamp=get_timestamp(self.now),
        )

    def run(self, theme: SpotlightTheme) -> SpotlightResult:
        """Build a theme and write its HTML page and text files."""
        result = self.build(theme)

        self.output_storage.write_html(result.name, result.html)
        for platform_name, text in result.texts.items():
            self.output_storage.write_text(result.name, platform_name, text, result.timestamp)

        logger.info(f"Spotlight {result.name} complete: {result.collage_count} posters, "
                    f"{len(result.texts)} text files")
        return result
