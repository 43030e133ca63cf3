"""
Feature Service Module

This module builds spotlights that feature one film, or a two-film program,
rather than a collage: a detail page with poster, director, synopsis and
ratings from three providers, plus a matching social text.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from config import settings
from config.theme_copy import PROGRAM_COPY, PROMO_LINE, SINGLE_MOVIE_COPY
from data.loader import SpotlightData
from data.models import RatingSet
from services.venue_service import aggregate_venues, build_venue_table, resolve_venues
from utils.exceptions import InvalidSelectionError, MovieNotFoundError
from utils.helpers import datetime_to_ms, escape_html, fill_template, format_rating, get_zone, safe_get
from utils.logger import get_logger

logger = get_logger(__name__)

DAY_MS = 24 * 60 * 60 * 1000
PROGRAM_SIZE = 2
RATING_SEPARATOR = "  •  "
HIDDEN = "hidden"

HEADER_EMOJI = "\U0001F3AC"
MOVIE_EMOJI = "\U0001F3A5"
VENUE_PIN = "\U0001F4CD"


@dataclass(frozen=True)
class ShowingSummary:
    """Upcoming performances of a movie across its showings."""
    venue_ids: Tuple[str, ...] = ()
    performance_count: int = 0
    last_performance_ms: Optional[int] = None


@dataclass
class FeatureSpotlight:
    """A rendered feature spotlight: HTML page and social text."""
    name: str
    title: str
    html: str
    text: str
    venue_names: List[str] = field(default_factory=list)


# =============================================================================
# Lookups
# =============================================================================

def find_movie(catalogue: Dict[str, Any], movie_id: str) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
    """
    Find a movie by id, at the top level or inside a program's included movies.

    Args:
        catalogue: Combined data with a "movies" table
        movie_id: Catalogue key or TMDB id of the movie

    Returns:
        Tuple: The movie and the program containing it (None at the top level)

    Raises:
        MovieNotFoundError: If no movie has that id
    """
    movies = catalogue.get("movies") or {}
    if movie_id in movies:
        return movies[movie_id], None

    for parent_id, parent in movies.items():
        for included in parent.get("includedMovies") or []:
            if str(included.get("id")) == movie_id:
                logger.info(f"Found as included movie within: {parent.get('title')} ({parent_id})")
                return included, parent

    raise MovieNotFoundError(f"Movie with TMDB ID {movie_id} not found in data")


def collect_upcoming_showings(source: Dict[str, Any], now: datetime) -> ShowingSummary:
    """
    Count upcoming performances per showing and collect their venues.

    Showings without an upcoming performance or without a venue are ignored.
    """
    now_ms = datetime_to_ms(now)
    performances = source.get("performances") or []

    venue_ids = []
    performance_count = 0
    last_performance_ms = None

    for showing_id, showing in (source.get("showings") or {}).items():
        upcoming = [p["time"] for p in performances if p.get("showingId") == showing_id and p["time"] > now_ms]
        venue_id = showing.get("venueId")
        if not upcoming or not venue_id:
            continue

        if venue_id not in venue_ids:
            venue_ids.append(venue_id)
        performance_count += len(upcoming)
        last_performance_ms = max([last_performance_ms or 0] + upcoming)

    return ShowingSummary(tuple(venue_ids), performance_count, last_performance_ms)


def describe_showing_duration(last_performance_ms: Optional[int], now: datetime) -> str:
    """
    Describe how far away the last performance is, e.g. "the next 2 weeks".

    Returns an empty string when there is no upcoming performance.
    """
    now_ms = datetime_to_ms(now)
    if not last_performance_ms or last_performance_ms <= now_ms:
        return ""

    days = math.ceil((last_performance_ms - now_ms) / DAY_MS)
    if days <= 3:
        return f"the next {days} day{'' if days == 1 else 's'}"
    if days <= 7:
        return "the next week"
    if days <= 14:
        return "the next 2 weeks"
    if days <= 21:
        return "the next 3 weeks"
    if days <= 35:
        return "the next month"
    if days <= 60:
        return "the next 2 months"
    # Halves round up
    return f"the next {math.floor(days / 30 + 0.5)} months"


def get_ratings_for_movie(movie_id: str, imdb: Dict[str, Any], letterboxd: Dict[str, Any],
                          rotten_tomatoes: Dict[str, Any]) -> RatingSet:
    """
    Gather the IMDB, Letterboxd and Rotten Tomatoes ratings of a movie.

    Args:
        movie_id: Movie id the rating tables are keyed by
        imdb: IMDB ratings
        letterboxd: Letterboxd ratings
        rotten_tomatoes: Rotten Tomatoes scores

    Returns:
        RatingSet: Display-ready ratings, empty where unknown
    """
    imdb_rating = safe_get(imdb, movie_id, "rating")
    letterboxd_rating = safe_get(letterboxd, movie_id, "rating")

    return RatingSet(
        imdb=format_rating(imdb_rating) if imdb_rating else "",
        letterboxd=f"{float(letterboxd_rating):.1f}" if letterboxd_rating else "",
        rt_critics=safe_get(rotten_tomatoes, movie_id, "critics", "all", "score") or None,
        rt_audience=safe_get(rotten_tomatoes, movie_id, "audience", "all", "score") or None,
    )


def get_director_name(movie: Dict[str, Any], people: Optional[Dict[str, Any]]) -> str:
    """
    Resolve the director of a movie through the people table.

    The director field usually holds a person id; a non-numeric value that is
    not in the table is taken to be the name itself.
    """
    director_id = movie.get("director") or (movie.get("directors") or [None])[0]
    if not director_id:
        return ""

    name = safe_get(people or {}, str(director_id), "name")
    if name:
        return name
    if isinstance(director_id, str) and not director_id.isdigit():
        return director_id
    return ""


def get_release_year(movie: Dict[str, Any]) -> str:
    release_date = movie.get("releaseDate")
    if release_date:
        try:
            return str(datetime.fromisoformat(str(release_date).replace('Z', '+00:00')).year)
        except ValueError:
            logger.debug(f"Unparseable release date {release_date} for {movie.get('title')}")
    return str(movie.get("year") or "")


def get_synopsis(movie: Dict[str, Any]) -> str:
    return movie.get("overview") or movie.get("synopsis") or ""


# =============================================================================
# Text rendering
# =============================================================================

def format_rating_parts(ratings: RatingSet) -> str:
    """Ratings in the order Letterboxd, IMDB, Rotten Tomatoes, joined by bullets."""
    parts = []
    if ratings.letterboxd:
        parts.append(f"\U0001F49A {ratings.letterboxd} /5 Letterboxd")
    if ratings.imdb:
        parts.append(f"⭐ {ratings.imdb} /10 IMDB")
    if ratings.has_rotten_tomatoes:
        scores = []
        if ratings.rt_critics is not None:
            scores.append(f"\U0001F345 {ratings.rt_critics}%")
        if ratings.rt_audience is not None:
            scores.append(f"\U0001F37F {ratings.rt_audience}%")
        parts.append(f"{' '.join(scores)} Rotten Tomatoes")
    return RATING_SEPARATOR.join(parts)


def describe_showings(performance_count: int, duration: str, venues_text: str) -> str:
    """
    Sentence about where and for how long a film is showing.

    A single performance reads "in 2 weeks"; several read "over the next 2 weeks".
    """
    performances = "performance" if performance_count == 1 else "performances"
    if performance_count > 0 and duration:
        if performance_count == 1:
            when = f"in {duration.replace('the next ', '')}"
        else:
            when = f"over {duration}"
        return f"Showing {performance_count} {performances} {when}, at {venues_text}"
    if performance_count > 0:
        return f"Showing {performance_count} {performances}, at {venues_text}"
    return f"Now showing at {venues_text}"


def _title_line(title: str, year: str) -> str:
    return f"{title} ({year})" if year else title


def _closing(showing_text: str, copy: Dict[str, str]) -> str:
    text = f"{VENUE_PIN} {showing_text}\n\n"
    text += f"{PROMO_LINE}\n\n"
    text += "---\n\n"
    text += f"{copy['hashtags']}\n\n"
    text += copy["footer"]
    return text


# =============================================================================
# HTML tokens
# =============================================================================

def movie_tokens(prefix: str, movie: Dict[str, Any], ratings: RatingSet,
                 director: str, year: str) -> Dict[str, str]:
    """Template replacements for one featured movie, all named with the prefix."""
    def hidden_unless(value) -> str:
        return "" if value else HIDDEN

    tokens = {
        "TITLE": escape_html(movie.get("title") or ""),
        "YEAR": year,
        "POSTER_URL": escape_html(settings.TMDB_IMAGE_BASE + movie["posterPath"]),
        "DIRECTOR": escape_html(director),
        "SYNOPSIS": escape_html(get_synopsis(movie)),
        "IMDB_RATING": ratings.imdb,
        "LETTERBOXD_RATING": ratings.letterboxd,
        "RT_CRITICS_SCORE": f"{ratings.rt_critics}%" if ratings.rt_critics is not None else "",
        "RT_AUDIENCE_SCORE": f"{ratings.rt_audience}%" if ratings.rt_audience is not None else "",
        "RT_CRITICS_CLASS": "fresh" if ratings.rt_critics_fresh else "rotten",
        "RT_AUDIENCE_CLASS": "fresh" if ratings.rt_audience_fresh else "rotten",
        "IMDB_HIDDEN": hidden_unless(ratings.imdb),
        "LETTERBOXD_HIDDEN": hidden_unless(ratings.letterboxd),
        "RT_HIDDEN": hidden_unless(ratings.has_rotten_tomatoes),
        "RT_CRITICS_HIDDEN": hidden_unless(ratings.rt_critics is not None),
        "RT_AUDIENCE_HIDDEN": hidden_unless(ratings.rt_audience is not None),
    }
    return {f"{prefix}{key}": value for key, value in tokens.items()}


def _ratings_for(movie_id: str, data: SpotlightData) -> RatingSet:
    return get_ratings_for_movie(movie_id, data.imdb, data.letterboxd, data.rotten_tomatoes)


def _now(now: Optional[datetime]) -> datetime:
    return (now or datetime.now(get_zone())).astimezone(get_zone())


# =============================================================================
# Spotlights
# =============================================================================

def build_single_movie_spotlight(data: SpotlightData, movie_id: str, template: str,
                                 now: Optional[datetime] = None) -> FeatureSpotlight:
    """
    Build the spotlight page and text for one movie.

    An included movie uses its program's showings, since that is where its
    performances are listed.

    Args:
        data: Catalogue and ratings
        movie_id: Catalogue key or TMDB id of the movie
        template: single-movie HTML template
        now: Reference time, defaults to the current local time

    Returns:
        FeatureSpotlight: The rendered page and text

    Raises:
        MovieNotFoundError: If the movie is not in the catalogue
        InvalidSelectionError: If the movie has no poster
    """
    now = _now(now)
    movie, parent = find_movie(data.catalogue, movie_id)
    title = movie.get("title") or ""

    logger.info(f"Generating spotlight for: {title}")
    logger.info(f"  TMDB ID: {movie_id}")
    logger.info(f"  Poster path: {movie.get('posterPath') or 'none'}")

    if not movie.get("posterPath"):
        raise InvalidSelectionError(f"Movie {title} ({movie_id}) does not have a poster")

    showings = collect_upcoming_showings(parent or movie, now)
    duration = describe_showing_duration(showings.last_performance_ms, now)
    venues = aggregate_venues(resolve_venues(showings.venue_ids, build_venue_table(data.venues)))

    year = get_release_year(movie)
    director = get_director_name(movie, data.catalogue.get("people"))
    synopsis = get_synopsis(movie)
    ratings = _ratings_for(movie_id, data)

    tokens = movie_tokens("MOVIE_", movie, ratings, director, year)
    tokens["VENUES_TEXT"] = venues.html
    html = fill_template(template, tokens)

    text = f"{HEADER_EMOJI} {SINGLE_MOVIE_COPY['header']} {HEADER_EMOJI}\n\n"
    text += f"{_title_line(title, year)}\n"
    if director:
        text += f"Directed by {director}\n"
    text += "\n"
    if synopsis:
        text += f"{synopsis}\n\n"
    rating_text = format_rating_parts(ratings)
    if rating_text:
        text += f"{rating_text}\n\n"
    text += _closing(describe_showings(showings.performance_count, duration, venues.text), SINGLE_MOVIE_COPY)

    return FeatureSpotlight(
        name="single-movie",
        title=title,
        html=html,
        text=text,
        venue_names=[item.text for item in venues.items],
    )


def build_program_spotlight(data: SpotlightData, program_id: str, template: str,
                            now: Optional[datetime] = None) -> FeatureSpotlight:
    """
    Build the double feature spotlight page and text for a two-film program.

    Args:
        data: Catalogue and ratings
        program_id: Generated catalogue key of the program, not a TMDB id
        template: program HTML template
        now: Reference time, defaults to the current local time

    Returns:
        FeatureSpotlight: The rendered page and text

    Raises:
        MovieNotFoundError: If the program is not in the catalogue
        InvalidSelectionError: If the program does not hold exactly two films
                               or a film has no poster
    """
    now = _now(now)
    program = data.movies.get(program_id)
    if program is None:
        raise MovieNotFoundError(
            f"Program with ID {program_id} not found in data. "
            f"Make sure you're using a generated ID, not a TMDB ID"
        )

    program_title = program.get("title") or ""
    included = program.get("includedMovies") or []
    if not included:
        raise InvalidSelectionError(
            f"Program {program_title} has no included movies, use a single movie spotlight instead"
        )
    if len(included) != PROGRAM_SIZE:
        raise InvalidSelectionError(
            f"Program {program_title} has {len(included)} included movies, only {PROGRAM_SIZE}-movie programs are supported"
        )

    missing = [m.get("title") or "untitled" for m in included if not m.get("posterPath")]
    if missing:
        raise InvalidSelectionError(f"Missing posters for: {', '.join(missing)}")

    logger.info(f"Generating program spotlight for: {program_title}")
    for index, movie in enumerate(included, start=1):
        logger.info(f"  Movie {index}: {movie.get('title')}")

    showings = collect_upcoming_showings(program, now)
    duration = describe_showing_duration(showings.last_performance_ms, now)
    venues = aggregate_venues(resolve_venues(showings.venue_ids, build_venue_table(data.venues)))
    program_year = get_release_year(program)

    tokens = {
        "PROGRAM_TITLE": escape_html(program_title),
        "PROGRAM_YEAR": program_year,
        "PROGRAM_SYNOPSIS": escape_html(get_synopsis(program)),
        "VENUES_TEXT": venues.html,
    }

    text = f"{HEADER_EMOJI} {PROGRAM_COPY['header']} {HEADER_EMOJI}\n\n"
    text += f"{_title_line(program_title, program_year)}\n\n"

    for index, movie in enumerate(included, start=1):
        year = get_release_year(movie)
        director = get_director_name(movie, data.catalogue.get("people"))
        ratings = _ratings_for(str(movie.get("id")), data)
        tokens.update(movie_tokens(f"MOVIE_{index}_", movie, ratings, director, year))

        text += f"{MOVIE_EMOJI} {_title_line(movie.get('title') or '', year)}\n"
        if director:
            text += f"Directed by {director}\n"
        rating_text = format_rating_parts(ratings)
        if rating_text:
            text += f"{rating_text}\n"
        text += "\n"

    text += _closing(describe_showings(showings.performance_count, duration, venues.text), PROGRAM_COPY)

    return FeatureSpotlight(
        name="program",
        title=program_title,
        html=fill_template(template, tokens),
        text=text,
        venue_names=[item.text for item in venues.items],
    )
