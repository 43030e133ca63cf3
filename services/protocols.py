"""
Service Protocol Definitions

This module defines typing.Protocol interfaces for the pluggable parts of a
spotlight theme. These protocols keep themes swappable and easy to test.

Protocols defined:
- LineFormatter: Renders one movie line of social text
- MovieFinder: Selects the movies for a theme from the catalogue
"""

from datetime import datetime
from typing import Protocol, Optional, List, Dict, Any

from data.models import MovieSummary


class LineFormatter(Protocol):
    """Protocol for rendering one movie as a line of social text.

    Implementations must return a single line ending in a newline. The compact
    variant is used on character-limited platforms.
    """

    def __call__(self, movie: MovieSummary, emoji: str, compact: bool = False) -> str:
        """Format a movie line.

        Args:
            movie: The movie to describe.
            emoji: Decorative emoji chosen for this line.
            compact: Whether to use the short form.

        Returns:
            The formatted line, including its trailing newline.
        """
        ...


class MovieFinder(Protocol):
    """Protocol for selecting the movies of a theme.

    The same finder runs twice per spotlight: once with strict filters for the
    collage and once without for the social text.
    """

    def __call__(
        self,
        catalogue: Dict[str, Any],
        imdb_ratings: Dict[str, Any],
        uncategorised_genre_id: Optional[str],
        strict_filters: bool = True,
        now: Optional[datetime] = None
    ) -> List[MovieSummary]:
        """Select movies for a theme.

        Args:
            catalogue: Movies keyed by id.
            imdb_ratings: IMDB ratings keyed by movie id.
            uncategorised_genre_id: Genre id marking non-film events, if known.
            strict_filters: Apply the stricter collage-only predicates.
            now: Reference time for "upcoming" and week windows.

        Returns:
            Selected movies sorted by title.
        """
        ...
