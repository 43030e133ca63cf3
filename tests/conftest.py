"""
Shared Test Fixtures for the Spotlight Generator

This module provides common fixtures used across all test modules.
Fixtures include a fixed clock, a seeded random source, log capture, an
in-memory output storage, and data factories for venues, movie summaries
and raw catalogue entries.
"""

import pytest
import random
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List
from zoneinfo import ZoneInfo
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

LONDON = ZoneInfo("Europe/London")


# =============================================================================
# Clock and Randomness Fixtures
# =============================================================================

@pytest.fixture
def fixed_now():
    """
    A fixed reference time: Wednesday 5 February 2025, 12:00 in London.

    The week around it runs from Monday 3 February 00:00 to Sunday 9 February
    23:59:59.999. London is on GMT in February, so local time equals UTC.
    """
    return datetime(2025, 2, 5, 12, 0, tzinfo=LONDON)


@pytest.fixture
def ms_from_now(fixed_now):
    """
    Factory for epoch milliseconds relative to fixed_now.

    Usage:
        def test_something(ms_from_now):
            tomorrow = ms_from_now(days=1)
    """
    def _ms(days: float = 0, hours: float = 0) -> int:
        moment = fixed_now + timedelta(days=days, hours=hours)
        return int(moment.timestamp() * 1000)

    return _ms


@pytest.fixture
def seeded_rng():
    """A random source with a fixed seed for reproducible layouts and emojis."""
    return random.Random(1234)


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def capture_logs():
    """
    Capture log messages for assertion in tests.

    Captures actual log records, propagated from the application logger to the
    root logger, for inspection.

    Returns:
        list: A list that will contain captured log records.
    """
    import logging

    class LogCapture(logging.Handler):
        def __init__(self):
            super().__init__()
            self.records = []

        def emit(self, record):
            self.records.append(record)

    handler = LogCapture()
    handler.setLevel(logging.DEBUG)

    root_logger = logging.getLogger()
    original_level = root_logger.level
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(handler)

    yield handler.records

    root_logger.removeHandler(handler)
    root_logger.setLevel(original_level)


# =============================================================================
# Data Model Factories
# =============================================================================

@pytest.fixture
def venue_factory():
    """
    Factory fixture for creating Venue test objects.

    Usage:
        def test_venues(venue_factory):
            venue = venue_factory("odeon-1", "ODEON Camden", group_name="ODEON")

    Returns:
        callable: A factory function for creating Venue objects.
    """
    from data.models import Venue

    def _create_venue(
        venue_id: str = 'venue-1',
        name: str = 'Test Cinema',
        group_name: Optional[str] = None,
        socials: Optional[Dict[str, str]] = None,
    ) -> Venue:
        return Venue(id=venue_id, name=name, group_name=group_name, socials=socials or {})

    return _create_venue


@pytest.fixture
def movie_summary_factory():
    """
    Factory fixture for creating MovieSummary test objects.

    Usage:
        def test_text(movie_summary_factory):
            movie = movie_summary_factory(title="Alien", rating=8.5, venue_id="rio")

    Returns:
        callable: A factory function for creating MovieSummary objects.
    """
    from data.models import MovieSummary

    counter = {'next': 1}

    def _create_summary(
        title: str = 'Test Film',
        movie_id: Optional[str] = None,
        rating: Optional[float] = 7.0,
        venue_id: Optional[str] = 'venue-1',
        timestamp: str = '2025-02-07T20:00:00.000Z',
        poster_url: Optional[str] = 'https://image.tmdb.org/t/p/w500/poster.jpg',
        performance_count: int = 2,
        venue_count: int = 1,
    ) -> MovieSummary:
        if movie_id is None:
            movie_id = f"movie-{counter['next']}"
            counter['next'] += 1
        return MovieSummary(
            id=movie_id,
            title=title,
            poster_url=poster_url,
            rating=rating,
            performance_count=performance_count,
            venue_count=venue_count,
            timestamp=timestamp,
            venue_id=venue_id,
        )

    return _create_summary


@pytest.fixture
def catalogue_movie_factory(ms_from_now):
    """
    Factory fixture for raw catalogue movie entries.

    Performances are given per venue as hour offsets from fixed_now; each venue
    gets one showing.

    Usage:
        def test_finder(catalogue_movie_factory):
            movie = catalogue_movie_factory("m1", "Alien", venue_performances={"rio": [24, 48]})

    Returns:
        callable: A factory function for creating raw movie dictionaries.
    """
    def _create_movie(
        movie_id: str = 'movie-1',
        title: str = 'Test Film',
        venue_performances: Optional[Dict[str, List[float]]] = None,
        duration: Optional[int] = 2 * 60 * 60 * 1000,
        poster_path: Optional[str] = '/poster.jpg',
        actors: Optional[List[str]] = None,
        genres: Optional[List[str]] = None,
        seen_hours: Optional[float] = -24,
        **extra: Any,
    ) -> Dict[str, Any]:
        if venue_performances is None:
            venue_performances = {'venue-1': [24]}

        showings = {}
        performances = []
        for index, (venue_id, hours) in enumerate(venue_performances.items(), start=1):
            showing_id = f"{movie_id}-s{index}"
            showings[showing_id] = {'venueId': venue_id}
            if seen_hours is not None:
                showings[showing_id]['seen'] = ms_from_now(hours=seen_hours)
            performances.extend({'showingId': showing_id, 'time': ms_from_now(hours=h)} for h in hours)

        movie = {
            'id': movie_id,
            'title': title,
            'duration': duration,
            'posterPath': poster_path,
            'actors': ['Test Actor'] if actors is None else actors,
            'genres': genres or [],
            'showings': showings,
            'performances': performances,
        }
        movie.update(extra)
        return movie

    return _create_movie


@pytest.fixture
def raw_venues():
    """A raw venue table as found in the combined data."""
    return {
        'rio': {'name': 'Rio Cinema', 'socials': {'twitter': 'riocinema', 'instagram': 'rio_cinema'}},
        'odeon-camden': {'name': 'ODEON Camden', 'groupName': 'ODEON'},
        'barbican': {'name': 'Barbican', 'socials': {'twitter': 'BarbicanCentre'}},
    }


# =============================================================================
# Dependency Injection Fixtures
# =============================================================================

class MockOutputStorage:
    """Mock implementation of OutputStorage protocol for testing.

    This class implements the OutputStorage protocol interface, allowing
    runners to be tested without touching the filesystem.

    Usage:
        def test_with_di(mock_output_storage):
            runner = SpotlightRunner(data, output_storage=mock_output_storage)
            # ... test code
            assert mock_output_storage.html_writes
    """

    def __init__(self):
        """Initialize the mock storage with empty tracking lists."""
        self.html_writes = []
        self.text_writes = []

    def write_html(self, name: str, html: str) -> str:
        self.html_writes.append((name, html))
        return f"memory://site/{name}.html"

    def write_text(self, name: str, platform_name: Optional[str], text: str, timestamp: str) -> str:
        self.text_writes.append((name, platform_name, text, timestamp))
        return f"memory://output/{name}-{platform_name}_{timestamp}.txt"

    def texts_by_platform(self) -> Dict[Optional[str], str]:
        return {platform: text for _, platform, text, _ in self.text_writes}


@pytest.fixture
def mock_output_storage():
    """
    Provide a MockOutputStorage instance for dependency injection tests.

    Returns:
        MockOutputStorage: A fresh mock storage instance.
    """
    return MockOutputStorage()
