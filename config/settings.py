"""
Configuration Settings for the Spotlight Generator

This module centralizes all configuration settings for the Spotlight Generator,
including environment variables, directory locations, and application constants.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Determine the application root directory
APP_ROOT = Path(__file__).resolve().parent.parent

# Load environment variables from .env file
load_dotenv(dotenv_path=os.path.join(APP_ROOT, '.env'))

# =============================================================================
# Directory Settings
# =============================================================================

DATA_DIR = os.getenv("SPOTLIGHT_DATA_DIR", str(APP_ROOT))
SITE_DIR = os.getenv("SPOTLIGHT_SITE_DIR", os.path.join(APP_ROOT, "site"))
OUTPUT_DIR = os.getenv("SPOTLIGHT_OUTPUT_DIR", os.path.join(APP_ROOT, "output"))
TEMPLATES_DIR = os.path.join(APP_ROOT, "templates")

# Data files, relative to DATA_DIR
COMBINED_DATA_FILE = os.path.join("combined-data", "combined-data.json")
IMDB_RATINGS_FILE = os.path.join("matched-data", "imdb.json")
LETTERBOXD_RATINGS_FILE = os.path.join("matched-data", "letterboxd.json")
ROTTEN_TOMATOES_RATINGS_FILE = os.path.join("matched-data", "rottentomatoes.json")

# Week boundaries and social dates are computed in this zone
TIMEZONE = os.getenv("SPOTLIGHT_TIMEZONE", "Europe/London")

# =============================================================================
# Selection Settings
# =============================================================================

TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p/w500"
MIN_DURATION_MS = 60 * 60 * 1000     # Feature length: 60 minutes
MIN_IMDB_RATING = 5                  # Strict filter: minimum IMDB rating
MAX_PERFORMANCES = 4                 # Strict filter: skip widely available films
MAX_VENUES = 2                       # Strict filter: skip likely blockbusters
UNCATEGORISED_GENRE_NAME = "Uncategorised"
MAX_COLLAGE_MOVIES = 100             # Posters in one collage

# =============================================================================
# Venue Display Settings
# =============================================================================

MAX_DISPLAY_ITEMS = 7                # Venue entries before grouping/truncating

# =============================================================================
# Social Media Platform Settings
# =============================================================================

# None is the generic platform (no handles, no limit)
DEFAULT_PLATFORMS = ["twitter", "instagram", None]
GENERIC_PLATFORM_NAME = "generic"

TWITTER_CHARACTER_LIMIT = 280        # Per message in a thread
THREAD_COUNTER_RESERVE = 10          # Characters kept free for the "(i/N)" counter
INSTAGRAM_CHARACTER_LIMIT = 2000     # Caption budget (platform max is 2200)

COMPACT_TOP_PICKS_COUNT = 15         # Initial "top picks" size before shrinking
COMPACT_MIN_VENUE_FILMS = 2          # Venues listed in compact mode need this many films

# =============================================================================
# Rating Settings
# =============================================================================

RT_FRESH_THRESHOLD = 60              # Rotten Tomatoes score counted as fresh
