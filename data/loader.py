"""
Data Loader Module

This module reads the combined catalogue and the three rating tables from the
data directory. The files are produced by an upstream pipeline and are read
as-is; nothing here validates their contents beyond parsing.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from config import settings
from utils.exceptions import DataLoadError
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class SpotlightData:
    """Catalogue and ratings for one spotlight run.

    Attributes:
        catalogue (dict): Combined data with movies, venues, genres and people.
        imdb (dict): IMDB ratings keyed by movie id.
        letterboxd (dict): Letterboxd ratings keyed by movie id.
        rotten_tomatoes (dict): Rotten Tomatoes scores keyed by movie id.
    """
    catalogue: Dict[str, Any]
    imdb: Dict[str, Any] = field(default_factory=dict)
    letterboxd: Dict[str, Any] = field(default_factory=dict)
    rotten_tomatoes: Dict[str, Any] = field(default_factory=dict)

    @property
    def movies(self) -> Dict[str, Any]:
        return self.catalogue.get("movies") or {}

    @property
    def venues(self) -> Dict[str, Any]:
        return self.catalogue.get("venues") or {}


def read_json(path: str) -> Any:
    """
    Read and parse one JSON file.

    Args:
        path: File to read

    Returns:
        The parsed JSON value

    Raises:
        DataLoadError: If the file is missing or is not valid JSON
    """
    try:
        with open(path, 'r', encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise DataLoadError(f"Data file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise DataLoadError(f"Could not read {path}: {e}") from e


def load_data(data_dir: Optional[str] = None) -> SpotlightData:
    """
    Load the combined catalogue and rating tables.

    Args:
        data_dir: Directory containing combined-data/ and matched-data/,
                  defaults to settings.DATA_DIR

    Returns:
        SpotlightData: The loaded catalogue and ratings

    Raises:
        DataLoadError: If any file is missing or invalid
    """
    data_dir = data_dir or settings.DATA_DIR

    paths = {
        "catalogue": os.path.join(data_dir, settings.COMBINED_DATA_FILE),
        "imdb": os.path.join(data_dir, settings.IMDB_RATINGS_FILE),
        "letterboxd": os.path.join(data_dir, settings.LETTERBOXD_RATINGS_FILE),
        "rotten_tomatoes": os.path.join(data_dir, settings.ROTTEN_TOMATOES_RATINGS_FILE),
    }

    loaded = {}
    for key, path in paths.items():
        logger.info(f"Reading {key} data from: {path}")
        loaded[key] = read_json(path)

    if not isinstance(loaded["catalogue"], dict) or "movies" not in loaded["catalogue"]:
        raise DataLoadError(f"Combined data has no movies: {paths['catalogue']}")

    data = SpotlightData(**loaded)
    logger.info(f"Total movies in data: {len(data.movies)}")
    return data
