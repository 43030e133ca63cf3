"""
Spotlight Generator Application

This is the main entry point for the Spotlight Generator application.
It selects films from the cinema catalogue and renders a spotlight for one
theme: an HTML page for the screenshot step and social text per platform.

Usage:
    python main.py last-chance
    python main.py new-films --seed 42
    python main.py single-movie <TMDB_ID>
    python main.py program <PROGRAM_ID>
"""

import sys
import random
import argparse
import logging
from datetime import datetime
from typing import Optional, List

from config import settings
from config.validators import validate_settings, get_config_summary
from utils.logger import get_logger, setup_file_logging
from utils.exceptions import (
    SpotlightError, ConfigurationError, DataError, FormattingError, OutputError
)
from utils.helpers import get_timestamp, get_zone
from data.loader import load_data
from data.output import FileOutputStorage, load_template
from data.protocols import OutputStorage
from services.spotlight_service import SpotlightRunner, THEMES
from services.feature_service import build_single_movie_spotlight, build_program_spotlight

# Set up logging
logger = get_logger(__name__)

FEATURE_BUILDERS = {
    "single-movie": build_single_movie_spotlight,
    "program": build_program_spotlight,
}

USAGE_EXAMPLES = {
    "single-movie": ("TMDB_ID", "550"),
    "program": ("PROGRAM_ID", "097696a9"),
}


class SpotlightGenerator:
    """
    Main application class for the Spotlight Generator.

    This class orchestrates loading the catalogue, rendering one spotlight,
    and writing its artifacts.
    """

    def __init__(self, data_dir: Optional[str] = None, output_storage: Optional[OutputStorage] = None,
                 seed: Optional[int] = None, now: Optional[datetime] = None):
        """
        Initialize the Spotlight Generator application.

        Args:
            data_dir: Directory holding the catalogue and rating files
            output_storage: Where artifacts are written, defaults to the configured directories
            seed: Seed for collage layout and emoji choice, random if not given
            now: Reference time, defaults to the current local time
        """
        # Validate settings
        validate_settings()

        self.data_dir = data_dir or settings.DATA_DIR
        self.output_storage = output_storage or FileOutputStorage()
        self.rng = random.Random(seed)
        self.now = now or datetime.now(get_zone())

    def run(self, spotlight: str, identifier: Optional[str] = None) -> bool:
        """
        Generate one spotlight.

        Args:
            spotlight: Theme name (last-chance, new-films, single-movie, program)
            identifier: Catalogue id, required by single-movie and program

        Returns:
            bool: True if the spotlight was generated
        """
        data = load_data(self.data_dir)

        if spotlight in THEMES:
            theme = THEMES[spotlight](self.now)
            runner = SpotlightRunner(data, self.output_storage, rng=self.rng, now=self.now)
            result = runner.run(theme)
            if not result.text_count:
                logger.warning(f"No movies matched the {spotlight} spotlight this week")
                return False
            return True

        builder = FEATURE_BUILDERS[spotlight]
        feature = builder(data, identifier, load_template(f"{spotlight}.html"), now=self.now)

        self.output_storage.write_html(feature.name, feature.html)
        self.output_storage.write_text(feature.name, None, feature.text, get_timestamp(self.now))
        logger.info(f"Spotlight {feature.name} complete: {feature.title}")
        return True


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Spotlight Generator Application')
    parser.add_argument('spotlight', choices=list(THEMES) + list(FEATURE_BUILDERS),
                        help='Spotlight to generate')
    parser.add_argument('identifier', nargs='?', default=None,
                        help='TMDB ID (single-movie) or generated program ID (program)')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for a reproducible layout')
    parser.add_argument('--data-dir', type=str, default=None, help='Directory with combined and matched data')
    parser.add_argument('--log-file', type=str, default='spotlight.log', help='Log file path')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='INFO', help='Logging level')
    return parser.parse_args(argv)


def print_usage(spotlight: str) -> None:
    """Print the usage message for a spotlight that needs an identifier."""
    placeholder, example = USAGE_EXAMPLES[spotlight]
    print(f"Usage: python main.py {spotlight} <{placeholder}>", file=sys.stderr)
    print(f"Example: python main.py {spotlight} {example}", file=sys.stderr)
    if spotlight == "program":
        print("\nNote: Use the generated ID (hex string), not a TMDB ID.", file=sys.stderr)


def main(argv: Optional[List[str]] = None):
    """Main entry point for the application."""
    # Parse command line arguments
    args = parse_arguments(argv)

    if args.spotlight in FEATURE_BUILDERS and not args.identifier:
        print_usage(args.spotlight)
        return 1

    # Set up logging
    log_level = getattr(logging, args.log_level)
    setup_file_logging(args.log_file, log_level)

    # Log application start
    logger.info(f"Starting Spotlight Generator: {args.spotlight}")

    try:
        generator = SpotlightGenerator(data_dir=args.data_dir, seed=args.seed)
        logger.debug(f"Configuration: {get_config_summary()}")
        success = generator.run(args.spotlight, args.identifier)

        # Report status
        if success:
            logger.info("Spotlight Generator completed successfully")
            exit_code = 0
        else:
            logger.warning("Spotlight Generator completed with warnings or errors")
            exit_code = 1

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        exit_code = 1
    except DataError as e:
        logger.error(f"Data error: {e}")
        exit_code = 1
    except FormattingError as e:
        logger.error(f"Formatting error: {e}", exc_info=True)
        exit_code = 1
    except OutputError as e:
        logger.error(f"Output error: {e}", exc_info=True)
        exit_code = 1
    except SpotlightError as e:
        logger.error(f"Spotlight error: {e}", exc_info=True)
        exit_code = 1
    except Exception as e:
        logger.error(f"Unhandled exception in Spotlight Generator: {e}", exc_info=True)
        exit_code = 2

    # Log application end
    logger.info(f"Spotlight Generator application finished with exit code {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
