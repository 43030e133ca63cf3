"""
Tests for Spotlight Generator Main Application

Tests cover argument parsing, usage errors, exit codes for each error
category, and end-to-end generation into an in-memory storage.
"""

import pytest
from unittest.mock import MagicMock, patch
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from main import SpotlightGenerator, main, parse_arguments
from data.loader import SpotlightData
from utils.exceptions import (
    BudgetExceededError, ConfigurationError, DataLoadError, MovieNotFoundError,
    OutputWriteError, SpotlightError,
)


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def spotlight_data(catalogue_movie_factory, raw_venues):
    """A catalogue with one film in its final week."""
    movie = catalogue_movie_factory("alien", "Alien", {"rio": [24]}, director="Ridley Scott", year=1979)
    return SpotlightData(
        catalogue={"movies": {"alien": movie}, "venues": raw_venues},
        imdb={"alien": {"rating": 8.5}},
    )


@pytest.fixture
def generator(mock_output_storage, fixed_now):
    """A generator writing to memory at a fixed time."""
    return SpotlightGenerator(data_dir="/data", output_storage=mock_output_storage, seed=7, now=fixed_now)


# =============================================================================
# Argument Parsing Tests
# =============================================================================

class TestParseArguments:
    """Tests for command line parsing."""

    def test_theme_defaults(self):
        """A theme needs no identifier and has default options."""
        args = parse_arguments(["last-chance"])

        assert args.spotlight == "last-chance"
        assert args.identifier is None
        assert args.seed is None
        assert args.log_level == "INFO"
        assert args.log_file == "spotlight.log"

    def test_feature_with_options(self):
        """Identifier and options are parsed."""
        args = parse_arguments(["single-movie", "550", "--seed", "42", "--data-dir", "/tmp/data",
                                "--log-level", "DEBUG"])

        assert args.identifier == "550"
        assert args.seed == 42
        assert args.data_dir == "/tmp/data"
        assert args.log_level == "DEBUG"

    def test_unknown_spotlight_is_rejected(self):
        """argparse exits on an unknown spotlight name."""
        with pytest.raises(SystemExit):
            parse_arguments(["top-ten"])


# =============================================================================
# Exit Code Tests
# =============================================================================

class TestMainExitCodes:
    """Tests for how main reports outcomes."""

    @pytest.mark.parametrize("spotlight,placeholder", [
        ("single-movie", "<TMDB_ID>"),
        ("program", "<PROGRAM_ID>"),
    ])
    def test_missing_identifier_prints_usage(self, spotlight, placeholder, capsys):
        """Feature spotlights without an identifier print usage and fail."""
        with patch('main.SpotlightGenerator') as mock_generator_cls:
            exit_code = main([spotlight])

        assert exit_code == 1
        assert f"Usage: python main.py {spotlight} {placeholder}" in capsys.readouterr().err
        mock_generator_cls.assert_not_called()

    def test_success(self):
        """A generated spotlight exits with 0."""
        with patch('main.setup_file_logging'), patch('main.SpotlightGenerator') as mock_generator_cls:
            mock_generator_cls.return_value.run.return_value = True

            exit_code = main(["new-films", "--seed", "3"])

        assert exit_code == 0
        mock_generator_cls.assert_called_once_with(data_dir=None, seed=3)
        mock_generator_cls.return_value.run.assert_called_once_with("new-films", None)

    def test_nothing_generated(self):
        """An empty week exits with 1."""
        with patch('main.setup_file_logging'), patch('main.SpotlightGenerator') as mock_generator_cls:
            mock_generator_cls.return_value.run.return_value = False

            assert main(["last-chance"]) == 1

    @pytest.mark.parametrize("error", [
        ConfigurationError("bad timezone"),
        DataLoadError("missing file"),
        MovieNotFoundError("no such movie"),
        BudgetExceededError("too long"),
        OutputWriteError("disk full"),
        SpotlightError("other"),
    ])
    def test_domain_errors_exit_with_1(self, error, capture_logs):
        """Every application error is logged and exits with 1."""
        with patch('main.setup_file_logging'), patch('main.SpotlightGenerator') as mock_generator_cls:
            mock_generator_cls.return_value.run.side_effect = error

            exit_code = main(["single-movie", "550"])

        assert exit_code == 1
        assert any(str(error) in r.getMessage() for r in capture_logs if r.levelname == "ERROR")

    def test_unexpected_error_exits_with_2(self):
        """Anything else is a crash and exits with 2."""
        with patch('main.setup_file_logging'), patch('main.SpotlightGenerator') as mock_generator_cls:
            mock_generator_cls.return_value.run.side_effect = KeyError("boom")

            assert main(["program", "abc123"]) == 2

    def test_log_level_is_applied(self):
        """The chosen level is passed to file logging."""
        with patch('main.setup_file_logging') as mock_setup, patch('main.SpotlightGenerator'):
            main(["last-chance", "--log-level", "WARNING", "--log-file", "run.log"])

        mock_setup.assert_called_once_with("run.log", 30)


# =============================================================================
# Generator Tests
# =============================================================================

class TestSpotlightGenerator:
    """Tests for generating spotlights into storage."""

    def test_invalid_settings_fail_at_startup(self):
        """Configuration is validated when the generator is created."""
        with patch('main.validate_settings', side_effect=ConfigurationError("bad")):
            with pytest.raises(ConfigurationError):
                SpotlightGenerator()

    def test_theme_run(self, generator, spotlight_data, mock_output_storage):
        """A theme writes its page and one text per platform."""
        with patch('main.load_data', return_value=spotlight_data) as mock_load:
            assert generator.run("last-chance") is True

        mock_load.assert_called_once_with("/data")
        assert [name for name, _ in mock_output_storage.html_writes] == ["last-chance"]
        assert set(mock_output_storage.texts_by_platform()) == {"twitter", "instagram", "generic"}

    def test_empty_theme_run(self, generator, mock_output_storage):
        """A week without films still writes, but reports failure."""
        empty = SpotlightData(catalogue={"movies": {}})

        with patch('main.load_data', return_value=empty):
            assert generator.run("new-films") is False

        assert len(mock_output_storage.html_writes) == 1

    def test_feature_run(self, generator, spotlight_data, mock_output_storage):
        """A feature spotlight writes its page and a single text file."""
        template_loader = MagicMock(return_value="<h1>{{MOVIE_TITLE}}</h1>")

        with patch('main.load_data', return_value=spotlight_data), \
             patch('main.load_template', template_loader):
            assert generator.run("single-movie", "alien") is True

        template_loader.assert_called_once_with("single-movie.html")
        assert mock_output_storage.html_writes == [("single-movie", "<h1>Alien</h1>")]
        name, platform, text, timestamp = mock_output_storage.text_writes[0]
        assert (name, platform, timestamp) == ("single-movie", None, "2025-02-05_1200")
        assert "Alien (1979)" in text
        assert "Directed by Ridley Scott" in text

    def test_feature_errors_propagate(self, generator, spotlight_data, mock_output_storage):
        """Lookup failures reach the caller and nothing is written."""
        with patch('main.load_data', return_value=spotlight_data), \
             patch('main.load_template', return_value=""):
            with pytest.raises(MovieNotFoundError):
                generator.run("program", "missing")

        assert mock_output_storage.html_writes == []
