"""
Custom Exception Classes for the Spotlight Generator

This module defines custom exceptions for better error handling and
categorization of failures across the application.
"""


class SpotlightError(Exception):
    """Base exception for all Spotlight Generator errors."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(SpotlightError):
    """Raised when configuration validation fails or a theme is misconfigured."""
    pass


# =============================================================================
# Data Errors
# =============================================================================

class DataError(SpotlightError):
    """Base exception for catalogue and rating data errors."""
    pass


class DataLoadError(DataError):
    """Raised when a data file is missing or cannot be parsed."""
    pass


class MovieNotFoundError(DataError):
    """Raised when a requested movie or program is not in the catalogue."""
    pass


class InvalidSelectionError(DataError):
    """Raised when a requested movie cannot be featured (no poster, wrong program size)."""
    pass


# =============================================================================
# Formatting Errors
# =============================================================================

class FormattingError(SpotlightError):
    """Base exception for formatting errors."""
    pass


class BudgetExceededError(FormattingError):
    """Raised when rendered text cannot fit within its character limit."""
    pass


class LayoutError(FormattingError):
    """Raised when a collage layout is requested for an invalid poster count."""
    pass


# =============================================================================
# Output Errors
# =============================================================================

class OutputError(SpotlightError):
    """Base exception for output errors."""
    pass


class OutputWriteError(OutputError):
    """Raised when a generated artifact cannot be written."""
    pass
