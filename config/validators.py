"""
Configuration Validation for the Spotlight Generator

This module contains configuration validation logic for application settings
and for the per-theme social text configuration.
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from utils.exceptions import ConfigurationError

COUNT_PLACEHOLDER = "{{count}}"


def validate_settings():
    """
    Validate that all required settings are properly configured.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    # Import settings here to avoid circular imports
    from config import settings

    errors = []

    try:
        ZoneInfo(settings.TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        errors.append(f"Unknown timezone: {settings.TIMEZONE}")

    if not settings.DATA_DIR:
        errors.append("SPOTLIGHT_DATA_DIR must not be empty")

    if not settings.TMDB_IMAGE_BASE.startswith("http"):
        errors.append(f"TMDB_IMAGE_BASE must be an http(s) URL, got {settings.TMDB_IMAGE_BASE}")

    # Validate numeric settings are within reasonable bounds
    numeric_validations = [
        ("MIN_IMDB_RATING", settings.MIN_IMDB_RATING, 0, 10),
        ("MAX_PERFORMANCES", settings.MAX_PERFORMANCES, 1, 1000),
        ("MAX_VENUES", settings.MAX_VENUES, 1, 1000),
        ("MAX_COLLAGE_MOVIES", settings.MAX_COLLAGE_MOVIES, 1, 500),
        ("MAX_DISPLAY_ITEMS", settings.MAX_DISPLAY_ITEMS, 2, 50),
        ("TWITTER_CHARACTER_LIMIT", settings.TWITTER_CHARACTER_LIMIT, 50, 25000),
        ("INSTAGRAM_CHARACTER_LIMIT", settings.INSTAGRAM_CHARACTER_LIMIT, 100, 2200),
        ("COMPACT_TOP_PICKS_COUNT", settings.COMPACT_TOP_PICKS_COUNT, 1, 100),
        ("COMPACT_MIN_VENUE_FILMS", settings.COMPACT_MIN_VENUE_FILMS, 1, 100),
        ("RT_FRESH_THRESHOLD", settings.RT_FRESH_THRESHOLD, 0, 100),
    ]

    for name, value, min_val, max_val in numeric_validations:
        if value < min_val or value > max_val:
            errors.append(f"{name} must be between {min_val} and {max_val}, got {value}")

    if settings.MIN_DURATION_MS <= 0:
        errors.append(f"MIN_DURATION_MS must be positive, got {settings.MIN_DURATION_MS}")

    if settings.THREAD_COUNTER_RESERVE >= settings.TWITTER_CHARACTER_LIMIT:
        errors.append("THREAD_COUNTER_RESERVE must be smaller than TWITTER_CHARACTER_LIMIT")

    # Raise all errors at once
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    return True


def validate_social_config(config) -> bool:
    """
    Reject a social text configuration before any formatting begins.

    Args:
        config: SocialPostConfig to check

    Returns:
        bool: True if the configuration is usable

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    errors = []

    if not config.header:
        errors.append("header must not be empty")

    if COUNT_PLACEHOLDER not in (config.intro_template or ""):
        errors.append(f"intro_template must contain {COUNT_PLACEHOLDER}")

    if config.character_limit is not None and config.character_limit <= 0:
        errors.append(f"character_limit must be positive, got {config.character_limit}")

    if config.top_picks_count < 1:
        errors.append(f"top_picks_count must be at least 1, got {config.top_picks_count}")

    if config.min_venue_films < 1:
        errors.append(f"min_venue_films must be at least 1, got {config.min_venue_films}")

    if not config.venue_id_field:
        errors.append("venue_id_field must not be empty")

    if errors:
        error_msg = "Invalid social text configuration:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    return True


def get_config_summary() -> dict:
    """
    Returns a summary of current configuration.
    Useful for logging startup state.
    """
    # Import settings here to avoid circular imports
    from config import settings

    return {
        "directories": {
            "data": settings.DATA_DIR,
            "site": settings.SITE_DIR,
            "output": settings.OUTPUT_DIR,
        },
        "selection": {
            "min_imdb_rating": settings.MIN_IMDB_RATING,
            "max_performances": settings.MAX_PERFORMANCES,
            "max_venues": settings.MAX_VENUES,
            "max_collage_movies": settings.MAX_COLLAGE_MOVIES,
        },
        "social": {
            "platforms": [p or settings.GENERIC_PLATFORM_NAME for p in settings.DEFAULT_PLATFORMS],
            "twitter_limit": settings.TWITTER_CHARACTER_LIMIT,
            "instagram_limit": settings.INSTAGRAM_CHARACTER_LIMIT,
            "top_picks": settings.COMPACT_TOP_PICKS_COUNT,
        },
        "timezone": settings.TIMEZONE,
    }
