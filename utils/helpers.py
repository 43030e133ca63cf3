"""
Helper Utility Module

This module provides various helper functions used throughout the Spotlight Generator:
date and week arithmetic, social date formatting, HTML escaping, and template filling.
"""

import os
import re
import html
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Tuple
from zoneinfo import ZoneInfo

from config import settings

TEMPLATE_TOKEN_PATTERN = re.compile(r"\{\{([A-Z0-9_]+)\}\}")


def get_zone(tz_name: Optional[str] = None) -> ZoneInfo:
    """Return the configured local time zone."""
    return ZoneInfo(tz_name or settings.TIMEZONE)


def sort_key(text: str) -> Tuple[str, str]:
    """
    Key for lexical ordering of display text.

    Case-insensitive first, with the raw text as a tie-breaker so the order is total.
    """
    text = text or ""
    return text.casefold(), text


def escape_html(text: Any) -> str:
    """
    Escape HTML special characters.

    Args:
        text: The value to escape; non-strings are converted first

    Returns:
        str: Text safe to place in HTML content or attributes
    """
    return html.escape(str(text), quote=True)


def format_rating(rating: Optional[float]) -> str:
    """Render a numeric rating without a trailing .0 (8.0 -> "8", 7.5 -> "7.5")."""
    if rating is None or rating == "":
        return ""
    return f"{float(rating):g}"


def get_timestamp(now: Optional[datetime] = None) -> str:
    """
    Generate a timestamp string for filenames (YYYY-MM-DD_HHMM).

    Args:
        now: Time to format, defaults to the current local time

    Returns:
        str: The formatted timestamp
    """
    now = now or datetime.now(get_zone())
    return now.strftime("%Y-%m-%d_%H%M")


def ms_to_datetime(epoch_ms: float, tz: Optional[ZoneInfo] = None) -> datetime:
    """Convert epoch milliseconds to an aware datetime (UTC unless a zone is given)."""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=tz or timezone.utc)


def datetime_to_ms(value: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return int(round(value.timestamp() * 1000))


def ms_to_iso(epoch_ms: float) -> str:
    """Convert epoch milliseconds to an ISO-8601 UTC string, e.g. 2025-02-04T20:00:00.000Z."""
    value = ms_to_datetime(epoch_ms)
    return f"{value:%Y-%m-%dT%H:%M:%S}.{value.microsecond // 1000:03d}Z"


def parse_iso(iso_date: str) -> datetime:
    """Parse an ISO-8601 string, accepting a trailing Z."""
    parsed = datetime.fromisoformat(iso_date.replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def get_start_of_week(now: datetime) -> datetime:
    """
    Get the start of the current week (Monday 00:00:00) in now's zone.

    Args:
        now: Aware reference time

    Returns:
        datetime: Midnight at the start of Monday
    """
    start = now - timedelta(days=now.weekday())
    return start.replace(hour=0, minute=0, second=0, microsecond=0)


def get_end_of_week(now: datetime) -> datetime:
    """
    Get the end of the current week (Sunday 23:59:59.999) in now's zone.

    On a Sunday this is the following Sunday.
    """
    sunday_first_day = (now.weekday() + 1) % 7
    end = now + timedelta(days=7 - sunday_first_day)
    return end.replace(hour=23, minute=59, second=59, microsecond=999000)


def get_earliest_seen_timestamp(movie: Dict[str, Any]) -> Optional[float]:
    """
    Get the earliest "seen" timestamp from a movie's showings.

    The "seen" field is on each showing, not on the movie itself.
    """
    showings = movie.get("showings") or {}
    seen = [s.get("seen") for s in showings.values() if s.get("seen") is not None]
    if not seen:
        return None
    return min(seen)


def find_genre_id_by_name(genres: Dict[str, Any], name: str) -> Optional[str]:
    """Find a genre ID by name."""
    for genre_id, genre in (genres or {}).items():
        if genre.get("name") == name:
            return genre_id
    return None


def get_ordinal_suffix(n: int) -> str:
    """Get ordinal suffix for a number (1st, 2nd, 3rd, 4th, 11th, 21st, etc.)."""
    if 11 <= n % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")


def format_date(iso_date: str, tz: Optional[ZoneInfo] = None) -> str:
    """Format an ISO date for logs, e.g. "Wed 4 Feb, 20:00"."""
    value = parse_iso(iso_date).astimezone(tz or get_zone())
    return f"{value:%a} {value.day} {value:%b}, {value:%H:%M}"


def format_social_date(iso_date: str, compact: bool = False,
                       now: Optional[datetime] = None, tz: Optional[ZoneInfo] = None) -> str:
    """
    Format a date for social media.

    The month is only shown when it differs from the current month.

    Args:
        iso_date: ISO date string
        compact: Use the compact format for character-limited platforms
        now: Reference time, defaults to the current time
        tz: Zone to display in, defaults to the configured zone

    Returns:
        str: "Wednesday 4th at 20:00" or, compact, "Wed 4 @ 8pm"
    """
    tz = tz or get_zone()
    value = parse_iso(iso_date).astimezone(tz)
    now = (now or datetime.now(tz)).astimezone(tz)
    show_month = value.month != now.month or value.year != now.year

    if compact:
        hour12 = value.hour % 12 or 12
        ampm = "am" if value.hour < 12 else "pm"
        time_str = f"{hour12}{ampm}" if value.minute == 0 else f"{hour12}:{value.minute:02d}{ampm}"
        if show_month:
            return f"{value:%a} {value.day} {value:%b} @ {time_str}"
        return f"{value:%a} {value.day} @ {time_str}"

    day = f"{value.day}{get_ordinal_suffix(value.day)}"
    if show_month:
        return f"{value:%A} {day} {value:%b} at {value:%H:%M}"
    return f"{value:%A} {day} at {value:%H:%M}"


def fill_template(template: str, replacements: Dict[str, Any]) -> str:
    """
    Replace {{TOKEN}} placeholders in a template.

    Tokens without a replacement are removed so no placeholder leaks into output.

    Args:
        template: Template text
        replacements: Token name (without braces) to replacement value

    Returns:
        str: The filled template
    """
    def _replace(match):
        value = replacements.get(match.group(1))
        return "" if value is None else str(value)

    return TEMPLATE_TOKEN_PATTERN.sub(_replace, template)


def safe_get(data: Dict[str, Any], *keys, default: Any = None) -> Any:
    """
    Safely get a value from a nested dictionary.

    Args:
        data: The dictionary to search
        *keys: The keys to follow
        default: Default value if key doesn't exist

    Returns:
        The value at the specified keys or the default value
    """
    for key in keys:
        try:
            data = data[key]
        except (KeyError, TypeError, IndexError):
            return default
    return data


def ensure_dir_exists(directory: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        directory: The directory path to check/create
    """
    if not os.path.exists(directory):
        os.makedirs(directory)
