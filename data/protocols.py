"""
Data Layer Protocol Definitions

This module defines typing.Protocol interfaces for data layer operations.
These protocols enable dependency injection for artifact output, making the
spotlight runners testable without touching the filesystem.

Protocols defined:
- OutputStorage: Interface for persisting generated HTML and social text
"""

from typing import Optional, Protocol


class OutputStorage(Protocol):
    """Protocol defining the interface for spotlight artifact storage.

    Implementations should provide methods for:
    - Writing the collage HTML page of a spotlight
    - Writing one social text file per platform

    This protocol abstracts file output, allowing runners to work with any
    compatible backend (real directories, in-memory mock, etc.).
    """

    def write_html(self, name: str, html: str) -> str:
        """Store the HTML page of a spotlight.

        Args:
            name: Spotlight name, e.g. 'last-chance'.
            html: The complete HTML document.

        Returns:
            A location describing where the page was written.
        """
        ...

    def write_text(self, name: str, platform_name: Optional[str], text: str, timestamp: str) -> str:
        """Store the social text of a spotlight for one platform.

        Args:
            name: Spotlight name, e.g. 'last-chance'.
            platform_name: 'twitter', 'instagram', 'generic', or None for
                a spotlight with a single text.
            text: The social text.
            timestamp: Run timestamp (YYYY-MM-DD_HHMM) shared by all files of a run.

        Returns:
            A location describing where the text was written.
        """
        ...
