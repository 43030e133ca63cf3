"""
Output Module

This module writes generated spotlight artifacts to disk and reads the HTML
templates they are rendered from.

Layout:
- site/<name>.html                                  collage page
- output/<name>-<platform>_<YYYY-MM-DD_HHMM>.txt    social text per platform
- output/<name>_<YYYY-MM-DD_HHMM>.txt               social text of a feature spotlight
"""

import os
from typing import Optional

from config import settings
from utils.exceptions import DataLoadError, OutputWriteError
from utils.helpers import ensure_dir_exists
from utils.logger import get_logger

logger = get_logger(__name__)


def load_template(name: str, templates_dir: Optional[str] = None) -> str:
    """
    Read an HTML template by file name.

    Args:
        name: Template file name, e.g. 'last-chance.html'
        templates_dir: Directory to read from, defaults to settings.TEMPLATES_DIR

    Returns:
        str: The template text

    Raises:
        DataLoadError: If the template cannot be read
    """
    path = os.path.join(templates_dir or settings.TEMPLATES_DIR, name)
    try:
        with open(path, 'r', encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise DataLoadError(f"Could not read template {path}: {e}") from e


class FileOutputStorage:
    """Writes spotlight artifacts into a site directory and an output directory."""

    def __init__(self, site_dir: Optional[str] = None, output_dir: Optional[str] = None):
        """
        Initialize the file output storage.

        Args:
            site_dir: Directory for HTML pages, defaults to settings.SITE_DIR
            output_dir: Directory for social text, defaults to settings.OUTPUT_DIR
        """
        self.site_dir = site_dir or settings.SITE_DIR
        self.output_dir = output_dir or settings.OUTPUT_DIR

    def _write(self, directory: str, filename: str, content: str) -> str:
        path = os.path.join(directory, filename)
        try:
            ensure_dir_exists(directory)
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise OutputWriteError(f"Could not write {path}: {e}") from e
        return path

    def write_html(self, name: str, html: str) -> str:
        path = self._write(self.site_dir, f"{name}.html", html)
        logger.info(f"HTML generated: {path}")
        return path

    def write_text(self, name: str, platform_name: Optional[str], text: str, timestamp: str) -> str:
        stem = f"{name}-{platform_name}" if platform_name else name
        path = self._write(self.output_dir, f"{stem}_{timestamp}.txt", text)
        logger.info(f"{(platform_name or 'social').capitalize()} text generated: {path} ({len(text)} chars)")
        return path
