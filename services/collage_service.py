"""
Collage Service Module

This module lays out movie posters in a scattered collage and renders the
collage HTML. Positions, sizes and rotations are percentages of the display
area so the page scales with its container.

All randomness goes through an injected random.Random so layouts can be
reproduced with a seed.
"""

import math
import random
from typing import List, Optional, Sequence

from data.models import CollageLayout, MovieSummary, PosterPlacement
from utils.exceptions import LayoutError
from utils.helpers import escape_html
from utils.logger import get_logger

logger = get_logger(__name__)

# Collage layout constants (centered positioning, so these are center points)
POSTER_AREA = {"min_x": 5, "max_x": 95, "min_y": 5, "max_y": 88}
RADIAL_EXPANSION = 1.1    # Push posters outward by 10%
JITTER_FACTOR = 0.5       # Jitter within 50% of cell size
MAX_ROTATION_DEG = 8
BASE_POSTER_COUNT = 28    # Poster count at which posters get the base width
BASE_POSTER_WIDTH = 18    # Width percentage at BASE_POSTER_COUNT posters
MAX_POSTER_WIDTH = 30     # 300px in a 1000px container (300x450 at 2:3)

POSTER_ITEMS_TOKEN = "{{POSTER_ITEMS}}"

POSTER_ITEM_HTML = """
    <div class="poster-item" style="{style}">
      <img src="{src}" alt="{alt}" loading="eager">
    </div>"""


def poster_width(count: int) -> float:
    """
    Global poster width for a collage of count posters.

    Posters shrink as the count grows and are capped so a single poster does not overflow.
    """
    scale_factor = math.sqrt(BASE_POSTER_COUNT / count)
    return round(min(BASE_POSTER_WIDTH * scale_factor, MAX_POSTER_WIDTH), 1)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def generate_layout(count: int, rng: Optional[random.Random] = None) -> CollageLayout:
    """
    Compute a placement for each of count posters.

    Posters sit in a grid that covers the poster area, get jittered inside their
    cell, then are pushed away from the centre so sparse collages still reach the
    edges. Placements are indexed in render order, which is also their z-order.

    Args:
        count: Number of posters (at least 1)
        rng: Random source, defaults to a fresh unseeded one

    Returns:
        CollageLayout: One placement per poster, all with the same width

    Raises:
        LayoutError: If count is less than 1
    """
    if count < 1:
        raise LayoutError(f"A collage needs at least one poster, got {count}")

    rng = rng or random.Random()
    min_x, max_x = POSTER_AREA["min_x"], POSTER_AREA["max_x"]
    min_y, max_y = POSTER_AREA["min_y"], POSTER_AREA["max_y"]

    width = poster_width(count)

    # Fewer posters get pushed out harder to fill the edges
    scale_factor = math.sqrt(BASE_POSTER_COUNT / count)
    expansion = RADIAL_EXPANSION + (scale_factor - 1) * 0.01

    cols = math.ceil(math.sqrt(count))
    rows = math.ceil(count / cols)
    cell_width = (max_x - min_x) / cols
    cell_height = (max_y - min_y) / rows
    center_x = (min_x + max_x) / 2
    center_y = (min_y + max_y) / 2

    placements = []
    for index in range(count):
        col = index % cols
        row = index // cols

        jitter_x = (rng.random() - 0.5) * cell_width * JITTER_FACTOR
        jitter_y = (rng.random() - 0.5) * cell_height * JITTER_FACTOR
        pos_x = min_x + cell_width / 2 + col * cell_width + jitter_x
        pos_y = min_y + cell_height / 2 + row * cell_height + jitter_y

        pos_x = center_x + (pos_x - center_x) * expansion
        pos_y = center_y + (pos_y - center_y) * expansion

        rotation = rng.uniform(-MAX_ROTATION_DEG, MAX_ROTATION_DEG)

        placements.append(PosterPlacement(
            left_percent=round(_clamp(pos_x, min_x, max_x), 1),
            top_percent=round(_clamp(pos_y, min_y, max_y), 1),
            width_percent=width,
            rotation_deg=round(rotation, 1),
            z_index=index,
        ))

    return CollageLayout(placements=tuple(placements), width_percent=width, cols=cols, rows=rows)


def shuffle_movies(movies: Sequence[MovieSummary], rng: Optional[random.Random] = None) -> List[MovieSummary]:
    """Return the movies in a random render order without touching the input."""
    rng = rng or random.Random()
    return rng.sample(list(movies), len(movies))


def placement_style(placement: PosterPlacement) -> str:
    """CSS for one poster: centered on its point, then rotated."""
    return (
        f"left: {placement.left_percent:.1f}%; top: {placement.top_percent:.1f}%; "
        f"width: {placement.width_percent:.1f}%; "
        f"transform: translate(-50%, -50%) rotate({placement.rotation_deg:.1f}deg); "
        f"z-index: {placement.z_index};"
    )


def render_poster_items(movies: Sequence[MovieSummary], layout: CollageLayout) -> str:
    """Render one poster-item div per movie, paired with placements in order."""
    return "".join(
        POSTER_ITEM_HTML.format(
            style=placement_style(placement),
            src=escape_html(movie.poster_url or ""),
            alt=escape_html(movie.title),
        )
        for movie, placement in zip(movies, layout.placements)
    )


def render_collage_html(movies: Sequence[MovieSummary], template: str,
                        rng: Optional[random.Random] = None) -> str:
    """
    Shuffle, lay out and render a poster collage into an HTML template.

    Args:
        movies: Movies with poster URLs
        template: HTML containing the {{POSTER_ITEMS}} token
        rng: Random source for shuffle, jitter and rotation

    Returns:
        str: The filled HTML document
    """
    if not movies:
        logger.warning("No movies for collage, rendering an empty page")
        return template.replace(POSTER_ITEMS_TOKEN, "")

    rng = rng or random.Random()
    shuffled = shuffle_movies(movies, rng)
    layout = generate_layout(len(shuffled), rng)

    logger.info(
        f"Generated collage with {len(shuffled)} posters in {layout.cols}x{layout.rows} grid "
        f"(poster width: {layout.width_percent:.1f}%)"
    )

    return template.replace(POSTER_ITEMS_TOKEN, render_poster_items(shuffled, layout))
