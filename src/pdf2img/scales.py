"""Candidate render scales for a page."""

import logging
from typing import Sequence

from pdf2img.resource_limits import DEFAULT_MAX_PIXEL_DIMENSION

logger = logging.getLogger(__name__)

# Highest fidelity first.
BASE_SCALES: tuple[float, ...] = (4.0, 2.0, 1.0, 0.75)

MAX_PIXEL_DIMENSION = DEFAULT_MAX_PIXEL_DIMENSION

# The pixel ceiling never pulls the largest allowed scale below this value.
DEFAULT_CEILING_FLOOR = 1.0


def max_allowed_scale(
    natural_width: float,
    natural_height: float,
    max_pixel_dimension: int = MAX_PIXEL_DIMENSION,
    ceiling_floor: float = DEFAULT_CEILING_FLOOR,
) -> float:
    """Return the largest scale that keeps the page within the pixel ceiling.

    Args:
        natural_width: Page width at scale 1.
        natural_height: Page height at scale 1.
        max_pixel_dimension: Ceiling for the larger rendered dimension.
            If 0 or negative, the ceiling is disabled.
        ceiling_floor: Lower bound for the returned scale. Use 0 to honor
            the pixel ceiling strictly for very large pages.

    Raises:
        ValueError: If the page has no area.
    """
    larger = max(natural_width, natural_height)
    if natural_width <= 0 or natural_height <= 0:
        raise ValueError(
            f"Page has no area: {natural_width} x {natural_height}"
        )
    if max_pixel_dimension <= 0:
        return float("inf")
    return max(ceiling_floor, max_pixel_dimension / larger)


def plan_scales(
    natural_width: float,
    natural_height: float,
    max_pixel_dimension: int = MAX_PIXEL_DIMENSION,
    candidates: Sequence[float] = BASE_SCALES,
    ceiling_floor: float = DEFAULT_CEILING_FLOOR,
) -> list[float]:
    """Plan the ordered list of scales to attempt for a page.

    Each candidate is clamped to the maximum allowed scale before duplicates
    are removed, so an unreachable high scale collapses onto the ceiling
    instead of costing an extra attempt. Order of ``candidates`` is kept.

    Example:
        >>> plan_scales(612, 792)
        [4.0, 2.0, 1.0, 0.75]
        >>> plan_scales(2000, 1000)
        [2.0, 1.0, 0.75]
    """
    ceiling = max_allowed_scale(
        natural_width, natural_height, max_pixel_dimension, ceiling_floor
    )
    scales: list[float] = []
    for candidate in candidates:
        scale = min(float(candidate), ceiling)
        if scale > 0 and scale not in scales:
            scales.append(scale)
    logger.debug(
        f"Planned scales {scales} for page {natural_width} x {natural_height} "
        f"(max allowed scale {ceiling})"
    )
    return scales
