"""
Dimension estimation for the Rectification module.

Derives the size of the rectified raster from the edge lengths of the
ordered source quadrilateral.
"""

import logging
from typing import Tuple

import numpy as np

from src.rectification.errors import InvalidGeometry
from src.rectification.types import Dimensions, Quadrilateral

logger = logging.getLogger(__name__)


def calculate_edge_lengths(quad: Quadrilateral) -> Tuple[float, float, float, float]:
    """
    Calculate the length of all 4 edges of a quadrilateral.

    Args:
        quad: Canonically ordered corners.

    Returns:
        Tuple of (top_edge, right_edge, bottom_edge, left_edge) lengths.

    Example:
        >>> quad = Quadrilateral.from_array([[0, 0], [400, 0], [400, 100], [0, 100]])
        >>> calculate_edge_lengths(quad)
        (400.0, 100.0, 400.0, 100.0)
    """
    tl, tr, br, bl = quad.as_array()

    top_edge = float(np.linalg.norm(tr - tl))
    right_edge = float(np.linalg.norm(br - tr))
    bottom_edge = float(np.linalg.norm(bl - br))
    left_edge = float(np.linalg.norm(tl - bl))

    logger.debug(
        f"Edge lengths - Top: {top_edge:.1f}, Right: {right_edge:.1f}, "
        f"Bottom: {bottom_edge:.1f}, Left: {left_edge:.1f}"
    )

    return top_edge, right_edge, bottom_edge, left_edge


def estimate_dimensions(quad: Quadrilateral) -> Dimensions:
    """
    Estimate width and height of the rectified output.

    Width is the longer of the top and bottom edges, height the longer of
    the left and right edges, so the output covers the larger extent of
    non-parallel source edges.

    Args:
        quad: Canonically ordered corners.

    Returns:
        Dimensions with unrounded width and height.

    Raises:
        InvalidGeometry: If any edge or diagonal has zero length, i.e. two
            corners coincide.

    Example:
        >>> quad = Quadrilateral.from_array([[0, 0], [100, 0], [100, 200], [0, 200]])
        >>> estimate_dimensions(quad)
        Dimensions(width=100.0, height=200.0)
    """
    top, right, bottom, left = calculate_edge_lengths(quad)
    tl, tr, br, bl = quad.as_array()

    # Opposite corners can coincide while all four edges stay non-zero
    segments = {
        "top edge": top,
        "right edge": right,
        "bottom edge": bottom,
        "left edge": left,
        "TL-BR diagonal": float(np.linalg.norm(br - tl)),
        "TR-BL diagonal": float(np.linalg.norm(bl - tr)),
    }
    degenerate = [name for name, length in segments.items() if length <= 0]
    if degenerate:
        raise InvalidGeometry(
            f"Degenerate quadrilateral: zero-length {', '.join(degenerate)}. "
            "Corner points are coincident."
        )

    width = max(top, bottom)
    height = max(left, right)

    logger.debug(f"Estimated dimensions: {width:.1f} x {height:.1f}")

    return Dimensions(width=width, height=height)
