"""
Input quality checks for captured photos.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)


def is_resolution_sufficient(image: np.ndarray, min_resolution_px: int = 500) -> bool:
    """
    Check that both image sides reach the minimum resolution.

    Args:
        image: Image array (H, W) or (H, W, C).
        min_resolution_px: Minimum width and height in pixels.

    Returns:
        True if width and height are both >= min_resolution_px.
    """
    height, width = image.shape[:2]
    sufficient = width >= min_resolution_px and height >= min_resolution_px

    if not sufficient:
        logger.warning(
            f"Image resolution {width}x{height} below minimum {min_resolution_px}px"
        )

    return sufficient
