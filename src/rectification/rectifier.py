"""
Main processor for the Rectification module.

Orchestrates the rectification procedure:
1. Corner ordering (TL, TR, BR, BL)
2. Dimension estimation (longest opposite edges)
3. Perspective mapping (homography solve)
4. Resampling (inverse-mapped warp)

Each call is synchronous and self-contained; a failure at any stage raises
and no partial raster is returned.
"""

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from src.rectification.config_loader import RectificationConfig, load_config
from src.rectification.corner_ordering import PointsLike, order_corners
from src.rectification.dimensions import estimate_dimensions
from src.rectification.homography import compute_perspective_transform
from src.rectification.resampler import warp_image

logger = logging.getLogger(__name__)


class Rectifier:
    """
    Perspective rectification of a document quadrilateral.

    The instance only holds configuration, so one Rectifier can serve
    concurrent calls from several threads.

    Example:
        >>> rectifier = Rectifier()
        >>> image = cv2.imread("page.jpg")
        >>> corners = [[120, 80], [890, 60], [930, 1220], [90, 1250]]
        >>> page = rectifier.rectify(image, corners)
    """

    def __init__(
        self,
        config: Optional[RectificationConfig] = None,
        config_path: Optional[Path] = None,
    ):
        """
        Initialize the rectifier.

        Args:
            config: Pre-loaded configuration object. If None, will load from file.
            config_path: Path to config file. If None, uses default location.
        """
        if config is not None:
            self.config = config
            logger.debug("Using provided configuration")
        else:
            self.config = load_config(config_path) if config_path else load_config()
            logger.debug("Loaded configuration from file")

    def rectify(self, image: np.ndarray, corners: PointsLike) -> np.ndarray:
        """
        Warp the quadrilateral described by ``corners`` into a rectangle.

        Args:
            image: Source image (H, W) or (H, W, C), uint8. Not modified.
            corners: 4 corner points in any order, in source pixel space.

        Returns:
            Rectified image sized by the longest opposite edges of the
            quadrilateral.

        Raises:
            InvalidInput: Bad image, wrong point count or non-finite points.
            InvalidGeometry: Coincident corners (zero-length edge or diagonal).
            SingularTransform: Collinear corners.
        """
        quad = order_corners(corners, self.config.ordering.strategy)
        dims = estimate_dimensions(quad)
        transform = compute_perspective_transform(quad, dims)

        rectified = warp_image(
            image,
            transform,
            dims,
            interpolation=self.config.warp.interpolation,
            border_value=self.config.warp.border_value,
            backend=self.config.warp.backend,
        )

        logger.info(
            f"Rectified {image.shape[1]}x{image.shape[0]} image to "
            f"{rectified.shape[1]}x{rectified.shape[0]} (aspect {dims.aspect_ratio:.3f})"
        )
        return rectified


def rectify(
    image: np.ndarray,
    corners: PointsLike,
    config: Optional[RectificationConfig] = None,
) -> np.ndarray:
    """
    Convenience function for one-shot rectification.

    Uses built-in defaults when no configuration is given, so it does not
    touch the filesystem.

    Example:
        >>> image = np.zeros((300, 300, 3), dtype=np.uint8)
        >>> rectify(image, [[50, 50], [250, 50], [250, 250], [50, 250]]).shape
        (200, 200, 3)
    """
    rectifier = Rectifier(config=config or RectificationConfig())
    return rectifier.rectify(image, corners)
