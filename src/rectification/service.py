"""
Scan service: the calling layer around the rectification core.

Combines corner detection (with the default-quadrilateral fallback),
rectification, optional enhancement and JPEG encoding, and runs them on a
thread pool so a UI thread is never blocked. Results are delivered as
``concurrent.futures.Future`` objects; callers attach callbacks with
``Future.add_done_callback``.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np

from src.rectification.config_loader import RectificationConfig, get_default_config
from src.rectification.corner_ordering import PointsLike
from src.rectification.detectors import (
    ContourCornerDetector,
    CornerDetector,
    default_corners,
)
from src.rectification.enhancement import enhance_image
from src.rectification.errors import RectificationError
from src.rectification.quality import is_resolution_sufficient
from src.rectification.rectifier import Rectifier
from src.utils.io import encode_image, read_image

logger = logging.getLogger(__name__)

ImageSource = Union[np.ndarray, str, Path]


class ScanService:
    """
    Document scanning service.

    Args:
        config: Module configuration. Defaults to the bundled config.yaml.
        detector: Corner detector. Defaults to ContourCornerDetector.

    Example:
        >>> with ScanService() as service:
        ...     corners = service.detect_corners("photo.jpg")
        ...     future = service.submit_crop("photo.jpg", corners)
        ...     jpeg_bytes = future.result()
    """

    def __init__(
        self,
        config: Optional[RectificationConfig] = None,
        detector: Optional[CornerDetector] = None,
    ):
        self.config = config or get_default_config()
        self.detector = detector or ContourCornerDetector(self.config.detection)
        self.rectifier = Rectifier(config=self.config)
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.service.max_workers,
            thread_name_prefix="scan",
        )

    @staticmethod
    def _load(source: ImageSource) -> np.ndarray:
        if isinstance(source, np.ndarray):
            return source
        return read_image(source)

    def default_corners_for(self, image: np.ndarray) -> np.ndarray:
        height, width = image.shape[:2]
        return default_corners(
            width, height, self.config.detection.fallback_margin_ratio
        )

    def detect_corners(self, source: ImageSource) -> np.ndarray:
        """
        Detect document corners, falling back to the inset default.

        Detector failures (None or an exception) never propagate; the
        default quadrilateral is returned instead.

        Returns:
            (4, 2) float64 array of corners (unordered if detected).

        Raises:
            FileNotFoundError / ValueError: If ``source`` is a path that
                cannot be read.
        """
        image = self._load(source)

        try:
            corners = self.detector.detect(image)
        except Exception as e:
            logger.warning(f"Corner detection failed: {e}")
            corners = None

        if corners is None:
            logger.info("Using default corners")
            return self.default_corners_for(image)

        return np.asarray(corners, dtype=np.float64)

    def check_quality(self, source: ImageSource) -> bool:
        """Check the photo against the configured minimum resolution."""
        return is_resolution_sufficient(
            self._load(source), self.config.quality.min_resolution_px
        )

    def crop_image(
        self,
        source: ImageSource,
        corners: PointsLike,
        fallback_to_default: bool = False,
    ) -> np.ndarray:
        """
        Rectify the document region, then enhance if configured.

        Args:
            source: Decoded image or path to an image file.
            corners: 4 corner points in any order.
            fallback_to_default: Retry once with the default quadrilateral
                when the given corners cannot be rectified.

        Raises:
            RectificationError: If rectification fails (and no fallback was
                requested or the fallback failed too).
        """
        image = self._load(source)

        try:
            rectified = self.rectifier.rectify(image, corners)
        except RectificationError as e:
            if not fallback_to_default:
                raise
            logger.warning(f"Rectification failed ({e}), retrying with default corners")
            rectified = self.rectifier.rectify(image, self.default_corners_for(image))

        if self.config.output.enhance:
            rectified = enhance_image(rectified)

        return rectified

    def crop_image_bytes(
        self,
        source: ImageSource,
        corners: PointsLike,
        fallback_to_default: bool = False,
    ) -> bytes:
        """Rectify and encode as JPEG at the configured quality."""
        rectified = self.crop_image(source, corners, fallback_to_default)
        return encode_image(
            rectified, ext=".jpg", jpeg_quality=self.config.output.jpeg_quality
        )

    def _submit(self, fn: Callable, *args, callback: Optional[Callable] = None) -> Future:
        future = self._executor.submit(fn, *args)
        if callback is not None:
            future.add_done_callback(callback)
        return future

    def submit_detect(
        self, source: ImageSource, callback: Optional[Callable[[Future], None]] = None
    ) -> Future:
        """Run detect_corners on the worker pool."""
        return self._submit(self.detect_corners, source, callback=callback)

    def submit_crop(
        self,
        source: ImageSource,
        corners: PointsLike,
        callback: Optional[Callable[[Future], None]] = None,
        fallback_to_default: bool = False,
    ) -> Future:
        """Run crop_image_bytes on the worker pool; the future holds JPEG bytes."""
        return self._submit(
            self.crop_image_bytes, source, corners, fallback_to_default, callback=callback
        )

    def close(self, wait: bool = True):
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "ScanService":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
