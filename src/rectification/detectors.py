"""
Corner Detection

Corner detectors find the four document corners in a photo. They return
unordered points (or None when nothing is found); ordering and the default
fallback belong to the caller.

Variants:
    - ContourCornerDetector: OpenCV edge + contour approximation.
    - MockCornerDetector: preset corners, for tests and offline runs.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

import cv2
import numpy as np

from src.rectification.config_loader import DetectionConfig

logger = logging.getLogger(__name__)


def default_corners(width: float, height: float, margin_ratio: float = 0.1) -> np.ndarray:
    """
    Inset rectangle used when corner detection fails.

    The margin is ``margin_ratio`` of min(width, height) on every side.

    Returns:
        (4, 2) float64 array [TL, TR, BR, BL].

    Example:
        >>> default_corners(1000, 500).tolist()
        [[50.0, 50.0], [950.0, 50.0], [950.0, 450.0], [50.0, 450.0]]
    """
    margin = min(width, height) * margin_ratio
    return np.array(
        [
            [margin, margin],
            [width - margin, margin],
            [width - margin, height - margin],
            [margin, height - margin],
        ],
        dtype=np.float64,
    )


class CornerDetector(ABC):
    """Capability that locates the document quadrilateral in an image."""

    @abstractmethod
    def detect(self, image: np.ndarray) -> Optional[np.ndarray]:
        """
        Detect document corners.

        Args:
            image: BGR or grayscale uint8 image.

        Returns:
            (4, 2) float64 array of unordered corners, or None if no
            document was found.
        """


class ContourCornerDetector(CornerDetector):
    """
    Finds the largest convex 4-vertex contour in the Canny edge map.

    Args:
        config: Detection thresholds. Defaults to DetectionConfig().
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()

    def _edge_map(self, image: np.ndarray) -> np.ndarray:
        if image.ndim == 3:
            code = cv2.COLOR_BGRA2GRAY if image.shape[2] == 4 else cv2.COLOR_BGR2GRAY
            gray = cv2.cvtColor(image, code)
        else:
            gray = image

        k = self.config.blur_kernel
        blurred = cv2.GaussianBlur(gray, (k, k), 0)
        edges = cv2.Canny(blurred, self.config.canny_low, self.config.canny_high)
        # Close small gaps in the document outline
        return cv2.dilate(edges, np.ones((3, 3), np.uint8), iterations=1)

    def detect(self, image: np.ndarray) -> Optional[np.ndarray]:
        edges = self._edge_map(image)
        contours, _ = cv2.findContours(edges, cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE)

        frame_area = float(image.shape[0] * image.shape[1])
        min_area = self.config.min_area_ratio * frame_area

        for contour in sorted(contours, key=cv2.contourArea, reverse=True):
            area = cv2.contourArea(contour)
            if area < min_area:
                break

            peri = cv2.arcLength(contour, True)
            approx = cv2.approxPolyDP(contour, self.config.approx_epsilon * peri, True)
            if len(approx) == 4 and cv2.isContourConvex(approx):
                logger.info(
                    f"Detected document quadrilateral covering "
                    f"{area / frame_area:.1%} of the frame"
                )
                return approx.reshape(4, 2).astype(np.float64)

        logger.warning("No document quadrilateral found")
        return None


class MockCornerDetector(CornerDetector):
    """
    Returns preset corners without looking at the image.

    Args:
        corners: Corners to return, or None to simulate a detection failure.
        error: Exception to raise from detect(), to simulate a crashing
            detector.
    """

    def __init__(
        self,
        corners: Optional[Sequence[Sequence[float]]] = None,
        error: Optional[Exception] = None,
    ):
        self.corners = None if corners is None else np.asarray(corners, dtype=np.float64)
        self.error = error
        self.calls = 0

    def detect(self, image: np.ndarray) -> Optional[np.ndarray]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return None if self.corners is None else self.corners.copy()
