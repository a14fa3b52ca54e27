"""
Data types and structures for the Rectification module.

Provides immutable containers for the values produced along one
rectification call: ordered corners, output dimensions and the
destination-to-source perspective transform.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

import numpy as np

from src.common.types import Point


class OrderingStrategy(Enum):
    """How unordered detector corners are labelled TL/TR/BR/BL."""

    EXTREMES = "extremes"  # min/max of x+y and y-x
    QUADRANT = "quadrant"  # position relative to the centroid


class Interpolation(Enum):
    """Sampling method used by the resampler."""

    BILINEAR = "bilinear"
    NEAREST = "nearest"


class WarpBackend(Enum):
    """Implementation used for the resampling step."""

    NUMPY = "numpy"
    OPENCV = "opencv"


@dataclass(frozen=True)
class Quadrilateral:
    """
    Four corners in canonical order.

    Only the corner orderer builds these from raw detector output; anything
    else should be treated as unordered.
    """

    top_left: Point
    top_right: Point
    bottom_right: Point
    bottom_left: Point

    @classmethod
    def from_array(cls, pts: np.ndarray) -> "Quadrilateral":
        """Build from a (4, 2) array already in TL, TR, BR, BL order."""
        pts = np.asarray(pts, dtype=np.float64)
        return cls(*(Point.from_numpy(p) for p in pts))

    @property
    def corners(self) -> Tuple[Point, Point, Point, Point]:
        return (self.top_left, self.top_right, self.bottom_right, self.bottom_left)

    def as_array(self) -> np.ndarray:
        """Return corners as a (4, 2) float64 array [TL, TR, BR, BL]."""
        return np.array([p.to_tuple() for p in self.corners], dtype=np.float64)


@dataclass(frozen=True)
class Dimensions:
    """Output size of the rectified raster, derived from the quadrilateral."""

    width: float
    height: float

    @property
    def pixel_width(self) -> int:
        return max(1, int(round(self.width)))

    @property
    def pixel_height(self) -> int:
        return max(1, int(round(self.height)))

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def destination_corners(self) -> np.ndarray:
        """Corners of the destination rectangle: (0,0), (w,0), (w,h), (0,h)."""
        return np.array(
            [
                [0.0, 0.0],
                [self.width, 0.0],
                [self.width, self.height],
                [0.0, self.height],
            ],
            dtype=np.float64,
        )


@dataclass(frozen=True, eq=False)
class PerspectiveTransform:
    """
    Homography taking destination-rectangle coordinates to source coordinates.

    Attributes:
        matrix: 3x3 float64 matrix normalised so that matrix[2, 2] == 1.
    """

    matrix: np.ndarray = field(repr=False)

    def __post_init__(self):
        m = np.array(self.matrix, dtype=np.float64)
        if m.shape != (3, 3):
            raise ValueError(f"Expected a 3x3 matrix, got shape {m.shape}")
        m.setflags(write=False)
        object.__setattr__(self, "matrix", m)

    @property
    def coefficients(self) -> Tuple[float, ...]:
        """The 8 independent coefficients (a, b, c, d, e, f, g, h)."""
        return tuple(float(v) for v in self.matrix.ravel()[:8])

    def apply(self, points: np.ndarray) -> np.ndarray:
        """
        Map destination points into source space.

        Args:
            points: Array of shape (N, 2) or (2,).

        Returns:
            Array with the same shape holding source coordinates.
        """
        pts = np.asarray(points, dtype=np.float64)
        flat = pts.reshape(-1, 2)
        homogeneous = np.hstack([flat, np.ones((flat.shape[0], 1))])
        mapped = homogeneous @ self.matrix.T
        mapped = mapped[:, :2] / mapped[:, 2:3]
        return mapped.reshape(pts.shape)

    def inverse(self) -> "PerspectiveTransform":
        """Source-to-destination transform."""
        inv = np.linalg.inv(self.matrix)
        return PerspectiveTransform(inv / inv[2, 2])
