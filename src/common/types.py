"""
Common type definitions for the document rectification pipeline.

This module provides Pydantic-based type definitions for the raster and
point structures shared by corner detection, rectification and the
calling service layer.

These types provide:
- Type validation and conversion
- Consistent interfaces across modules
- Integration with numpy arrays and OpenCV
"""

import math
from typing import Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ImageBuffer(BaseModel):
    """
    Type-safe wrapper for image arrays (numpy.ndarray).

    Rasters handed to the rectifier are decoded pixel buffers. The wrapper
    checks that they are non-empty uint8 arrays of shape (H, W) or
    (H, W, C) with 1, 3 or 4 channels.

    Attributes:
        data: The underlying numpy array containing image data.

    Example:
        >>> import cv2
        >>> image = cv2.imread("receipt.jpg")
        >>> img_buffer = ImageBuffer(data=image)
        >>> print(img_buffer.height, img_buffer.width)  # 480, 640
    """

    data: np.ndarray = Field(..., description="Image data as numpy array")

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("data")
    @classmethod
    def _validate_image(cls, v: np.ndarray) -> np.ndarray:
        """
        Validate that the numpy array is a valid image.

        Raises:
            ValueError: If array is not a valid image format.
        """
        if not isinstance(v, np.ndarray):
            raise ValueError(f"Expected numpy.ndarray, got {type(v)}")

        if v.size == 0:
            raise ValueError("Image array is empty")

        if len(v.shape) not in (2, 3):
            raise ValueError(
                f"Expected 2D (grayscale) or 3D (color) image, got shape {v.shape}"
            )

        if len(v.shape) == 3 and v.shape[2] not in (1, 3, 4):
            raise ValueError(
                f"Expected 1, 3, or 4 channels for color image, got {v.shape[2]}"
            )

        if v.dtype != np.uint8:
            raise ValueError(
                f"Expected uint8 dtype for image, got {v.dtype}. "
                "Images should be in range [0, 255]"
            )

        return v

    @property
    def shape(self) -> Tuple[int, ...]:
        """Get image shape (H, W) or (H, W, C)."""
        return self.data.shape

    @property
    def height(self) -> int:
        """Get image height in pixels."""
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        """Get image width in pixels."""
        return int(self.data.shape[1])

    @property
    def channels(self) -> int:
        """Get number of channels (1 for grayscale, 3 for BGR, 4 for BGRA)."""
        if len(self.data.shape) == 2:
            return 1
        return int(self.data.shape[2])

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    def to_numpy(self) -> np.ndarray:
        return self.data

    def __repr__(self) -> str:
        return f"ImageBuffer(shape={self.shape}, dtype={self.data.dtype})"


class Point(BaseModel):
    """
    Immutable 2D point (x, y) in source-image pixel space.

    Coordinates are kept as floats; corner detectors and perspective
    solves produce sub-pixel positions, so nothing is rounded here.

    Example:
        >>> point = Point(x=100.5, y=200)
        >>> arr = point.to_numpy()  # array([100.5, 200. ])
        >>> point2 = Point.from_numpy(np.array([150, 250]))
    """

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="X-coordinate (horizontal)")
    y: float = Field(..., description="Y-coordinate (vertical)")

    @field_validator("x", "y", mode="before")
    @classmethod
    def _validate_finite(cls, v: Union[int, float]) -> float:
        """Reject non-numeric and non-finite coordinates."""
        if isinstance(v, bool) or not isinstance(v, (int, float, np.number)):
            raise ValueError(f"Coordinate must be numeric, got {type(v)}")
        v = float(v)
        if not math.isfinite(v):
            raise ValueError(f"Coordinate must be finite, got {v}")
        return v

    @classmethod
    def from_numpy(cls, arr: np.ndarray) -> "Point":
        """
        Create Point from numpy array.

        Args:
            arr: Numpy array of shape (2,) with [x, y] coordinates.

        Raises:
            ValueError: If array shape is not (2,).
        """
        arr = np.asarray(arr)
        if arr.shape != (2,):
            raise ValueError(f"Expected array of shape (2,), got {arr.shape}")
        return cls(x=float(arr[0]), y=float(arr[1]))

    @classmethod
    def from_list(cls, coords: list) -> "Point":
        if len(coords) != 2:
            raise ValueError(f"Expected list with 2 elements, got {len(coords)}")
        return cls(x=coords[0], y=coords[1])

    def to_numpy(self, dtype: type = np.float64) -> np.ndarray:
        return np.array([self.x, self.y], dtype=dtype)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        """
        Calculate Euclidean distance to another point.

        Args:
            other: Target point.

        Returns:
            Euclidean distance as float.
        """
        return math.hypot(self.x - other.x, self.y - other.y)

    def __repr__(self) -> str:
        return f"Point(x={self.x:g}, y={self.y:g})"
