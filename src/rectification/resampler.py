"""
Image Resampling

Fills the destination raster by inverse mapping: every output pixel is
mapped through the destination-to-source transform and the source is
sampled there, so the output has no holes.

Background policy: output pixels whose source position falls outside
[0, W-1] x [0, H-1] get ``border_value`` in every colour channel. For
4-channel images the alpha of those pixels is 0 (transparent).
"""

import logging
from typing import Union

import cv2
import numpy as np
from pydantic import ValidationError

from src.common.types import ImageBuffer
from src.rectification.errors import InvalidInput
from src.rectification.types import (
    Dimensions,
    Interpolation,
    PerspectiveTransform,
    WarpBackend,
)

logger = logging.getLogger(__name__)

# Slack for floating-point error when testing source bounds
BOUNDS_TOLERANCE = 1e-6

_CV2_INTERPOLATION = {
    Interpolation.BILINEAR: cv2.INTER_LINEAR,
    Interpolation.NEAREST: cv2.INTER_NEAREST,
}


def validate_image(image: np.ndarray) -> ImageBuffer:
    """
    Wrap a raster in an ImageBuffer, translating validation failures.

    Raises:
        InvalidInput: If the image is None, empty or not a uint8 raster with
            1, 3 or 4 channels.
    """
    if image is None:
        raise InvalidInput("Invalid input image: image is None")
    try:
        return ImageBuffer(data=image)
    except ValidationError as e:
        raise InvalidInput(f"Invalid input image: {e.errors()[0]['msg']}") from e


def destination_grid(dims: Dimensions, transform: PerspectiveTransform):
    """
    Source coordinates for every destination pixel.

    Returns:
        Tuple (map_x, map_y) of float64 arrays with shape
        (pixel_height, pixel_width).
    """
    height, width = dims.pixel_height, dims.pixel_width
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    dst = np.stack([xs.ravel(), ys.ravel()], axis=1)
    src = transform.apply(dst)
    return src[:, 0].reshape(height, width), src[:, 1].reshape(height, width)


def _sample_nearest(src: np.ndarray, map_x: np.ndarray, map_y: np.ndarray):
    h, w = src.shape[:2]
    xi = np.clip(np.rint(map_x).astype(np.intp), 0, w - 1)
    yi = np.clip(np.rint(map_y).astype(np.intp), 0, h - 1)
    return src[yi, xi].astype(np.float64)


def _sample_bilinear(src: np.ndarray, map_x: np.ndarray, map_y: np.ndarray):
    h, w = src.shape[:2]
    mx = np.clip(map_x, 0, w - 1)
    my = np.clip(map_y, 0, h - 1)

    # x0 stops one short of the last column so x1 stays in range
    x0 = np.clip(np.floor(mx), 0, max(w - 2, 0)).astype(np.intp)
    y0 = np.clip(np.floor(my), 0, max(h - 2, 0)).astype(np.intp)
    x1 = np.minimum(x0 + 1, w - 1)
    y1 = np.minimum(y0 + 1, h - 1)

    fx = (mx - x0)[..., np.newaxis]
    fy = (my - y0)[..., np.newaxis]

    data = src.astype(np.float64)
    top = (1.0 - fx) * data[y0, x0] + fx * data[y0, x1]
    bottom = (1.0 - fx) * data[y1, x0] + fx * data[y1, x1]
    return (1.0 - fy) * top + fy * bottom


def _warp_numpy(
    image: np.ndarray,
    transform: PerspectiveTransform,
    dims: Dimensions,
    interpolation: Interpolation,
    border_value: int,
) -> np.ndarray:
    h, w = image.shape[:2]
    src = image if image.ndim == 3 else image[..., np.newaxis]

    map_x, map_y = destination_grid(dims, transform)
    inside = (
        (map_x >= -BOUNDS_TOLERANCE)
        & (map_x <= w - 1 + BOUNDS_TOLERANCE)
        & (map_y >= -BOUNDS_TOLERANCE)
        & (map_y <= h - 1 + BOUNDS_TOLERANCE)
    )

    if interpolation is Interpolation.NEAREST:
        sampled = _sample_nearest(src, map_x, map_y)
    else:
        sampled = _sample_bilinear(src, map_x, map_y)

    output = np.clip(np.rint(sampled), 0, 255).astype(image.dtype)
    output[~inside] = border_value
    if output.shape[2] == 4:
        output[~inside, 3] = 0

    return output if image.ndim == 3 else output[..., 0]


def _warp_opencv(
    image: np.ndarray,
    transform: PerspectiveTransform,
    dims: Dimensions,
    interpolation: Interpolation,
    border_value: int,
) -> np.ndarray:
    channels = 1 if image.ndim == 2 else image.shape[2]
    fill = [border_value] * channels
    if channels == 4:
        fill[3] = 0

    # The matrix already maps destination to source
    warped = cv2.warpPerspective(
        image,
        np.asarray(transform.matrix),
        (dims.pixel_width, dims.pixel_height),
        flags=_CV2_INTERPOLATION[interpolation] | cv2.WARP_INVERSE_MAP,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=tuple(fill),
    )
    if image.ndim == 3 and warped.ndim == 2:
        warped = warped[..., np.newaxis]
    return warped


def warp_image(
    image: np.ndarray,
    transform: PerspectiveTransform,
    dims: Dimensions,
    interpolation: Union[Interpolation, str] = Interpolation.BILINEAR,
    border_value: int = 255,
    backend: Union[WarpBackend, str] = WarpBackend.NUMPY,
) -> np.ndarray:
    """
    Resample the source image into a new raster of the given dimensions.

    Args:
        image: Source image (H, W) or (H, W, C), uint8. Never modified.
        transform: Destination-to-source perspective transform.
        dims: Output dimensions; the raster is pixel_height x pixel_width.
        interpolation: "bilinear" (default) or "nearest".
        border_value: Fill value (0-255) for pixels that map outside the
            source. Alpha of such pixels is always 0.
        backend: "numpy" (default) or "opencv" (cv2.warpPerspective with
            WARP_INVERSE_MAP and the same border policy).

    Returns:
        Newly allocated image with the same dtype and channel count as the
        source.

    Raises:
        InvalidInput: If the image or border value is invalid.
    """
    buffer = validate_image(image)
    interpolation = Interpolation(interpolation)
    backend = WarpBackend(backend)

    if not 0 <= int(border_value) <= 255:
        raise InvalidInput(f"border_value must be in [0, 255], got {border_value}")

    warp = _warp_opencv if backend is WarpBackend.OPENCV else _warp_numpy
    rectified = warp(
        buffer.to_numpy(), transform, dims, interpolation, int(border_value)
    )

    logger.debug(
        f"Resampled {buffer.width}x{buffer.height} source into "
        f"{dims.pixel_width}x{dims.pixel_height} ({interpolation.value}, {backend.value})"
    )

    return rectified
