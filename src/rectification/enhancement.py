"""
Post-crop enhancement for scanned documents.

Brightens, adds contrast and sharpens a rectified page. Applied by the
service layer when ``output.enhance`` is enabled.
"""

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def enhance_image(
    image: np.ndarray,
    exposure_ev: float = 0.3,
    contrast: float = 1.2,
    saturation: float = 1.1,
    sharpness: float = 0.4,
) -> np.ndarray:
    """
    Apply exposure, contrast, saturation and sharpening adjustments.

    Args:
        image: uint8 grayscale, BGR or BGRA image. Not modified.
        exposure_ev: Exposure change in stops (gain = 2 ** ev).
        contrast: Contrast factor around mid-grey (1.0 = unchanged).
        saturation: Saturation factor (1.0 = unchanged, colour images only).
        sharpness: Unsharp-mask amount (0 = no sharpening).

    Returns:
        New uint8 image with the same shape.
    """
    alpha = None
    single_channel = image.ndim == 3 and image.shape[2] == 1
    if single_channel:
        image = image[..., 0]
    elif image.ndim == 3 and image.shape[2] == 4:
        alpha = image[..., 3].copy()
        image = image[..., :3]

    work = image.astype(np.float32)
    work *= 2.0 ** exposure_ev
    work = (work - 127.5) * contrast + 127.5
    result = np.clip(work, 0, 255).astype(np.uint8)

    if result.ndim == 3 and result.shape[2] == 3 and saturation != 1.0:
        hsv = cv2.cvtColor(result, cv2.COLOR_BGR2HSV).astype(np.float32)
        hsv[..., 1] = np.clip(hsv[..., 1] * saturation, 0, 255)
        result = cv2.cvtColor(hsv.astype(np.uint8), cv2.COLOR_HSV2BGR)

    if sharpness > 0:
        blurred = cv2.GaussianBlur(result, (0, 0), 2.0)
        result = cv2.addWeighted(result, 1.0 + sharpness, blurred, -sharpness, 0)

    if alpha is not None:
        result = np.dstack([result, alpha])
    elif single_channel:
        result = result[..., np.newaxis]

    logger.debug(
        f"Enhanced image (ev={exposure_ev}, contrast={contrast}, "
        f"saturation={saturation}, sharpness={sharpness})"
    )
    return result
