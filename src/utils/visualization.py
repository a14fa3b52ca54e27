"""
Visualization Utilities

Debug overlays for detected and ordered corners.
"""

from typing import Sequence

import cv2
import numpy as np

CORNER_LABELS = ("TL", "TR", "BR", "BL")


def draw_quadrilateral(
    image: np.ndarray,
    corners: Sequence[Sequence[float]],
    color=(0, 255, 0),
    thickness: int = 2,
    labels: Sequence[str] = CORNER_LABELS,
) -> np.ndarray:
    """
    Draw a quadrilateral and its corner labels on a copy of the image.

    Args:
        image: BGR image.
        corners: 4 points, drawn in the given order.
        color: BGR line color.
        thickness: Line thickness in pixels.
        labels: Text drawn next to each corner.

    Returns:
        New image with the overlay; the input is not modified.
    """
    overlay = image.copy()
    if overlay.ndim == 2:
        overlay = cv2.cvtColor(overlay, cv2.COLOR_GRAY2BGR)

    pts = np.rint(np.asarray(corners, dtype=np.float64)).astype(np.int32)
    cv2.polylines(overlay, [pts.reshape(-1, 1, 2)], True, color, thickness)

    for label, (x, y) in zip(labels, pts):
        cv2.circle(overlay, (int(x), int(y)), thickness * 3, (0, 0, 255), -1)
        cv2.putText(
            overlay,
            label,
            (int(x) + 8, int(y) - 8),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.6,
            (0, 0, 255),
            2,
        )

    return overlay
