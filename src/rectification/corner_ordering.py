"""
Corner Ordering

Labels four unordered corner points as Top-Left, Top-Right, Bottom-Right and
Bottom-Left. Detector output carries no reliable order, so every
rectification starts here.
"""

import logging
from typing import Optional, Sequence, Union

import numpy as np

from src.common.types import Point
from src.rectification.errors import InvalidInput
from src.rectification.types import OrderingStrategy, Quadrilateral

logger = logging.getLogger(__name__)

PointsLike = Union[np.ndarray, Sequence[Sequence[float]], Sequence[Point]]


def as_point_array(points: PointsLike) -> np.ndarray:
    """
    Convert 4 points to a validated (4, 2) float64 array.

    Args:
        points: Array of shape (4, 2), a list of [x, y] pairs, or a list of
            Point instances.

    Returns:
        Array of shape (4, 2).

    Raises:
        InvalidInput: If there are not exactly 4 points or any coordinate is
            not finite.
    """
    if isinstance(points, np.ndarray):
        raw = points
    else:
        raw = [p.to_tuple() if isinstance(p, Point) else p for p in points]

    try:
        pts = np.array(raw, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Corner points are not numeric: {e}") from e

    if pts.shape != (4, 2):
        raise InvalidInput(
            f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
        )

    if not np.isfinite(pts).all():
        raise InvalidInput(f"Corner points must be finite, got {pts.tolist()}")

    return pts


def order_corners(
    points: PointsLike,
    strategy: Union[OrderingStrategy, str] = OrderingStrategy.EXTREMES,
) -> Quadrilateral:
    """
    Order 4 points as Top-Left, Top-Right, Bottom-Right, Bottom-Left.

    Args:
        points: 4 corner points in any order.
        strategy: "extremes" (default) or "quadrant". See
            order_by_extremes and order_by_quadrant.

    Returns:
        Quadrilateral with canonically labelled corners.

    Raises:
        InvalidInput: If the input is not 4 finite points.

    Example:
        >>> quad = order_corners([[300, 150], [100, 200], [320, 400], [80, 380]])
        >>> quad.top_left
        Point(x=100, y=200)
    """
    pts = as_point_array(points)
    strategy = OrderingStrategy(strategy)

    if strategy is OrderingStrategy.QUADRANT:
        rect = order_by_quadrant(pts)
    else:
        rect = order_by_extremes(pts)

    logger.debug(
        f"Ordered points ({strategy.value}): TL={rect[0]}, TR={rect[1]}, "
        f"BR={rect[2]}, BL={rect[3]}"
    )
    return Quadrilateral.from_array(rect)


def order_by_extremes(pts: np.ndarray) -> np.ndarray:
    """
    Order points using coordinate-sum and coordinate-difference extremes.

    - Top-Left: smallest sum (x + y)
    - Bottom-Right: largest sum (x + y)
    - Top-Right: smallest difference (y - x)
    - Bottom-Left: largest difference (y - x)

    When the four picks do not hit four distinct points (a square turned by
    45 degrees ties both sums and differences), falls back to an angular
    sort around the centroid.

    Args:
        pts: Validated (4, 2) array.

    Returns:
        (4, 2) array in TL, TR, BR, BL order.
    """
    s = pts.sum(axis=1)
    diff = np.diff(pts, axis=1).ravel()

    indices = [
        int(np.argmin(s)),
        int(np.argmin(diff)),
        int(np.argmax(s)),
        int(np.argmax(diff)),
    ]

    if len(set(indices)) == 4:
        return pts[indices].copy()

    logger.debug(
        f"Sum/difference extremes are ambiguous (indices {indices}), "
        "ordering by angle around centroid"
    )
    return order_by_angle(pts)


def order_by_angle(pts: np.ndarray) -> np.ndarray:
    """
    Sort points clockwise (in image coordinates) around their centroid.

    The sequence starts at the point with the smallest x + y so that the
    first entry is the top-left corner.
    """
    center = pts.mean(axis=0)
    angles = np.arctan2(pts[:, 1] - center[1], pts[:, 0] - center[0])
    clockwise = pts[np.argsort(angles, kind="stable")]

    start = int(np.argmin(clockwise.sum(axis=1)))
    return np.roll(clockwise, -start, axis=0)


def order_by_quadrant(pts: np.ndarray) -> np.ndarray:
    """
    Classify each point by its quadrant relative to the centroid.

    - x < cx and y < cy: Top-Left
    - x > cx and y < cy: Top-Right
    - x < cx and y > cy: Bottom-Left
    - otherwise: Bottom-Right

    Two points landing in the same quadrant overwrite each other (last one
    wins). A slot that is never filled takes the point at the same index
    of the input (0: TL, 1: TR, 2: BR, 3: BL). Never raises; ambiguous
    input yields a plausible but possibly wrong order.

    Args:
        pts: Validated (4, 2) array.

    Returns:
        (4, 2) array in TL, TR, BR, BL order.
    """
    cx, cy = pts.mean(axis=0)
    slots: list[Optional[np.ndarray]] = [None, None, None, None]
    collisions = 0

    for point in pts:
        x, y = point
        if x < cx and y < cy:
            slot = 0
        elif x > cx and y < cy:
            slot = 1
        elif x < cx and y > cy:
            slot = 3
        else:
            slot = 2

        if slots[slot] is not None:
            collisions += 1
        slots[slot] = point

    missing = [i for i, p in enumerate(slots) if p is None]
    for i in missing:
        slots[i] = pts[i]

    if collisions or missing:
        logger.warning(
            f"Quadrant classification was ambiguous: {collisions} collision(s), "
            f"slots {missing} filled from input order"
        )

    return np.array(slots, dtype=np.float64)
