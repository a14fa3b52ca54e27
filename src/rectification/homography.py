"""
Perspective Mapping

Solves the homography that takes the destination rectangle onto the ordered
source quadrilateral. The resampler uses it in the destination-to-source
direction, so every output pixel has exactly one source position.
"""

import itertools
import logging

import numpy as np

from src.rectification.errors import SingularTransform
from src.rectification.types import Dimensions, PerspectiveTransform, Quadrilateral

logger = logging.getLogger(__name__)

# Relative tolerance for collinearity and matrix conditioning checks
COLLINEARITY_EPS = 1e-9
MAX_CONDITION_NUMBER = 1e12


def _check_not_collinear(points: np.ndarray, label: str) -> None:
    """
    Raise SingularTransform if any 3 of the 4 points are collinear.

    The cross product is compared against the squared extent of the point
    set so the check does not depend on the image scale.
    """
    extent = float(np.ptp(points, axis=0).max())
    tolerance = COLLINEARITY_EPS * max(extent, 1.0) ** 2

    for i, j, k in itertools.combinations(range(4), 3):
        p1, p2, p3 = points[i], points[j], points[k]
        cross = (p2[0] - p1[0]) * (p3[1] - p1[1]) - (p3[0] - p1[0]) * (p2[1] - p1[1])
        if abs(cross) <= tolerance:
            raise SingularTransform(
                f"{label} points {i}, {j}, {k} are collinear - "
                "cannot compute perspective transform"
            )


def _normalizing_transform(points: np.ndarray) -> np.ndarray:
    """Similarity moving the centroid to the origin with mean distance sqrt(2)."""
    center = points.mean(axis=0)
    mean_dist = float(np.linalg.norm(points - center, axis=1).mean())
    scale = np.sqrt(2.0) / mean_dist
    return np.array(
        [
            [scale, 0.0, -scale * center[0]],
            [0.0, scale, -scale * center[1]],
            [0.0, 0.0, 1.0],
        ]
    )


def _apply(T: np.ndarray, points: np.ndarray) -> np.ndarray:
    homogeneous = np.hstack([points, np.ones((len(points), 1))]) @ T.T
    return homogeneous[:, :2] / homogeneous[:, 2:3]


def solve_homography(src: np.ndarray, dst: np.ndarray) -> np.ndarray:
    """
    Solve the 3x3 homography H with H @ [dst, 1] ~ [src, 1].

    Each correspondence contributes two rows of an 8x8 system in the
    unknowns (a, b, c, d, e, f, g, h):

        sx = (a*dx + b*dy + c) / (g*dx + h*dy + 1)
        sy = (d*dx + e*dy + f) / (g*dx + h*dy + 1)

    Both point sets are normalised (centroid at the origin, mean distance
    sqrt(2)) before solving and the result is mapped back, which keeps the
    system well conditioned for large images.

    Args:
        src: (4, 2) points the mapping should produce.
        dst: (4, 2) points the mapping is applied to.

    Returns:
        3x3 float64 matrix with H[2, 2] == 1.

    Raises:
        SingularTransform: If the system has no unique solution.
    """
    src = np.asarray(src, dtype=np.float64)
    dst = np.asarray(dst, dtype=np.float64)

    _check_not_collinear(src, "Source")
    _check_not_collinear(dst, "Destination")

    T_src = _normalizing_transform(src)
    T_dst = _normalizing_transform(dst)
    H_norm = _solve_normalized(_apply(T_src, src), _apply(T_dst, dst))

    H = np.linalg.inv(T_src) @ H_norm @ T_dst
    if abs(H[2, 2]) < np.finfo(np.float64).eps:
        raise SingularTransform("Perspective transform maps the origin to infinity")
    H = H / H[2, 2]

    if not np.isfinite(H).all() or abs(np.linalg.det(H)) < np.finfo(np.float64).eps:
        raise SingularTransform("Perspective transform is not invertible")

    return H


def _solve_normalized(src: np.ndarray, dst: np.ndarray) -> np.ndarray:
    A = np.zeros((8, 8), dtype=np.float64)
    b = np.zeros(8, dtype=np.float64)
    for i, ((sx, sy), (dx, dy)) in enumerate(zip(src, dst)):
        A[2 * i] = [dx, dy, 1.0, 0.0, 0.0, 0.0, -sx * dx, -sx * dy]
        A[2 * i + 1] = [0.0, 0.0, 0.0, dx, dy, 1.0, -sy * dx, -sy * dy]
        b[2 * i] = sx
        b[2 * i + 1] = sy

    if np.linalg.cond(A) > MAX_CONDITION_NUMBER:
        raise SingularTransform("Perspective system is ill-conditioned")

    try:
        coeffs = np.linalg.solve(A, b)
    except np.linalg.LinAlgError as e:
        raise SingularTransform(f"Failed to compute perspective transform: {e}") from e

    return np.append(coeffs, 1.0).reshape(3, 3)


def compute_perspective_transform(
    quad: Quadrilateral, dims: Dimensions
) -> PerspectiveTransform:
    """
    Compute the destination-to-source transform for a rectification.

    The destination rectangle has corners (0, 0), (w, 0), (w, h), (0, h)
    taken from the unrounded dimensions, matched to TL, TR, BR, BL.

    Args:
        quad: Ordered source corners.
        dims: Output dimensions from the dimension estimator.

    Returns:
        PerspectiveTransform mapping destination coordinates into the source
        image.

    Raises:
        SingularTransform: If the corners are collinear or the system is
            not invertible.

    Example:
        >>> quad = Quadrilateral.from_array([[50, 50], [250, 50], [250, 250], [50, 250]])
        >>> t = compute_perspective_transform(quad, Dimensions(200.0, 200.0))
        >>> t.apply([0, 0])
        array([50., 50.])
    """
    H = solve_homography(quad.as_array(), dims.destination_corners())

    logger.debug(f"Perspective coefficients: {np.round(H.ravel()[:8], 6).tolist()}")

    return PerspectiveTransform(H)
