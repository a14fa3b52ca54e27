"""
Unit tests for homography module.
"""

import cv2
import numpy as np
import pytest

from src.rectification.dimensions import estimate_dimensions
from src.rectification.errors import SingularTransform
from src.rectification.homography import compute_perspective_transform, solve_homography
from src.rectification.types import Dimensions, PerspectiveTransform, Quadrilateral


@pytest.fixture
def tilted_quad():
    return Quadrilateral.from_array([[120, 80], [890, 60], [930, 1220], [90, 1250]])


def _diagonal_intersection(quad: np.ndarray) -> np.ndarray:
    """Intersection of TL-BR and TR-BL."""
    tl, tr, br, bl = quad
    d1 = br - tl
    d2 = bl - tr
    A = np.array([d1, -d2]).T
    t, _ = np.linalg.solve(A, tr - tl)
    return tl + t * d1


class TestComputePerspectiveTransform:
    """Tests for compute_perspective_transform function."""

    def test_destination_corners_map_to_source(self, tilted_quad):
        dims = estimate_dimensions(tilted_quad)

        transform = compute_perspective_transform(tilted_quad, dims)

        np.testing.assert_allclose(
            transform.apply(dims.destination_corners()),
            tilted_quad.as_array(),
            atol=1e-6,
        )

    def test_axis_aligned_square_is_translation(self):
        quad = Quadrilateral.from_array([[50, 50], [250, 50], [250, 250], [50, 250]])

        transform = compute_perspective_transform(quad, Dimensions(200.0, 200.0))

        np.testing.assert_allclose(transform.apply([0, 0]), [50, 50], atol=1e-9)
        np.testing.assert_allclose(transform.apply([100, 30]), [150, 80], atol=1e-9)
        np.testing.assert_allclose(
            transform.matrix, [[1, 0, 50], [0, 1, 50], [0, 0, 1]], atol=1e-9
        )

    def test_true_projective_mapping(self):
        """The rectangle centre lands on the source diagonals' intersection.

        An affine approximation would send it to the corner centroid instead.
        """
        quad = Quadrilateral.from_array([[100, 100], [300, 120], [380, 400], [20, 380]])
        dims = estimate_dimensions(quad)

        transform = compute_perspective_transform(quad, dims)
        centre = transform.apply([dims.width / 2, dims.height / 2])

        np.testing.assert_allclose(
            centre, _diagonal_intersection(quad.as_array()), atol=1e-6
        )
        assert not np.allclose(centre, quad.as_array().mean(axis=0), atol=0.5)

    def test_matches_opencv(self, tilted_quad):
        dims = estimate_dimensions(tilted_quad)
        dst = dims.destination_corners().astype(np.float32)
        src = tilted_quad.as_array().astype(np.float32)
        expected = cv2.getPerspectiveTransform(dst, src)

        transform = compute_perspective_transform(tilted_quad, dims)

        probe = np.array([[10, 10], [300, 500], [700, 1100]], dtype=np.float64)
        ours = transform.apply(probe)
        theirs = cv2.perspectiveTransform(probe.reshape(-1, 1, 2), expected).reshape(-1, 2)
        np.testing.assert_allclose(ours, theirs, atol=1e-2)

    def test_large_image_coordinates(self):
        quad = Quadrilateral.from_array(
            [[310, 220], [5800, 180], [5950, 4100], [150, 4300]]
        )
        dims = estimate_dimensions(quad)

        transform = compute_perspective_transform(quad, dims)

        np.testing.assert_allclose(
            transform.apply(dims.destination_corners()), quad.as_array(), atol=1e-5
        )

    def test_inverse_round_trip(self, tilted_quad):
        dims = estimate_dimensions(tilted_quad)
        transform = compute_perspective_transform(tilted_quad, dims)

        np.testing.assert_allclose(
            transform.inverse().apply(tilted_quad.as_array()),
            dims.destination_corners(),
            atol=1e-6,
        )

    def test_coefficients(self, tilted_quad):
        transform = compute_perspective_transform(
            tilted_quad, estimate_dimensions(tilted_quad)
        )

        assert len(transform.coefficients) == 8
        assert transform.matrix[2, 2] == pytest.approx(1.0)

    def test_collinear_points_raise(self):
        quad = Quadrilateral.from_array([[0, 0], [100, 0], [200, 0], [300, 0]])

        with pytest.raises(SingularTransform, match="collinear"):
            compute_perspective_transform(quad, Dimensions(100.0, 100.0))

    def test_three_collinear_points_raise(self):
        quad = Quadrilateral.from_array([[0, 0], [100, 0], [200, 0], [100, 100]])

        with pytest.raises(SingularTransform):
            compute_perspective_transform(quad, Dimensions(200.0, 100.0))

    def test_diagonal_line_raises(self):
        quad = Quadrilateral.from_array([[0, 0], [100, 100], [200, 200], [300, 300]])

        with pytest.raises(SingularTransform):
            compute_perspective_transform(quad, Dimensions(141.0, 424.0))


class TestSolveHomography:
    def test_identity(self):
        pts = np.array([[0, 0], [10, 0], [10, 10], [0, 10]], dtype=np.float64)

        H = solve_homography(pts, pts)

        np.testing.assert_allclose(H, np.eye(3), atol=1e-12)

    def test_degenerate_destination_raises(self):
        src = np.array([[0, 0], [10, 0], [10, 10], [0, 10]], dtype=np.float64)
        dst = np.array([[0, 0], [1, 1], [2, 2], [3, 3]], dtype=np.float64)

        with pytest.raises(SingularTransform, match="Destination"):
            solve_homography(src, dst)


class TestPerspectiveTransform:
    def test_matrix_is_read_only(self):
        transform = PerspectiveTransform(np.eye(3))

        with pytest.raises(ValueError):
            transform.matrix[0, 0] = 2.0

    def test_wrong_shape(self):
        with pytest.raises(ValueError, match="3x3"):
            PerspectiveTransform(np.eye(2))

    def test_apply_keeps_shape(self):
        transform = PerspectiveTransform(np.eye(3))

        assert transform.apply([1.0, 2.0]).shape == (2,)
        assert transform.apply(np.zeros((5, 2))).shape == (5, 2)
