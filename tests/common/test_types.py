"""
Unit tests for common types (ImageBuffer, Point).
"""

import numpy as np
import pytest
from pydantic import ValidationError

from src.common.types import ImageBuffer, Point


class TestImageBuffer:
    @pytest.mark.parametrize(
        "shape, channels",
        [((10, 20), 1), ((10, 20, 1), 1), ((10, 20, 3), 3), ((10, 20, 4), 4)],
    )
    def test_valid_shapes(self, shape, channels):
        buffer = ImageBuffer(data=np.zeros(shape, dtype=np.uint8))

        assert buffer.height == 10
        assert buffer.width == 20
        assert buffer.channels == channels
        assert buffer.has_alpha == (channels == 4)

    def test_to_numpy_returns_same_array(self):
        data = np.zeros((5, 5), dtype=np.uint8)

        assert ImageBuffer(data=data).to_numpy() is data

    @pytest.mark.parametrize(
        "data",
        [
            np.array([], dtype=np.uint8),
            np.zeros((4,), dtype=np.uint8),
            np.zeros((4, 4, 2), dtype=np.uint8),
            np.zeros((4, 4, 3), dtype=np.float32),
            [[0, 0], [0, 0]],
        ],
    )
    def test_invalid_data(self, data):
        with pytest.raises(ValidationError):
            ImageBuffer(data=data)


class TestPoint:
    def test_coordinates_are_float(self):
        point = Point(x=3, y=4)

        assert isinstance(point.x, float)
        assert point.to_tuple() == (3.0, 4.0)

    def test_numpy_conversion(self):
        point = Point.from_numpy(np.array([1.5, 2.5]))

        np.testing.assert_array_equal(point.to_numpy(), [1.5, 2.5])
        assert point.to_numpy().dtype == np.float64

    def test_from_numpy_wrong_shape(self):
        with pytest.raises(ValueError):
            Point.from_numpy(np.array([1.0, 2.0, 3.0]))

    def test_from_list(self):
        assert Point.from_list([7, 8]) == Point(x=7, y=8)

        with pytest.raises(ValueError):
            Point.from_list([1])

    def test_distance(self):
        assert Point(x=0, y=0).distance_to(Point(x=3, y=4)) == pytest.approx(5.0)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "1.0", True, None])
    def test_rejects_invalid_coordinates(self, value):
        with pytest.raises(ValidationError):
            Point(x=value, y=0)

    def test_frozen(self):
        point = Point(x=1, y=2)

        with pytest.raises(ValidationError):
            point.x = 5

    def test_repr(self):
        assert repr(Point(x=1.5, y=2)) == "Point(x=1.5, y=2)"
