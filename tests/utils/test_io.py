"""
Unit tests for I/O and visualization utilities.
"""

import json

import cv2
import numpy as np
import pytest

from src.utils.io import encode_image, load_yaml, read_image, save_json, write_image
from src.utils.visualization import draw_quadrilateral


class TestImageIO:
    def test_png_round_trip(self, gradient_image, tmp_path):
        path = tmp_path / "nested" / "image.png"

        write_image(gradient_image, path)

        np.testing.assert_array_equal(read_image(path), gradient_image)

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_image(tmp_path / "missing.png")

    def test_read_undecodable_file(self, tmp_path):
        path = tmp_path / "broken.jpg"
        path.write_bytes(b"not an image")

        with pytest.raises(ValueError, match="Could not decode"):
            read_image(path)

    def test_keep_alpha(self, tmp_path):
        image = np.full((8, 8, 4), 100, dtype=np.uint8)
        path = tmp_path / "alpha.png"
        write_image(image, path)

        assert read_image(path).shape == (8, 8, 3)
        assert read_image(path, keep_alpha=True).shape == (8, 8, 4)

    def test_encode_jpeg(self, gradient_image):
        data = encode_image(gradient_image)

        assert data[:2] == b"\xff\xd8"

    def test_encode_jpeg_drops_alpha(self):
        image = np.full((8, 8, 4), 100, dtype=np.uint8)

        decoded = cv2.imdecode(
            np.frombuffer(encode_image(image), np.uint8), cv2.IMREAD_UNCHANGED
        )

        assert decoded.shape == (8, 8, 3)

    def test_jpeg_quality_affects_size(self, gradient_image):
        low = encode_image(gradient_image, jpeg_quality=10)
        high = encode_image(gradient_image, jpeg_quality=95)

        assert len(low) < len(high)


class TestStructuredFiles:
    def test_save_json(self, tmp_path):
        path = tmp_path / "out" / "corners.json"

        save_json({"corners": [[1.0, 2.0]]}, path)

        assert json.loads(path.read_text()) == {"corners": [[1.0, 2.0]]}

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("warp:\n  border_value: 0\n", encoding="utf-8")

        assert load_yaml(path) == {"warp": {"border_value": 0}}


class TestDrawQuadrilateral:
    def test_overlay_is_a_copy(self, gradient_image):
        original = gradient_image.copy()

        overlay = draw_quadrilateral(gradient_image, [[50, 50], [250, 50], [250, 250], [50, 250]])

        np.testing.assert_array_equal(gradient_image, original)
        assert not np.array_equal(overlay, original)
        np.testing.assert_array_equal(overlay[150, 50], (0, 255, 0))

    def test_grayscale_becomes_bgr(self):
        image = np.zeros((50, 50), dtype=np.uint8)

        overlay = draw_quadrilateral(image, [[5, 5], [45, 5], [45, 45], [5, 45]])

        assert overlay.shape == (50, 50, 3)
