"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import pytest


@pytest.fixture
def sample_quadrilateral_points():
    """Fixture providing sample 4-corner points in scrambled order."""
    import numpy as np

    return np.array(
        [
            [300, 150],  # Top-right area
            [100, 200],  # Top-left area
            [320, 400],  # Bottom-right area
            [80, 380],  # Bottom-left area
        ],
        dtype=np.float64,
    )


@pytest.fixture
def gradient_image():
    """300x300 BGR image where every pixel encodes its own position."""
    import numpy as np

    ys, xs = np.mgrid[0:300, 0:300]
    image = np.zeros((300, 300, 3), dtype=np.uint8)
    image[..., 0] = xs % 256
    image[..., 1] = ys % 256
    image[..., 2] = (xs + ys) % 256
    return image


@pytest.fixture
def sample_document_image():
    """Fixture providing a photo-like image with a tilted white page."""
    import cv2
    import numpy as np

    # Dark desk background
    image = np.full((600, 800, 3), 40, dtype=np.uint8)

    pts = np.array([[150, 100], [650, 120], [620, 520], [180, 500]], dtype=np.int32)
    cv2.fillPoly(image, [pts], (245, 245, 245))
    cv2.putText(
        image,
        "INVOICE 2024",
        (230, 300),
        cv2.FONT_HERSHEY_SIMPLEX,
        1.5,
        (20, 20, 20),
        3,
    )

    return image, pts.astype(np.float64)
