"""
Document Rectification

Turns a photographed document quadrilateral into an axis-aligned,
top-down rectangle.

Pipeline stages:
1. Corner ordering (TL, TR, BR, BL)
2. Dimension estimation (longest opposite edges)
3. Perspective mapping (8-coefficient homography)
4. Resampling (inverse mapping, bilinear by default)
"""

from src.rectification.config_loader import (
    RectificationConfig,
    get_default_config,
    load_config,
)
from src.rectification.corner_ordering import order_corners
from src.rectification.detectors import (
    ContourCornerDetector,
    CornerDetector,
    MockCornerDetector,
    default_corners,
)
from src.rectification.dimensions import calculate_edge_lengths, estimate_dimensions
from src.rectification.errors import (
    InvalidGeometry,
    InvalidInput,
    RectificationError,
    SingularTransform,
)
from src.rectification.homography import compute_perspective_transform
from src.rectification.rectifier import Rectifier, rectify
from src.rectification.resampler import warp_image
from src.rectification.service import ScanService
from src.rectification.types import (
    Dimensions,
    Interpolation,
    OrderingStrategy,
    PerspectiveTransform,
    Quadrilateral,
    WarpBackend,
)

__all__ = [
    "Rectifier",
    "rectify",
    "ScanService",
    "order_corners",
    "estimate_dimensions",
    "calculate_edge_lengths",
    "compute_perspective_transform",
    "warp_image",
    "CornerDetector",
    "ContourCornerDetector",
    "MockCornerDetector",
    "default_corners",
    "RectificationConfig",
    "load_config",
    "get_default_config",
    "RectificationError",
    "InvalidInput",
    "InvalidGeometry",
    "SingularTransform",
    "Dimensions",
    "Interpolation",
    "OrderingStrategy",
    "PerspectiveTransform",
    "Quadrilateral",
    "WarpBackend",
]
