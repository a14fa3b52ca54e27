"""
Shared Utilities

Common functions used across all modules.
"""

from src.utils.io import encode_image, load_yaml, read_image, save_json, write_image
from src.utils.visualization import draw_quadrilateral

__all__ = [
    "encode_image",
    "load_yaml",
    "read_image",
    "save_json",
    "write_image",
    "draw_quadrilateral",
]
