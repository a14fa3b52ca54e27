"""
Common types shared across all modules.

This module provides standardized data types for the document rectification
pipeline, ensuring consistency between corner detection, rectification and
the service layer.
"""

from src.common.types import ImageBuffer, Point

__all__ = ["ImageBuffer", "Point"]
