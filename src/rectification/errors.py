"""
Error types raised by the rectification core.

Every error is terminal for a single call. Callers decide whether to retry
with a default quadrilateral or surface the failure.
"""


class RectificationError(ValueError):
    """Base class for all rectification failures."""


class InvalidInput(RectificationError):
    """Wrong point count, non-finite coordinates or an unusable image."""


class InvalidGeometry(RectificationError):
    """Degenerate quadrilateral (coincident corners, zero-length edges)."""


class SingularTransform(RectificationError):
    """The four correspondences do not determine an invertible homography."""
