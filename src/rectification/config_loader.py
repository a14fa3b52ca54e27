"""Configuration loader with Pydantic validation for the Rectification module.

This module provides type-safe configuration loading from YAML files using
Pydantic models for validation and default values.
"""

import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from src.rectification.types import Interpolation, OrderingStrategy, WarpBackend
from src.utils.io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


class OrderingConfig(BaseModel):
    """Corner ordering configuration.

    Attributes:
        strategy: "extremes" (sum/difference extremes) or "quadrant"
            (centroid quadrants with input-order fallback)
    """

    strategy: OrderingStrategy = OrderingStrategy.EXTREMES


class WarpConfig(BaseModel):
    """Resampling configuration.

    Attributes:
        interpolation: "bilinear" or "nearest"
        border_value: Fill value for pixels mapping outside the source
        backend: "numpy" or "opencv"
    """

    interpolation: Interpolation = Interpolation.BILINEAR
    border_value: int = Field(default=255, ge=0, le=255)
    backend: WarpBackend = WarpBackend.NUMPY


class DetectionConfig(BaseModel):
    """Contour-based corner detection configuration.

    Attributes:
        canny_low: Lower hysteresis threshold for Canny edges
        canny_high: Upper hysteresis threshold for Canny edges
        blur_kernel: Gaussian blur kernel size (odd)
        min_area_ratio: Minimum document area relative to the frame
        approx_epsilon: Polygon approximation tolerance relative to perimeter
        fallback_margin_ratio: Inset of the default quadrilateral, relative
            to min(width, height)
    """

    canny_low: int = Field(default=50, ge=0)
    canny_high: int = Field(default=150, ge=0)
    blur_kernel: int = Field(default=5, ge=1)
    min_area_ratio: float = Field(default=0.2, gt=0.0, lt=1.0)
    approx_epsilon: float = Field(default=0.02, gt=0.0, lt=1.0)
    fallback_margin_ratio: float = Field(default=0.1, ge=0.0, lt=0.5)

    @field_validator("blur_kernel")
    @classmethod
    def _odd_kernel(cls, v: int) -> int:
        if v % 2 == 0:
            raise ValueError(f"blur_kernel must be odd, got {v}")
        return v


class OutputConfig(BaseModel):
    """Output encoding configuration.

    Attributes:
        jpeg_quality: JPEG quality for encoded crops (1-100)
        enhance: Apply exposure/contrast/sharpen enhancement after cropping
    """

    jpeg_quality: int = Field(default=90, ge=1, le=100)
    enhance: bool = False


class QualityConfig(BaseModel):
    """Input quality configuration.

    Attributes:
        min_resolution_px: Minimum width and height of a usable photo
    """

    min_resolution_px: int = Field(default=500, ge=1)


class ServiceConfig(BaseModel):
    """Background execution configuration.

    Attributes:
        max_workers: Thread pool size for detection and cropping tasks
    """

    max_workers: int = Field(default=2, ge=1)


class RectificationConfig(BaseModel):
    """Complete rectification module configuration."""

    ordering: OrderingConfig = OrderingConfig()
    warp: WarpConfig = WarpConfig()
    detection: DetectionConfig = DetectionConfig()
    output: OutputConfig = OutputConfig()
    quality: QualityConfig = QualityConfig()
    service: ServiceConfig = ServiceConfig()


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> RectificationConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file.

    Returns:
        Validated RectificationConfig object.

    Raises:
        FileNotFoundError: If config file does not exist.
        yaml.YAMLError: If YAML parsing fails.
        pydantic.ValidationError: If configuration validation fails.

    Example:
        >>> config = load_config(Path("src/rectification/config.yaml"))
        >>> print(config.warp.interpolation)
        Interpolation.BILINEAR
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading rectification config from {config_path}")
    config_dict = load_yaml(config_path) or {}

    config = RectificationConfig(**config_dict)
    logger.info("Successfully loaded rectification configuration")
    return config


def get_default_config() -> RectificationConfig:
    """Get default configuration from bundled config.yaml file.

    Returns:
        Config loaded from src/rectification/config.yaml, or built-in
        defaults if the file is missing.
    """
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    logger.warning("Bundled config.yaml not found, using built-in defaults")
    return RectificationConfig()
