"""
Unit tests for config_loader module.
"""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from src.rectification.config_loader import (
    RectificationConfig,
    get_default_config,
    load_config,
)
from src.rectification.types import Interpolation, OrderingStrategy, WarpBackend


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_default_config(self):
        config = load_config()

        assert isinstance(config, RectificationConfig)
        assert config.ordering.strategy is OrderingStrategy.EXTREMES
        assert config.warp.interpolation is Interpolation.BILINEAR
        assert config.warp.backend is WarpBackend.NUMPY
        assert config.warp.border_value == 255
        assert config.detection.fallback_margin_ratio == pytest.approx(0.1)
        assert config.output.jpeg_quality == 90
        assert config.quality.min_resolution_px == 500

    def test_get_default_config(self):
        assert get_default_config() == load_config()

    def test_load_custom_config(self, tmp_path):
        custom_config = {
            "ordering": {"strategy": "quadrant"},
            "warp": {"interpolation": "nearest", "border_value": 0, "backend": "opencv"},
            "output": {"jpeg_quality": 80, "enhance": True},
        }
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump(custom_config), encoding="utf-8")

        config = load_config(config_path)

        assert config.ordering.strategy is OrderingStrategy.QUADRANT
        assert config.warp.interpolation is Interpolation.NEAREST
        assert config.warp.border_value == 0
        assert config.warp.backend is WarpBackend.OPENCV
        assert config.output.enhance is True
        # Sections not given keep their defaults
        assert config.detection.canny_high == 150

    def test_empty_file_uses_defaults(self, tmp_path):
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("", encoding="utf-8")

        assert load_config(config_path) == RectificationConfig()

    def test_missing_file_raises_error(self):
        with pytest.raises(FileNotFoundError):
            load_config(Path("nonexistent_config.yaml"))


class TestValidation:
    """Invalid values are rejected by the pydantic models."""

    @pytest.mark.parametrize(
        "section, values",
        [
            ("warp", {"border_value": 300}),
            ("warp", {"interpolation": "cubic"}),
            ("ordering", {"strategy": "spiral"}),
            ("detection", {"blur_kernel": 4}),
            ("detection", {"min_area_ratio": 0}),
            ("detection", {"fallback_margin_ratio": 0.5}),
            ("output", {"jpeg_quality": 0}),
            ("service", {"max_workers": 0}),
        ],
    )
    def test_invalid_values(self, tmp_path, section, values):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({section: values}), encoding="utf-8")

        with pytest.raises(ValidationError):
            load_config(config_path)
