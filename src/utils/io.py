"""
I/O Utilities

File input/output and image encoding. The rectification core works on
decoded pixel buffers only; everything that touches bytes lives here.
"""

import json
from pathlib import Path
from typing import Any, Dict, Union

import cv2
import numpy as np
import yaml


def load_yaml(file_path: Path) -> Dict[str, Any]:
    """Load YAML file."""
    with open(file_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def save_json(data: Dict[str, Any], file_path: Path, indent: int = 2):
    """Save data to JSON file."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent)


def read_image(file_path: Union[str, Path], keep_alpha: bool = False) -> np.ndarray:
    """
    Decode an image file into a uint8 BGR (or BGRA) array.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If OpenCV cannot decode the file.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Image not found: {file_path}")

    flags = cv2.IMREAD_UNCHANGED if keep_alpha else cv2.IMREAD_COLOR
    image = cv2.imread(str(file_path), flags)
    if image is None:
        raise ValueError(f"Could not decode image: {file_path}")
    return image


def encode_image(image: np.ndarray, ext: str = ".jpg", jpeg_quality: int = 90) -> bytes:
    """
    Encode an image to compressed bytes.

    Args:
        image: uint8 image array.
        ext: Target format extension (".jpg" or ".png").
        jpeg_quality: JPEG quality (ignored for PNG).

    Raises:
        ValueError: If encoding fails.
    """
    params = []
    if ext.lower() in (".jpg", ".jpeg"):
        params = [cv2.IMWRITE_JPEG_QUALITY, int(jpeg_quality)]
        # JPEG has no alpha channel
        if image.ndim == 3 and image.shape[2] == 4:
            image = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)

    ok, buffer = cv2.imencode(ext, image, params)
    if not ok:
        raise ValueError(f"Failed to encode image as {ext}")
    return buffer.tobytes()


def write_image(image: np.ndarray, file_path: Union[str, Path], jpeg_quality: int = 90):
    """Encode an image and write it, creating parent directories."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_bytes(
        encode_image(image, ext=file_path.suffix or ".jpg", jpeg_quality=jpeg_quality)
    )
