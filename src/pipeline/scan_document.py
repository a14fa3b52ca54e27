"""
Document Scan Pipeline

Detects the document in a photo (or takes corners from the command line),
rectifies it and writes the result.

Usage:
    docrectify --input photo.jpg --output page.jpg
    docrectify --input photo.jpg --output page.jpg \\
        --corners 120,80,890,60,930,1220,90,1250 --strategy quadrant
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from src.rectification import (
    OrderingStrategy,
    RectificationConfig,
    RectificationError,
    ScanService,
    get_default_config,
    load_config,
    order_corners,
)
from src.utils.io import read_image, save_json, write_image
from src.utils.visualization import draw_quadrilateral

logger = logging.getLogger(__name__)


def parse_corners(text: str) -> np.ndarray:
    """Parse "x1,y1,x2,y2,x3,y3,x4,y4" into a (4, 2) array."""
    try:
        values = [float(v) for v in text.split(",")]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Corners must be numbers: {e}") from e
    if len(values) != 8:
        raise argparse.ArgumentTypeError(
            f"Expected 8 comma-separated values, got {len(values)}"
        )
    return np.array(values, dtype=np.float64).reshape(4, 2)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Detect and rectify a document in a photo"
    )
    parser.add_argument("--input", type=Path, required=True, help="Input image")
    parser.add_argument("--output", type=Path, required=True, help="Output image")
    parser.add_argument(
        "--corners",
        type=parse_corners,
        default=None,
        help="Corners as x1,y1,...,x4,y4 (any order). Detected if omitted.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Configuration file")
    parser.add_argument(
        "--strategy",
        choices=["extremes", "quadrant"],
        default=None,
        help="Override the corner ordering strategy",
    )
    parser.add_argument(
        "--corners-json", type=Path, default=None, help="Write ordered corners to JSON"
    )
    parser.add_argument(
        "--debug-overlay", type=Path, default=None, help="Write a corner overlay image"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def _load_config(args: argparse.Namespace) -> RectificationConfig:
    config = load_config(args.config) if args.config else get_default_config()
    if args.strategy:
        config = config.model_copy(
            update={
                "ordering": config.ordering.model_copy(
                    update={"strategy": OrderingStrategy(args.strategy)}
                )
            }
        )
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = _load_config(args)
    image = read_image(args.input)

    with ScanService(config=config) as service:
        if not service.check_quality(image):
            logger.warning("Photo is below the recommended resolution")

        corners = args.corners if args.corners is not None else service.detect_corners(image)
        try:
            ordered = order_corners(corners, config.ordering.strategy).as_array()
        except RectificationError as e:
            logger.error(f"Invalid corners: {e}")
            return 1
        logger.info(f"Corners (TL, TR, BR, BL): {np.round(ordered, 1).tolist()}")

        if args.corners_json:
            save_json({"corners": ordered.tolist()}, args.corners_json)

        if args.debug_overlay:
            write_image(draw_quadrilateral(image, ordered), args.debug_overlay)

        try:
            page = service.crop_image(image, corners)
        except RectificationError as e:
            logger.error(f"Rectification failed: {e}")
            return 1

    write_image(page, args.output, jpeg_quality=config.output.jpeg_quality)
    logger.info(f"Wrote {page.shape[1]}x{page.shape[0]} page to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
