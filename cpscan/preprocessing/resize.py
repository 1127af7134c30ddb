"""Geometric steps applied before color isolation.

Upscaling makes small overlay glyphs thick enough for Tesseract to
segment; cropping drops UI chrome below the text of interest.
"""

import cv2
import numpy as np

from cpscan.utils.logger import get_logger

logger = get_logger(__name__)

INTERPOLATIONS: dict[str, int] = {
    "nearest": cv2.INTER_NEAREST,
    "linear": cv2.INTER_LINEAR,
}


def upscale(image: np.ndarray, factor: int = 2, interpolation: str = "linear") -> np.ndarray:
    """Multiply both image dimensions by an integer factor.

    Args:
        image: Input image (grayscale, RGB or RGBA).
        factor: Integer scale factor, 1 returns a copy.
        interpolation: ``"nearest"`` or ``"linear"``.

    Returns:
        Resized image with shape ``(h * factor, w * factor, ...)``.

    Raises:
        ValueError: If the factor is below 1 or the interpolation is unknown.
    """
    if factor < 1:
        raise ValueError(f"Scale factor must be >= 1, got {factor}")
    if interpolation not in INTERPOLATIONS:
        raise ValueError(f"Unsupported interpolation: {interpolation}")
    if factor == 1:
        return image.copy()

    h, w = image.shape[:2]
    result = cv2.resize(
        image,
        (w * factor, h * factor),
        interpolation=INTERPOLATIONS[interpolation],
    )
    logger.debug("Upscaled %dx%d by %dx (%s)", w, h, factor, interpolation)
    return result


def crop_top(image: np.ndarray, fraction: float = 0.35) -> np.ndarray:
    """Keep the top ``fraction`` of the rows at full width.

    Line positions reported by OCR afterwards are relative to the
    cropped frame.

    Args:
        image: Input image.
        fraction: Share of the height to keep, in ``(0, 1]``.

    Returns:
        Cropped copy of the image; at least one row is always kept.
    """
    if not 0.0 < fraction <= 1.0:
        raise ValueError(f"Crop fraction must be in (0, 1], got {fraction}")

    h = image.shape[0]
    rows = max(1, int(round(h * fraction)))
    logger.debug("Cropped to top %d of %d rows", rows, h)
    return image[:rows].copy()
