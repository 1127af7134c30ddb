"""Screenshot normalization pipeline for OCR.

Orchestrates crop, upscale, and a single color-isolation strategy,
with before/after quality metrics.
"""

from dataclasses import dataclass

import cv2
import numpy as np

from cpscan.utils.config import NormalizerConfig
from cpscan.utils.logger import get_logger

from .isolate import ISOLATION_METHODS, isolate, to_rgba
from .resize import INTERPOLATIONS, crop_top, upscale

logger = get_logger(__name__)


@dataclass
class QualityMetrics:
    """Before/after image quality measurements."""

    sharpness_before: float
    sharpness_after: float
    contrast_before: float
    contrast_after: float


def _to_gray(image: np.ndarray) -> np.ndarray:
    rgba = to_rgba(image)
    return cv2.cvtColor(rgba, cv2.COLOR_RGBA2GRAY)


def calculate_sharpness(image: np.ndarray) -> float:
    """Calculate image sharpness using Laplacian variance.

    Args:
        image: Input image (grayscale, RGB or RGBA).

    Returns:
        Sharpness score (higher means sharper).
    """
    return float(cv2.Laplacian(_to_gray(image), cv2.CV_64F).var())


def calculate_contrast(image: np.ndarray) -> float:
    """Calculate contrast as the standard deviation of gray intensities."""
    return float(_to_gray(image).std())


class ImageNormalizer:
    """Makes creature-screen captures legible to a generic OCR engine.

    The output is an RGBA bitmap whose dimensions are those of the input
    after the configured crop and upscale, with every channel in
    ``[0, 255]``.

    Args:
        config: Normalizer configuration.

    Raises:
        ValueError: If the configured isolation method or interpolation
            is unknown.
    """

    def __init__(self, config: NormalizerConfig) -> None:
        if config.method not in ISOLATION_METHODS:
            raise ValueError(f"Unsupported isolation method: {config.method}")
        if config.interpolation not in INTERPOLATIONS:
            raise ValueError(f"Unsupported interpolation: {config.interpolation}")
        self.config = config

    def output_shape(self, height: int, width: int) -> tuple[int, int]:
        """Return the ``(height, width)`` the normalizer produces for an input size."""
        if self.config.crop_enabled:
            height = max(1, int(round(height * self.config.crop_fraction)))
        factor = self.config.scale_factor
        return height * factor, width * factor

    def normalize(self, image: np.ndarray) -> tuple[np.ndarray, QualityMetrics]:
        """Run crop, upscale and isolation on a screenshot.

        Args:
            image: Raw screenshot (grayscale, RGB or RGBA).

        Returns:
            Tuple of (normalized RGBA bitmap, quality metrics).
        """
        metrics = QualityMetrics(
            sharpness_before=calculate_sharpness(image),
            contrast_before=calculate_contrast(image),
            sharpness_after=0.0,
            contrast_after=0.0,
        )

        result = to_rgba(image)

        if self.config.crop_enabled:
            result = crop_top(result, self.config.crop_fraction)

        result = upscale(
            result,
            factor=self.config.scale_factor,
            interpolation=self.config.interpolation,
        )
        result = isolate(result, self.config)

        metrics.sharpness_after = calculate_sharpness(result)
        metrics.contrast_after = calculate_contrast(result)

        logger.info(
            "Normalized %dx%d -> %dx%d via %s: sharpness %.1f->%.1f, contrast %.1f->%.1f",
            image.shape[1],
            image.shape[0],
            result.shape[1],
            result.shape[0],
            self.config.method,
            metrics.sharpness_before,
            metrics.sharpness_after,
            metrics.contrast_before,
            metrics.contrast_after,
        )
        return result, metrics
