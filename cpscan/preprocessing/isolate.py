"""Text-versus-background separation for creature-screen captures.

Screen text is rendered near-white over warm or saturated backgrounds,
while Tesseract reads dark glyphs on a light field best. Each strategy
here turns an RGBA bitmap into an RGBA bitmap with R == G == B and the
alpha channel untouched. Exactly one of them runs per normalization.
"""

import numpy as np

from cpscan.utils.config import NormalizerConfig
from cpscan.utils.logger import get_logger

logger = get_logger(__name__)

ISOLATION_METHODS = ("blue_weighted", "brightness", "contrast", "none")


def to_rgba(image: np.ndarray) -> np.ndarray:
    """Promote a grayscale, RGB or RGBA array to an RGBA ``uint8`` copy.

    Args:
        image: Input array of shape ``(h, w)``, ``(h, w, 3)`` or ``(h, w, 4)``.

    Returns:
        Array of shape ``(h, w, 4)`` with an opaque alpha where none existed.

    Raises:
        ValueError: If the array shape is not an image.
    """
    data = np.clip(image, 0, 255).astype(np.uint8)

    if data.ndim == 2:
        alpha = np.full(data.shape, 255, dtype=np.uint8)
        return np.dstack([data, data, data, alpha])
    if data.ndim == 3 and data.shape[2] == 3:
        alpha = np.full(data.shape[:2], 255, dtype=np.uint8)
        return np.dstack([data, alpha])
    if data.ndim == 3 and data.shape[2] == 4:
        return data.copy()
    raise ValueError(f"Unsupported image shape: {image.shape}")


def luminance(rgba: np.ndarray) -> np.ndarray:
    """Rec. 601 luminance of an RGBA bitmap as ``float64``."""
    r = rgba[..., 0].astype(np.float64)
    g = rgba[..., 1].astype(np.float64)
    b = rgba[..., 2].astype(np.float64)
    return 0.299 * r + 0.587 * g + 0.114 * b


def _with_gray(rgba: np.ndarray, gray: np.ndarray) -> np.ndarray:
    """Write a gray plane into the color channels, keeping alpha."""
    values = np.clip(np.rint(gray), 0, 255).astype(np.uint8)
    result = rgba.copy()
    result[..., 0] = values
    result[..., 1] = values
    result[..., 2] = values
    return result


def isolate_blue_weighted(
    image: np.ndarray,
    blue_weight: float = 0.6,
    low_cutoff: int = 100,
    high_cutoff: int = 180,
) -> np.ndarray:
    """Blend the blue channel into luminance, invert, then snap the extremes.

    Gold and orange backgrounds carry little blue and fall to light values
    after inversion, while white text stays dark. The luminance share
    keeps blue backgrounds from swallowing the text.

    Args:
        image: RGBA bitmap.
        blue_weight: Share of the blue channel; luminance gets the rest.
        low_cutoff: Inverted values below this become pure black.
        high_cutoff: Inverted values above this become pure white.

    Returns:
        Near-binary RGBA bitmap with dark text on a light field.
    """
    rgba = to_rgba(image)
    blue = rgba[..., 2].astype(np.float64)
    blended = blue_weight * blue + (1.0 - blue_weight) * luminance(rgba)
    inverted = 255.0 - blended

    inverted = np.where(inverted < low_cutoff, 0.0, inverted)
    inverted = np.where(inverted > high_cutoff, 255.0, inverted)

    logger.debug(
        "Applied blue-weighted isolation (w=%.2f, low=%d, high=%d)",
        blue_weight,
        low_cutoff,
        high_cutoff,
    )
    return _with_gray(rgba, inverted)


def isolate_brightness(image: np.ndarray, threshold: int = 210) -> np.ndarray:
    """Mark pixels as text only when all three channels exceed ``threshold``.

    Saturated bright colors such as gold keep one channel low and are
    rejected. Around 160 light backgrounds leak in as text; around 210
    bright glyphs separate from near-white backgrounds. Tune per theme.

    Args:
        image: RGBA bitmap.
        threshold: Per-channel brightness cutoff.

    Returns:
        Binary RGBA bitmap, text black and everything else white.
    """
    rgba = to_rgba(image)
    is_text = np.all(rgba[..., :3] > threshold, axis=-1)
    gray = np.where(is_text, 0.0, 255.0)
    logger.debug(
        "Applied brightness isolation (threshold=%d, text pixels=%d)",
        threshold,
        int(is_text.sum()),
    )
    return _with_gray(rgba, gray)


def contrast_stretch(image: np.ndarray, contrast: float = 1.5) -> np.ndarray:
    """Linear contrast around mid-gray: ``gray * c + 128 * (1 - c)``.

    Smoother than hard binarization when the text and background are
    not far apart, at the cost of leaving more noise for OCR.

    Args:
        image: RGBA bitmap.
        contrast: Contrast multiplier, values above 1 increase contrast.

    Returns:
        Grayscale RGBA bitmap clamped to ``[0, 255]``.
    """
    rgba = to_rgba(image)
    stretched = luminance(rgba) * contrast + 128.0 * (1.0 - contrast)
    logger.debug("Applied contrast stretch (c=%.2f)", contrast)
    return _with_gray(rgba, stretched)


def isolate(image: np.ndarray, config: NormalizerConfig) -> np.ndarray:
    """Apply the isolation strategy selected by ``config.method``.

    Args:
        image: RGBA bitmap.
        config: Normalizer configuration.

    Returns:
        Transformed RGBA bitmap of the same dimensions.

    Raises:
        ValueError: If an unsupported method is configured.
    """
    method = config.method
    if method == "blue_weighted":
        return isolate_blue_weighted(
            image,
            blue_weight=config.blue_weight,
            low_cutoff=config.low_cutoff,
            high_cutoff=config.high_cutoff,
        )
    if method == "brightness":
        return isolate_brightness(image, threshold=config.brightness_threshold)
    if method == "contrast":
        return contrast_stretch(image, contrast=config.contrast)
    if method == "none":
        return to_rgba(image)
    raise ValueError(f"Unsupported isolation method: {method}")
