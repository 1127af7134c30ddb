"""Tesseract OCR capability with line-segmented output.

Recognition is the one long-running step of a scan, so it runs in a
worker thread behind an async interface with optional progress
reporting and a cancellation event checked at the call boundary.
"""

import asyncio
from collections.abc import Callable

import numpy as np
import pytesseract
from PIL import Image

from cpscan.utils.logger import get_logger

from .transcript import Line, Transcript

logger = get_logger(__name__)

ProgressCallback = Callable[[float], None]


class OCRError(Exception):
    """Raised when the OCR engine fails to recognize an image."""


class OCRCancelledError(OCRError):
    """Raised when a scan is cancelled at the OCR boundary."""

    def __init__(self, message: str = "OCR cancelled") -> None:
        super().__init__(message)


class TesseractEngine:
    """Wrapper around Tesseract producing a ``Transcript``.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        psm: Tesseract page segmentation mode.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        psm: int = 6,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm

    async def recognize(
        self,
        image: np.ndarray,
        lang: str | None = None,
        progress: ProgressCallback | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Transcript:
        """Recognize text in a normalized bitmap.

        Args:
            image: Normalized bitmap as a numpy array.
            lang: OCR language hint. Defaults to the engine default.
            progress: Called with non-decreasing completion fractions in
                ``[0, 1]``. Purely observational.
            cancel: Event that aborts the scan when set before or
                after the engine call.

        Returns:
            Transcript with full text and ordered lines.

        Raises:
            OCRCancelledError: If ``cancel`` is set.
            OCRError: If Tesseract fails or is not installed.
        """
        lang = lang or self.default_lang
        config = f"--psm {self.psm}"
        pil_image = self._to_pil(image)

        self._check_cancelled(cancel)
        self._report(progress, 0.0)

        try:
            text = await asyncio.to_thread(
                pytesseract.image_to_string, pil_image, lang=lang, config=config
            )
            self._check_cancelled(cancel)
            self._report(progress, 0.5)

            data = await asyncio.to_thread(
                pytesseract.image_to_data,
                pil_image,
                lang=lang,
                config=config,
                output_type=pytesseract.Output.DICT,
            )
        except pytesseract.TesseractError as exc:
            message = getattr(exc, "message", None) or str(exc)
            logger.error("Tesseract failed: %s", message)
            raise OCRError(message) from exc
        except (OSError, RuntimeError) as exc:
            logger.error("OCR engine unavailable: %s", exc)
            raise OCRError(str(exc)) from exc

        self._check_cancelled(cancel)

        lines = self._group_lines(data)
        if not lines:
            lines = [
                Line(index=i, text=raw.strip())
                for i, raw in enumerate(t for t in text.splitlines() if t.strip())
            ]

        self._report(progress, 1.0)
        logger.info("OCR recognized %d lines", len(lines))
        return Transcript(full_text=text, lines=tuple(lines))

    def _to_pil(self, image: np.ndarray) -> Image.Image:
        pil_image = Image.fromarray(image)
        if pil_image.mode not in ("L", "RGB"):
            pil_image = pil_image.convert("RGB")
        return pil_image

    def _group_lines(self, data: dict) -> list[Line]:
        """Join word-level Tesseract output into reading-order lines.

        Args:
            data: ``image_to_data`` output as a dict of parallel lists.

        Returns:
            Lines with the mean confidence of their words, in ``[0, 1]``.
        """
        grouped: dict[tuple[int, int, int], list[tuple[str, float]]] = {}

        for i in range(len(data["text"])):
            word = str(data["text"][i]).strip()
            conf = float(data["conf"][i])
            if not word or conf < 0:
                continue
            key = (
                int(data["block_num"][i]),
                int(data["par_num"][i]),
                int(data["line_num"][i]),
            )
            grouped.setdefault(key, []).append((word, conf))

        lines: list[Line] = []
        for words in grouped.values():
            text = " ".join(w for w, _ in words)
            confidence = sum(c for _, c in words) / len(words) / 100.0
            lines.append(Line(index=len(lines), text=text, confidence=confidence))
        return lines

    @staticmethod
    def _check_cancelled(cancel: asyncio.Event | None) -> None:
        if cancel is not None and cancel.is_set():
            logger.info("OCR cancelled")
            raise OCRCancelledError()

    @staticmethod
    def _report(progress: ProgressCallback | None, fraction: float) -> None:
        if progress is not None:
            progress(fraction)
