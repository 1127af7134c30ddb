"""End-to-end screenshot scanning.

Loads a screenshot, normalizes it, awaits OCR, extracts fields and
validates them. OCR failure or cancellation is reported on the result
with every field ``NOT_FOUND``; it never raises.
"""

import asyncio
import io
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from cpscan.extraction.field_extractor import FieldExtractor
from cpscan.extraction.results import ExtractionResult
from cpscan.ocr.tesseract_engine import (
    OCRCancelledError,
    OCRError,
    ProgressCallback,
    TesseractEngine,
)
from cpscan.preprocessing.pipeline import ImageNormalizer, QualityMetrics
from cpscan.utils.config import AppConfig
from cpscan.utils.logger import get_logger
from cpscan.validation.rules_engine import RulesEngine, ValidationReport
from cpscan.validation.species import SpeciesTable

logger = get_logger(__name__)

STATUS_COMPLETE = "complete"
STATUS_ERROR = "error"


@dataclass
class ScanResult:
    """Outcome of scanning one screenshot."""

    source_file: str
    status: str
    message: str
    result: ExtractionResult
    validation: ValidationReport | None = None
    quality_metrics: QualityMetrics | None = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_COMPLETE


class ScreenScanner:
    """Screenshot-to-fields pipeline.

    Each call to ``scan`` owns its own bitmap and result, so concurrent
    scans of different images do not interfere.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.normalizer = ImageNormalizer(config.normalizer)
        self.ocr_engine = TesseractEngine(
            tesseract_cmd=config.ocr.tesseract_cmd,
            default_lang=config.ocr.default_lang,
            psm=config.ocr.psm,
        )
        self.extractor = FieldExtractor(config.extraction)
        self.validator: RulesEngine | None = None
        if config.validation.enabled:
            self.validator = RulesEngine(
                Path(config.validation.rules_path),
                SpeciesTable.load(Path(config.validation.species_path)),
            )

    def load_image(self, source: Path | bytes) -> np.ndarray:
        """Decode a screenshot from a path or raw bytes into an RGBA array.

        Raises:
            ValueError: If the data is not a readable image.
        """
        try:
            if isinstance(source, bytes):
                img = Image.open(io.BytesIO(source))
            else:
                img = Image.open(Path(source))
            return np.array(img.convert("RGBA"))
        except (UnidentifiedImageError, OSError) as exc:
            raise ValueError(f"Cannot read image: {exc}") from exc

    async def scan(
        self,
        source: Path | bytes,
        filename: str = "screenshot",
        progress: ProgressCallback | None = None,
        cancel: asyncio.Event | None = None,
    ) -> ScanResult:
        """Scan one screenshot.

        Args:
            source: Path to an image file, or raw image bytes.
            filename: Display name for the source.
            progress: Observational OCR progress callback.
            cancel: Event that cancels the scan at the OCR boundary.

        Returns:
            Scan result. On OCR failure ``status`` is ``"error"`` and
            ``message`` carries the engine's message.

        Raises:
            ValueError: If the source is not a readable image.
        """
        logger.info("Scanning %s", filename)
        image = self.load_image(source)
        bitmap, metrics = self.normalizer.normalize(image)

        try:
            transcript = await self.ocr_engine.recognize(
                bitmap, progress=progress, cancel=cancel
            )
        except OCRCancelledError as exc:
            logger.info("Scan of %s cancelled", filename)
            return self._failed(filename, f"Cancelled: {exc}", metrics)
        except OCRError as exc:
            logger.warning("OCR failed for %s: %s", filename, exc)
            return self._failed(filename, f"Error: {exc}", metrics)

        extraction = self.extractor.extract(transcript)
        validation = self.validator.validate(extraction) if self.validator else None

        return ScanResult(
            source_file=filename,
            status=STATUS_COMPLETE,
            message="Scan complete",
            result=extraction,
            validation=validation,
            quality_metrics=metrics,
        )

    def _failed(
        self, filename: str, message: str, metrics: QualityMetrics
    ) -> ScanResult:
        return ScanResult(
            source_file=filename,
            status=STATUS_ERROR,
            message=message,
            result=ExtractionResult(),
            quality_metrics=metrics,
        )
