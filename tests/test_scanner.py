"""Tests for end-to-end screenshot scanning."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, patch

import numpy as np
import pytest
from PIL import Image

from cpscan.extraction.results import NOT_FOUND, HitPoints
from cpscan.ocr.tesseract_engine import OCRCancelledError, OCRError
from cpscan.ocr.transcript import Transcript
from cpscan.scanner import STATUS_COMPLETE, STATUS_ERROR, ScreenScanner
from cpscan.utils.config import AppConfig, ValidationConfig


@pytest.fixture
def scanner(config_dir: Path) -> ScreenScanner:
    config = AppConfig(
        validation=ValidationConfig(
            rules_path=str(config_dir / "validation_rules.yaml"),
            species_path=str(config_dir / "species.yaml"),
        )
    )
    return ScreenScanner(config)


class TestLoadImage:
    """Tests for screenshot decoding."""

    def test_from_bytes(self, scanner: ScreenScanner, png_bytes: bytes) -> None:
        image = scanner.load_image(png_bytes)
        assert image.shape == (40, 60, 4)
        assert image.dtype == np.uint8

    def test_from_path(self, scanner: ScreenScanner, tmp_path: Path) -> None:
        path = tmp_path / "shot.png"
        Image.fromarray(np.zeros((10, 20), dtype=np.uint8)).save(path)
        assert scanner.load_image(path).shape == (10, 20, 4)

    def test_unreadable(self, scanner: ScreenScanner) -> None:
        with pytest.raises(ValueError, match="Cannot read image"):
            scanner.load_image(b"not an image")


class TestScreenScanner:
    """Tests for the ScreenScanner pipeline."""

    def test_successful_scan(
        self, scanner: ScreenScanner, png_bytes: bytes, garchomp_lines: list[str]
    ) -> None:
        scanner.ocr_engine.recognize = AsyncMock(
            return_value=Transcript.from_lines(garchomp_lines)
        )
        scan = asyncio.run(scanner.scan(png_bytes, "shot.png"))

        assert scan.ok
        assert scan.status == STATUS_COMPLETE
        assert scan.source_file == "shot.png"
        assert scan.result.cp == 2207
        assert scan.result.hp == HitPoints(187, 187)
        assert scan.validation is not None
        assert scan.validation.all_valid is True
        assert scan.quality_metrics is not None

    def test_normalized_bitmap_passed_to_ocr(
        self, scanner: ScreenScanner, png_bytes: bytes
    ) -> None:
        scanner.ocr_engine.recognize = AsyncMock(return_value=Transcript.from_lines([]))
        asyncio.run(scanner.scan(png_bytes))

        bitmap = scanner.ocr_engine.recognize.call_args[0][0]
        assert bitmap.shape == (80, 120, 4)

    def test_concurrent_scans_are_independent(
        self, scanner: ScreenScanner, png_bytes: bytes
    ) -> None:
        transcripts = [
            Transcript.from_lines(["11:42", "CP2207", "Garchomp", "HP 187/187"]),
            Transcript.from_lines(["11:42", "CP 1500", "Pidgey", "HP 60/60"]),
        ]

        async def recognize(bitmap, progress=None, cancel=None):
            transcript = transcripts.pop(0)
            await asyncio.sleep(0)
            return transcript

        scanner.ocr_engine.recognize = recognize

        async def run():
            return await asyncio.gather(
                scanner.scan(png_bytes, "a.png"), scanner.scan(png_bytes, "b.png")
            )

        first, second = asyncio.run(run())
        assert first.source_file == "a.png"
        assert second.source_file == "b.png"
        assert (first.result.cp, first.result.name) == (2207, "Garchomp")
        assert (second.result.cp, second.result.name) == (1500, "Pidgey")
        assert second.result.hp == HitPoints(60, 60)

    def test_ocr_error_reported(self, scanner: ScreenScanner, png_bytes: bytes) -> None:
        scanner.ocr_engine.recognize = AsyncMock(
            side_effect=OCRError("tesseract is not installed")
        )
        scan = asyncio.run(scanner.scan(png_bytes, "shot.png"))

        assert not scan.ok
        assert scan.status == STATUS_ERROR
        assert scan.message == "Error: tesseract is not installed"
        assert scan.validation is None
        for name in ("name", "cp", "hp", "stardust", "moves"):
            assert getattr(scan.result, name) is NOT_FOUND

    def test_cancelled_scan(self, scanner: ScreenScanner, png_bytes: bytes) -> None:
        scanner.ocr_engine.recognize = AsyncMock(side_effect=OCRCancelledError())
        scan = asyncio.run(scanner.scan(png_bytes))

        assert scan.status == STATUS_ERROR
        assert scan.message == "Cancelled: OCR cancelled"
        assert scan.result.missing_fields() == ["name", "cp", "hp", "stardust", "moves"]

    @patch("cpscan.ocr.tesseract_engine.pytesseract.image_to_string")
    def test_cancel_event_stops_before_ocr(
        self, mock_string, scanner: ScreenScanner, png_bytes: bytes
    ) -> None:
        async def run():
            cancel = asyncio.Event()
            cancel.set()
            return await scanner.scan(png_bytes, cancel=cancel)

        scan = asyncio.run(run())
        assert scan.status == STATUS_ERROR
        mock_string.assert_not_called()

    @patch("cpscan.ocr.tesseract_engine.pytesseract.image_to_data")
    @patch("cpscan.ocr.tesseract_engine.pytesseract.image_to_string")
    def test_scan_through_engine(
        self, mock_string, mock_data, scanner: ScreenScanner, png_bytes: bytes
    ) -> None:
        mock_string.return_value = "CP 3200\nMetagross\n"
        mock_data.return_value = {
            "text": ["CP", "3200", "Metagross"],
            "conf": [90, 90, 90],
            "block_num": [1, 1, 1],
            "par_num": [1, 1, 1],
            "line_num": [1, 1, 2],
        }
        progress: list[float] = []

        scan = asyncio.run(scanner.scan(png_bytes, progress=progress.append))
        assert scan.result.cp == 3200
        assert scan.result.name == "Metagross"
        assert progress[-1] == 1.0

    def test_unreadable_image_raises(self, scanner: ScreenScanner) -> None:
        with pytest.raises(ValueError):
            asyncio.run(scanner.scan(b"garbage"))

    def test_validation_disabled(self, png_bytes: bytes) -> None:
        scanner = ScreenScanner(AppConfig(validation=ValidationConfig(enabled=False)))
        scanner.ocr_engine.recognize = AsyncMock(
            return_value=Transcript.from_lines(["CP 500"])
        )
        scan = asyncio.run(scanner.scan(png_bytes))
        assert scan.ok
        assert scan.validation is None
