"""FastAPI application for the creature-screen scanner API.

Provides REST endpoints for scanning uploaded screenshots, parsing
transcripts, listing the species table, and health checks.
"""

import shutil
import time
import uuid
from pathlib import Path
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from cpscan.extraction.field_extractor import extract_fields
from cpscan.scanner import ScreenScanner
from cpscan.utils.config import load_config
from cpscan.utils.logger import get_logger
from cpscan.validation.species import SpeciesTable

from .schemas import (
    BatchItemResponse,
    BatchScanResponse,
    FieldsResponse,
    HealthResponse,
    ParseRequest,
    ParseResponse,
    ScanResponse,
    SpeciesInfo,
    SpeciesResponse,
    ValidationResultResponse,
)

logger = get_logger(__name__)

VERSION = "1.0.0"

app = FastAPI(
    title="Creature Screen Scanner API",
    description="Extract name, CP, HP, stardust and moves from game screenshots",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_scanner() -> ScreenScanner:
    """Build the scanner from the current configuration."""
    return ScreenScanner(load_config())


_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/webp",
    "image/bmp",
    "application/octet-stream",
}


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version=VERSION,
        tesseract_available=shutil.which("tesseract") is not None,
    )


@app.post("/scan", response_model=ScanResponse)
async def scan_screenshot(
    file: Annotated[UploadFile, File(...)],
) -> ScanResponse:
    """Scan an uploaded screenshot.

    OCR failures are reported in the body with ``status == "error"`` and
    every field empty; only unusable uploads are HTTP errors.

    Args:
        file: Uploaded screenshot (PNG, JPEG, WebP or BMP).

    Returns:
        Scan results with fields and validation.
    """
    start_time = time.time()

    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    filename = file.filename or "screenshot"
    content = await file.read()
    scanner = _get_scanner()
    try:
        scan = await scanner.scan(content, filename)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    validation = (
        [
            ValidationResultResponse(
                field_name=r.field_name,
                is_valid=r.is_valid,
                message=r.message,
                rule_name=r.rule_name,
            )
            for r in scan.validation.results
        ]
        if scan.validation is not None
        else []
    )

    return ScanResponse(
        success=scan.ok,
        scan_id=str(uuid.uuid4()),
        filename=filename,
        status=scan.status,
        message=scan.message,
        fields=FieldsResponse(**scan.result.to_dict()),
        raw_text=scan.result.raw_text,
        validation=validation,
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.post("/scan/batch", response_model=BatchScanResponse)
async def scan_batch(
    files: Annotated[list[UploadFile], File(...)],
) -> BatchScanResponse:
    """Scan several uploaded screenshots.

    Args:
        files: List of uploaded screenshots.

    Returns:
        Batch results with per-file outcomes.
    """
    results: list[BatchItemResponse] = []
    successful = 0

    for file in files:
        filename = file.filename or "unknown"
        try:
            result = await scan_screenshot(file)
        except HTTPException as exc:
            results.append(BatchItemResponse(filename=filename, error=exc.detail))
            continue

        results.append(BatchItemResponse(filename=filename, result=result))
        if result.success:
            successful += 1

    return BatchScanResponse(
        success=successful > 0,
        total_screenshots=len(files),
        successful=successful,
        failed=len(files) - successful,
        results=results,
    )


@app.post("/parse", response_model=ParseResponse)
async def parse_transcript(request: ParseRequest) -> ParseResponse:
    """Extract fields from an already-recognized transcript."""
    config = load_config()
    result = extract_fields(request.full_text, request.lines, config.extraction)
    return ParseResponse(
        fields=FieldsResponse(**result.to_dict()),
        strategies=result.strategies,
    )


@app.get("/species", response_model=SpeciesResponse)
async def list_species() -> SpeciesResponse:
    """List the species reference table."""
    config = load_config()
    table = SpeciesTable.load(Path(config.validation.species_path))
    return SpeciesResponse(
        species=[
            SpeciesInfo(id=e.id, name=e.name, family=e.family, max_cp=e.max_cp)
            for e in table.entries
        ]
    )
