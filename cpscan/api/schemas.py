"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel, Field


class HitPointsResponse(BaseModel):
    """Current and maximum HP."""

    current: int
    maximum: int


class FieldsResponse(BaseModel):
    """Fields recovered from one screen; ``None`` means not found."""

    name: str | None = None
    cp: int | None = None
    hp: HitPointsResponse | None = None
    stardust: int | None = None
    moves: list[str] | None = None
    cp_line_index: int | None = None
    ratio_line_index: int | None = None
    missing: list[str] = Field(default_factory=list)


class ValidationResultResponse(BaseModel):
    """Response schema for a validation check result."""

    field_name: str
    is_valid: bool
    message: str
    rule_name: str


class ScanResponse(BaseModel):
    """Response schema for a screenshot scan request."""

    success: bool
    scan_id: str
    filename: str
    status: str
    message: str
    fields: FieldsResponse
    raw_text: str
    validation: list[ValidationResultResponse]
    processing_time_ms: float


class ParseRequest(BaseModel):
    """An already-recognized transcript, one entry per OCR line."""

    lines: list[str]
    full_text: str | None = None


class ParseResponse(BaseModel):
    """Response schema for transcript parsing."""

    fields: FieldsResponse
    strategies: dict[str, str]


class SpeciesInfo(BaseModel):
    """One row of the species reference table."""

    id: str
    name: str
    family: str
    max_cp: int


class SpeciesResponse(BaseModel):
    """Response schema listing the species reference table."""

    species: list[SpeciesInfo]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool


class BatchItemResponse(BaseModel):
    """Response schema for a single item in a batch scan."""

    filename: str
    result: ScanResponse | None = None
    error: str | None = None


class BatchScanResponse(BaseModel):
    """Response schema for a batch scan of several screenshots."""

    success: bool
    total_screenshots: int
    successful: int
    failed: int
    results: list[BatchItemResponse]
