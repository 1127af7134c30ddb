"""Configuration management for the creature-screen scanner.

Loads and validates YAML configuration with defaults for image
normalization, OCR, field extraction, and validation settings.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_DENY_LIST: list[str] = [
    "cp",
    "hp",
    "weight",
    "height",
    "kg",
    "stardust",
    "candy",
    "candy xl",
    "power up",
    "evolve",
    "heaviest",
    "lightest",
    "tallest",
    "shortest",
    "xxl",
    "xxs",
    "lucky",
    "buddy",
    "favorite",
    "trade",
    "appraise",
    "normal",
    "fire",
    "water",
    "grass",
    "electric",
    "ice",
    "fighting",
    "poison",
    "ground",
    "flying",
    "psychic",
    "bug",
    "rock",
    "ghost",
    "dragon",
    "dark",
    "steel",
    "fairy",
]

# Move names routinely contain type words, so moves use a shorter list.
DEFAULT_MOVE_DENY_LIST: list[str] = [
    "cp",
    "hp",
    "weight",
    "height",
    "kg",
    "stardust",
    "candy",
    "power up",
    "evolve",
    "trade",
    "appraise",
    "buddy",
    "new attack",
]


class NormalizerConfig(BaseModel):
    """Configuration for the screenshot normalization pipeline."""

    scale_factor: int = Field(default=2, ge=1, le=4)
    interpolation: str = "linear"
    crop_enabled: bool = False
    crop_fraction: float = Field(default=0.35, gt=0.0, le=1.0)
    method: str = "blue_weighted"
    blue_weight: float = Field(default=0.6, ge=0.0, le=1.0)
    low_cutoff: int = Field(default=100, ge=0, le=255)
    high_cutoff: int = Field(default=180, ge=0, le=255)
    brightness_threshold: int = Field(default=210, ge=0, le=255)
    contrast: float = Field(default=1.5, gt=0.0)


class OCRConfig(BaseModel):
    """Configuration for the Tesseract OCR engine."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 6


class ExtractionConfig(BaseModel):
    """Configuration for the heuristic field extractor.

    ``cp_min``/``cp_max`` bound the plausible CP value. The upper bound sits
    a little above the highest CP observed at the level cap, the lower bound
    is the game floor; both reject clock times and day counters.
    """

    cp_min: int = 10
    cp_max: int = 6500
    skip_status_bar: bool = True
    anchor_window: int = Field(default=6, ge=1)
    ratio_window: int = Field(default=4, ge=1)
    name_window: int = Field(default=3, ge=1)
    hp_max: int = 1000
    stardust_min: int = 200
    stardust_max: int = 20000
    stardust_window: int = Field(default=2, ge=0)
    move_window: int = Field(default=8, ge=1)
    max_moves: int = Field(default=3, ge=1)
    move_power_max: int = 300
    deny_list: list[str] = Field(default_factory=lambda: list(DEFAULT_DENY_LIST))
    move_deny_list: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MOVE_DENY_LIST)
    )


class ValidationConfig(BaseModel):
    """Configuration for the validation rules engine."""

    enabled: bool = True
    rules_path: str = "configs/validation_rules.yaml"
    species_path: str = "configs/species.yaml"


class ServerConfig(BaseModel):
    """Bind address for the HTTP API server."""

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
