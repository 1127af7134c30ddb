"""Shared test fixtures for the scanner test suite."""

import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def sample_rgba() -> np.ndarray:
    """Gold background with a white text block, as RGBA."""
    image = np.zeros((60, 80, 4), dtype=np.uint8)
    image[..., 0] = 230
    image[..., 1] = 180
    image[..., 2] = 40
    image[..., 3] = 255
    image[20:40, 10:70, :3] = 250
    return image


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.zeros((200, 300), dtype=np.uint8)
    image[50:150, 50:250] = 255
    return image


@pytest.fixture
def png_bytes() -> bytes:
    """A small RGB PNG encoded in memory."""
    img = Image.fromarray(np.zeros((40, 60, 3), dtype=np.uint8))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def garchomp_lines() -> list[str]:
    """Transcript of a full creature screen with a clock in the status bar."""
    return [
        "11:42",
        "CP2207",
        "Garchomp",
        "HP 187/187",
        "95.0kg 1.9m",
        "POWER UP",
        "4000 3",
        "Dragon Tail 15",
        "Earthquake 140",
        "Outrage 110",
    ]


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
