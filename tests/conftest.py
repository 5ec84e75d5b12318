"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides test settings, sample worksheet documents and mock conversion
services.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator
from unittest.mock import AsyncMock, MagicMock

import pytest

# Must be set before the package configures logging on import
os.environ.setdefault("WORKSHEET_ENVIRONMENT", "testing")
os.environ.setdefault("WORKSHEET_LOG_LEVEL", "DEBUG")
os.environ.setdefault("WORKSHEET_STORAGE_PATH", str(Path(tempfile.gettempdir()) / "worksheet_renderer_test"))

from pydantic_settings import SettingsConfigDict

from worksheet_renderer.config.settings import Settings
from worksheet_renderer.core.rendering.assets import InMemoryIconResolver
from worksheet_renderer.models.schemas import WorksheetDocument

from tests.data.sample_worksheets import (
    BLUE_LIST_WORKSHEET,
    GRID_WORKSHEET,
    MINIMAL_WORKSHEET,
)


BUG_SVG = b'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100"><circle cx="50" cy="50" r="30" fill="#8B4513"/></svg>'
SUN_SVG = b'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100"><circle cx="50" cy="50" r="25" fill="#F1C40F"/></svg>'


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    environment: str = "testing"
    log_level: str = "DEBUG"
    font_stylesheet_url: str = ""
    playwright_headless: bool = True
    playwright_timeout: int = 5000

    model_config = SettingsConfigDict(env_file=".env.test", env_prefix="WORKSHEET_")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp(prefix="worksheet_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_settings(temp_dir: Path) -> TestSettings:
    """Test settings rooted in a temporary directory."""
    return TestSettings(storage_path=temp_dir / "storage", output_path=temp_dir / "worksheets")


@pytest.fixture
def icon_resolver() -> InMemoryIconResolver:
    """Icon catalogue with a couple of known icons."""
    return InMemoryIconResolver({"bug": BUG_SVG, "sun": SUN_SVG})


@pytest.fixture
def minimal_worksheet_data() -> Dict[str, Any]:
    """Raw minimal worksheet document."""
    return dict(MINIMAL_WORKSHEET)


@pytest.fixture
def minimal_worksheet() -> WorksheetDocument:
    """Validated minimal worksheet document."""
    return WorksheetDocument.model_validate(MINIMAL_WORKSHEET)


@pytest.fixture
def blue_worksheet() -> WorksheetDocument:
    """Validated blue list worksheet with icon and shape assets."""
    return WorksheetDocument.model_validate(BLUE_LIST_WORKSHEET)


@pytest.fixture
def grid_worksheet() -> WorksheetDocument:
    """Validated 2x3 grid worksheet."""
    return WorksheetDocument.model_validate(GRID_WORKSHEET)


@pytest.fixture
def mock_pdf_generator() -> MagicMock:
    """PDF generator stub that writes a placeholder PDF."""

    async def _generate(html_content: str, output_path: Path) -> Path:
        output_path = Path(output_path)
        output_path.write_bytes(b"%PDF-1.4\n% worksheet\n%%EOF\n")
        return output_path

    generator = MagicMock()
    generator.generate_pdf = AsyncMock(side_effect=_generate)
    return generator


@pytest.fixture
def mock_preview_generator() -> MagicMock:
    """Preview generator stub that writes a placeholder PNG."""

    async def _generate(pdf_path: Path, output_path: Path) -> Path:
        output_path = Path(output_path)
        output_path.write_bytes(b"\x89PNG\r\n\x1a\n")
        return output_path

    generator = MagicMock()
    generator.generate_preview = AsyncMock(side_effect=_generate)
    return generator


# Test markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
