"""
Unit Tests for Preview Generator
================================

Unit tests for first-page PNG previews with a mocked poppler rasterizer.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from PIL import Image

from worksheet_renderer.core.rendering.pdf_generator import ConversionError
from worksheet_renderer.core.rendering.preview_generator import (
    PDFPreviewGenerator,
    PreviewGenerationError,
    generate_pdf_preview,
)


@pytest.fixture
def generator(test_settings):
    """Create preview generator bound to test settings."""
    with patch("worksheet_renderer.core.rendering.preview_generator.get_settings", return_value=test_settings):
        return PDFPreviewGenerator()


@pytest.fixture
def pdf_file(tmp_path):
    """Placeholder PDF on disk."""
    path = tmp_path / "worksheet-1.pdf"
    path.write_bytes(b"%PDF-1.4\n%%EOF\n")
    return path


class TestPreviewGenerationError:
    """Test preview error hierarchy."""

    def test_is_conversion_error(self):
        """Test preview errors are conversion errors."""
        assert isinstance(PreviewGenerationError("x"), ConversionError)


class TestPDFPreviewGenerator:
    """Test PDF preview generator."""

    @pytest.mark.asyncio
    async def test_generate_preview(self, generator, pdf_file, tmp_path):
        """Test writing the first-page preview."""
        output = tmp_path / "worksheet-preview-1.png"
        page = Image.new("RGB", (85, 110), "white")

        with patch(
            "worksheet_renderer.core.rendering.preview_generator.convert_from_path", return_value=[page]
        ) as convert:
            result = await generator.generate_preview(pdf_file, output)

        assert result == output
        assert output.exists()
        with Image.open(output) as image:
            assert image.format == "PNG"
            assert image.size == (85, 110)

        convert.assert_called_once_with(
            str(pdf_file), dpi=100, first_page=1, last_page=1, fmt="png", poppler_path=None
        )

    @pytest.mark.asyncio
    async def test_poppler_path_passed(self, test_settings, pdf_file, tmp_path):
        """Test configured poppler directory."""
        test_settings.poppler_path = tmp_path / "poppler"
        test_settings.preview_dpi = 72
        with patch("worksheet_renderer.core.rendering.preview_generator.get_settings", return_value=test_settings):
            generator = PDFPreviewGenerator()

        with patch(
            "worksheet_renderer.core.rendering.preview_generator.convert_from_path",
            return_value=[Image.new("RGB", (10, 10))],
        ) as convert:
            await generator.generate_preview(pdf_file, tmp_path / "p.png")

        assert convert.call_args.kwargs["poppler_path"] == str(tmp_path / "poppler")
        assert convert.call_args.kwargs["dpi"] == 72

    @pytest.mark.asyncio
    async def test_rasterizer_failure_wrapped(self, generator, pdf_file, tmp_path):
        """Test rasterizer errors become PreviewGenerationError."""
        with patch(
            "worksheet_renderer.core.rendering.preview_generator.convert_from_path",
            side_effect=OSError("pdftoppm not found"),
        ):
            with pytest.raises(PreviewGenerationError, match="pdftoppm not found"):
                await generator.generate_preview(pdf_file, tmp_path / "p.png")

    @pytest.mark.asyncio
    async def test_no_pages(self, generator, pdf_file, tmp_path):
        """Test an empty rasterization result."""
        with patch("worksheet_renderer.core.rendering.preview_generator.convert_from_path", return_value=[]):
            with pytest.raises(PreviewGenerationError, match="No image rendered"):
                await generator.generate_preview(pdf_file, tmp_path / "p.png")

        assert not (tmp_path / "p.png").exists()

    @pytest.mark.asyncio
    async def test_image_closed(self, generator, pdf_file, tmp_path):
        """Test that the rasterized page is released."""
        page = MagicMock()
        page.save.side_effect = lambda path, **kwargs: path.write_bytes(b"\x89PNG")

        with patch("worksheet_renderer.core.rendering.preview_generator.convert_from_path", return_value=[page]):
            await generator.generate_preview(pdf_file, tmp_path / "p.png")

        page.save.assert_called_once_with(tmp_path / "p.png", format="PNG", optimize=True)
        page.close.assert_called_once()


class TestGeneratePDFPreview:
    """Test module-level preview helper."""

    @pytest.mark.asyncio
    async def test_uses_given_generator(self, tmp_path):
        """Test convenience function delegation."""
        generator = MagicMock()
        generator.generate_preview = AsyncMock(return_value=tmp_path / "p.png")

        result = await generate_pdf_preview(tmp_path / "w.pdf", tmp_path / "p.png", generator)

        assert result == tmp_path / "p.png"
