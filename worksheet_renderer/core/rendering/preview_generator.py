"""
Preview Generator
=================

Rasterize the first page of a generated PDF into a PNG preview using
pdf2image (poppler) and Pillow. Preview failures are fatal: downstream
consumers expect every worksheet to come with its preview image.
"""

from typing import Any, Optional, Union
from pathlib import Path
import asyncio

from pdf2image import convert_from_path
from PIL import Image  # type: ignore

from worksheet_renderer.config.logging import get_logger
from worksheet_renderer.config.settings import get_settings
from worksheet_renderer.core.rendering.pdf_generator import ConversionError

logger = get_logger(__name__)


class PreviewGenerationError(ConversionError):
    """Exception raised when preview rasterization fails."""

    pass


class PDFPreviewGenerator:
    """First-page PNG preview generator."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.logger: Any = logger.bind(generator="pdf_preview")  # structlog.BoundLoggerBase

    def _rasterize_first_page(self, pdf_path: Path) -> Image.Image:
        """Render page one of ``pdf_path`` to a PIL image."""
        poppler_path = str(self.settings.poppler_path) if self.settings.poppler_path else None
        images = convert_from_path(
            str(pdf_path),
            dpi=self.settings.preview_dpi,
            first_page=1,
            last_page=1,
            fmt="png",
            poppler_path=poppler_path,
        )
        if not images:
            raise RuntimeError(f"No image rendered for first page of {pdf_path}")
        return images[0]

    def _write_preview(self, pdf_path: Path, output_path: Path) -> None:
        image = self._rasterize_first_page(pdf_path)
        try:
            image.save(output_path, format="PNG", optimize=True)
        finally:
            image.close()

    async def generate_preview(self, pdf_path: Union[str, Path], output_path: Union[str, Path]) -> Path:
        """
        Generate a PNG preview of the first PDF page.

        Args:
            pdf_path: Source PDF file
            output_path: Destination PNG path

        Returns:
            Path of the written preview

        Raises:
            PreviewGenerationError: If rasterization or saving fails
        """
        pdf_path = Path(pdf_path)
        output_path = Path(output_path)

        try:
            self.logger.info("Generating PDF preview", pdf=str(pdf_path), output=str(output_path))

            # poppler runs as an external process; keep it off the event loop
            await asyncio.to_thread(self._write_preview, pdf_path, output_path)

            self.logger.info(
                "PDF preview generated",
                output=str(output_path),
                file_size=output_path.stat().st_size,
            )
            return output_path

        except Exception as e:
            error_msg = f"Preview generation failed: {e}"
            self.logger.error("Preview generation error", pdf=str(pdf_path), error=error_msg)
            raise PreviewGenerationError(error_msg) from e


async def generate_pdf_preview(
    pdf_path: Union[str, Path],
    output_path: Union[str, Path],
    generator: Optional[PDFPreviewGenerator] = None,
) -> Path:
    """
    Generate a PNG preview of the first page of a PDF.

    Args:
        pdf_path: Source PDF file
        output_path: Destination PNG path
        generator: Optional generator instance

    Returns:
        Path of the written preview
    """
    generator = generator or PDFPreviewGenerator()
    return await generator.generate_preview(pdf_path, output_path)
