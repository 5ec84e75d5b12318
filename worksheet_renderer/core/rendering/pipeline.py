"""
Rendering Pipeline
==================

Sequential worksheet rendering: DSL document to HTML, HTML to PDF, PDF to
first-page preview. A failure at any stage aborts the whole render and is
raised to the caller; no stage is retried.
"""

from typing import Any, Optional, Union
from pathlib import Path
import time

from worksheet_renderer.config.logging import get_logger, render_context
from worksheet_renderer.config.settings import get_settings
from worksheet_renderer.core.rendering.assets import IconResolver
from worksheet_renderer.core.rendering.html_generator import WorksheetHTMLGenerator, resolve_seed
from worksheet_renderer.core.rendering.pdf_generator import PlaywrightPDFGenerator
from worksheet_renderer.core.rendering.preview_generator import (
    PDFPreviewGenerator,
    PreviewGenerationError,
)
from worksheet_renderer.models.schemas import RenderResult, WorksheetDocument

logger = get_logger(__name__)


def output_paths(output_dir: Path, timestamp: int) -> tuple[Path, Path]:
    """Return the PDF and preview paths for a render timestamp."""
    return (
        output_dir / f"worksheet-{timestamp}.pdf",
        output_dir / f"worksheet-preview-{timestamp}.png",
    )


class WorksheetRenderPipeline:
    """DSL to HTML to PDF to preview pipeline."""

    def __init__(
        self,
        html_generator: Optional[WorksheetHTMLGenerator] = None,
        pdf_generator: Optional[PlaywrightPDFGenerator] = None,
        preview_generator: Optional[PDFPreviewGenerator] = None,
        icon_resolver: Optional[IconResolver] = None,
    ) -> None:
        self.settings = get_settings()
        self.logger: Any = logger.bind(component="pipeline")  # structlog.BoundLoggerBase
        self.html_generator = html_generator or WorksheetHTMLGenerator(icon_resolver)
        self.pdf_generator = pdf_generator or PlaywrightPDFGenerator()
        self.preview_generator = preview_generator or PDFPreviewGenerator()

    async def render(
        self, document: WorksheetDocument, output_dir: Optional[Union[str, Path]] = None
    ) -> RenderResult:
        """
        Render a worksheet to PDF and preview files.

        Args:
            document: Validated worksheet document; ``meta.seed`` is filled when missing
            output_dir: Directory for the generated files, created when absent

        Returns:
            RenderResult with both file paths and the shared timestamp

        Raises:
            HTMLGenerationError: If HTML generation fails
            PDFGenerationError: If PDF conversion fails
            PreviewGenerationError: If preview rasterization fails
        """
        start_time = time.time()
        seed = resolve_seed(document)

        with render_context(seed, document.meta.title):
            html = self.html_generator.render(document)

            timestamp = int(time.time() * 1000)
            output_dir = Path(output_dir) if output_dir else self.settings.output_path
            output_dir.mkdir(parents=True, exist_ok=True)
            pdf_path, preview_path = output_paths(output_dir, timestamp)

            await self.pdf_generator.generate_pdf(html, pdf_path)

            try:
                await self.preview_generator.generate_preview(pdf_path, preview_path)
            except PreviewGenerationError:
                self.logger.warning("Removing PDF without preview", pdf=str(pdf_path))
                pdf_path.unlink(missing_ok=True)
                raise

            self.logger.info(
                "Worksheet rendered",
                pdf=str(pdf_path),
                preview=str(preview_path),
                processing_time=round(time.time() - start_time, 3),
            )

        return RenderResult(
            pdf_path=pdf_path,
            preview_path=preview_path,
            timestamp=timestamp,
            seed=seed,
            metadata={"html_length": len(html), "items": len(document.items)},
        )


async def render_worksheet_to_pdf(
    document: WorksheetDocument,
    output_dir: Optional[Union[str, Path]] = None,
    icon_resolver: Optional[IconResolver] = None,
) -> RenderResult:
    """
    Render a worksheet document to a PDF and a first-page PNG preview.

    Args:
        document: Validated worksheet document
        output_dir: Directory for the generated files
        icon_resolver: Optional icon catalogue override

    Returns:
        RenderResult with ``pdf_path``, ``preview_path`` and ``timestamp``
    """
    pipeline = WorksheetRenderPipeline(icon_resolver=icon_resolver)
    return await pipeline.render(document, output_dir)
