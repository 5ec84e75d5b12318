"""
PDF Generator
=============

Playwright-based PDF generation from worksheet HTML. Every conversion
launches its own headless Chromium and always closes it, on success and on
failure; browsers are not pooled between conversions.
"""

from typing import Any, AsyncGenerator, Dict, Optional, Union
from contextlib import asynccontextmanager
from pathlib import Path

from playwright.async_api import async_playwright, Browser, Page

from worksheet_renderer.config.logging import get_logger
from worksheet_renderer.config.settings import get_settings

logger = get_logger(__name__)

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]


class ConversionError(Exception):
    """Base exception for HTML to PDF to preview conversion failures."""

    pass


class PDFGenerationError(ConversionError):
    """Exception raised when PDF generation fails."""

    pass


class PlaywrightPDFGenerator:
    """Playwright-based PDF generator implementation."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.logger: Any = logger.bind(generator="playwright_pdf")  # structlog.BoundLoggerBase

    @asynccontextmanager
    async def launch_browser(self) -> AsyncGenerator[Browser, None]:
        """Launch a dedicated browser, closing it and Playwright on exit."""
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=self.settings.playwright_headless,
                args=BROWSER_ARGS,
            )
            try:
                yield browser
            finally:
                await browser.close()
        finally:
            await playwright.stop()

    def _pdf_options(self, output_path: Path) -> Dict[str, Any]:
        """Build ``page.pdf`` keyword arguments."""
        margin = self.settings.pdf_margin
        return {
            "path": str(output_path),
            "format": self.settings.pdf_format,
            "print_background": True,
            "margin": {"top": margin, "right": margin, "bottom": margin, "left": margin},
        }

    async def _configure_page(self, page: Page) -> None:
        """Configure page settings."""
        page.set_default_timeout(self.settings.playwright_timeout)

    async def generate_pdf(self, html_content: str, output_path: Union[str, Path]) -> Path:
        """
        Generate a PDF file from HTML content.

        Args:
            html_content: HTML content to render
            output_path: Destination PDF path

        Returns:
            Path of the written PDF

        Raises:
            PDFGenerationError: If the browser cannot be launched or printing fails
        """
        output_path = Path(output_path)

        try:
            self.logger.info(
                "Generating PDF from HTML",
                html_length=len(html_content),
                output=str(output_path),
            )

            async with self.launch_browser() as browser:
                page = await browser.new_page()
                await self._configure_page(page)

                # Inline data-URI assets and web fonts must be painted before printing
                await page.set_content(html_content, wait_until="networkidle")
                await page.pdf(**self._pdf_options(output_path))

            self.logger.info("PDF generation completed", output=str(output_path))
            return output_path

        except Exception as e:
            error_msg = f"PDF generation failed: {e}"
            self.logger.error("PDF generation error", error=error_msg)
            raise PDFGenerationError(error_msg) from e


async def convert_html_to_pdf(
    html_content: str,
    output_path: Union[str, Path],
    generator: Optional[PlaywrightPDFGenerator] = None,
) -> Path:
    """
    Convert HTML to a PDF file.

    Args:
        html_content: HTML content to render
        output_path: Destination PDF path
        generator: Optional generator instance

    Returns:
        Path of the written PDF
    """
    generator = generator or PlaywrightPDFGenerator()
    return await generator.generate_pdf(html_content, output_path)
