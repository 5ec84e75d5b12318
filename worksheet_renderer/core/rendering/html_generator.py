"""
HTML Generator
==============

Convert worksheet DSL documents into a styled two-page HTML document: the
worksheet itself and, optionally, its answer key. Theme, layout, spacing and
asset visuals are resolved from the document; cosmetic problems fall back to
defaults instead of failing the render.
"""

from typing import Any, Dict, List, Optional, Union
from datetime import date
from pathlib import Path
import random

import jinja2

from worksheet_renderer.config.logging import get_logger, render_context
from worksheet_renderer.config.settings import get_settings
from worksheet_renderer.core.rendering.assets import AssetRenderer, FileSystemIconResolver, IconResolver
from worksheet_renderer.core.rendering.themes import (
    resolve_theme,
    resolve_box_size,
    resolve_spacing,
)
from worksheet_renderer.models.schemas import WorksheetAsset, WorksheetDocument

logger = get_logger(__name__)

SEED_UPPER_BOUND = 1_000_000

# U.S. Letter content geometry
PAGE_WIDTH = "8.5in"
PAGE_MARGIN = "0.5in"


class HTMLGenerationError(Exception):
    """Exception raised when HTML generation fails."""

    pass


def generate_seed() -> int:
    """Draw a fresh seed in [0, 1_000_000)."""
    return random.SystemRandom().randrange(SEED_UPPER_BOUND)


def resolve_seed(document: WorksheetDocument) -> int:
    """
    Return the document seed, writing a fresh one back when missing.

    Args:
        document: Worksheet document, mutated only to fill ``meta.seed``

    Returns:
        Seed the document renders with
    """
    seed = document.meta.seed
    if not isinstance(seed, int) or isinstance(seed, bool):
        seed = generate_seed()
        document.meta.seed = seed
        logger.debug("Generated worksheet seed", seed=seed)
    return seed


def format_answer(value: Union[str, int, float, List[str], None]) -> str:
    """Format a target answer for display inside an answer box."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(part) for part in value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class WorksheetHTMLGenerator:
    """Jinja2-based worksheet HTML generator."""

    template_name = "worksheet.html"

    def __init__(self, icon_resolver: Optional[IconResolver] = None) -> None:
        self.settings = get_settings()
        self.logger: Any = logger.bind(generator="worksheet")  # structlog.BoundLoggerBase
        self.asset_renderer = AssetRenderer(
            icon_resolver or FileSystemIconResolver(self.settings.icons_path)
        )
        self._setup_jinja2_environment()

    def _setup_jinja2_environment(self) -> None:
        """Setup Jinja2 template environment."""
        template_dir = Path(__file__).parent / "templates"
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            autoescape=jinja2.select_autoescape(["html", "xml"]),
            undefined=jinja2.StrictUndefined,
        )
        self.env.filters["answer"] = format_answer

    def render(self, document: WorksheetDocument) -> str:
        """
        Render a worksheet document to HTML.

        The only side effect is filling ``document.meta.seed`` when it is
        missing. Item order is taken verbatim from the document.

        Args:
            document: Validated worksheet document

        Returns:
            Generated HTML string

        Raises:
            HTMLGenerationError: If template rendering fails
        """
        seed = resolve_seed(document)

        with render_context(seed, document.meta.title):
            try:
                self.logger.info("Generating worksheet HTML", items=len(document.items))

                template = self.env.get_template(self.template_name)
                html = template.render(**self._prepare_context(document, seed))

                self.logger.info("Worksheet HTML generated", html_length=len(html))
                return html

            except jinja2.TemplateError as e:
                error_msg = f"Template rendering failed: {e}"
                self.logger.error("HTML generation failed", error=error_msg)
                raise HTMLGenerationError(error_msg) from e

    def _prepare_context(self, document: WorksheetDocument, seed: int) -> Dict[str, Any]:
        """
        Prepare template rendering context.

        Args:
            document: Worksheet document
            seed: Resolved render seed

        Returns:
            Template context dictionary
        """
        layout = document.layout
        layout_type = getattr(layout.type, "value", layout.type)

        def render_assets(assets: List[WorksheetAsset], item_index: int):
            return self.asset_renderer.render_assets(assets, placement_seed=f"{seed}:{item_index}")

        return {
            "document": document,
            "theme": resolve_theme(document.branding.theme),
            "box_size": resolve_box_size(layout.box_size),
            "spacing": resolve_spacing(layout.spacing),
            "layout_class": f"{layout_type}-layout",
            "grid_columns": layout.cols or 1,
            "logo": document.branding.logo or self.settings.default_logo,
            "year": date.today().year,
            "page_width": PAGE_WIDTH,
            "page_margin": PAGE_MARGIN,
            "font_stylesheet_url": self.settings.font_stylesheet_url,
            "render_assets": render_assets,
            # Seeded generator exposed to templates; items keep document order.
            "rng": random.Random(seed),
        }


def render_worksheet_to_html(
    document: WorksheetDocument, icon_resolver: Optional[IconResolver] = None
) -> str:
    """
    Render a worksheet document to HTML.

    Args:
        document: Validated worksheet document
        icon_resolver: Optional icon catalogue override

    Returns:
        Generated HTML string
    """
    generator = WorksheetHTMLGenerator(icon_resolver)
    return generator.render(document)
