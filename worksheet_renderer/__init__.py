"""
Worksheet DSL Renderer
======================

Deterministic rendering of declarative worksheet documents into styled HTML,
paginated PDF and a PNG preview of the first page.

This package provides:
- Pydantic models for the worksheet DSL
- Theme, layout and asset resolution for HTML generation
- PDF conversion with Playwright
- First-page preview rasterization with pdf2image
"""

__version__ = "1.0.0"
__author__ = "PracticeGenius Team"
