"""
Rendering Module
===============

HTML generation, PDF conversion and preview rasterization.

Components:
- themes: Palettes and size/spacing tables
- assets: Icon catalogue, shape catalogue and asset HTML builders
- html_generator: Convert worksheet documents to HTML
- pdf_generator: Browser automation for PDF output
- preview_generator: First-page PNG previews
- pipeline: Sequential DSL to PDF and preview rendering
"""
