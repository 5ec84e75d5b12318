"""
Core Business Logic
==================

Core business logic modules for worksheet processing and rendering.

Modules:
- dsl: Worksheet DSL parsing, validation and upstream preparation
- rendering: HTML generation, PDF conversion and preview rasterization
"""
