"""
Test Suite
==========

Test suite matching the worksheet_renderer package structure.

Test Categories:
- unit: Unit tests for individual components
- integration: Pipeline tests with mocked browser and rasterizer
"""
