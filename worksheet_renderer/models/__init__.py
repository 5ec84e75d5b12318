"""
Data Models
===========

Pydantic models for worksheet DSL documents and rendering results.
"""
