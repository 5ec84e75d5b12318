"""
Worksheet DSL
=============

Parsing, validation and safe defaults for worksheet DSL documents.
"""
