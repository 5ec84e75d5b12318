"""
Test Utilities
==============

Assertion helpers for rendered worksheet HTML.
"""
