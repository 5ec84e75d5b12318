"""
Test Data
=========

Sample worksheet DSL documents shared across unit and integration tests.
"""
