"""Test suite for erythroid-ir.

Test organization:
- fixtures/: Mock retention table generators
- unit/: Unit tests for individual modules

Run tests with:
    pytest tests/
    pytest tests/unit/ -v --tb=short
"""
