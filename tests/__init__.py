"""
Unit Tests for uci_driver

This package contains unit tests for all uci_driver components.

Running Tests:
    # Run all tests
    pytest tests/

    # Run specific test file
    pytest tests/test_options.py

    # Run with coverage
    pytest tests/ --cov=uci_driver --cov-report=html

    # Run specific test
    pytest tests/test_search.py::TestParseBestMove::test_bestmove_with_ponder

Dependencies:
    - pytest: Test framework
    - pytest-cov: Coverage reporting
    - chess: Used by the fake engine for subprocess tests
"""
