"""
Test suite for Branch Fulfillment.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_cutoff_service.py -v
"""
