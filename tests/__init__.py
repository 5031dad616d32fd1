"""
Test suite for the catalog ingestion and reconciliation engine.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_upsert_service.py -v
"""
