"""
Test suite for Wholesale Shipment Planning.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_shipment_partitioner.py -v
"""
