"""Archive ingestion pipeline.

This module streams extracted archive files, deserializes their lines
concurrently, and hands typed records to the store layer.
"""
