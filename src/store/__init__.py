"""Destination store layer.

This module persists ingested archive records into a typed
relational snapshot and reads them back for inspection.
"""
