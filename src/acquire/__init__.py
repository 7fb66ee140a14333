"""Upstream archive acquisition.

This module fetches the manifest and bundle over HTTPS and unpacks
the bundle into a local directory of JSON-lines files.
"""
