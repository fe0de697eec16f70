# release_crawler/__init__.py
"""Sync package-index release metadata into three normalized CSV tables."""

__version__ = "0.1.0"
