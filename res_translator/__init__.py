"""Batch translation of Android strings.xml resources."""

__version__ = "0.1.0"
