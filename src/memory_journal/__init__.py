"""Incremental collection synchronization for the memory journal API."""

__version__ = "0.1.0"
