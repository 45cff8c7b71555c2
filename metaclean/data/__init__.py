"""Data loading utilities for metaclean."""

from .loaders import MetadataLoader, write_table

__all__ = [
    "MetadataLoader",
    "write_table",
]
