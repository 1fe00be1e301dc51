"""
Storage implementations.

Provides implementations of the Storage interface for persisting rated items.

Available implementations:
- CSVStorage: Headerless CSV file with atomic replace-on-write saves
"""

from .csv_storage import CSVStorage

__all__ = ["CSVStorage"]
